"""
Observability module.

Provides logging configuration and structured, context-aware log helpers.
"""

from backend.observability.log_utils import (
    build_log_extra,
    log_exception_with_context,
    log_with_context,
    safe_log_value,
)
from backend.observability.logger import configure_logging

__all__ = [
    "configure_logging",
    "build_log_extra",
    "log_with_context",
    "log_exception_with_context",
    "safe_log_value",
]
