"""
Core business logic module.

Contains the exception hierarchy and the CV summarizer pipeline.
"""

from backend.core.exceptions import (
    ConfigurationError,
    CVSummarizerException,
    EmptyUpload,
    IntakePersistenceError,
    JobFailed,
    JobTimedOut,
    StageError,
    ValidationIgnored,
)

__all__ = [
    "CVSummarizerException",
    "ConfigurationError",
    "ValidationIgnored",
    "EmptyUpload",
    "IntakePersistenceError",
    "JobFailed",
    "JobTimedOut",
    "StageError",
]
