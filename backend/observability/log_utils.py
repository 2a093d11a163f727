"""
Structured logging helpers for pipeline code.

Context passed as keyword arguments becomes LogRecord attributes. Values go
through safe_log_value so OCR text, message bodies or model output never
flood a log line, and keys that collide with LogRecord's own attributes are
prefixed instead of raising KeyError inside logging.

Dependencies: logging (stdlib)
System role: Logging helper functions
"""

import logging
from typing import Any

# Attributes LogRecord sets itself; passing them in extra raises KeyError
_RESERVED_KEYS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime"}


def safe_log_value(value: Any, max_length: int = 500) -> str:
    """
    Safely convert any value to a string for logging.

    Collections and byte payloads are summarized by size; long strings are
    truncated.

    Args:
        value: Value to convert
        max_length: Maximum length before truncating

    Returns:
        str: Safe string representation
    """
    try:
        if value is None:
            return "None"
        if isinstance(value, str):
            val_str = value
        elif isinstance(value, (bytes, bytearray)):
            val_str = f"{type(value).__name__}({len(value)} bytes)"
        elif isinstance(value, (list, tuple, set, frozenset)):
            val_str = f"{type(value).__name__}({len(value)} items)"
        elif isinstance(value, dict):
            val_str = f"dict({len(value)} keys)"
        else:
            val_str = str(value)

        if len(val_str) > max_length:
            return val_str[:max_length] + f"... (truncated, {len(val_str)} total)"
        return val_str
    except Exception as e:  # pylint: disable=broad-except
        return f"<unable to log: {type(e).__name__}>"


def build_log_extra(**context: Any) -> dict[str, str]:
    """
    Turn keyword context into a logging ``extra`` mapping.

    Returns:
        dict: Stringified values; reserved keys renamed to ``ctx_<key>``
    """
    extra = {}
    for key, value in context.items():
        name = f"ctx_{key}" if key in _RESERVED_KEYS else key
        extra[name] = safe_log_value(value)
    return extra


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **context: Any,
) -> None:
    """
    Log a message with structured context.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        message: Log message
        **context: Arbitrary key-value pairs attached to the record
    """
    logger.log(level, message, extra=build_log_extra(**context))


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    **context: Any,
) -> None:
    """
    Log an exception at ERROR with traceback and context.

    Pipeline exceptions carry a ``details`` dict; it is attached as
    ``error_details`` so the record shows the job, key or attempt count
    that failed.

    Args:
        logger: Logger instance
        message: Log message
        exc: Exception instance
        **context: Additional key-value pairs
    """
    extra = build_log_extra(**context)
    extra["error_type"] = type(exc).__name__
    extra["error_msg"] = safe_log_value(getattr(exc, "message", None) or str(exc))
    details = getattr(exc, "details", None)
    if details:
        extra["error_details"] = safe_log_value(
            ", ".join(f"{k}={v}" for k, v in details.items())
        )
    logger.error(message, exc_info=exc, extra=extra)
