"""
Exception hierarchy for the CV summarizer pipeline.

Provides layered exception structure for intake, stage and adapter errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the pipeline
"""

from typing import Any


class CVSummarizerException(Exception):
    """Base exception for all CV summarizer errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(CVSummarizerException):
    """Raised when the configuration bundle is missing required values."""


# ============================================================================
# Intake outcomes
# ============================================================================


class ValidationIgnored(CVSummarizerException):
    """Raised when an intake event is not a processable document upload."""

    def __init__(self, reason: str, key: str | None = None) -> None:
        """
        Initialize ignored-event outcome.

        Args:
            reason: Why the event was skipped
            key: Object key of the notification
        """
        details = {"key": key} if key is not None else {}
        super().__init__(reason, details)


class EmptyUpload(CVSummarizerException):
    """Raised when a zero-byte upload is detected at intake."""

    def __init__(self, bucket: str, key: str) -> None:
        super().__init__(
            f"Empty file uploaded: {key}", {"bucket": bucket, "key": key}
        )


class IntakePersistenceError(CVSummarizerException):
    """Raised when the job store or work queue fails during intake."""

    def __init__(
        self,
        message: str,
        bucket: str | None = None,
        key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if bucket:
            details["bucket"] = bucket
        if key:
            details["key"] = key
        super().__init__(message, details)


# ============================================================================
# Polling outcomes
# ============================================================================


class JobFailed(CVSummarizerException):
    """Raised when an external asynchronous job reports failure."""

    def __init__(
        self,
        message: str,
        attempts: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.attempts = attempts
        details = details or {}
        details["attempts"] = attempts
        super().__init__(message, details)


class JobTimedOut(CVSummarizerException):
    """Raised when an external asynchronous job is still pending after max attempts."""

    def __init__(
        self,
        message: str,
        attempts: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.attempts = attempts
        details = details or {}
        details["attempts"] = attempts
        super().__init__(message, details)


# ============================================================================
# Pipeline stage errors
# ============================================================================


class StageError(CVSummarizerException):
    """Raised when a pipeline stage fails; caught at the stage boundary."""

    def __init__(
        self,
        message: str,
        stage: str,
        job_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize stage error.

        Args:
            message: Error message
            stage: Pipeline stage name (extraction, summarization, finalize)
            job_id: Job being processed
            details: Additional context
        """
        self.stage = stage
        self.job_id = job_id
        details = details or {}
        details["stage"] = stage
        if job_id:
            details["job_id"] = job_id
        super().__init__(message, details)


class MessageParseError(CVSummarizerException):
    """Raised when a queue or storage event cannot be parsed."""


# ============================================================================
# Adapter errors
# ============================================================================


class ObjectStoreError(CVSummarizerException):
    """Raised when an object store read, write or delete fails."""

    def __init__(
        self,
        message: str,
        key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if key:
            details["key"] = key
        super().__init__(message, details)


class JobStoreError(CVSummarizerException):
    """Raised when a job store operation fails."""

    def __init__(
        self,
        message: str,
        job_id: str | None = None,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if job_id:
            details["job_id"] = job_id
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class JobAlreadyExistsError(JobStoreError):
    """Raised when a job record with the same id was already created."""


class JobAlreadyTerminalError(JobStoreError):
    """Raised when a conditional update finds the job no longer IN_PROGRESS."""


class WorkQueueError(CVSummarizerException):
    """Raised when enqueueing a work message fails."""


class OCRError(CVSummarizerException):
    """Raised when the OCR service cannot start or report a job."""


class SummarizationError(CVSummarizerException):
    """Raised when the language model fails or returns no structured result."""
