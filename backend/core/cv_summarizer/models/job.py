"""
Job record model and state machine.

One Job per uploaded document. The record is created IN_PROGRESS by the
intake gate and moves exactly once to COMPLETED or FAILED. Stage fields are
declared upfront and stay absent until their stage finishes.

Dependencies: pydantic
System role: Versioned job schema shared by intake, queue and job store
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

JOB_SCHEMA_VERSION = 1


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


class JobStatus(str, Enum):
    """Job processing lifecycle states (mirrors the job store schema)."""

    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self is not JobStatus.IN_PROGRESS

    def can_transition_to(self, new_status: "JobStatus") -> bool:
        """
        Check a status transition against the state machine.

        Only IN_PROGRESS -> COMPLETED and IN_PROGRESS -> FAILED are allowed.

        Args:
            new_status: Target status

        Returns:
            bool: True when the transition is legal
        """
        return self is JobStatus.IN_PROGRESS and new_status.is_terminal


class FileMetadata(BaseModel):
    """Upload metadata captured at intake."""

    name: str = Field(description="Original file name, e.g. resume.pdf")
    format: str = Field(description="Lower-cased extension without the dot")
    size_bytes: int = Field(gt=0, description="Object size; zero-byte uploads never become jobs")


class SourceLocation(BaseModel):
    """Object store reference to the original upload."""

    bucket: str
    key: str
    url: str


class StageResult(BaseModel):
    """Outcome of one pipeline stage: a stored artifact or an error marker."""

    object_key: str | None = None
    url: str | None = None
    length: int | None = Field(default=None, description="Characters written to the artifact")
    error: str | None = Field(default=None, description="Set when the stage failed")
    completed_at: str = Field(default_factory=utc_now_iso)

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.object_key is not None

    @classmethod
    def stored(cls, object_key: str, url: str, length: int) -> "StageResult":
        return cls(object_key=object_key, url=url, length=length)

    @classmethod
    def failed(cls, error: str) -> "StageResult":
        # DynamoDB attribute limits; the full error is in the logs
        return cls(error=error[:2000])


class QueueTrace(BaseModel):
    """Last-seen queue delivery metadata (diagnostic only)."""

    message_id: str
    receive_count: int = 1
    group_id: str | None = None
    received_at: str = Field(default_factory=utc_now_iso)


class Job(BaseModel):
    """Job record persisted in the job store and carried in queue messages."""

    schema_version: int = JOB_SCHEMA_VERSION
    job_id: str
    user_id: str
    source_location: SourceLocation
    file_metadata: FileMetadata
    status: JobStatus = JobStatus.IN_PROGRESS
    stage_extraction: StageResult | None = None
    stage_summary: StageResult | None = None
    queue_trace: QueueTrace | None = None
    source_ip: str | None = None
    event_time: str | None = None
    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)

    def to_item(self) -> dict[str, Any]:
        """Serialize to a job store item; absent stage fields are omitted."""
        return self.model_dump(mode="json", exclude_none=True)

    @classmethod
    def from_item(cls, item: dict[str, Any]) -> "Job":
        """Rebuild a Job from a job store item or queue message body."""
        return cls.model_validate(item)
