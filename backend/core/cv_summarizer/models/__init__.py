"""
Models for the CV summarizer pipeline.

Exports: Job and its parts, UploadNotification, SQS schemas, summary schemas, PipelineResult
"""

from .job import (
    FileMetadata,
    Job,
    JobStatus,
    QueueTrace,
    SourceLocation,
    StageResult,
    utc_now_iso,
)
from .pipeline_result import PipelineResult
from .s3_event import UploadNotification
from .sqs_event import QueueMessage, SQSRecord
from .summary import (
    ContactDetails,
    CVSummary,
    Education,
    ExperienceStats,
    SummaryArtifact,
    SummaryOutcome,
)

__all__ = [
    "FileMetadata",
    "Job",
    "JobStatus",
    "QueueTrace",
    "SourceLocation",
    "StageResult",
    "utc_now_iso",
    "PipelineResult",
    "UploadNotification",
    "QueueMessage",
    "SQSRecord",
    "ContactDetails",
    "CVSummary",
    "Education",
    "ExperienceStats",
    "SummaryArtifact",
    "SummaryOutcome",
]
