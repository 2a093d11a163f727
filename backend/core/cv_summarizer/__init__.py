"""
CV summarizer document processing pipeline.

Intake gate, bounded poller and queue-driven orchestrator that take an
uploaded CV through Textract OCR and a Gemini summary to a terminal job
record.

Dependencies: boto3, langchain_core, langchain_google_genai, pydantic
System role: Document processing pipeline entrypoint
"""

from .entrypoint import JobPipeline
from .intake import IntakeGate, build_job_id
from .models import Job, JobStatus, PipelineResult, StageResult
from .polling import BoundedPoller, PollResult, PollStatus

__all__ = [
    "JobPipeline",
    "IntakeGate",
    "build_job_id",
    "BoundedPoller",
    "PollResult",
    "PollStatus",
    "Job",
    "JobStatus",
    "PipelineResult",
    "StageResult",
]
