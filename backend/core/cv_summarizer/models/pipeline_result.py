"""
Pipeline result model for job processing.

Represents the outcome of one processing attempt for a queue message.

Dependencies: pydantic
System role: Return type for JobPipeline.process()
"""

from pydantic import BaseModel, Field

from .job import JobStatus


class PipelineResult(BaseModel):
    """Result of one orchestrator run."""

    job_id: str = Field(description="Job identifier")
    status: JobStatus = Field(description="Terminal status this attempt computed")
    extraction_succeeded: bool
    summary_succeeded: bool
    finalized: bool = Field(description="True when this attempt wrote the terminal record")
    already_terminal: bool = Field(
        default=False,
        description="True when a previous delivery had already finalized the job",
    )
    processing_time_ms: float = Field(description="Total processing time in milliseconds")

    @property
    def acknowledged(self) -> bool:
        """Whether the queue message may be deleted."""
        return self.finalized or self.already_terminal
