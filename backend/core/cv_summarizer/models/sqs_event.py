"""
SQS event schema for job processing.

Work messages carry the full Job snapshot taken at enqueue time; the record
attributes expose delivery count and group id for diagnostics.

Dependencies: pydantic
System role: Data validation and contract definition for the queue consumer
"""

from pydantic import BaseModel

from .job import Job, QueueTrace


class SQSRecord(BaseModel):
    """Single SQS record wrapper."""

    messageId: str
    receiptHandle: str = ""
    body: str  # JSON string containing a Job snapshot
    attributes: dict = {}
    messageAttributes: dict = {}
    md5OfBody: str = ""
    eventSourceARN: str | None = None

    def to_trace(self) -> QueueTrace:
        """Build the diagnostic queue trace for this delivery."""
        return QueueTrace(
            message_id=self.messageId,
            receive_count=int(self.attributes.get("ApproximateReceiveCount", 1)),
            group_id=self.attributes.get("MessageGroupId"),
        )


class QueueMessage(BaseModel):
    """Dequeued work item: the job snapshot plus its delivery trace."""

    job: Job
    trace: QueueTrace
