"""
OCR task using AWS Textract asynchronous text detection.

Starts a StartDocumentTextDetection job against the uploaded object, waits
for it through the BoundedPoller, then follows NextToken across result pages
and joins LINE blocks with newlines in the order Textract reports them.

Dependencies: boto3
System role: First stage of the processing pipeline (text extraction)
"""

import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from backend.core.cv_summarizer.polling import BoundedPoller, PollResult, PollStatus
from backend.core.exceptions import OCRError

logger = logging.getLogger(__name__)

# Textract JobStatus -> poller status
_STATUS_MAP = {
    "IN_PROGRESS": PollStatus.PENDING,
    "SUCCEEDED": PollStatus.SUCCEEDED,
    "PARTIAL_SUCCESS": PollStatus.SUCCEEDED,
    "FAILED": PollStatus.FAILED,
}


class TextractOCRTask:
    """Extract text from an S3 document with Textract."""

    def __init__(self, textract_client: Any, poller: BoundedPoller) -> None:
        """
        Initialize OCR task.

        Args:
            textract_client: boto3 Textract client
            poller: Poller bounding the wait for the Textract job
        """
        self._textract = textract_client
        self._poller = poller

    def start(self, bucket: str, key: str) -> str:
        """
        Start an asynchronous text detection job.

        Returns:
            str: Textract JobId

        Raises:
            OCRError: The job could not be started
        """
        try:
            response = self._textract.start_document_text_detection(
                DocumentLocation={"S3Object": {"Bucket": bucket, "Name": key}}
            )
        except (ClientError, BotoCoreError) as e:
            raise OCRError(
                f"Failed to start Textract job: {e}", {"bucket": bucket, "key": key}
            ) from e

        job_id = response["JobId"]
        logger.info(
            "start - Textract job started",
            extra={"textract_job_id": job_id, "bucket": bucket, "key": key},
        )
        return job_id

    def poll(self, job_id: str) -> PollResult:
        """Fetch the first result page and map its JobStatus."""
        try:
            response = self._textract.get_document_text_detection(JobId=job_id)
        except (ClientError, BotoCoreError) as e:
            raise OCRError(f"Failed to poll Textract job: {e}", {"textract_job_id": job_id}) from e

        job_status = response.get("JobStatus", "IN_PROGRESS")
        status = _STATUS_MAP.get(job_status, PollStatus.PENDING)
        if job_status == "PARTIAL_SUCCESS":
            logger.warning(
                "poll - Textract job partially succeeded",
                extra={"textract_job_id": job_id, "status_message": response.get("StatusMessage")},
            )
        return PollResult(status=status, payload=response, message=response.get("StatusMessage"))

    def collect_lines(self, job_id: str, first_page: dict[str, Any]) -> list[str]:
        """Gather LINE block text from every result page, in service order."""
        lines: list[str] = []
        page = first_page
        while True:
            lines.extend(
                block.get("Text", "")
                for block in page.get("Blocks", [])
                if block.get("BlockType") == "LINE"
            )
            next_token = page.get("NextToken")
            if not next_token:
                return lines
            try:
                page = self._textract.get_document_text_detection(JobId=job_id, NextToken=next_token)
            except (ClientError, BotoCoreError) as e:
                raise OCRError(
                    f"Failed to read Textract results: {e}", {"textract_job_id": job_id}
                ) from e

    def extract_text(self, bucket: str, key: str) -> str:
        """
        Run OCR on an object and return its text.

        Raises:
            OCRError: Textract API failure
            JobFailed: Textract reported the job as failed
            JobTimedOut: Job still running after the poller's ceiling
        """
        job_id = self.start(bucket, key)
        first_page = self._poller.wait(lambda: self.poll(job_id))
        lines = self.collect_lines(job_id, first_page)

        logger.info(
            "extract_text - Extracted text",
            extra={"textract_job_id": job_id, "line_count": len(lines)},
        )
        return "\n".join(lines)
