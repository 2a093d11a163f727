"""
Lambda handler for SQS-triggered job processing.

Processes jobs from the FIFO work queue through the pipeline:
OCR (Textract) → store text → summarize (Gemini) → store summary → finalize.

Uses partial batch responses (ReportBatchItemFailures). A record is reported
as failed only when its job could not be finalized, so SQS redelivers it.
Unparseable records are logged and acknowledged; redelivery cannot fix them.
For FIFO queues, every record after the first failure is also reported so
message group ordering is preserved.

Configuration (see backend.configs):
- CV_PIPELINE_SECRET_NAME: Secrets Manager bundle with bucket/table/queue/region
- CV_PIPELINE_POLL_INTERVAL_SECONDS / CV_PIPELINE_MAX_POLL_ATTEMPTS: OCR wait bounds
- CV_PIPELINE_LOG_LEVEL: Logging level

Dependencies: entrypoint, lambda_utils
System role: Lambda entry point for async job processing
"""

import logging
from typing import Any, Dict

from dotenv import load_dotenv

# Load environment variables from .env if present
load_dotenv()

from backend.configs import get_pipeline_settings
from backend.core.cv_summarizer.lambda_utils.clients import get_pipeline
from backend.core.cv_summarizer.lambda_utils.event_parser import parse_sqs_record
from backend.core.exceptions import MessageParseError
from backend.observability import configure_logging

configure_logging(get_pipeline_settings().log_level)
logger = logging.getLogger(__name__)


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda handler for SQS work messages.

    Args:
        event: SQS event with Records array
        context: Lambda context object

    Returns:
        Dict with batchItemFailures for records that must be redelivered
    """
    records = event.get("Records", [])
    logger.info("handler - Received SQS event", extra={"record_count": len(records)})

    pipeline = get_pipeline()
    failures: list[dict[str, str]] = []
    processed = 0

    for record in records:
        message_id = record.get("messageId", "")

        if failures:
            # FIFO: later messages in the batch must wait for the failed one
            failures.append({"itemIdentifier": message_id})
            continue

        try:
            message = parse_sqs_record(record)
        except MessageParseError as e:
            logger.warning(
                "%s:handler - MessageParseError: %s",
                __name__,
                e,
                extra={"message_id": message_id},
            )
            continue

        result = pipeline.process(message)
        processed += 1

        if not result.acknowledged:
            logger.error(
                "%s:handler - Job not finalized, requesting redelivery",
                __name__,
                extra={"job_id": result.job_id, "message_id": message_id},
            )
            failures.append({"itemIdentifier": message_id})

    logger.info(
        "%s:handler - Processing complete",
        __name__,
        extra={"processed_count": processed, "failed_count": len(failures)},
    )
    return {"batchItemFailures": failures}
