"""
Lambda handler for S3-triggered intake.

Receives ObjectCreated notifications for the uploads bucket, creates a job
record per accepted document and enqueues it on the FIFO work queue.

The S3 trigger does not redeliver on a normal return, so every outcome is
handled here and nothing is raised back to the caller.

Configuration (see backend.configs):
- CV_PIPELINE_SECRET_NAME: Secrets Manager bundle with bucket/table/queue/region
- CV_PIPELINE_LOG_LEVEL: Logging level

Dependencies: intake, lambda_utils.clients
System role: Lambda entry point for upload intake
"""

import json
import logging
from typing import Any, Dict

from dotenv import load_dotenv

# Load environment variables from .env if present
load_dotenv()

from backend.configs import get_pipeline_settings
from backend.core.cv_summarizer.lambda_utils.clients import get_intake_gate
from backend.core.exceptions import ConfigurationError
from backend.observability import configure_logging

configure_logging(get_pipeline_settings().log_level)
logger = logging.getLogger(__name__)


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda handler for S3 upload notifications.

    Args:
        event: S3 event with Records array
        context: Lambda context object

    Returns:
        Dict with statusCode and per-outcome counts
    """
    logger.info(
        "handler - Received S3 event",
        extra={"record_count": len(event.get("Records", []))},
    )

    try:
        gate = get_intake_gate()
    except ConfigurationError as e:
        logger.error("%s:handler - ConfigurationError: %s", __name__, e)
        return {"statusCode": 500, "body": json.dumps({"error": str(e)})}

    counts = gate.handle_event(event)
    logger.info("%s:handler - Intake complete", __name__, extra=counts)
    return {"statusCode": 200, "body": json.dumps(counts)}
