"""
S3 and SQS event parsing utilities for Lambda.
"""

import logging
from typing import Any, Dict
from urllib.parse import unquote_plus

from pydantic import ValidationError

from backend.core.cv_summarizer.models import Job, QueueMessage, SQSRecord, UploadNotification
from backend.core.exceptions import MessageParseError

logger = logging.getLogger(__name__)


def parse_s3_record(record: Dict[str, Any]) -> UploadNotification:
    """
    Parse one record of an S3 ObjectCreated event.

    S3 invokes the intake Lambda with this structure:
    {
        "Records": [{
            "eventSource": "aws:s3",
            "eventName": "ObjectCreated:Put",
            "eventTime": "2026-01-05T10:00:00.000Z",
            "requestParameters": {"sourceIPAddress": "203.0.113.10"},
            "s3": {
                "bucket": {"name": "bucket-name"},
                "object": {"key": "uploads/42/resume.pdf", "size": 1024, "sequencer": "..."}
            }
        }]
    }

    Only ObjectCreated:* records are accepted; tagging, ACL and delete
    notifications for the same prefix are rejected before they reach intake.
    Object keys arrive URL-encoded (spaces as '+').
    """
    try:
        if record.get("eventSource") != "aws:s3":
            raise ValueError(f"Invalid event source: {record.get('eventSource')}")
        if not str(record.get("eventName", "")).startswith("ObjectCreated:"):
            raise ValueError(f"Not an object-created event: {record.get('eventName')}")

        s3_info = record.get("s3", {})
        object_info = s3_info.get("object", {})
        bucket = s3_info.get("bucket", {}).get("name", "")
        key = unquote_plus(object_info.get("key", ""))

        if not bucket:
            raise ValueError("Missing S3 bucket name")
        if not key:
            raise ValueError("Missing S3 object key")
        if object_info.get("size") is None:
            raise ValueError("Missing S3 object size")

        notification = UploadNotification(
            bucket=bucket,
            key=key,
            size=object_info["size"],
            source_ip=record.get("requestParameters", {}).get("sourceIPAddress"),
            event_time=record.get("eventTime"),
            sequencer=object_info.get("sequencer"),
        )

        logger.info(
            "parse_s3_record - Parsed S3 event",
            extra={"bucket": bucket, "key": key, "size": notification.size},
        )
        return notification

    except ValidationError as e:
        logger.error("parse_s3_record - ValidationError: %s", e)
        raise MessageParseError(f"Invalid S3 event format: {e}") from e
    except ValueError as e:
        logger.error("parse_s3_record - ValueError: %s", e)
        raise MessageParseError(f"Invalid S3 event format: {e}") from e
    except (AttributeError, TypeError) as e:
        logger.error("parse_s3_record - %s: %s", type(e).__name__, e)
        raise MessageParseError(f"Failed to parse S3 event: {e}") from e


def parse_sqs_record(record: Dict[str, Any]) -> QueueMessage:
    """
    Parse a work queue record into the job snapshot and its delivery trace.
    """
    try:
        sqs_record = SQSRecord.model_validate(record)
        if not sqs_record.body:
            raise ValueError("Empty message body")

        job = Job.model_validate_json(sqs_record.body)
        message = QueueMessage(job=job, trace=sqs_record.to_trace())

        logger.info(
            "parse_sqs_record - Parsed message",
            extra={
                "message_id": sqs_record.messageId,
                "job_id": job.job_id,
                "receive_count": message.trace.receive_count,
            },
        )
        return message

    except ValueError as e:
        # pydantic.ValidationError (bad JSON or schema) is a ValueError subclass
        logger.error("parse_sqs_record - ValueError: %s", e)
        raise MessageParseError(f"Invalid message body: {e}") from e
