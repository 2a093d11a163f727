"""Unit tests for S3 and SQS record parsing."""

import json

import pytest

from backend.core.cv_summarizer.lambda_utils.event_parser import parse_s3_record, parse_sqs_record
from backend.core.exceptions import MessageParseError


def s3_record(key: str = "uploads/42/resume.pdf", size: int = 10000, **overrides) -> dict:
    record = {
        "eventSource": "aws:s3",
        "eventName": "ObjectCreated:Put",
        "eventTime": "2026-01-05T10:00:00.000Z",
        "requestParameters": {"sourceIPAddress": "203.0.113.10"},
        "s3": {
            "bucket": {"name": "cv-bucket"},
            "object": {"key": key, "size": size, "sequencer": "0055AED6DCD90281E5"},
        },
    }
    record.update(overrides)
    return record


class TestParseS3Record:
    def test_parses_notification(self):
        notification = parse_s3_record(s3_record())

        assert notification.bucket == "cv-bucket"
        assert notification.key == "uploads/42/resume.pdf"
        assert notification.size == 10000
        assert notification.source_ip == "203.0.113.10"
        assert notification.sequencer == "0055AED6DCD90281E5"

    def test_url_decodes_key(self):
        notification = parse_s3_record(s3_record(key="uploads/42/my+resume%282%29.pdf"))
        assert notification.key == "uploads/42/my resume(2).pdf"

    def test_rejects_other_event_sources(self):
        with pytest.raises(MessageParseError, match="Invalid event source"):
            parse_s3_record(s3_record(eventSource="aws:sqs"))

    def test_rejects_missing_key(self):
        record = s3_record()
        record["s3"]["object"].pop("key")
        with pytest.raises(MessageParseError):
            parse_s3_record(record)

    def test_rejects_negative_size(self):
        with pytest.raises(MessageParseError):
            parse_s3_record(s3_record(size=-1))

    @pytest.mark.parametrize("event_name", ["ObjectTagging:Put", "ObjectAcl:Put", "ObjectRemoved:Delete", None])
    def test_rejects_non_create_events(self, event_name):
        with pytest.raises(MessageParseError, match="Not an object-created event"):
            parse_s3_record(s3_record(eventName=event_name))

    def test_accepts_multipart_upload_event(self):
        record = s3_record(eventName="ObjectCreated:CompleteMultipartUpload")
        assert parse_s3_record(record).key == "uploads/42/resume.pdf"

    def test_rejects_missing_size(self):
        record = s3_record()
        record["s3"]["object"].pop("size")
        with pytest.raises(MessageParseError, match="Missing S3 object size"):
            parse_s3_record(record)


class TestParseSqsRecord:
    def _body(self) -> str:
        return json.dumps(
            {
                "schema_version": 1,
                "job_id": "job-1",
                "user_id": "42",
                "source_location": {
                    "bucket": "cv-bucket",
                    "key": "uploads/42/resume.pdf",
                    "url": "https://cv-bucket.s3.ap-southeast-1.amazonaws.com/uploads/42/resume.pdf",
                },
                "file_metadata": {"name": "resume.pdf", "format": "pdf", "size_bytes": 10000},
                "status": "IN_PROGRESS",
            }
        )

    def test_parses_job_and_trace(self):
        message = parse_sqs_record(
            {
                "messageId": "msg-1",
                "body": self._body(),
                "attributes": {"ApproximateReceiveCount": "2", "MessageGroupId": "42"},
            }
        )

        assert message.job.job_id == "job-1"
        assert message.job.file_metadata.size_bytes == 10000
        assert message.trace.message_id == "msg-1"
        assert message.trace.receive_count == 2

    @pytest.mark.parametrize("body", ["", "not-json", json.dumps({"job_id": "job-1"})])
    def test_rejects_bad_bodies(self, body):
        with pytest.raises(MessageParseError):
            parse_sqs_record({"messageId": "msg-1", "body": body})
