"""
Tests for the job pipeline orchestrator.

Runs real intake, job store and artifact store code against in-memory
fakes, with Textract scripted and the summarizer mocked.
"""

import json
from unittest.mock import MagicMock

import pytest

from backend.core.cv_summarizer.lambda_utils.event_parser import parse_sqs_record
from backend.core.cv_summarizer.models import JobStatus, QueueMessage, UploadNotification
from backend.core.exceptions import JobStoreError, SummarizationError


def _upload(intake_gate, key: str = "users/42/resume.pdf", size: int = 10000):
    return intake_gate.handle(
        UploadNotification(
            bucket="cv-bucket",
            key=key,
            size=size,
            source_ip="203.0.113.10",
            event_time="2026-01-05T10:00:00.000Z",
            sequencer="0055AED6DCD90281E5",
        )
    )


def _delivery(fifo_queue, index: int = 0, receive_count: int = 1) -> QueueMessage:
    sent = fifo_queue.messages[index]
    return parse_sqs_record(
        {
            "messageId": f"msg-{index}-{receive_count}",
            "body": sent["body"],
            "attributes": {
                "ApproximateReceiveCount": str(receive_count),
                "MessageGroupId": sent["group_id"],
            },
        }
    )


def test_upload_to_completed_job(
    intake_gate, fifo_queue, jobs_table, s3, sleeps, make_pipeline, textract_factory, summarizer
):
    """Upload, two pending polls, OCR success and a summary reach COMPLETED."""
    job = _upload(intake_gate)
    textract = textract_factory(["IN_PROGRESS", "IN_PROGRESS", "SUCCEEDED"], ["John Doe Engineer"])
    pipeline = make_pipeline(textract)

    result = pipeline.process(_delivery(fifo_queue))

    assert result.status is JobStatus.COMPLETED
    assert result.finalized and result.acknowledged
    assert textract.poll_calls == 3
    assert sleeps == [5.0, 5.0]

    item = jobs_table.items[job.job_id]
    assert item["status"] == "COMPLETED"
    text_key = item["stage_extraction"]["object_key"]
    summary_key = item["stage_summary"]["object_key"]
    assert text_key.startswith("uploads/42/") and text_key.endswith("_extracted-text.txt")
    assert summary_key.startswith("uploads/42/") and summary_key.endswith("_ai_summary.json")
    assert item["stage_extraction"]["length"] == len("John Doe Engineer")
    assert item["queue_trace"]["receive_count"] == 1

    assert s3.objects[("cv-bucket", text_key)]["Body"] == b"John Doe Engineer"
    artifact = json.loads(s3.objects[("cv-bucket", summary_key)]["Body"])
    assert artifact["job_id"] == job.job_id
    assert artifact["source_text_key"] == text_key
    assert artifact["result"]["score"] == 7
    summarizer.summarize.assert_called_once_with("John Doe Engineer")


def test_multi_page_text_reaches_summarizer_in_order(
    intake_gate, fifo_queue, jobs_table, s3, make_pipeline, textract_factory, summarizer
):
    lines = ["John Doe", "Senior Engineer", "Acme Corp 2019-2024", "Python, AWS", "BSc Computing", "Hanoi"]
    job = _upload(intake_gate)
    textract = textract_factory(["SUCCEEDED"], lines, pages=3)

    result = make_pipeline(textract).process(_delivery(fifo_queue))

    assert result.status is JobStatus.COMPLETED
    item = jobs_table.items[job.job_id]
    text_key = item["stage_extraction"]["object_key"]
    assert s3.objects[("cv-bucket", text_key)]["Body"] == "\n".join(lines).encode("utf-8")
    assert item["stage_extraction"]["length"] == len("\n".join(lines))
    summarizer.summarize.assert_called_once_with("\n".join(lines))


def test_ocr_failure_marks_job_failed_and_skips_summary(
    intake_gate, fifo_queue, jobs_table, make_pipeline, textract_factory
):
    job = _upload(intake_gate)
    summarizer = MagicMock()
    pipeline = make_pipeline(textract_factory(["IN_PROGRESS", "FAILED"], []), summarizer)

    result = pipeline.process(_delivery(fifo_queue))

    assert result.status is JobStatus.FAILED
    assert result.acknowledged
    summarizer.summarize.assert_not_called()
    item = jobs_table.items[job.job_id]
    assert item["status"] == "FAILED"
    assert "failed" in item["stage_extraction"]["error"]
    assert item["stage_summary"]["error"].startswith("Skipped")


def test_empty_ocr_text_fails_extraction(intake_gate, fifo_queue, jobs_table, make_pipeline, textract_factory):
    job = _upload(intake_gate)
    pipeline = make_pipeline(textract_factory(["SUCCEEDED"], []))

    result = pipeline.process(_delivery(fifo_queue))

    assert result.status is JobStatus.FAILED
    assert jobs_table.items[job.job_id]["stage_extraction"]["error"] == "OCR returned no text"


def test_summary_failure_keeps_extraction_result(
    intake_gate, fifo_queue, jobs_table, s3, make_pipeline, textract_factory
):
    """Partial failure: extraction stored, summary error recorded, job FAILED."""
    job = _upload(intake_gate)
    summarizer = MagicMock()
    summarizer.summarize.side_effect = SummarizationError("Summarizer timed out after 120s")
    pipeline = make_pipeline(textract_factory(["SUCCEEDED"], ["John Doe Engineer"]), summarizer)

    result = pipeline.process(_delivery(fifo_queue))

    assert result.status is JobStatus.FAILED
    assert result.extraction_succeeded and not result.summary_succeeded
    item = jobs_table.items[job.job_id]
    assert item["stage_extraction"]["object_key"] in s3.keys()
    assert item["stage_summary"]["error"].endswith("Summarizer timed out after 120s")


def test_redelivery_after_completion_leaves_record_unchanged(
    intake_gate, fifo_queue, jobs_table, make_pipeline, textract_factory
):
    job = _upload(intake_gate)
    make_pipeline(textract_factory(["SUCCEEDED"], ["John Doe Engineer"])).process(_delivery(fifo_queue))
    completed = dict(jobs_table.items[job.job_id])

    # Second delivery whose stages would now fail
    result = make_pipeline(textract_factory(["FAILED"], [])).process(
        _delivery(fifo_queue, receive_count=2)
    )

    assert result.already_terminal and not result.finalized
    assert result.acknowledged
    assert jobs_table.items[job.job_id] == completed


def test_finalize_failure_is_not_acknowledged(intake_gate, fifo_queue, job_store, make_pipeline, textract_factory):
    _upload(intake_gate)
    pipeline = make_pipeline(textract_factory(["SUCCEEDED"], ["John Doe Engineer"]))
    job_store.finalize = MagicMock(side_effect=JobStoreError("Throttled", "job", "update"))

    result = pipeline.process(_delivery(fifo_queue))

    assert not result.finalized
    assert not result.acknowledged


def test_message_snapshot_not_mutated(intake_gate, fifo_queue, make_pipeline, textract_factory):
    _upload(intake_gate)
    message = _delivery(fifo_queue)
    before = message.model_dump()

    make_pipeline(textract_factory(["SUCCEEDED"], ["John Doe Engineer"])).process(message)

    assert message.model_dump() == before


@pytest.mark.parametrize("receive_count", [1, 3])
def test_receive_count_recorded(intake_gate, fifo_queue, jobs_table, make_pipeline, textract_factory, receive_count):
    job = _upload(intake_gate)

    make_pipeline(textract_factory(["SUCCEEDED"], ["John Doe Engineer"])).process(
        _delivery(fifo_queue, receive_count=receive_count)
    )

    assert jobs_table.items[job.job_id]["queue_trace"]["receive_count"] == receive_count
