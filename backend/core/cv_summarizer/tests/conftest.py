"""
Shared fixtures for CV summarizer pipeline tests.

Provides in-memory fakes for the DynamoDB table, SQS FIFO queue, S3 and
Textract that honour the conditions the pipeline relies on.
"""

import copy
from typing import Any
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from backend.configs import PipelineConfig
from backend.core.cv_summarizer.database import JobStore
from backend.core.cv_summarizer.entrypoint import JobPipeline
from backend.core.cv_summarizer.intake import IntakeGate
from backend.core.cv_summarizer.messaging import SQSWorkQueue
from backend.core.cv_summarizer.models import CVSummary, SummaryOutcome
from backend.core.cv_summarizer.polling import BoundedPoller
from backend.core.cv_summarizer.tasks import S3ArtifactStore, TextractOCRTask


def conditional_check_failed(operation: str) -> ClientError:
    return ClientError(
        {"Error": {"Code": "ConditionalCheckFailedException", "Message": "The conditional request failed"}},
        operation,
    )


class FakeJobsTable:
    """DynamoDB Table stand-in supporting the expressions JobStore emits."""

    def __init__(self) -> None:
        self.items: dict[str, dict[str, Any]] = {}
        self.writes: list[dict[str, Any]] = []

    def put_item(self, Item: dict, ConditionExpression: str | None = None) -> dict:
        if ConditionExpression == "attribute_not_exists(job_id)" and Item["job_id"] in self.items:
            raise conditional_check_failed("PutItem")
        self.items[Item["job_id"]] = copy.deepcopy(Item)
        self.writes.append({"op": "put", "job_id": Item["job_id"]})
        return {}

    def get_item(self, Key: dict, ConsistentRead: bool = False) -> dict:
        item = self.items.get(Key["job_id"])
        return {"Item": copy.deepcopy(item)} if item else {}

    def update_item(
        self,
        Key: dict,
        UpdateExpression: str,
        ExpressionAttributeNames: dict,
        ExpressionAttributeValues: dict,
        ConditionExpression: str | None = None,
        ReturnValues: str = "NONE",
    ) -> dict:
        job_id = Key["job_id"]
        item = self.items.get(job_id)

        if ConditionExpression:
            if item is None:
                raise conditional_check_failed("UpdateItem")
            if "#status = :expected_status" in ConditionExpression:
                if item.get("status") != ExpressionAttributeValues[":expected_status"]:
                    raise conditional_check_failed("UpdateItem")

        assert UpdateExpression.startswith("SET ")
        for assignment in UpdateExpression[4:].split(", "):
            name_token, value_token = assignment.split(" = ")
            item[ExpressionAttributeNames[name_token]] = copy.deepcopy(
                ExpressionAttributeValues[value_token]
            )

        self.writes.append({"op": "update", "job_id": job_id, "fields": list(ExpressionAttributeNames.values())})
        return {"Attributes": copy.deepcopy(item)}


class FakeFifoQueue:
    """SQS client stand-in collapsing duplicate deduplication ids."""

    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []
        self._seen: set[str] = set()

    def send_message(self, QueueUrl, MessageBody, MessageGroupId, MessageDeduplicationId) -> dict:
        if MessageDeduplicationId not in self._seen:
            self._seen.add(MessageDeduplicationId)
            self.messages.append(
                {
                    "body": MessageBody,
                    "group_id": MessageGroupId,
                    "dedup_id": MessageDeduplicationId,
                }
            )
        return {"MessageId": f"msg-{len(self.messages)}"}


class FakeS3:
    """S3 client stand-in recording objects in memory."""

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str], dict[str, Any]] = {}
        self.deleted: list[tuple[str, str]] = []

    def put_object(self, Bucket, Key, Body, ContentType, Metadata) -> dict:
        self.objects[(Bucket, Key)] = {"Body": Body, "ContentType": ContentType, "Metadata": Metadata}
        return {"ETag": '"etag"'}

    def get_object(self, Bucket, Key) -> dict:
        if (Bucket, Key) not in self.objects:
            raise ClientError({"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject")
        body = MagicMock()
        body.read.return_value = self.objects[(Bucket, Key)]["Body"]
        return {"Body": body}

    def delete_object(self, Bucket, Key) -> dict:
        self.objects.pop((Bucket, Key), None)
        self.deleted.append((Bucket, Key))
        return {}

    def keys(self) -> list[str]:
        return [key for _, key in self.objects]


class FakeTextract:
    """Textract client stand-in replaying a scripted status sequence."""

    def __init__(self, statuses: list[str], lines: list[str], pages: int = 1) -> None:
        self.statuses = list(statuses)
        self.lines = lines
        self.pages = pages
        self.poll_calls = 0
        self.started: list[dict] = []

    def start_document_text_detection(self, DocumentLocation) -> dict:
        self.started.append(DocumentLocation)
        return {"JobId": "textract-job-1"}

    def get_document_text_detection(self, JobId, NextToken: str | None = None) -> dict:
        if NextToken is None:
            self.poll_calls += 1
            status = self.statuses.pop(0) if self.statuses else "IN_PROGRESS"
            if status != "SUCCEEDED":
                return {"JobStatus": status, "StatusMessage": "scripted"}
            page_index = 0
        else:
            page_index = int(NextToken)

        per_page = max(1, -(-len(self.lines) // self.pages))
        chunk = self.lines[page_index * per_page:(page_index + 1) * per_page]
        blocks = [{"BlockType": "PAGE"}]
        for line in chunk:
            blocks.append({"BlockType": "LINE", "Text": line})
            blocks.append({"BlockType": "WORD", "Text": line.split(" ")[0]})
        response = {"JobStatus": "SUCCEEDED", "Blocks": blocks}
        if page_index + 1 < self.pages:
            response["NextToken"] = str(page_index + 1)
        return response


def make_summary(**overrides) -> CVSummary:
    data = {
        "role": "Software Engineer",
        "summary": "John Doe is an engineer.",
        "skills": ["Python", "AWS"],
        "strengths": ["Delivery"],
        "score": 7,
        "justification": "Solid experience with clear impact.",
    }
    data.update(overrides)
    return CVSummary(**data)


@pytest.fixture
def config() -> PipelineConfig:
    return PipelineConfig(
        region="ap-southeast-1",
        documents_bucket="cv-bucket",
        jobs_table="cv-jobs",
        queue_url="https://sqs.ap-southeast-1.amazonaws.com/123/cv-jobs.fifo",
        google_api_key="test-key",
        poll_interval_seconds=5.0,
        max_poll_attempts=60,
    )


@pytest.fixture
def jobs_table() -> FakeJobsTable:
    return FakeJobsTable()


@pytest.fixture
def fifo_queue() -> FakeFifoQueue:
    return FakeFifoQueue()


@pytest.fixture
def s3() -> FakeS3:
    return FakeS3()


@pytest.fixture
def job_store(jobs_table) -> JobStore:
    return JobStore(jobs_table)


@pytest.fixture
def object_store(s3, config) -> S3ArtifactStore:
    return S3ArtifactStore(s3, config.documents_bucket, config.region)


@pytest.fixture
def intake_gate(job_store, fifo_queue, object_store, config) -> IntakeGate:
    return IntakeGate(
        job_store=job_store,
        work_queue=SQSWorkQueue(fifo_queue, config.queue_url),
        object_store=object_store,
        config=config,
    )


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def summarizer() -> MagicMock:
    """Summarization task mock returning a fixed summary."""
    task = MagicMock()
    task.summarize.return_value = SummaryOutcome(
        result=make_summary(),
        model_id="gemini-2.5-flash",
        usage={"input_tokens": 120, "output_tokens": 80, "total_tokens": 200},
    )
    return task


@pytest.fixture
def make_pipeline(job_store, object_store, config, sleeps, summarizer):
    """Build a JobPipeline around a scripted Textract and a summarizer mock."""
    default_summarizer = summarizer

    def _make(textract: FakeTextract, summarizer: Any | None = None) -> JobPipeline:
        if summarizer is None:
            summarizer = default_summarizer
        poller = BoundedPoller(
            poll_interval=config.poll_interval_seconds,
            max_attempts=config.max_poll_attempts,
            sleep=sleeps.append,
        )
        return JobPipeline(
            job_store=job_store,
            object_store=object_store,
            ocr_task=TextractOCRTask(textract, poller),
            summarization_task=summarizer,
            config=config,
        )

    return _make


@pytest.fixture
def textract_factory():
    """Return the FakeTextract class for scripting OCR responses."""
    return FakeTextract


@pytest.fixture
def summary_factory():
    """Return a builder for CVSummary instances."""
    return make_summary
