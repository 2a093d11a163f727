"""
Job store for DynamoDB.

Persists job records keyed by job_id and enforces the status state machine:
IN_PROGRESS -> COMPLETED | FAILED, no transition out of a terminal state.

All writes are conditional and field-scoped: create() refuses to overwrite
an existing job, update_fields() only SETs the given attributes and can be
guarded by the expected current status.

Dependencies: boto3, botocore
System role: Job record persistence for intake and orchestrator
"""

import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from backend.core.cv_summarizer.models import Job, JobStatus, QueueTrace, StageResult, utc_now_iso
from backend.core.exceptions import (
    JobAlreadyExistsError,
    JobAlreadyTerminalError,
    JobStoreError,
)

logger = logging.getLogger(__name__)

_IMMUTABLE_FIELDS = frozenset(
    {"job_id", "user_id", "source_location", "file_metadata", "created_at", "schema_version"}
)


def _is_conditional_failure(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"


class JobStore:
    """Create and update job records in a DynamoDB table."""

    def __init__(self, table: Any) -> None:
        """
        Initialize with a DynamoDB Table resource.

        Args:
            table: boto3 dynamodb.Table
        """
        self._table = table

    def create(self, job: Job) -> None:
        """
        Create a new job record.

        Args:
            job: Job in IN_PROGRESS

        Raises:
            ValueError: Job is not IN_PROGRESS
            JobAlreadyExistsError: A record with this job_id exists
            JobStoreError: DynamoDB failure
        """
        if job.status is not JobStatus.IN_PROGRESS:
            raise ValueError(f"New jobs must be {JobStatus.IN_PROGRESS.value}, got {job.status.value}")

        try:
            self._table.put_item(
                Item=job.to_item(),
                ConditionExpression="attribute_not_exists(job_id)",
            )
        except ClientError as e:
            if _is_conditional_failure(e):
                raise JobAlreadyExistsError(
                    f"Job {job.job_id} already exists", job.job_id, "create"
                ) from e
            logger.error("%s:create - %s: %s", __name__, type(e).__name__, e)
            raise JobStoreError(f"Failed to create job: {e}", job.job_id, "create") from e
        except BotoCoreError as e:
            logger.error("%s:create - %s: %s", __name__, type(e).__name__, e)
            raise JobStoreError(f"Failed to create job: {e}", job.job_id, "create") from e

        logger.info(
            "%s:create - Job created",
            __name__,
            extra={"job_id": job.job_id, "user_id": job.user_id},
        )

    def get(self, job_id: str) -> Job | None:
        """Read a job record (strongly consistent), or None if absent."""
        try:
            response = self._table.get_item(Key={"job_id": job_id}, ConsistentRead=True)
        except (ClientError, BotoCoreError) as e:
            raise JobStoreError(f"Failed to read job: {e}", job_id, "get") from e

        item = response.get("Item")
        return Job.from_item(item) if item else None

    def update_fields(
        self,
        job_id: str,
        fields: dict[str, Any],
        expected_status: JobStatus | None = None,
    ) -> Job:
        """
        Atomically SET several attributes of a job.

        updated_at is always rewritten. None values are rejected so an update
        can never clear a previously written field.

        Args:
            job_id: Job to update
            fields: Attribute name -> JSON-serializable value
            expected_status: Only write if the stored status equals this

        Returns:
            Job: The record after the update

        Raises:
            ValueError: Empty update, None value, immutable field, or illegal status transition
            JobAlreadyTerminalError: expected_status did not match (job missing or moved on)
            JobStoreError: DynamoDB failure
        """
        if not fields:
            raise ValueError("No fields to update")
        blocked = _IMMUTABLE_FIELDS.intersection(fields)
        if blocked:
            raise ValueError(f"Immutable fields cannot be updated: {sorted(blocked)}")
        nulls = [name for name, value in fields.items() if value is None]
        if nulls:
            raise ValueError(f"Fields cannot be cleared: {nulls}")

        if "status" in fields:
            new_status = JobStatus(fields["status"])
            if expected_status is None or not expected_status.can_transition_to(new_status):
                raise ValueError(
                    f"Illegal status transition {expected_status} -> {new_status.value}"
                )

        values = {**fields, "updated_at": utc_now_iso()}
        names: dict[str, str] = {}
        attr_values: dict[str, Any] = {}
        assignments = []
        for index, (name, value) in enumerate(values.items()):
            names[f"#f{index}"] = name
            attr_values[f":v{index}"] = value
            assignments.append(f"#f{index} = :v{index}")

        request: dict[str, Any] = {
            "Key": {"job_id": job_id},
            "UpdateExpression": "SET " + ", ".join(assignments),
            "ExpressionAttributeNames": names,
            "ExpressionAttributeValues": attr_values,
            "ReturnValues": "ALL_NEW",
        }
        if expected_status is not None:
            names["#status"] = "status"
            attr_values[":expected_status"] = expected_status.value
            request["ConditionExpression"] = "attribute_exists(job_id) AND #status = :expected_status"
        else:
            request["ConditionExpression"] = "attribute_exists(job_id)"

        try:
            response = self._table.update_item(**request)
        except ClientError as e:
            if _is_conditional_failure(e):
                raise JobAlreadyTerminalError(
                    f"Job {job_id} is not {expected_status.value if expected_status else 'present'}",
                    job_id,
                    "update",
                ) from e
            logger.error("%s:update_fields - %s: %s", __name__, type(e).__name__, e)
            raise JobStoreError(f"Failed to update job: {e}", job_id, "update") from e
        except BotoCoreError as e:
            logger.error("%s:update_fields - %s: %s", __name__, type(e).__name__, e)
            raise JobStoreError(f"Failed to update job: {e}", job_id, "update") from e

        return Job.from_item(response["Attributes"])

    def finalize(
        self,
        job_id: str,
        status: JobStatus,
        stage_extraction: StageResult | None,
        stage_summary: StageResult | None,
        queue_trace: QueueTrace | None = None,
    ) -> Job:
        """
        Write the terminal status and stage fields in one conditional update.

        Only succeeds while the job is still IN_PROGRESS, so a redelivered
        message can never regress or flip a terminal record.

        Raises:
            ValueError: status is not terminal
            JobAlreadyTerminalError: The job was already finalized
            JobStoreError: DynamoDB failure
        """
        if not status.is_terminal:
            raise ValueError(f"Finalize requires a terminal status, got {status.value}")

        fields: dict[str, Any] = {"status": status.value}
        if stage_extraction is not None:
            fields["stage_extraction"] = stage_extraction.model_dump(mode="json", exclude_none=True)
        if stage_summary is not None:
            fields["stage_summary"] = stage_summary.model_dump(mode="json", exclude_none=True)
        if queue_trace is not None:
            fields["queue_trace"] = queue_trace.model_dump(mode="json", exclude_none=True)

        job = self.update_fields(job_id, fields, expected_status=JobStatus.IN_PROGRESS)
        logger.info(
            "%s:finalize - Job marked as %s",
            __name__,
            status.value,
            extra={"job_id": job_id},
        )
        return job
