"""
Intake gate for uploaded documents.

Validates S3 upload notifications, creates the IN_PROGRESS job record and
enqueues the job snapshot for processing.

Outcomes per notification:
- ignored: not a document upload (directory marker, wrong key shape, extension)
- empty: zero-byte upload, object deleted, no job
- duplicate: redelivered notification, job already created (re-enqueued
  while it is still untouched IN_PROGRESS, so a failed send can recover)
- accepted: job created and enqueued
- dropped: job store or work queue failure (logged, not retried)

Dependencies: models, database.job_store, messaging.work_queue, tasks.storage_task
System role: Entry gate creating jobs before any queue message references them
"""

import logging
import uuid
from typing import Any

from backend.configs import PipelineConfig
from backend.core.cv_summarizer.database import JobStore
from backend.core.cv_summarizer.lambda_utils.event_parser import parse_s3_record
from backend.core.cv_summarizer.messaging import SQSWorkQueue
from backend.core.cv_summarizer.models import (
    FileMetadata,
    Job,
    JobStatus,
    SourceLocation,
    UploadNotification,
)
from backend.core.cv_summarizer.tasks import S3ArtifactStore
from backend.core.exceptions import (
    EmptyUpload,
    IntakePersistenceError,
    JobAlreadyExistsError,
    JobStoreError,
    MessageParseError,
    ObjectStoreError,
    ValidationIgnored,
    WorkQueueError,
)
from backend.observability import log_exception_with_context, log_with_context

logger = logging.getLogger(__name__)

# Namespace for deterministic job ids derived from the upload event
JOB_ID_NAMESPACE = uuid.UUID("6f1c2d4e-8a3b-5c7d-9e0f-1a2b3c4d5e6f")


def build_job_id(notification: UploadNotification) -> str:
    """
    Derive the job id for an upload event.

    The S3 sequencer is identical when the same event is redelivered and
    differs for a later upload to the same key, so repeated notifications
    map to one job while re-uploads get a new one.
    """
    marker = notification.sequencer or notification.event_time or ""
    return str(uuid.uuid5(JOB_ID_NAMESPACE, f"{notification.bucket}/{notification.key}/{marker}"))


class IntakeGate:
    """Turn upload notifications into persisted, enqueued jobs."""

    def __init__(
        self,
        job_store: JobStore,
        work_queue: SQSWorkQueue,
        object_store: S3ArtifactStore,
        config: PipelineConfig,
    ) -> None:
        self._job_store = job_store
        self._work_queue = work_queue
        self._object_store = object_store
        self._config = config

    def validate(self, notification: UploadNotification) -> tuple[str, str, str]:
        """
        Check the key shape and extension.

        Args:
            notification: Parsed upload notification

        Returns:
            tuple[str, str, str]: (user_id, file_name, extension)

        Raises:
            ValidationIgnored: Not a processable document upload
        """
        key = notification.key
        if key.endswith("/"):
            raise ValidationIgnored("Directory marker", key)

        parts = key.split("/")
        if len(parts) != 3:
            raise ValidationIgnored("Key is not prefix/user_id/file_name", key)

        _, user_id, file_name = parts
        if not user_id or not file_name:
            raise ValidationIgnored("File is not in a user folder", key)

        if "." not in file_name:
            raise ValidationIgnored("File has no extension", key)
        extension = file_name.rsplit(".", 1)[1].lower()
        if extension not in self._config.allowed_extensions:
            raise ValidationIgnored(f"Extension .{extension} is not supported", key)

        return user_id, file_name, extension

    def build_job(self, notification: UploadNotification) -> Job:
        """Build the initial IN_PROGRESS job for an accepted upload."""
        user_id, file_name, extension = self.validate(notification)
        return Job(
            job_id=build_job_id(notification),
            user_id=user_id,
            source_location=SourceLocation(
                bucket=notification.bucket,
                key=notification.key,
                url=self._object_store.object_url(notification.key, notification.bucket),
            ),
            file_metadata=FileMetadata(
                name=file_name,
                format=extension,
                size_bytes=notification.size,
            ),
            status=JobStatus.IN_PROGRESS,
            source_ip=notification.source_ip,
            event_time=notification.event_time,
        )

    def handle(self, notification: UploadNotification) -> Job | None:
        """
        Process one upload notification.

        Never raises for expected outcomes; returns the created job, or None
        when the notification was ignored, empty, duplicate or dropped.
        """
        bucket, key = notification.bucket, notification.key

        try:
            if key.endswith("/"):
                raise ValidationIgnored("Directory marker", key)
            if notification.size == 0:
                raise EmptyUpload(bucket, key)
            job = self.build_job(notification)
        except ValidationIgnored as e:
            log_with_context(
                logger, logging.INFO, "handle - Ignoring notification", reason=e.message, bucket=bucket, key=key
            )
            return None
        except EmptyUpload as e:
            logger.warning("handle - %s, deleting object", e.message, extra={"bucket": bucket, "key": key})
            self._delete_empty_upload(bucket, key)
            return None

        try:
            self._job_store.create(job)
        except JobAlreadyExistsError:
            logger.info(
                "handle - Duplicate notification, job already exists",
                extra={"job_id": job.job_id, "bucket": bucket, "key": key},
            )
            self._resend_pending(job.job_id, bucket, key)
            return None
        except JobStoreError as e:
            self._report_dropped(IntakePersistenceError(f"Job store write failed: {e.message}", bucket, key), e)
            return None

        if not self._enqueue(job, bucket, key):
            return None

        logger.info(
            "handle - Job created and enqueued",
            extra={"job_id": job.job_id, "user_id": job.user_id, "key": key},
        )
        return job

    def handle_event(self, event: dict[str, Any]) -> dict[str, int]:
        """
        Process every record of an S3 event.

        Returns:
            dict: Counts of accepted and skipped records
        """
        counts = {"records": 0, "accepted": 0, "skipped": 0}
        for record in event.get("Records", []):
            counts["records"] += 1
            try:
                notification = parse_s3_record(record)
            except MessageParseError as e:
                logger.warning("handle_event - Skipping unparseable record: %s", e)
                counts["skipped"] += 1
                continue

            if self.handle(notification) is None:
                counts["skipped"] += 1
            else:
                counts["accepted"] += 1
        return counts

    def _enqueue(self, job: Job, bucket: str, key: str) -> bool:
        try:
            self._work_queue.enqueue(
                group_id=job.user_id,
                dedup_id=job.job_id,
                payload=job.model_dump_json(exclude_none=True),
            )
        except WorkQueueError as e:
            # Job stays IN_PROGRESS with no delivery until the notification is redelivered
            self._report_dropped(IntakePersistenceError(f"Work queue send failed: {e.message}", bucket, key), e)
            return False
        return True

    def _resend_pending(self, job_id: str, bucket: str, key: str) -> None:
        """
        Re-enqueue an existing job that no worker has touched yet.

        A previous send may have failed after the job was created. The FIFO
        dedup id is the job id, so a resend of a job that was already
        delivered within the dedup window collapses into the first message.
        """
        try:
            existing = self._job_store.get(job_id)
        except JobStoreError as e:
            self._report_dropped(IntakePersistenceError(f"Job store read failed: {e.message}", bucket, key), e)
            return

        if existing is None or existing.status is not JobStatus.IN_PROGRESS:
            return
        if existing.stage_extraction is not None or existing.stage_summary is not None:
            return

        if self._enqueue(existing, bucket, key):
            log_with_context(
                logger,
                logging.INFO,
                "handle - Re-enqueued pending job",
                job_id=job_id,
                user_id=existing.user_id,
                key=key,
            )

    def _delete_empty_upload(self, bucket: str, key: str) -> None:
        try:
            self._object_store.delete(key, bucket=bucket)
        except ObjectStoreError as e:
            log_exception_with_context(
                logger, "handle - Failed to delete empty upload", e, bucket=bucket, key=key
            )

    @staticmethod
    def _report_dropped(error: IntakePersistenceError, cause: Exception) -> None:
        log_exception_with_context(
            logger,
            "handle - Intake persistence failed, notification dropped",
            cause,
            bucket=error.details.get("bucket"),
            key=error.details.get("key"),
            reason=error.message,
        )
