"""
Job pipeline orchestrator.

Drives one dequeued job through OCR extraction, AI summarization and a
single conditional finalize write.

Every stage error is caught at the stage boundary and recorded as a failed
stage; the finalize step always runs so a job is never left IN_PROGRESS by a
processing attempt. Redelivered messages re-run the stages; the finalize
write is conditional on IN_PROGRESS, so a terminal record is never changed.

Dependencies: All task modules, database.job_store, configs
System role: Pipeline orchestration (coordinates only)
"""

import logging
import time

from backend.configs import PipelineConfig
from backend.core.cv_summarizer.database import JobStore
from backend.core.cv_summarizer.models import (
    Job,
    JobStatus,
    PipelineResult,
    QueueMessage,
    StageResult,
    SummaryArtifact,
    utc_now_iso,
)
from backend.core.cv_summarizer.tasks import (
    S3ArtifactStore,
    SummarizationTask,
    TextractOCRTask,
    artifact_timestamp,
)
from backend.core.exceptions import JobAlreadyTerminalError, StageError
from backend.observability import log_exception_with_context, log_with_context

logger = logging.getLogger(__name__)

STAGE_EXTRACTION = "extraction"
STAGE_SUMMARIZATION = "summarization"
STAGE_FINALIZE = "finalize"


class JobPipeline:
    """Orchestrate job processing: OCR -> store text -> summarize -> store summary -> finalize."""

    def __init__(
        self,
        job_store: JobStore,
        object_store: S3ArtifactStore,
        ocr_task: TextractOCRTask,
        summarization_task: SummarizationTask,
        config: PipelineConfig,
    ) -> None:
        """
        Initialize pipeline with its collaborators.

        Args:
            job_store: Job record persistence
            object_store: Artifact storage
            ocr_task: Text extraction
            summarization_task: Structured summary generation
            config: Resolved pipeline configuration
        """
        self._job_store = job_store
        self._object_store = object_store
        self._ocr_task = ocr_task
        self._summarization_task = summarization_task
        self._config = config

    def process(self, message: QueueMessage) -> PipelineResult:
        """
        Process one dequeued job to a terminal state.

        Args:
            message: Job snapshot and queue delivery trace

        Returns:
            PipelineResult: Outcome of this attempt
        """
        start_time = time.perf_counter()
        # Working copy for this attempt only
        job = message.job.model_copy(deep=True)

        logger.info(
            "%s:process - Processing job",
            __name__,
            extra={
                "job_id": job.job_id,
                "user_id": job.user_id,
                "receive_count": message.trace.receive_count,
            },
        )

        extraction, raw_text = self._run_extraction(job)
        summary = self._run_summarization(job, extraction, raw_text)
        return self._finalize(job, extraction, summary, message, start_time)

    def _run_extraction(self, job: Job) -> tuple[StageResult, str | None]:
        try:
            raw_text = self._ocr_task.extract_text(job.source_location.bucket, job.source_location.key)
            if not raw_text.strip():
                raise StageError("OCR returned no text", STAGE_EXTRACTION, job.job_id)

            stage = self._object_store.store_extracted_text(
                self._config.upload_prefix, job.user_id, raw_text, artifact_timestamp()
            )
            logger.info(
                "%s:_run_extraction - Extracted text stored",
                __name__,
                extra={"job_id": job.job_id, "object_key": stage.object_key, "length": stage.length},
            )
            return stage, raw_text

        except Exception as e:  # pylint: disable=broad-except
            return self._stage_failed(job, STAGE_EXTRACTION, e), None

    def _run_summarization(
        self, job: Job, extraction: StageResult, raw_text: str | None
    ) -> StageResult:
        if not extraction.succeeded or not raw_text:
            logger.warning(
                "%s:_run_summarization - Skipped, extraction unavailable",
                __name__,
                extra={"job_id": job.job_id},
            )
            return StageResult.failed("Skipped: extraction did not produce text")

        try:
            outcome = self._summarization_task.summarize(raw_text)
            artifact = SummaryArtifact(
                job_id=job.job_id,
                user_id=job.user_id,
                source_text_key=extraction.object_key or "",
                model_id=outcome.model_id,
                usage=outcome.usage,
                generated_at=utc_now_iso(),
                result=outcome.result,
            )
            stage = self._object_store.store_summary(
                self._config.upload_prefix,
                job.user_id,
                artifact.model_dump(mode="json"),
                artifact_timestamp(),
            )
            logger.info(
                "%s:_run_summarization - Summary stored",
                __name__,
                extra={"job_id": job.job_id, "object_key": stage.object_key, "score": outcome.result.score},
            )
            return stage

        except Exception as e:  # pylint: disable=broad-except
            return self._stage_failed(job, STAGE_SUMMARIZATION, e)

    def _finalize(
        self,
        job: Job,
        extraction: StageResult,
        summary: StageResult,
        message: QueueMessage,
        start_time: float,
    ) -> PipelineResult:
        status = (
            JobStatus.COMPLETED
            if extraction.succeeded and summary.succeeded
            else JobStatus.FAILED
        )
        finalized = False
        already_terminal = False

        try:
            self._job_store.finalize(
                job.job_id,
                status,
                stage_extraction=extraction,
                stage_summary=summary,
                queue_trace=message.trace,
            )
            finalized = True
        except JobAlreadyTerminalError:
            already_terminal = True
            logger.warning(
                "%s:_finalize - Job already terminal, leaving record unchanged",
                __name__,
                extra={"job_id": job.job_id, "receive_count": message.trace.receive_count},
            )
        except Exception as e:  # pylint: disable=broad-except
            self._stage_failed(job, STAGE_FINALIZE, e)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        log_with_context(
            logger,
            logging.INFO,
            f"{__name__}:_finalize - Job processed",
            job_id=job.job_id,
            status=status.value,
            finalized=finalized,
            extraction_error=extraction.error,
            summary_error=summary.error,
            processing_time_ms=round(elapsed_ms, 1),
        )

        return PipelineResult(
            job_id=job.job_id,
            status=status,
            extraction_succeeded=extraction.succeeded,
            summary_succeeded=summary.succeeded,
            finalized=finalized,
            already_terminal=already_terminal,
            processing_time_ms=elapsed_ms,
        )

    @staticmethod
    def _stage_failed(job: Job, stage: str, error: Exception) -> StageResult:
        stage_error = error if isinstance(error, StageError) else StageError(
            f"{type(error).__name__}: {error}", stage, job.job_id
        )
        log_exception_with_context(
            logger,
            f"{__name__}:{stage} - Stage failed",
            error,
            job_id=job.job_id,
            stage=stage,
        )
        return StageResult.failed(stage_error.message)
