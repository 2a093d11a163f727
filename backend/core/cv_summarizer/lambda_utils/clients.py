"""
Process-wide AWS clients and component factories for Lambda.

Clients are created once per worker process (Lambda cold start), reused on
warm starts and never mutated afterwards. Components receive them through
their constructors. reset_process_state() clears every cache for tests.
"""

import logging
from functools import lru_cache
from typing import Any, NamedTuple

import boto3

from backend.configs import PipelineConfig, get_config, reset_config_cache
from backend.core.cv_summarizer.database import JobStore
from backend.core.cv_summarizer.entrypoint import JobPipeline
from backend.core.cv_summarizer.intake import IntakeGate
from backend.core.cv_summarizer.messaging import SQSWorkQueue
from backend.core.cv_summarizer.polling import BoundedPoller
from backend.core.cv_summarizer.tasks import S3ArtifactStore, SummarizationTask, TextractOCRTask

logger = logging.getLogger(__name__)


class AWSClients(NamedTuple):
    """boto3 clients shared by all components in a process."""

    s3: Any
    sqs: Any
    textract: Any
    jobs_table: Any


@lru_cache
def get_clients() -> AWSClients:
    """Create boto3 clients for the configured region (once per process)."""
    config = get_config()
    session = boto3.session.Session(region_name=config.region)
    clients = AWSClients(
        s3=session.client("s3"),
        sqs=session.client("sqs"),
        textract=session.client("textract"),
        jobs_table=session.resource("dynamodb").Table(config.jobs_table),
    )
    logger.info("get_clients - AWS clients initialized", extra={"region": config.region})
    return clients


def build_intake_gate(config: PipelineConfig, clients: AWSClients) -> IntakeGate:
    """Wire an IntakeGate from config and clients."""
    return IntakeGate(
        job_store=JobStore(clients.jobs_table),
        work_queue=SQSWorkQueue(clients.sqs, config.queue_url),
        object_store=S3ArtifactStore(clients.s3, config.documents_bucket, config.region),
        config=config,
    )


def build_pipeline(config: PipelineConfig, clients: AWSClients) -> JobPipeline:
    """Wire a JobPipeline from config and clients."""
    poller = BoundedPoller(
        poll_interval=config.poll_interval_seconds,
        max_attempts=config.max_poll_attempts,
        name="Textract job",
    )
    return JobPipeline(
        job_store=JobStore(clients.jobs_table),
        object_store=S3ArtifactStore(clients.s3, config.documents_bucket, config.region),
        ocr_task=TextractOCRTask(clients.textract, poller),
        summarization_task=SummarizationTask(
            model_id=config.summary_model_id,
            api_key=config.google_api_key,
            temperature=config.summary_temperature,
            timeout_seconds=config.summary_timeout_seconds,
            max_retries=config.summary_max_retries,
        ),
        config=config,
    )


@lru_cache
def get_intake_gate() -> IntakeGate:
    return build_intake_gate(get_config(), get_clients())


@lru_cache
def get_pipeline() -> JobPipeline:
    return build_pipeline(get_config(), get_clients())


def reset_process_state() -> None:
    """Drop cached config, clients and components (tests only)."""
    get_pipeline.cache_clear()
    get_intake_gate.cache_clear()
    get_clients.cache_clear()
    reset_config_cache()
