"""
Unified pipeline configuration.

Merges the Secrets Manager bundle with environment tunables into a single
immutable PipelineConfig. The config is built once per worker process and is
read-only afterwards; reset_config_cache() exists for tests.

Dependencies: pydantic, backend.configs.pipeline, backend.configs.secrets
System role: Central configuration aggregator injected into every component
"""

import logging
from functools import lru_cache
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from backend.configs.pipeline import PipelineSettings, get_pipeline_settings
from backend.configs.secrets import get_secret_bundle
from backend.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Secret bundle key -> PipelineSettings fallback attribute
_SECRET_KEYS = {
    "AWS_REGION_ID": "region",
    "S3_BUCKET_NAME": "documents_bucket",
    "DYNAMODB_TABLE_NAME": "jobs_table",
    "SQS_QUEUE_URL": "queue_url",
    "GOOGLE_API_KEY": "google_api_key",
}

_REQUIRED = ("region", "documents_bucket", "jobs_table", "queue_url")


class PipelineConfig(BaseModel):
    """Resolved configuration shared by intake and processing."""

    model_config = ConfigDict(frozen=True)

    region: str
    documents_bucket: str
    jobs_table: str
    queue_url: str
    google_api_key: str = Field(default="", repr=False)

    upload_prefix: str = "uploads"
    allowed_extensions: tuple[str, ...] = ("pdf", "jpg", "jpeg", "png", "tiff")
    poll_interval_seconds: float = 5.0
    max_poll_attempts: int = 60
    summary_model_id: str = "gemini-2.5-flash"
    summary_temperature: float = 0.0
    summary_timeout_seconds: float = 120.0
    summary_max_retries: int = 2
    log_level: str = "INFO"

    @classmethod
    def from_sources(
        cls, settings: PipelineSettings, secrets: dict[str, Any] | None = None
    ) -> "PipelineConfig":
        """
        Build config from settings, letting secret values take precedence.

        Args:
            settings: Environment tunables
            secrets: Decoded Secrets Manager bundle (optional)

        Returns:
            PipelineConfig: Resolved configuration

        Raises:
            ConfigurationError: A required value is missing from both sources
        """
        secrets = secrets or {}
        resolved = {
            attr: str(secrets.get(key) or getattr(settings, attr) or "")
            for key, attr in _SECRET_KEYS.items()
        }

        missing = [attr for attr in _REQUIRED if not resolved[attr]]
        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}",
                {"missing": missing},
            )

        return cls(
            **resolved,
            upload_prefix=settings.upload_prefix,
            allowed_extensions=tuple(ext.lower().lstrip(".") for ext in settings.allowed_extensions),
            poll_interval_seconds=settings.poll_interval_seconds,
            max_poll_attempts=settings.max_poll_attempts,
            summary_model_id=settings.summary_model_id,
            summary_temperature=settings.summary_temperature,
            summary_timeout_seconds=settings.summary_timeout_seconds,
            summary_max_retries=settings.summary_max_retries,
            log_level=settings.log_level,
        )


@lru_cache
def get_config() -> PipelineConfig:
    """
    Get the process-wide pipeline configuration.

    Fetched once per Lambda container (cold start) and reused on warm starts.

    Returns:
        PipelineConfig: Resolved configuration
    """
    settings = get_pipeline_settings()
    secrets: dict[str, Any] = {}
    if settings.use_secrets_manager:
        secrets = get_secret_bundle(settings.secret_name, settings.secrets_region)

    config = PipelineConfig.from_sources(settings, secrets)
    logger.info(
        "get_config - Configuration resolved",
        extra={"region": config.region, "bucket": config.documents_bucket},
    )
    return config


def reset_config_cache() -> None:
    """Drop cached settings, secrets and config (tests only)."""
    get_config.cache_clear()
    get_secret_bundle.cache_clear()
    get_pipeline_settings.cache_clear()
