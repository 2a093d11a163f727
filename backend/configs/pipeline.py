"""
Pipeline tunables loaded from the environment.

Holds values that are safe to keep in plain Lambda environment variables:
polling bounds, model selection, allow-lists and fallbacks for the
secret-backed values.

Dependencies: pydantic, pydantic_settings
System role: Environment-based pipeline configuration
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PipelineSettings(BaseSettings):
    """Settings for the intake and processing Lambdas."""

    model_config = SettingsConfigDict(
        env_prefix="CV_PIPELINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(default="INFO", description="Root log level for the Lambda workers")

    # Secrets Manager bundle
    use_secrets_manager: bool = Field(
        default=True,
        description="Fetch service identifiers and credentials from Secrets Manager",
    )
    secret_name: str = Field(
        default="cv-summarizer/api-keys",
        description="Secrets Manager secret id holding the config bundle",
    )
    secrets_region: str = Field(
        default="ap-southeast-1",
        description="AWS region of the Secrets Manager secret",
    )

    # Fallbacks when a value is absent from the secret bundle
    region: str = Field(default="", description="AWS region for S3, DynamoDB, SQS and Textract")
    documents_bucket: str = Field(default="", description="S3 bucket for uploads and artifacts")
    jobs_table: str = Field(default="", description="DynamoDB table holding job records")
    queue_url: str = Field(default="", description="SQS FIFO queue URL for work messages")
    google_api_key: str = Field(default="", description="Google API key for Gemini")

    # Intake
    upload_prefix: str = Field(
        default="uploads",
        description="Key prefix used for artifacts written next to the upload",
    )
    allowed_extensions: list[str] = Field(
        default_factory=lambda: ["pdf", "jpg", "jpeg", "png", "tiff"],
        description="Document extensions accepted by the intake gate",
    )

    # OCR polling (5 sec * 60 = 5 minutes max)
    poll_interval_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Fixed wait between OCR status polls",
    )
    max_poll_attempts: int = Field(
        default=60,
        ge=1,
        description="Maximum OCR status polls before timing out",
    )

    # Summarizer
    summary_model_id: str = Field(
        default="gemini-2.5-flash",
        description="Google Gemini model used for CV summaries",
    )
    summary_temperature: float = Field(default=0.0, description="Model temperature")
    summary_timeout_seconds: float = Field(
        default=120.0,
        gt=0,
        description="Hard ceiling for a single summarizer call",
    )
    summary_max_retries: int = Field(
        default=2,
        ge=0,
        description="Client-side retries for transient summarizer errors",
    )


@lru_cache
def get_pipeline_settings() -> PipelineSettings:
    """
    Get cached pipeline settings instance.

    Returns:
        PipelineSettings: Singleton settings loaded from environment
    """
    return PipelineSettings()
