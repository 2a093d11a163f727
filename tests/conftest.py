"""
Shared test fixtures and configuration for entire test suite.

Provides: Environment isolation for pipeline settings, cache resets
Dependencies: pytest
System role: Test infrastructure and fixture management
"""

import pytest

from backend.configs import reset_config_cache

_PIPELINE_ENV = (
    "CV_PIPELINE_USE_SECRETS_MANAGER",
    "CV_PIPELINE_SECRET_NAME",
    "CV_PIPELINE_REGION",
    "CV_PIPELINE_DOCUMENTS_BUCKET",
    "CV_PIPELINE_JOBS_TABLE",
    "CV_PIPELINE_QUEUE_URL",
    "CV_PIPELINE_GOOGLE_API_KEY",
    "CV_PIPELINE_POLL_INTERVAL_SECONDS",
    "CV_PIPELINE_MAX_POLL_ATTEMPTS",
)


@pytest.fixture(autouse=True)
def isolated_pipeline_env(monkeypatch):
    """
    Strip pipeline variables from the environment and clear cached config.

    Yields:
        MonkeyPatch: For tests that set their own variables
    """
    for name in _PIPELINE_ENV:
        monkeypatch.delenv(name, raising=False)
    reset_config_cache()
    yield monkeypatch
    reset_config_cache()


@pytest.fixture
def pipeline_env(isolated_pipeline_env):
    """Minimal environment for resolving config without Secrets Manager."""
    env = {
        "CV_PIPELINE_USE_SECRETS_MANAGER": "false",
        "CV_PIPELINE_REGION": "ap-southeast-1",
        "CV_PIPELINE_DOCUMENTS_BUCKET": "cv-bucket",
        "CV_PIPELINE_JOBS_TABLE": "cv-jobs",
        "CV_PIPELINE_QUEUE_URL": "https://sqs.ap-southeast-1.amazonaws.com/123/cv-jobs.fifo",
    }
    for name, value in env.items():
        isolated_pipeline_env.setenv(name, value)
    return env
