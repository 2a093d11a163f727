"""
Configuration management module.

Provides centralized, type-safe configuration using Pydantic Settings
and the cached Secrets Manager bundle.
"""

from backend.configs.pipeline import PipelineSettings, get_pipeline_settings
from backend.configs.settings import PipelineConfig, get_config, reset_config_cache

__all__ = [
    "PipelineConfig",
    "PipelineSettings",
    "get_config",
    "get_pipeline_settings",
    "reset_config_cache",
]
