"""Configuration package for the syllabus ingestion pipeline."""

from syllabus.config.app_config import (
    AppConfig,
    ExtractionConfig,
    PipelineConfig,
    ProviderConfig,
    clear_config_cache,
    get_provider_config,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "ExtractionConfig",
    "PipelineConfig",
    "ProviderConfig",
    "clear_config_cache",
    "get_provider_config",
    "load_app_config",
]
