"""Application configuration loader.

Loads centralized configuration from data/config/app_config_v1.yaml,
falling back to built-in defaults when the file is absent. Sections
missing from the file keep their defaults.

Usage:
    from syllabus.config.app_config import load_app_config, get_provider_config

    config = load_app_config()
    timeout = config.pipeline.extraction_timeout
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("data/config/app_config_v1.yaml")


@dataclass
class ProviderConfig:
    """Configuration for a single LLM provider."""

    base_url: str | None
    default_model: str
    api_key_env: str | None = None

    def get_api_key(self) -> str | None:
        """Get API key from environment variable."""
        if self.api_key_env:
            return os.environ.get(self.api_key_env)
        return None


@dataclass
class ExtractionConfig:
    """Settings for the extraction engine's generation calls."""

    temperature: float = 0.1
    max_tokens: int = 2048
    max_input_chars: int = 60000
    # JSON repair attempts inside the LLM client (0 = none)
    json_repair_retries: int = 0


@dataclass
class PipelineConfig:
    """Orchestrator settings."""

    extraction_timeout: float = 180.0
    # Attempts per extraction call; 1 disables retry
    max_attempts: int = 1


@dataclass
class AppConfig:
    """Application-wide configuration."""

    providers: dict[str, ProviderConfig] = field(default_factory=dict)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    paths: dict[str, str] = field(default_factory=dict)

    @property
    def db_path(self) -> Path:
        """Catalog database location."""
        return Path(self.paths.get("db_path", "db/syllabus.db"))


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "providers": {
            "lmstudio": {
                "base_url": "http://localhost:1234/v1",
                "default_model": "llama-3.1-8b-instruct",
                "api_key_env": None,
            },
            "openai": {
                "base_url": None,
                "default_model": "gpt-4o-mini",
                "api_key_env": "OPENAI_API_KEY",
            },
            "anthropic": {
                "base_url": None,
                "default_model": "claude-sonnet-4-20250514",
                "api_key_env": "ANTHROPIC_API_KEY",
            },
        },
        "extraction": {
            "temperature": 0.1,
            "max_tokens": 2048,
            "max_input_chars": 60000,
            "json_repair_retries": 0,
        },
        "pipeline": {
            "extraction_timeout": 180.0,
            "max_attempts": 1,
        },
        "paths": {
            "db_path": "db/syllabus.db",
            "config_dir": "data/config",
        },
    }


def _merge_with_defaults(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay file values on the defaults, one section at a time."""
    result = _get_defaults()
    for section, values in (data or {}).items():
        if isinstance(values, dict) and isinstance(result.get(section), dict):
            result[section].update(copy.deepcopy(values))
        else:
            result[section] = values
    return result


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    providers = {}
    for name, pconfig in data.get("providers", {}).items():
        providers[name] = ProviderConfig(
            base_url=pconfig.get("base_url"),
            default_model=pconfig.get("default_model", "default"),
            api_key_env=pconfig.get("api_key_env"),
        )

    extraction_data = data.get("extraction", {})
    extraction = ExtractionConfig(
        temperature=float(extraction_data.get("temperature", 0.1)),
        max_tokens=int(extraction_data.get("max_tokens", 2048)),
        max_input_chars=int(extraction_data.get("max_input_chars", 60000)),
        json_repair_retries=int(extraction_data.get("json_repair_retries", 0)),
    )

    pipeline_data = data.get("pipeline", {})
    pipeline = PipelineConfig(
        extraction_timeout=float(pipeline_data.get("extraction_timeout", 180.0)),
        max_attempts=max(1, int(pipeline_data.get("max_attempts", 1))),
    )

    paths = data.get("paths", {})

    return AppConfig(
        providers=providers,
        extraction=extraction,
        pipeline=pipeline,
        paths=paths,
    )


def load_app_config(
    force_reload: bool = False,
    config_path: Path | None = None,
) -> AppConfig:
    """Load application config, using defaults when no file exists.

    Args:
        force_reload: If True, ignore cached config and reload from file.
        config_path: Alternative YAML file (bypasses the cache).

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if config_path is None and _cached_config is not None and not force_reload:
        return _cached_config

    path = config_path or CONFIG_FILE

    if path.exists():
        logger.debug("loading_app_config", source=str(path))
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        data = _merge_with_defaults(raw)
    else:
        logger.info("using_default_config", looked_at=str(path))
        data = _get_defaults()

    config = _parse_config(data)
    if config_path is None:
        _cached_config = config
    return config


def get_provider_config(provider: str) -> ProviderConfig | None:
    """Get configuration for a specific provider.

    Args:
        provider: Provider name (e.g., "lmstudio", "openai")

    Returns:
        ProviderConfig or None if provider not found.
    """
    config = load_app_config()
    return config.providers.get(provider)


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
