"""Application configuration loader.

Loads centralized configuration from config/summaryr.yaml (or the path in
SUMMARYR_CONFIG) and falls back to built-in defaults when no file exists.

Usage:
    from summaryr.config.app_config import load_app_config

    config = load_app_config()
    config.llm.chat_model
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("config/summaryr.yaml")
CONFIG_ENV_VAR = "SUMMARYR_CONFIG"


@dataclass
class LLMSettings:
    """OpenAI chat completion settings."""

    base_url: str | None = None
    chat_model: str = "gpt-4o-mini"
    temperature: float = 0.7
    timeout: int = 120
    api_key_env: str = "OPENAI_API_KEY"

    def get_api_key(self) -> str | None:
        """Get API key from environment variable."""
        return os.environ.get(self.api_key_env)


@dataclass
class TranscriptionSettings:
    """Whisper and realtime recording settings."""

    model: str = "whisper-1"
    min_chunk_bytes: int = 10240
    default_mode: str = "general"


@dataclass
class ProcessingSettings:
    """Limits used by the document pipeline and generators."""

    document_chunk_size: int = 5000
    generation_chunk_size: int = 10000
    max_document_flashcards: int = 50
    default_question_count: int = 20
    max_summary_chars: int = 100000
    words_per_page: int = 500


@dataclass
class AppConfig:
    """Application-wide configuration."""

    llm: LLMSettings = field(default_factory=LLMSettings)
    transcription: TranscriptionSettings = field(default_factory=TranscriptionSettings)
    processing: ProcessingSettings = field(default_factory=ProcessingSettings)
    paths: dict[str, str] = field(default_factory=dict)

    @property
    def data_dir(self) -> Path:
        return Path(self.paths.get("data_dir", "data"))

    @property
    def db_path(self) -> Path:
        return Path(self.paths.get("db_path", str(self.data_dir / "summaryr.db")))

    @property
    def uploads_dir(self) -> Path:
        return Path(self.paths.get("uploads_dir", str(self.data_dir / "uploads")))


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "llm": {
            "base_url": None,
            "chat_model": "gpt-4o-mini",
            "temperature": 0.7,
            "timeout": 120,
            "api_key_env": "OPENAI_API_KEY",
        },
        "transcription": {
            "model": "whisper-1",
            "min_chunk_bytes": 10240,
            "default_mode": "general",
        },
        "processing": {
            "document_chunk_size": 5000,
            "generation_chunk_size": 10000,
            "max_document_flashcards": 50,
            "default_question_count": 20,
            "max_summary_chars": 100000,
            "words_per_page": 500,
        },
        "paths": {
            "data_dir": "data",
            "db_path": "data/summaryr.db",
            "uploads_dir": "data/uploads",
        },
    }


def _merge(defaults: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Merge a partial YAML document over the defaults, one level deep."""
    result = {key: dict(value) for key, value in defaults.items()}
    for section, values in (overrides or {}).items():
        if isinstance(values, dict) and section in result:
            result[section].update(values)
        else:
            result[section] = values
    return result


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    llm_data = data.get("llm", {})
    llm = LLMSettings(
        base_url=llm_data.get("base_url"),
        chat_model=llm_data.get("chat_model", "gpt-4o-mini"),
        temperature=float(llm_data.get("temperature", 0.7)),
        timeout=int(llm_data.get("timeout", 120)),
        api_key_env=llm_data.get("api_key_env", "OPENAI_API_KEY"),
    )

    tr_data = data.get("transcription", {})
    transcription = TranscriptionSettings(
        model=tr_data.get("model", "whisper-1"),
        min_chunk_bytes=int(tr_data.get("min_chunk_bytes", 10240)),
        default_mode=tr_data.get("default_mode", "general"),
    )

    proc_data = data.get("processing", {})
    processing = ProcessingSettings(
        document_chunk_size=int(proc_data.get("document_chunk_size", 5000)),
        generation_chunk_size=int(proc_data.get("generation_chunk_size", 10000)),
        max_document_flashcards=int(proc_data.get("max_document_flashcards", 50)),
        default_question_count=int(proc_data.get("default_question_count", 20)),
        max_summary_chars=int(proc_data.get("max_summary_chars", 100000)),
        words_per_page=int(proc_data.get("words_per_page", 500)),
    )

    paths = {key: str(value) for key, value in data.get("paths", {}).items()}

    return AppConfig(
        llm=llm,
        transcription=transcription,
        processing=processing,
        paths=paths,
    )


def get_config_path() -> Path:
    """Resolve the config file path, honouring SUMMARYR_CONFIG."""
    override = os.environ.get(CONFIG_ENV_VAR)
    return Path(override) if override else CONFIG_FILE


def load_app_config(force_reload: bool = False) -> AppConfig:
    """Load application config, falling back to defaults.

    Args:
        force_reload: If True, ignore cached config and reload from file.

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    config_path = get_config_path()

    if config_path.exists():
        logger.debug("loading_app_config", source=str(config_path))
        raw = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
        data = _merge(_get_defaults(), raw)
    else:
        logger.info("using_default_config", looked_at=str(config_path))
        data = _get_defaults()

    _cached_config = _parse_config(data)
    return _cached_config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
