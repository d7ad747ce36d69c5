"""Configuration package for summaryr."""

from summaryr.config.app_config import (
    AppConfig,
    LLMSettings,
    ProcessingSettings,
    TranscriptionSettings,
    clear_config_cache,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "LLMSettings",
    "ProcessingSettings",
    "TranscriptionSettings",
    "clear_config_cache",
    "load_app_config",
]
