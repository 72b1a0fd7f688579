"""
Configuration module for Web Digest.

Provides Pydantic-based settings management with YAML file support
and environment variable overrides.
"""

from web_digest.config.settings import (
    Settings,
    BrowserSettings,
    LLMSettings,
    RateLimitSettings,
    RetrySettings,
    ChunkingSettings,
    BatchSettings,
    LoggingSettings,
)
from web_digest.config.loader import (
    load_config,
    get_settings,
    reset_settings,
    get_default_config_path,
)

__all__ = [
    "Settings",
    "BrowserSettings",
    "LLMSettings",
    "RateLimitSettings",
    "RetrySettings",
    "ChunkingSettings",
    "BatchSettings",
    "LoggingSettings",
    "load_config",
    "get_settings",
    "reset_settings",
    "get_default_config_path",
]
