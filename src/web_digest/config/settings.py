"""
Pydantic settings models for Web Digest.

All configuration is defined here with defaults suited to summarizing a
handful of pages per run against a hosted model endpoint.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from web_digest.chunking.chunker import DEFAULT_MAX_CHUNK_CHARS
from web_digest.core.retry import BackoffStrategy


class BrowserSettings(BaseModel):
    """Playwright browser configuration."""

    headless: bool = Field(
        default=True,
        description="Render pages without a visible window",
    )
    browser_type: Literal["chromium", "firefox", "webkit"] = Field(
        default="chromium",
        description="Playwright engine that renders pages",
    )
    timeout_ms: int = Field(
        default=30000,
        ge=1000,
        le=120000,
        description="Per-operation page timeout (ms) applied to the context",
    )
    navigation_timeout_ms: int = Field(
        default=30000,
        ge=1000,
        le=180000,
        description="Navigation timeout (ms) unless a call overrides it",
    )
    wait_until: Literal["load", "domcontentloaded", "networkidle", "commit"] = Field(
        default="networkidle",
        description="Page load state that ends a navigation",
    )
    user_agent: str | None = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
        ),
        description="User agent sent with every request; None keeps the engine default",
    )
    viewport_width: int = Field(
        default=1280,
        ge=320,
        le=3840,
        description="Viewport width (px)",
    )
    viewport_height: int = Field(
        default=720,
        ge=240,
        le=2160,
        description="Viewport height (px)",
    )
    ignore_https_errors: bool = Field(
        default=False,
        description="Accept pages served with invalid certificates",
    )
    min_content_chars: int = Field(
        default=50,
        ge=0,
        le=10000,
        description="Extracted text shorter than this is treated as no content",
    )
    max_links: int = Field(
        default=20,
        ge=1,
        le=200,
        description="Maximum same-host links returned by link extraction",
    )


class LLMSettings(BaseModel):
    """Model endpoint (Anthropic Messages API) configuration."""

    provider: Literal["anthropic"] = Field(
        default="anthropic",
        description="Hosted model provider",
    )
    model_name: str = Field(
        default="claude-sonnet-4-20250514",
        description="Model sent with each Messages request",
    )
    api_key_env_var: str = Field(
        default="ANTHROPIC_API_KEY",
        description="Environment variable holding the API key",
    )
    base_url: str = Field(
        default="https://api.anthropic.com",
        description="Messages API root URL",
    )
    api_version: str = Field(
        default="2023-06-01",
        description="Value of the anthropic-version header",
    )
    max_tokens: int = Field(
        default=2048,
        ge=100,
        le=8192,
        description="Output token cap per model call",
    )
    temperature: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Sampling temperature",
    )
    timeout_seconds: int = Field(
        default=60,
        ge=5,
        le=600,
        description="HTTP timeout per model call (s)",
    )


class RateLimitSettings(BaseModel):
    """Limits on calls to the model endpoint."""

    max_requests: int = Field(
        default=2,
        ge=1,
        le=1000,
        description="Model calls allowed to start per window",
    )
    window_seconds: float = Field(
        default=1.0,
        gt=0.0,
        le=3600.0,
        description="Rate window length in seconds",
    )


class RetrySettings(BaseModel):
    """Retry policy for navigation, extraction and model calls."""

    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Attempt budget per operation (0 = single attempt)",
    )
    base_delay_seconds: float = Field(
        default=1.0,
        ge=0.0,
        le=60.0,
        description="Base delay before the first retry",
    )
    backoff: BackoffStrategy = Field(
        default=BackoffStrategy.EXPONENTIAL,
        description="Delay growth strategy: exponential or linear",
    )
    max_delay_seconds: float | None = Field(
        default=30.0,
        ge=0.0,
        description="Upper bound on a single retry delay. None is unbounded.",
    )
    attempt_timeout_seconds: float | None = Field(
        default=None,
        gt=0.0,
        description="Time limit for one attempt of a retried operation. None is unlimited.",
    )


class ChunkingSettings(BaseModel):
    """Content chunking configuration."""

    max_chunk_chars: int = Field(
        default=DEFAULT_MAX_CHUNK_CHARS,
        ge=500,
        le=400000,
        description="Maximum characters per chunk sent to the model",
    )


class BatchSettings(BaseModel):
    """Batch orchestration configuration."""

    delay_seconds: float = Field(
        default=1.0,
        ge=0.0,
        le=60.0,
        description="Pause between successive URLs in a batch",
    )
    link_delay_seconds: float = Field(
        default=1.0,
        ge=0.0,
        le=60.0,
        description="Pause between followed links",
    )
    recycle_every: int = Field(
        default=10,
        ge=1,
        le=1000,
        description="Recycle the browser session after this many URLs",
    )


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Level of the web_digest logger",
    )
    format: str = Field(
        default="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        description="logging.Formatter format",
    )
    date_format: str = Field(
        default="%Y-%m-%d %H:%M:%S",
        description="logging.Formatter datefmt",
    )
    file_path: Path | None = Field(
        default=None,
        description="Rotating log file; None disables file logging",
    )
    max_file_size_mb: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Rotate the log file past this size (MB)",
    )
    backup_count: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Rotated files kept",
    )
    log_to_console: bool = Field(
        default=True,
        description="Also log to stdout",
    )

    @field_validator("file_path", mode="before")
    @classmethod
    def convert_file_path(cls, v: str | Path | None) -> Path | None:
        """Convert string paths to Path objects."""
        if v is None:
            return None
        return Path(v) if isinstance(v, str) else v


class Settings(BaseModel):
    """
    Root configuration model containing all subsystem settings.

    Settings are loaded from YAML with environment variable overrides.
    """

    browser: BrowserSettings = Field(
        default_factory=BrowserSettings,
        description="Browser/Playwright settings",
    )
    llm: LLMSettings = Field(
        default_factory=LLMSettings,
        description="Model endpoint settings",
    )
    rate_limit: RateLimitSettings = Field(
        default_factory=RateLimitSettings,
        description="Model endpoint rate limit",
    )
    retry: RetrySettings = Field(
        default_factory=RetrySettings,
        description="Retry policy settings",
    )
    chunking: ChunkingSettings = Field(
        default_factory=ChunkingSettings,
        description="Content chunking settings",
    )
    batch: BatchSettings = Field(
        default_factory=BatchSettings,
        description="Batch orchestration settings",
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )

    model_config = {
        "extra": "forbid",
        "validate_default": True,
    }
