"""
Tests for configuration module.

Tests settings loading, validation, and environment variable overrides.
"""

from pathlib import Path

import pytest
import yaml

from web_digest.config import (
    BatchSettings,
    BrowserSettings,
    RetrySettings,
    Settings,
    get_default_config_path,
    get_settings,
    load_config,
)
from web_digest.core.exceptions import ErrorCode, ErrorKind, WebDigestError
from web_digest.core.retry import BackoffStrategy


class TestSettings:
    """Tests for Settings model."""

    def test_default_settings_valid(self):
        """Default settings should be valid."""
        settings = Settings()

        assert settings.browser.headless is True
        assert settings.rate_limit.max_requests == 2
        assert settings.rate_limit.window_seconds == 1.0
        assert settings.retry.max_retries == 3
        assert settings.retry.backoff == BackoffStrategy.EXPONENTIAL
        assert settings.chunking.max_chunk_chars == 32000
        assert settings.batch.recycle_every == 10

    def test_browser_settings_validation(self):
        """Browser settings should validate constraints."""
        browser = BrowserSettings(timeout_ms=45000, viewport_width=1920)
        assert browser.timeout_ms == 45000

        with pytest.raises(ValueError):
            BrowserSettings(timeout_ms=10)

        with pytest.raises(ValueError):
            BrowserSettings(browser_type="netscape")

    def test_retry_settings_validation(self):
        """Retry settings should accept strategy names and reject negatives."""
        assert RetrySettings(backoff="linear").backoff == BackoffStrategy.LINEAR

        with pytest.raises(ValueError):
            RetrySettings(max_retries=-1)

    def test_batch_settings_validation(self):
        """Recycling needs a positive interval."""
        with pytest.raises(ValueError):
            BatchSettings(recycle_every=0)

    def test_settings_nested_override(self):
        """Nested settings can be overridden."""
        settings = Settings(
            browser={"headless": False},
            batch={"delay_seconds": 2.5},
        )

        assert settings.browser.headless is False
        assert settings.batch.delay_seconds == 2.5
        # Non-overridden should keep defaults
        assert settings.batch.link_delay_seconds == 1.0

    def test_unknown_section_rejected(self):
        """Unknown top-level keys should be rejected."""
        with pytest.raises(ValueError):
            Settings(crawler={"max_pages": 10})


class TestConfigLoader:
    """Tests for configuration loading."""

    def test_load_defaults(self):
        """Loading without a file should give defaults."""
        settings = load_config()

        assert settings == Settings()

    def test_load_from_yaml(self, temp_dir: Path):
        """Settings should be read from a YAML file."""
        config_file = temp_dir / "config.yaml"
        config_file.write_text(
            yaml.dump({
                "rate_limit": {"max_requests": 5, "window_seconds": 2.0},
                "retry": {"backoff": "linear"},
            })
        )

        settings = load_config(config_file)

        assert settings.rate_limit.max_requests == 5
        assert settings.rate_limit.window_seconds == 2.0
        assert settings.retry.backoff == BackoffStrategy.LINEAR

    def test_empty_yaml(self, temp_dir: Path):
        """An empty file should give defaults."""
        config_file = temp_dir / "config.yaml"
        config_file.write_text("")

        assert load_config(config_file) == Settings()

    def test_missing_file(self, temp_dir: Path):
        """A missing file should raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(temp_dir / "nope.yaml")

    def test_env_override(self, temp_dir: Path, monkeypatch):
        """Environment variables should override file values."""
        config_file = temp_dir / "config.yaml"
        config_file.write_text(yaml.dump({"batch": {"delay_seconds": 3.0}}))
        monkeypatch.setenv("WEB_DIGEST__BATCH__DELAY_SECONDS", "0.5")
        monkeypatch.setenv("WEB_DIGEST__BROWSER__HEADLESS", "false")
        monkeypatch.setenv("WEB_DIGEST__LLM__MODEL_NAME", "claude-test")

        settings = load_config(config_file)

        assert settings.batch.delay_seconds == 0.5
        assert settings.browser.headless is False
        assert settings.llm.model_name == "claude-test"

    def test_env_without_key_ignored(self, monkeypatch):
        """Variables without a section and key should be ignored."""
        monkeypatch.setenv("WEB_DIGEST__DEBUG", "1")

        assert load_config() == Settings()

    def test_invalid_value(self, temp_dir: Path):
        """Out-of-range values should raise a CONFIGURATION error."""
        config_file = temp_dir / "config.yaml"
        config_file.write_text(yaml.dump({"rate_limit": {"max_requests": 0}}))

        with pytest.raises(WebDigestError) as exc_info:
            load_config(config_file)

        assert exc_info.value.kind == ErrorKind.CONFIGURATION
        assert exc_info.value.code == ErrorCode.INVALID_CONFIG
        assert any("rate_limit.max_requests" in e for e in exc_info.value.details["errors"])

    def test_invalid_yaml(self, temp_dir: Path):
        """Malformed YAML should raise a CONFIGURATION error."""
        config_file = temp_dir / "config.yaml"
        config_file.write_text("batch: [unclosed")

        with pytest.raises(WebDigestError) as exc_info:
            load_config(config_file)

        assert exc_info.value.kind == ErrorKind.CONFIGURATION

    def test_non_mapping_yaml(self, temp_dir: Path):
        """A YAML list should be rejected."""
        config_file = temp_dir / "config.yaml"
        config_file.write_text("- a\n- b\n")

        with pytest.raises(WebDigestError):
            load_config(config_file)

    def test_get_settings_cached(self):
        """get_settings should return the same instance until reloaded."""
        first = get_settings()

        assert get_settings() is first
        assert get_settings(reload=True) is not first

    def test_env_overrides_from_mapping(self):
        """Overrides should nest by section and coerce values."""
        from web_digest.config.loader import env_overrides

        overrides = env_overrides(
            environ={
                "WEB_DIGEST__RETRY__MAX_RETRIES": "5",
                "WEB_DIGEST__RETRY__MAX_DELAY_SECONDS": "none",
                "OTHER__RETRY__MAX_RETRIES": "9",
            }
        )

        assert overrides == {"retry": {"max_retries": 5, "max_delay_seconds": None}}

    def test_default_path_from_env(self, temp_dir: Path, monkeypatch):
        """WEB_DIGEST_CONFIG should name the default configuration file."""
        path = temp_dir / "digest.yaml"
        monkeypatch.setenv("WEB_DIGEST_CONFIG", str(path))
        get_default_config_path.cache_clear()

        try:
            assert get_default_config_path() == path
        finally:
            get_default_config_path.cache_clear()
