"""
Logging configuration for Web Digest.

Everything logs below the `web_digest` logger. setup_logging() attaches a
console handler and, when configured, a size-rotated log file; modules get
child loggers through get_logger(__name__). Per-URL work logs through
get_logger_with_context() so every line names the page it concerns.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from web_digest.config.settings import LoggingSettings


ROOT_LOGGER_NAME = "web_digest"

_configured = False


def setup_logging(
    settings: "LoggingSettings | None" = None,
    level: str | None = None,
) -> logging.Logger:
    """
    Attach handlers to the application logger.

    Only the first call has an effect until reset_logging() is called.

    Args:
        settings: Logging section of the configuration (defaults if None)
        level: Level name overriding settings.level, e.g. "DEBUG"

    Returns:
        The `web_digest` logger
    """
    global _configured

    root = logging.getLogger(ROOT_LOGGER_NAME)
    if _configured:
        return root

    if settings is None:
        from web_digest.config.settings import LoggingSettings

        settings = LoggingSettings()

    numeric_level = logging.getLevelName((level or settings.level).upper())
    formatter = logging.Formatter(fmt=settings.format, datefmt=settings.date_format)

    handlers: list[logging.Handler] = []
    if settings.log_to_console:
        handlers.append(logging.StreamHandler(sys.stdout))
    if settings.file_path is not None:
        handlers.append(
            _rotating_file_handler(
                settings.file_path,
                max_bytes=settings.max_file_size_mb * 1024 * 1024,
                backup_count=settings.backup_count,
            )
        )

    root.handlers.clear()
    root.setLevel(numeric_level)
    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    # Handlers live on the app logger only; keep records out of the root logger
    root.propagate = False

    _configured = True
    return root


def _rotating_file_handler(path: Path, max_bytes: int, backup_count: int) -> RotatingFileHandler:
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        filename=str(path),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Logger under the application logger.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Batch started")
    """
    if not name or name == ROOT_LOGGER_NAME:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def reset_logging() -> None:
    """Close and detach all handlers so setup_logging() can run again."""
    global _configured

    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        handler.close()
        root.removeHandler(handler)

    _configured = False


class LoggerAdapter(logging.LoggerAdapter):
    """
    Appends `[key=value]` context to every message.

    Example:
        >>> logger = LoggerAdapter(get_logger(__name__), {"url": "https://example.com"})
        >>> logger.info("Summarized")  # "Summarized [url=https://example.com]"
    """

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        if self.extra:
            tags = " ".join(f"[{key}={value}]" for key, value in self.extra.items())
            msg = f"{msg} {tags}"
        return msg, kwargs


def get_logger_with_context(name: str | None = None, **context: str) -> LoggerAdapter:
    """
    Logger whose messages carry the given context.

    Example:
        >>> logger = get_logger_with_context(__name__, url="https://example.com")
        >>> logger.warning("Retrying")
    """
    return LoggerAdapter(get_logger(name), context)
