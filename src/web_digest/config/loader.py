"""
Configuration loading.

Sources, later ones winning:
1. Defaults defined in settings.py
2. A YAML file
3. Environment variables WEB_DIGEST__{SECTION}__{KEY}

Example: WEB_DIGEST__RATE_LIMIT__MAX_REQUESTS=5
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from web_digest.config.settings import Settings
from web_digest.core.exceptions import ErrorCode, ErrorKind, WebDigestError

ENV_PREFIX = "WEB_DIGEST"
CONFIG_PATH_ENV = "WEB_DIGEST_CONFIG"

_BOOL_WORDS = {
    "true": True, "yes": True, "on": True,
    "false": False, "no": False, "off": False,
}
_NULL_WORDS = {"none", "null", ""}

_cached: Settings | None = None


def _config_error(message: str, **details: Any) -> WebDigestError:
    return WebDigestError(
        message,
        ErrorKind.CONFIGURATION,
        code=ErrorCode.INVALID_CONFIG,
        details=details,
    )


def _merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Nested merge; mappings merge key by key, anything else replaces."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = _merge(current, value)
        else:
            merged[key] = value
    return merged


def _coerce(raw: str) -> Any:
    """Environment string to bool, None, int, float, or the string itself."""
    word = raw.strip().lower()
    if word in _BOOL_WORDS:
        return _BOOL_WORDS[word]
    if word in _NULL_WORDS:
        return None
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        return float(raw)
    except ValueError:
        return raw


def env_overrides(
    prefix: str = ENV_PREFIX,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """
    Nested overrides from PREFIX__SECTION__KEY variables.

    Names need at least a section and a key after the prefix; others are
    ignored.
    """
    environ = os.environ if environ is None else environ
    marker = f"{prefix}__"
    overrides: dict[str, Any] = {}

    for name, raw in environ.items():
        if not name.startswith(marker):
            continue
        *sections, key = name[len(marker):].lower().split("__")
        if not sections:
            continue
        target = overrides
        for section in sections:
            target = target.setdefault(section, {})
        target[key] = _coerce(raw)

    return overrides


def read_yaml(path: Path) -> dict[str, Any]:
    """
    Mapping stored in a YAML file (empty for an empty file).

    Raises:
        FileNotFoundError: If the file doesn't exist
        WebDigestError: CONFIGURATION error for invalid YAML or a non-mapping
    """
    if not path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise _config_error(f"Invalid YAML in configuration file: {e}", path=str(path)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise _config_error(
            "Configuration file must contain a mapping",
            path=str(path),
            found=type(data).__name__,
        )
    return data


def load_config(
    config_path: Path | str | None = None,
    env_prefix: str = ENV_PREFIX,
) -> Settings:
    """
    Build validated Settings from a file and the environment.

    Args:
        config_path: YAML file; None uses defaults plus environment only
        env_prefix: Prefix of override variables

    Raises:
        FileNotFoundError: If config_path is given but doesn't exist
        WebDigestError: CONFIGURATION error if values fail validation
    """
    data = read_yaml(Path(config_path)) if config_path is not None else {}
    data = _merge(data, env_overrides(env_prefix))

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise _config_error(
            f"Invalid configuration: {e.error_count()} validation error(s)",
            errors=[
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                for err in e.errors()
            ],
        ) from e


def get_settings(config_path: Path | str | None = None, reload: bool = False) -> Settings:
    """Settings loaded once per process; `reload=True` reads them again."""
    global _cached
    if _cached is None or reload:
        _cached = load_config(config_path)
    return _cached


def reset_settings() -> None:
    global _cached
    _cached = None


@lru_cache(maxsize=1)
def get_default_config_path() -> Path | None:
    """
    Configuration file to use when none is given.

    $WEB_DIGEST_CONFIG if set, else the first existing of ./config.yaml,
    ./config/config.yaml and ~/.web_digest/config.yaml.
    """
    explicit = os.environ.get(CONFIG_PATH_ENV)
    if explicit:
        return Path(explicit).expanduser()

    candidates = (
        Path.cwd() / "config.yaml",
        Path.cwd() / "config" / "config.yaml",
        Path.home() / ".web_digest" / "config.yaml",
    )
    return next((path for path in candidates if path.is_file()), None)
