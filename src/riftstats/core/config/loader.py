"""
YAML configuration loading.

configs/app.yaml is optional: without it every setting takes its
default and the Riot API key is read from the environment.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .models import AppConfig

DEFAULT_CONFIG_PATH = Path("configs/app.yaml")
API_KEY_ENV_VARS = ("RIOT_API_KEY", "VITE_RIOT_API_KEY")
PLACEHOLDER_API_KEY = "your_riot_api_key_here"

# ${VAR} or ${VAR:-default}
_ENV_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


class ConfigError(Exception):
    """Configuration file could not be read or failed validation."""

    def __init__(self, message: str, path: Path | None = None, details: str | None = None):
        self.path = path
        self.details = details
        super().__init__(message)


def _read_yaml(path: Path) -> dict[str, Any]:
    """Parse a YAML file whose top level must be a mapping (empty file -> {}).

    Raises:
        ConfigError: Unreadable file, invalid YAML or non-mapping document
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}", path=path, details=str(e)) from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}", path=path, details=str(e)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping at the top of {path}", path=path)
    return data


def _expand_env(value: Any) -> Any:
    """Substitute environment variables in every string of a YAML tree."""
    if isinstance(value, str):
        return _ENV_PATTERN.sub(lambda m: os.environ.get(m.group(1), m.group(2) or ""), value)
    if isinstance(value, dict):
        return {k: _expand_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env(v) for v in value]
    return value


def _deep_merge(base: dict[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_app_config(
    path: Path | str | None = None,
    expand_env: bool = True,
    overrides: Mapping[str, Any] | None = None,
) -> AppConfig:
    """Load and validate app.yaml.

    Args:
        path: Config file (default: configs/app.yaml). A missing file
            yields the defaults.
        expand_env: Substitute ${VAR} / ${VAR:-default} in string values
        overrides: Nested values applied on top of the file, e.g.
            {"logging": {"level": "DEBUG"}}

    Raises:
        ConfigError: The file exists but is unreadable or invalid
    """
    path = DEFAULT_CONFIG_PATH if path is None else Path(path)

    data = _read_yaml(path) if path.exists() else {}
    if expand_env:
        data = _expand_env(data)
    if overrides:
        data = _deep_merge(data, overrides)

    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(
            f"Invalid app configuration in {path}",
            path=path,
            details=str(e),
        ) from e


def resolve_api_key(config: AppConfig) -> str | None:
    """Riot API key from config, else the first usable environment variable."""
    if config.riot.api_key:
        return config.riot.api_key
    for name in API_KEY_ENV_VARS:
        value = os.environ.get(name, "").strip()
        if value and value != PLACEHOLDER_API_KEY:
            return value
    return None


DEFAULT_APP_YAML = """\
# riftstats configuration

logging:
  level: INFO
  file: logs/riftstats.log
  json_format: true
  rich_console: true

# Rate-limited fetcher (defaults fit a Riot development key)
fetcher:
  batch_size: 10
  inter_batch_delay_ms: 200
  max_retries_per_request: 1
  retry_delay_ms: 3000
  cache_ttl_ms: 0
  cache_max_entries: 512
  request_timeout_ms: 10000
  backoff: fixed

riot:
  api_key: ${RIOT_API_KEY:-}
  default_region: EUW
  match_count: 20
"""


def write_default_app_config(path: Path | str = DEFAULT_CONFIG_PATH, force: bool = False) -> bool:
    """Write DEFAULT_APP_YAML to path.

    Returns:
        False without writing if the file exists and force is not set
    """
    path = Path(path)
    if path.exists() and not force:
        return False

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_APP_YAML, encoding="utf-8")
    return True
