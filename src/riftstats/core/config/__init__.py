"""Configuration loading and validation."""

from .models import (
    # Enums
    BackoffStrategy,
    # Config models
    AppConfig,
    FetcherConfig,
    LoggingConfig,
    RiotConfig,
)
from .loader import ConfigError, load_app_config, resolve_api_key

__all__ = [
    # Enums
    "BackoffStrategy",
    # Config models
    "AppConfig",
    "FetcherConfig",
    "LoggingConfig",
    "RiotConfig",
    # Loaders
    "ConfigError",
    "load_app_config",
    "resolve_api_key",
]
