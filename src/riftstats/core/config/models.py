"""
Pydantic configuration models for riftstats.

These models provide type-safe configuration with validation for:
- Rate-limited fetcher behaviour
- Riot API access
- Logging
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# Enums
# =============================================================================


class BackoffStrategy(str, Enum):
    """Delay policy between retries of a throttled request."""

    FIXED = "fixed"
    EXPONENTIAL = "exponential"


# =============================================================================
# Fetcher Configuration
# =============================================================================


class FetcherConfig(BaseModel):
    """Batching, retry and caching settings for the rate-limited fetcher.

    Defaults reflect the Riot development key limit
    (20 requests/second, 100 requests/2 minutes).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    batch_size: int = Field(
        default=10,
        gt=0,
        description="Max requests dispatched concurrently in one batch",
    )
    inter_batch_delay_ms: int = Field(
        default=200,
        ge=0,
        description="Pause between consecutive batches in milliseconds",
    )
    max_retries_per_request: int = Field(
        default=1,
        ge=0,
        description="Retries allowed for a throttled request",
    )
    retry_delay_ms: int = Field(
        default=3000,
        ge=0,
        description="Delay before retrying a throttled request in milliseconds",
    )
    cache_ttl_ms: int = Field(
        default=0,
        ge=0,
        description="Cache lifetime in milliseconds (0 disables caching)",
    )
    cache_max_entries: int = Field(
        default=512,
        gt=0,
        description="Max cached entries before least recently used are evicted",
    )
    request_timeout_ms: int = Field(
        default=10_000,
        gt=0,
        description="Per-attempt timeout in milliseconds",
    )
    backoff: BackoffStrategy = Field(
        default=BackoffStrategy.FIXED,
        description="Fixed or exponential delay between retries",
    )
    max_retry_delay_ms: int = Field(
        default=30_000,
        ge=0,
        description="Upper bound for exponential retry delays",
    )
    respect_retry_after: bool = Field(
        default=True,
        description="Wait for the remote's Retry-After when it exceeds retry_delay_ms",
    )

    @field_validator("max_retry_delay_ms")
    @classmethod
    def max_delay_gte_retry_delay(cls, v: int, info: Any) -> int:
        """Ensure the backoff cap is at least the base retry delay."""
        retry_delay = info.data.get("retry_delay_ms", 0)
        if v < retry_delay:
            raise ValueError("max_retry_delay_ms must be >= retry_delay_ms")
        return v

    @property
    def cache_enabled(self) -> bool:
        return self.cache_ttl_ms > 0


# =============================================================================
# Riot API Configuration
# =============================================================================


class RiotConfig(BaseModel):
    """Riot Games API access settings."""

    api_key: str | None = Field(
        default=None,
        description="Riot API key (falls back to RIOT_API_KEY)",
    )
    default_region: str = Field(
        default="EUW",
        description="Region used when none is given",
    )
    timeout_seconds: float = Field(
        default=10.0,
        ge=1.0,
        le=120.0,
        description="HTTP timeout in seconds",
    )
    match_count: int = Field(
        default=20,
        ge=1,
        le=100,
        description="Matches loaded for match history",
    )
    top_champions_ttl_ms: int = Field(
        default=60 * 60 * 1000,
        ge=0,
        description="How long top-champion results stay cached",
    )
    match_cache_ttl_ms: int = Field(
        default=10 * 60 * 1000,
        ge=0,
        description="How long fetched match details stay cached (0 disables)",
    )
    top_champions_match_limit: int = Field(
        default=8,
        ge=1,
        le=20,
        description="Match details inspected when ranking a player's champions",
    )

    @field_validator("api_key")
    @classmethod
    def blank_key_is_none(cls, v: str | None) -> str | None:
        """Treat empty or placeholder keys as missing."""
        if v is None:
            return None
        v = v.strip()
        if not v or v == "your_riot_api_key_here":
            return None
        return v


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    file: Path | None = Field(
        default=None,
        description="Log file path",
    )
    json_format: bool = Field(
        default=True,
        description="Use JSON format for file logs",
    )
    rich_console: bool = Field(
        default=True,
        description="Use Rich for console output",
    )

    @field_validator("level")
    @classmethod
    def known_level(cls, v: str) -> str:
        v = v.upper()
        if v not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return v


# =============================================================================
# Application Configuration
# =============================================================================


class AppConfig(BaseModel):
    """Root application configuration.

    This is the main configuration object loaded from app.yaml.
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    fetcher: FetcherConfig = Field(default_factory=FetcherConfig)
    riot: RiotConfig = Field(default_factory=RiotConfig)

    def ensure_directories(self) -> None:
        """Create the log directory if a log file is configured."""
        if self.logging.file:
            self.logging.file.parent.mkdir(parents=True, exist_ok=True)
