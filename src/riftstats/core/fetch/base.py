"""
Fetch request/outcome data structures and error taxonomy.

Defines the contract between the rate-limited fetcher and the
call sites that hand it work.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar
from urllib.parse import urlencode

T = TypeVar("T")


# =============================================================================
# Errors
# =============================================================================


class FetchError(Exception):
    """Base exception for a failed remote call."""

    def __init__(
        self,
        message: str,
        key: str | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.key = key
        self.status_code = status_code
        self.cause = cause


class RateLimitError(FetchError):
    """Remote rejected the call due to rate limiting (429 or similar)."""

    def __init__(
        self,
        message: str,
        key: str | None = None,
        retry_after: float | None = None,
    ):
        super().__init__(message, key, status_code=429)
        self.retry_after = retry_after


class NotFoundError(FetchError):
    """Remote has nothing under this key. Never retried."""

    def __init__(self, message: str, key: str | None = None):
        super().__init__(message, key, status_code=404)


# =============================================================================
# Outcomes
# =============================================================================


class OutcomeStatus(str, Enum):
    """Terminal status of a single request."""

    HIT_CACHE = "hit-cache"
    SUCCESS = "success"
    FAILED = "failed"


class FailureKind(str, Enum):
    """Why a request failed. Diagnostic only."""

    THROTTLED = "throttled"
    TRANSIENT = "transient"
    PERMANENT = "permanent"
    CANCELLED = "cancelled"


def classify_failure(exc: BaseException) -> FailureKind:
    """Map an exception raised by a request to a failure kind."""
    if isinstance(exc, RateLimitError):
        return FailureKind.THROTTLED
    if isinstance(exc, NotFoundError):
        return FailureKind.PERMANENT
    if isinstance(exc, FetchError) and exc.status_code is not None:
        if 400 <= exc.status_code < 500:
            return FailureKind.PERMANENT
        return FailureKind.TRANSIENT
    if isinstance(exc, (ValueError, TypeError, KeyError)):
        # Includes pydantic.ValidationError: the payload is unusable.
        return FailureKind.PERMANENT
    return FailureKind.TRANSIENT


@dataclass(frozen=True)
class FetchRequest(Generic[T]):
    """One unit of work for the fetcher.

    Attributes:
        key: Identity of the target (e.g. a match id)
        execute: Zero-argument coroutine function performing one network call.
            Raises RateLimitError when throttled, anything else on failure.
        params: Parameters that change the response (e.g. width/format),
            folded into the cache key
    """

    key: str
    execute: Callable[[], Awaitable[T]]
    params: Mapping[str, Any] = field(default_factory=dict)

    @property
    def cache_key(self) -> str:
        """Cache key derived from identity and response-affecting params."""
        if not self.params:
            return self.key
        return f"{self.key}?{urlencode(sorted((k, str(v)) for k, v in self.params.items()))}"


@dataclass
class FetchOutcome(Generic[T]):
    """Per-request result, positionally aligned with the input list."""

    key: str
    status: OutcomeStatus
    value: T | None = None

    # Diagnostics
    attempts: int = 0
    failure: FailureKind | None = None
    error: str | None = None
    exception: BaseException | None = field(default=None, repr=False, compare=False)

    @property
    def ok(self) -> bool:
        """True when a value is available (fresh or cached)."""
        return self.status is not OutcomeStatus.FAILED

    @property
    def from_cache(self) -> bool:
        return self.status is OutcomeStatus.HIT_CACHE

    @classmethod
    def failed(
        cls,
        key: str,
        failure: FailureKind,
        error: str | None = None,
        attempts: int = 0,
        exception: BaseException | None = None,
    ) -> "FetchOutcome[T]":
        return cls(
            key=key,
            status=OutcomeStatus.FAILED,
            attempts=attempts,
            failure=failure,
            error=error,
            exception=exception,
        )

    def raise_for_failure(self) -> None:
        """Raise a FetchError if this outcome failed.

        FetchError subclasses (RateLimitError, NotFoundError) are re-raised
        as recorded. Anything else (timeouts, payload validation errors)
        is wrapped, with the original as ``cause`` and ``__cause__``.
        """
        if self.ok:
            return
        if isinstance(self.exception, FetchError):
            raise self.exception
        message = f"Fetch failed for {self.key}: {self.error or 'unknown error'}"
        if isinstance(self.exception, Exception):
            raise FetchError(message, key=self.key, cause=self.exception) from self.exception
        raise FetchError(message, key=self.key)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the plain outcome shape."""
        return {
            "key": self.key,
            "status": self.status.value,
            "value": self.value,
        }


def successful_values(outcomes: list[FetchOutcome[T]]) -> list[T]:
    """Values of the outcomes that succeeded, in order. Failed entries are skipped."""
    return [o.value for o in outcomes if o.ok]
