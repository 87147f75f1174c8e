"""
Retry utilities with tenacity.

Only throttled calls (RateLimitError) are retried. Every other
failure is terminal on the first attempt.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_fixed,
)
from tenacity.wait import wait_base

from ..config.models import BackoffStrategy
from .base import RateLimitError

if TYPE_CHECKING:
    from ..config.models import FetcherConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


# Default retry configuration
DEFAULT_MAX_RETRIES = 1
DEFAULT_RETRY_DELAY = 3.0  # seconds
DEFAULT_MAX_DELAY = 30.0  # seconds


class wait_retry_after(wait_base):
    """Wait at least as long as the remote's Retry-After hint.

    Falls back to the wrapped strategy when the hint is missing or
    shorter. The hint is capped at max_wait.
    """

    def __init__(self, base: wait_base, max_wait: float):
        self.base = base
        self.max_wait = max_wait

    def __call__(self, retry_state: RetryCallState) -> float:
        delay = self.base(retry_state)
        outcome = retry_state.outcome
        if outcome is None or not outcome.failed:
            return delay
        exc = outcome.exception()
        if isinstance(exc, RateLimitError) and exc.retry_after:
            return max(delay, min(exc.retry_after, self.max_wait))
        return delay


class RetryPolicy:
    """Retry policy for throttled requests."""

    def __init__(
        self,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        backoff: BackoffStrategy = BackoffStrategy.FIXED,
        max_delay: float = DEFAULT_MAX_DELAY,
        respect_retry_after: bool = True,
    ):
        """Initialize retry policy.

        Args:
            max_retries: Retries after the first attempt
            retry_delay: Delay before each retry in seconds
                (first retry when exponential)
            backoff: Fixed or exponential delays
            max_delay: Cap for exponential delays and Retry-After hints
            respect_retry_after: Honor RateLimitError.retry_after
        """
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if retry_delay < 0:
            raise ValueError("retry_delay must be >= 0")
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.backoff = backoff
        self.max_delay = max(max_delay, retry_delay)
        self.respect_retry_after = respect_retry_after

    @classmethod
    def from_config(cls, config: FetcherConfig) -> "RetryPolicy":
        return cls(
            max_retries=config.max_retries_per_request,
            retry_delay=config.retry_delay_ms / 1000.0,
            backoff=config.backoff,
            max_delay=config.max_retry_delay_ms / 1000.0,
            respect_retry_after=config.respect_retry_after,
        )

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def wait_strategy(self) -> wait_base:
        """Build the tenacity wait strategy."""
        if self.backoff is BackoffStrategy.EXPONENTIAL:
            wait: wait_base = wait_exponential(
                multiplier=self.retry_delay,
                min=self.retry_delay,
                max=self.max_delay,
            )
        else:
            wait = wait_fixed(self.retry_delay)

        if self.respect_retry_after:
            wait = wait_retry_after(wait, self.max_delay)
        return wait

    def retrying(self, key: str | None = None) -> AsyncRetrying:
        """Build an AsyncRetrying controller for one request."""
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self.wait_strategy(),
            retry=retry_if_exception_type(RateLimitError),
            before_sleep=_log_throttled(key),
            reraise=True,
        )

    async def call(
        self,
        coro_func: Callable[[], Awaitable[T]],
        key: str | None = None,
        on_attempt: Callable[[int], None] | None = None,
    ) -> T:
        """Execute an async function, retrying while it is throttled.

        Args:
            coro_func: Zero-argument async function
            key: Request key for log messages
            on_attempt: Called with the attempt number before each attempt

        Returns:
            Function result

        Raises:
            RateLimitError: If still throttled after the last retry
            Exception: Any non-throttle error, on the first occurrence
        """
        async for attempt in self.retrying(key):
            with attempt:
                if on_attempt is not None:
                    on_attempt(attempt.retry_state.attempt_number)
                return await coro_func()
        raise AssertionError("unreachable: tenacity reraises on exhaustion")


def _log_throttled(key: str | None) -> Callable[[RetryCallState], None]:
    def before_sleep(retry_state: RetryCallState) -> None:
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.warning(
            "Rate limit hit for %s (attempt %d), retrying in %.2fs",
            key or "request",
            retry_state.attempt_number,
            delay,
            extra={"request_key": key},
        )

    return before_sleep
