"""
Rate-limited batch fetcher.

Executes many independent remote calls against a service that enforces
a requests-per-window limit:

- at most batch_size calls in flight
- batches separated by inter_batch_delay_ms (none after the last)
- throttled calls retried after retry_delay_ms, up to max_retries_per_request
- other failures terminal on the first attempt
- optional TTL cache in front of every call

Per-request failures never raise out of fetch_all: they become
"failed" outcomes so callers can aggregate whatever data they got.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Iterable, Mapping
from typing import Any, TypeVar

from ..config.models import FetcherConfig
from .base import (
    FailureKind,
    FetchOutcome,
    FetchRequest,
    OutcomeStatus,
    classify_failure,
    successful_values,
)
from .caching import ResponseCache
from .retries import RetryPolicy
from .throttling import BatchPacer, BatchPlan

logger = logging.getLogger(__name__)

T = TypeVar("T")

ConfigLike = FetcherConfig | Mapping[str, Any] | None


class RateLimitedFetcher:
    """Batched, throttle-aware fetcher with a TTL cache.

    Usage:
        fetcher = RateLimitedFetcher(FetcherConfig(batch_size=10))
        outcomes = await fetcher.fetch_all([
            FetchRequest(key=match_id, execute=partial(client.get_match, match_id, routing))
            for match_id in match_ids
        ])
    """

    def __init__(
        self,
        config: FetcherConfig | None = None,
        cache: ResponseCache | None = None,
    ):
        """Initialize the fetcher.

        Args:
            config: Default configuration for fetch_all calls
            cache: Cache to use (default: a private cache sized from config)
        """
        self.config = config or FetcherConfig()
        self.cache = cache if cache is not None else ResponseCache(
            max_entries=self.config.cache_max_entries,
        )

    def resolve_config(self, config: ConfigLike = None) -> FetcherConfig:
        """Merge a per-call override into the fetcher defaults.

        Raises:
            pydantic.ValidationError: If the merged configuration is invalid
        """
        if config is None:
            return self.config
        if isinstance(config, FetcherConfig):
            return config
        return FetcherConfig.model_validate({**self.config.model_dump(), **dict(config)})

    async def fetch_all(
        self,
        requests: Iterable[FetchRequest[T]],
        config: ConfigLike = None,
        *,
        abort: asyncio.Event | None = None,
    ) -> list[FetchOutcome[T]]:
        """Fetch every request, returning outcomes in input order.

        Args:
            requests: Requests to execute
            config: Per-call configuration (FetcherConfig or overrides mapping)
            abort: When set, batches not yet dispatched are skipped
                and reported as cancelled failures

        Returns:
            One outcome per request, positionally aligned with the input

        Raises:
            pydantic.ValidationError: Invalid configuration (before any work)
            TypeError: An item is not a FetchRequest (before any work)
        """
        cfg = self.resolve_config(config)
        requests = list(requests)
        for request in requests:
            if not isinstance(request, FetchRequest):
                raise TypeError(f"Expected FetchRequest, got {type(request).__name__}")

        if not requests:
            return []

        started = time.monotonic()
        outcomes: list[FetchOutcome[T] | None] = [None] * len(requests)

        # Serve cache hits first; only misses consume rate-limit budget.
        misses: list[tuple[int, FetchRequest[T]]] = []
        ttl_seconds = cfg.cache_ttl_ms / 1000.0
        for index, request in enumerate(requests):
            if cfg.cache_enabled:
                entry = self.cache.get_entry(request.cache_key, ttl_seconds)
                if entry is not None:
                    outcomes[index] = FetchOutcome(
                        key=request.key,
                        status=OutcomeStatus.HIT_CACHE,
                        value=entry.value,
                    )
                    continue
            misses.append((index, request))

        plan = BatchPlan.build(
            [request for _, request in misses],
            cfg.batch_size,
            positions=[index for index, _ in misses],
        )
        pacer = BatchPacer(cfg.inter_batch_delay_ms / 1000.0)
        policy = RetryPolicy.from_config(cfg)

        for batch in plan:
            await pacer.wait()

            if abort is not None and abort.is_set():
                skipped = [pair for later in plan.batches[batch.number:] for pair in later.pairs()]
                logger.info("Fetch aborted, skipping %d requests", len(skipped))
                for index, request in skipped:
                    outcomes[index] = FetchOutcome.failed(
                        request.key,
                        FailureKind.CANCELLED,
                        error="aborted before dispatch",
                    )
                break

            logger.debug(
                "Fetching batch %d/%d (%d requests from index %d)",
                batch.number + 1,
                len(plan),
                len(batch),
                batch.start,
            )
            results = await asyncio.gather(*(
                self._fetch_one(request, cfg, policy) for request in batch.items
            ))
            pacer.mark_settled()

            for index, outcome in zip(batch.positions, results):
                outcomes[index] = outcome

        final = [o for o in outcomes if o is not None]
        self._log_summary(final, len(plan), time.monotonic() - started)
        return final

    async def fetch_values(
        self,
        requests: Iterable[FetchRequest[T]],
        config: ConfigLike = None,
        *,
        abort: asyncio.Event | None = None,
    ) -> list[T]:
        """Fetch and return only the values that were obtained, in order."""
        return successful_values(await self.fetch_all(requests, config, abort=abort))

    async def fetch_one(
        self,
        request: FetchRequest[T],
        config: ConfigLike = None,
    ) -> FetchOutcome[T]:
        """Fetch a single request under the same policy."""
        outcomes = await self.fetch_all([request], config)
        return outcomes[0]

    async def _fetch_one(
        self,
        request: FetchRequest[T],
        cfg: FetcherConfig,
        policy: RetryPolicy,
    ) -> FetchOutcome[T]:
        """Run one request through timeout and retry; never raises except on cancel."""
        attempts = 0
        timeout = cfg.request_timeout_ms / 1000.0

        def record_attempt(number: int) -> None:
            nonlocal attempts
            attempts = number

        async def attempt() -> T:
            return await asyncio.wait_for(request.execute(), timeout)

        try:
            value = await policy.call(attempt, key=request.key, on_attempt=record_attempt)
        except Exception as exc:
            failure = classify_failure(exc)
            _log_failure(request.key, failure, exc, attempts)
            return FetchOutcome.failed(
                request.key,
                failure,
                error=str(exc) or type(exc).__name__,
                attempts=attempts,
                exception=exc,
            )

        if cfg.cache_enabled:
            self.cache.set(request.cache_key, value)

        return FetchOutcome(
            key=request.key,
            status=OutcomeStatus.SUCCESS,
            value=value,
            attempts=attempts,
        )

    def _log_summary(self, outcomes: list[FetchOutcome[Any]], batches: int, elapsed: float) -> None:
        cached = sum(1 for o in outcomes if o.status is OutcomeStatus.HIT_CACHE)
        failed = sum(1 for o in outcomes if o.status is OutcomeStatus.FAILED)
        logger.info(
            "Loaded %d/%d (%d cached, %d failed) in %d batches, %.2fs",
            len(outcomes) - failed,
            len(outcomes),
            cached,
            failed,
            batches,
            elapsed,
        )


def _log_failure(key: str, failure: FailureKind, exc: BaseException, attempts: int) -> None:
    extra = {"request_key": key, "failure": failure.value}
    if failure is FailureKind.THROTTLED:
        logger.warning("Giving up on %s: still rate limited after %d attempts", key, attempts, extra=extra)
    elif failure is FailureKind.PERMANENT:
        logger.warning("Request %s rejected: %s", key, exc, extra=extra)
    elif isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        logger.error("Request %s timed out", key, extra=extra)
    else:
        logger.error("Request %s failed: %s", key, exc, extra=extra)
