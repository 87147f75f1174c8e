import time

import pytest

from conftest import DummyCall, throttled
from riftstats.core.config import BackoffStrategy
from riftstats.core.fetch import (
    BatchPacer,
    BatchPlan,
    FailureKind,
    FetchError,
    FetchOutcome,
    FetchRequest,
    NotFoundError,
    RateLimitError,
    ResponseCache,
    RetryPolicy,
)
from riftstats.core.fetch.base import classify_failure


# =============================================================================
# ResponseCache
# =============================================================================


def test_cache_entry_expires_lazily(fake_clock) -> None:
    cache = ResponseCache(clock=fake_clock)
    cache.set("k", "v")

    fake_clock.advance(9)
    assert cache.get("k", ttl_seconds=10) == "v"

    fake_clock.advance(1)
    assert "k" in cache  # still resident until read
    assert cache.get("k", ttl_seconds=10) is None
    assert "k" not in cache


def test_cache_overwrite_resets_timestamp(fake_clock) -> None:
    cache = ResponseCache(clock=fake_clock)
    cache.set("k", "old")
    fake_clock.advance(8)
    cache.set("k", "new")
    fake_clock.advance(8)

    assert cache.get("k", ttl_seconds=10) == "new"


def test_cache_evicts_least_recently_used(fake_clock) -> None:
    cache = ResponseCache(max_entries=2, clock=fake_clock)
    cache.set("a", 1)
    cache.set("b", 2)
    assert cache.get("a", ttl_seconds=60) == 1  # a is now most recent
    cache.set("c", 3)

    assert "b" not in cache
    assert cache.get("a", ttl_seconds=60) == 1
    assert cache.get("c", ttl_seconds=60) == 3
    assert cache.stats()["evictions"] == 1


def test_cache_stats_count_hits_and_misses(fake_clock) -> None:
    cache = ResponseCache(clock=fake_clock)
    cache.set("a", 1)
    cache.get("a", ttl_seconds=1)
    cache.get("missing", ttl_seconds=1)

    stats = cache.stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["entries"] == 1


def test_cache_rejects_non_positive_size() -> None:
    with pytest.raises(ValueError):
        ResponseCache(max_entries=0)


# =============================================================================
# FetchRequest / FetchOutcome
# =============================================================================


def test_cache_key_is_key_without_params() -> None:
    req = FetchRequest(key="EUW1_123", execute=DummyCall())
    assert req.cache_key == "EUW1_123"


def test_cache_key_params_are_order_independent() -> None:
    a = FetchRequest(key="img", execute=DummyCall(), params={"w": 400, "format": "webp"})
    b = FetchRequest(key="img", execute=DummyCall(), params={"format": "webp", "w": "400"})
    c = FetchRequest(key="img", execute=DummyCall(), params={"format": "png", "w": 400})

    assert a.cache_key == b.cache_key
    assert a.cache_key != c.cache_key


def test_failed_outcome_raise_for_failure() -> None:
    error = NotFoundError("gone", key="m1")
    outcome = FetchOutcome.failed("m1", FailureKind.PERMANENT, error="gone", exception=error)

    assert not outcome.ok
    assert outcome.to_dict() == {"key": "m1", "status": "failed", "value": None}
    with pytest.raises(NotFoundError):
        outcome.raise_for_failure()

    bare = FetchOutcome.failed("m2", FailureKind.CANCELLED, error="aborted")
    with pytest.raises(FetchError, match="aborted"):
        bare.raise_for_failure()


@pytest.mark.parametrize("error", [TimeoutError(), ValueError("missing profileIconId")])
def test_raise_for_failure_wraps_foreign_exceptions(error: Exception) -> None:
    kind = FailureKind.TRANSIENT if isinstance(error, TimeoutError) else FailureKind.PERMANENT
    outcome = FetchOutcome.failed("summoner:me", kind, error=str(error) or "TimeoutError", exception=error)

    with pytest.raises(FetchError) as exc_info:
        outcome.raise_for_failure()

    assert type(exc_info.value) is FetchError
    assert exc_info.value.key == "summoner:me"
    assert exc_info.value.cause is error
    assert exc_info.value.__cause__ is error


@pytest.mark.parametrize(
    "exc, kind",
    [
        (RateLimitError("slow down"), FailureKind.THROTTLED),
        (NotFoundError("gone"), FailureKind.PERMANENT),
        (FetchError("bad key", status_code=401), FailureKind.PERMANENT),
        (FetchError("unavailable", status_code=503), FailureKind.TRANSIENT),
        (FetchError("connection reset"), FailureKind.TRANSIENT),
        (ValueError("missing field"), FailureKind.PERMANENT),
        (TimeoutError(), FailureKind.TRANSIENT),
    ],
)
def test_classify_failure(exc: Exception, kind: FailureKind) -> None:
    assert classify_failure(exc) is kind


# =============================================================================
# BatchPlan / BatchPacer
# =============================================================================


def test_batch_plan_preserves_order_and_sizes() -> None:
    plan = BatchPlan.build(list("abcdefg"), 3)

    assert len(plan) == 3
    assert [b.items for b in plan] == [("a", "b", "c"), ("d", "e", "f"), ("g",)]
    assert [b.start for b in plan] == [0, 3, 6]
    assert plan.batches[2].positions == (6,)
    assert plan.is_last(plan.batches[2])
    assert not plan.is_last(plan.batches[0])


def test_batch_plan_empty_and_invalid() -> None:
    assert len(BatchPlan.build([], 5)) == 0
    with pytest.raises(ValueError):
        BatchPlan.build([1, 2], 0)
    with pytest.raises(ValueError):
        BatchPlan.build([1, 2], 2, positions=[0])


def test_batch_plan_keeps_sparse_input_positions() -> None:
    # e.g. misses at input indices 0, 2, 3 and 7 after cache hits elsewhere
    plan = BatchPlan.build(["a", "c", "d", "h"], 2, positions=[0, 2, 3, 7])

    assert [b.start for b in plan] == [0, 3]
    assert [b.positions for b in plan] == [(0, 2), (3, 7)]
    assert list(plan.batches[1].pairs()) == [(3, "d"), (7, "h")]


@pytest.mark.asyncio
async def test_pacer_waits_only_after_a_settled_batch() -> None:
    pacer = BatchPacer(0.05)

    started = time.monotonic()
    await pacer.wait()
    assert time.monotonic() - started < 0.02

    pacer.mark_settled()
    settled = time.monotonic()
    await pacer.wait()
    assert time.monotonic() - settled >= 0.05


# =============================================================================
# RetryPolicy
# =============================================================================


@pytest.mark.asyncio
async def test_retry_policy_retries_only_throttled() -> None:
    policy = RetryPolicy(max_retries=2, retry_delay=0)
    call = DummyCall(throttled(), throttled(), "ok")
    attempts: list[int] = []

    assert await policy.call(call, key="m1", on_attempt=attempts.append) == "ok"
    assert attempts == [1, 2, 3]

    failing = DummyCall(KeyError("x"), "never")
    with pytest.raises(KeyError):
        await policy.call(failing)
    assert failing.calls == 1


@pytest.mark.asyncio
async def test_retry_policy_reraises_when_exhausted() -> None:
    policy = RetryPolicy(max_retries=1, retry_delay=0)
    call = DummyCall(throttled())

    with pytest.raises(RateLimitError):
        await policy.call(call)
    assert call.calls == 2


@pytest.mark.asyncio
async def test_exponential_backoff_grows_delays() -> None:
    policy = RetryPolicy(max_retries=2, retry_delay=0.03, backoff=BackoffStrategy.EXPONENTIAL, max_delay=1.0)
    call = DummyCall(throttled(), throttled(), "ok")

    await policy.call(call)

    first_gap = call.started[1] - call.started[0]
    second_gap = call.started[2] - call.started[1]
    assert first_gap >= 0.03
    assert second_gap >= 0.06


@pytest.mark.asyncio
async def test_retry_after_ignored_when_disabled() -> None:
    policy = RetryPolicy(max_retries=1, retry_delay=0, respect_retry_after=False)
    call = DummyCall(throttled(retry_after=5.0), "ok")

    started = time.monotonic()
    assert await policy.call(call) == "ok"
    assert time.monotonic() - started < 1.0


def test_retry_policy_validates_arguments() -> None:
    with pytest.raises(ValueError):
        RetryPolicy(max_retries=-1)
    with pytest.raises(ValueError):
        RetryPolicy(retry_delay=-0.5)
