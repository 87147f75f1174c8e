"""Fetch utilities - batching, retries, caching."""

from .base import (
    FailureKind,
    FetchError,
    FetchOutcome,
    FetchRequest,
    NotFoundError,
    OutcomeStatus,
    RateLimitError,
    successful_values,
)
from .caching import CacheEntry, ResponseCache
from .fetcher import RateLimitedFetcher
from .retries import RetryPolicy
from .throttling import Batch, BatchPacer, BatchPlan

__all__ = [
    "Batch",
    "BatchPacer",
    "BatchPlan",
    "CacheEntry",
    "FailureKind",
    "FetchError",
    "FetchOutcome",
    "FetchRequest",
    "NotFoundError",
    "OutcomeStatus",
    "RateLimitError",
    "RateLimitedFetcher",
    "ResponseCache",
    "RetryPolicy",
    "successful_values",
]
