"""
In-memory response cache with lazy TTL expiry.

One cache is owned by each fetcher (or shared explicitly between
fetchers). It is never persisted and lives as long as the process.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 512


@dataclass
class CacheEntry:
    """A stored value and when it was stored (clock seconds)."""

    value: Any
    stored_at: float

    def is_valid(self, now: float, ttl: float) -> bool:
        return now - self.stored_at < ttl


class ResponseCache:
    """Bounded key/value cache with per-lookup TTL.

    Features:
    - Lazy expiry: stale entries are ignored and dropped when read
    - LRU eviction once max_entries is reached
    - Injectable clock for tests

    The fetcher runs on a single event loop, so reads and writes never
    interleave mid-operation. Concurrent writes to the same key resolve
    last-write-wins.
    """

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the cache.

        Args:
            max_entries: Entries kept before the least recently used is evicted
            clock: Returns the current time in seconds
        """
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()

        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def now(self) -> float:
        return self._clock()

    def get_entry(self, key: str, ttl_seconds: float) -> CacheEntry | None:
        """Return the entry for key if it is still valid.

        Args:
            key: Cache key
            ttl_seconds: Lifetime to apply to this lookup

        Returns:
            The valid entry, or None if absent or expired
        """
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None

        if not entry.is_valid(self.now(), ttl_seconds):
            del self._entries[key]
            self.misses += 1
            return None

        self._entries.move_to_end(key)
        self.hits += 1
        return entry

    def get(self, key: str, ttl_seconds: float, default: Any = None) -> Any:
        """Return the cached value for key, or default if absent or expired."""
        entry = self.get_entry(key, ttl_seconds)
        return default if entry is None else entry.value

    def set(self, key: str, value: Any) -> None:
        """Store value under key with the current time, evicting if full."""
        if key in self._entries:
            self._entries.move_to_end(key)
        self._entries[key] = CacheEntry(value=value, stored_at=self.now())

        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            self.evictions += 1
            logger.debug("Evicted cache entry %s", evicted)

    def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> dict[str, int]:
        """Get cache statistics."""
        return {
            "entries": len(self._entries),
            "max_entries": self.max_entries,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
        }
