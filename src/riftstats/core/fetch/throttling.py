"""
Batch planning and inter-batch pacing.

Requests are split into fixed-size batches that run one after another,
which bounds concurrency to the batch size and the request rate to
roughly batch_size per (batch duration + inter-batch delay).
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Batch(Generic[T]):
    """Up to batch_size items dispatched concurrently.

    positions holds the input index of each item. When a plan is built
    over a subset of the input (cache misses), positions need not be
    contiguous.
    """

    number: int  # 0-based
    items: tuple[T, ...]
    positions: tuple[int, ...]

    def __len__(self) -> int:
        return len(self.items)

    @property
    def start(self) -> int:
        """Input index of the first item."""
        return self.positions[0]

    def pairs(self) -> Iterator[tuple[int, T]]:
        """(input index, item) for each item in the batch."""
        return zip(self.positions, self.items)


@dataclass
class BatchPlan(Generic[T]):
    """Ordered partition of a list into batches of at most batch_size."""

    batch_size: int
    batches: list[Batch[T]] = field(default_factory=list)

    @classmethod
    def build(
        cls,
        items: Sequence[T],
        batch_size: int,
        positions: Sequence[int] | None = None,
    ) -> "BatchPlan[T]":
        """Partition items preserving input order.

        Args:
            items: Items to partition
            batch_size: Maximum items per batch
            positions: Input index of each item (default: 0..len-1)

        Raises:
            ValueError: If batch_size is not positive, or positions
                does not match items in length
        """
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        if positions is None:
            positions = range(len(items))
        if len(positions) != len(items):
            raise ValueError("positions must have one entry per item")

        batches = [
            Batch(
                number=n,
                items=tuple(items[lo:lo + batch_size]),
                positions=tuple(positions[lo:lo + batch_size]),
            )
            for n, lo in enumerate(range(0, len(items), batch_size))
        ]
        return cls(batch_size=batch_size, batches=batches)

    def __iter__(self) -> Iterator[Batch[T]]:
        return iter(self.batches)

    def __len__(self) -> int:
        return len(self.batches)

    def is_last(self, batch: Batch[T]) -> bool:
        return batch.number == len(self.batches) - 1


class BatchPacer:
    """Enforces a minimum gap between one batch settling and the next dispatch.

    Usage:
        pacer = BatchPacer(0.2)
        for batch in plan:
            await pacer.wait()
            await run(batch)
            pacer.mark_settled()
    """

    def __init__(self, delay_seconds: float):
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        self.delay_seconds = delay_seconds
        self._settled_at: float | None = None

    def mark_settled(self) -> None:
        """Record that the current batch has fully settled."""
        self._settled_at = time.monotonic()

    def remaining(self) -> float:
        """Seconds still to wait before the next dispatch."""
        if self._settled_at is None:
            return 0.0
        elapsed = time.monotonic() - self._settled_at
        return max(0.0, self.delay_seconds - elapsed)

    async def wait(self) -> None:
        """Sleep until the inter-batch delay has elapsed (no-op before the first batch)."""
        remaining = self.remaining()
        # Loop: the event loop may wake a timer slightly early.
        while remaining > 0:
            await asyncio.sleep(remaining)
            remaining = self.remaining()
