"""In-process cache for derived weekly and plan-level aggregates.

At most one computation per key is in flight: callers arriving while a
value is being computed await the same task instead of starting another.
Failed computations are not cached and the error reaches every waiter.
"""

import asyncio
import inspect
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional, Union

from .config import get_settings

logger = logging.getLogger(__name__)

Compute = Callable[[], Union[Any, Awaitable[Any]]]


@dataclass
class CacheEntry:
    """A computed value and when it was stored."""
    value: Any
    stored_at: float


class AggregateCache:
    """
    Single-flight cache with optional TTL.

    Must be used from one event loop.

    Args:
        ttl_seconds: Seconds a computed value stays fresh. None uses the
            configured default; 0 keeps nothing once the computation
            finishes (callers still share an in-flight computation).
        clock: Monotonic time source, injectable for tests
    """

    def __init__(self, ttl_seconds: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        if ttl_seconds is None:
            ttl_seconds = get_settings().cache_ttl_seconds
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[Hashable, CacheEntry] = {}
        self._in_flight: Dict[Hashable, asyncio.Task] = {}
        self.hits = 0
        self.misses = 0

    def _fresh(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.stored_at < self.ttl_seconds

    async def _run(self, key: Hashable, compute: Compute) -> Any:
        try:
            result = compute()
            if inspect.isawaitable(result):
                result = await result
            if self.ttl_seconds > 0:
                self._entries[key] = CacheEntry(value=result, stored_at=self._clock())
            return result
        finally:
            self._in_flight.pop(key, None)

    async def get_or_compute(self, key: Hashable, compute: Compute) -> Any:
        """
        Return the cached value for ``key``, computing it at most once.

        Args:
            key: Cache key (e.g. ("weekly_load", user_id, date))
            compute: Zero-argument callable returning the value or an awaitable

        Returns:
            The cached or freshly computed value
        """
        entry = self._entries.get(key)
        if entry is not None:
            if self._fresh(entry):
                self.hits += 1
                return entry.value
            del self._entries[key]

        task = self._in_flight.get(key)
        if task is None:
            self.misses += 1
            logger.info(f"Cache miss for {key!r}, computing")
            task = asyncio.ensure_future(self._run(key, compute))
            self._in_flight[key] = task
        else:
            self.hits += 1
            logger.debug(f"Awaiting in-flight computation for {key!r}")

        # A cancelled waiter must not cancel the computation others share
        return await asyncio.shield(task)

    def in_flight(self, key: Hashable) -> bool:
        """True while a computation for ``key`` is running."""
        return key in self._in_flight

    def invalidate(self, key: Hashable) -> None:
        """Drop a stored value. An in-flight computation is left to finish."""
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Drop all stored values."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
