"""
app/services/feed_cache.py

In-process, time-to-live cache for the most recent successful feed load.

States
------
empty      no entry; the next ``get()`` loads.
populated  entry present; ``get()`` returns it while younger than the TTL.

A failed load leaves the previous entry untouched and propagates the error.
Concurrent ``get()`` calls during a miss share one in-flight load.
``invalidate()`` empties the cache and detaches any in-flight load, whose
result is then returned to its waiters but never stored.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Protocol

from app.domain.project_record import LoadResult
from app.logging_utils import log_event

logger = logging.getLogger(__name__)

STATE_EMPTY = "empty"
STATE_POPULATED = "populated"


class SupportsLoad(Protocol):
    async def load(self) -> LoadResult: ...


@dataclass(frozen=True)
class CacheEntry:
    """
    A load result paired with the clock reading taken when the load completed.
    """

    result: LoadResult
    stored_at: float


class FeedCache:
    """
    Memoizes the latest :class:`LoadResult` produced by a loader.

    Parameters
    ----------
    loader:
        Anything with an ``async load() -> LoadResult`` method.
    ttl_seconds:
        Maximum entry age served without reloading.
    clock:
        Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        loader: SupportsLoad,
        *,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._loader = loader
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entry: CacheEntry | None = None
        self._inflight: asyncio.Task[LoadResult] | None = None
        self._generation = 0

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    @property
    def entry(self) -> CacheEntry | None:
        return self._entry

    @property
    def state(self) -> str:
        return STATE_POPULATED if self._entry is not None else STATE_EMPTY

    def is_fresh(self) -> bool:
        entry = self._entry
        return entry is not None and (self._clock() - entry.stored_at) < self._ttl_seconds

    async def get(self) -> LoadResult:
        """
        Return the cached result, loading when empty or expired.

        Raises whatever the loader raises; the existing entry is kept.
        """

        entry = self._entry
        if entry is not None and (self._clock() - entry.stored_at) < self._ttl_seconds:
            log_event(logger, logging.DEBUG, "feed_cache_hit", age_seconds=self._clock() - entry.stored_at)
            return entry.result

        if self._inflight is None:
            log_event(
                logger,
                logging.DEBUG,
                "feed_cache_miss",
                state=self.state,
                generation=self._generation,
            )
            self._inflight = asyncio.create_task(self._load(self._generation))
        else:
            log_event(logger, logging.DEBUG, "feed_cache_join_inflight", generation=self._generation)

        # A cancelled waiter must not cancel the load other callers share.
        return await asyncio.shield(self._inflight)

    def invalidate(self) -> None:
        """
        Discard the entry and detach any in-flight load. Idempotent.
        """

        self._generation += 1
        self._entry = None
        self._inflight = None
        log_event(logger, logging.DEBUG, "feed_cache_invalidated", generation=self._generation)

    async def _load(self, generation: int) -> LoadResult:
        try:
            result = await self._loader.load()
        except Exception as exc:
            logger.warning("Feed cache load failed; keeping previous entry: %s", exc)
            raise
        finally:
            if generation == self._generation:
                self._inflight = None

        if generation == self._generation:
            self._entry = CacheEntry(result=result, stored_at=self._clock())
            log_event(
                logger,
                logging.INFO,
                "feed_cache_populated",
                records=len(result.records),
                ttl_seconds=self._ttl_seconds,
            )
        else:
            log_event(logger, logging.DEBUG, "feed_cache_discarded_detached_load", generation=generation)
        return result
