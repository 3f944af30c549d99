"""
tests/test_feed_cache.py

Pytest unit tests for the FeedCache state machine.

Coverage
--------
- Hit within TTL, reload after expiry
- invalidate() forces a fresh fetch and is idempotent
- Failed load keeps the previous entry and propagates
- Concurrent misses share one in-flight load
- invalidate() during an in-flight load detaches it
"""

from __future__ import annotations

import asyncio

import pytest

from app.connectors.base import FeedFetchError
from app.domain.project_record import LoadResult
from app.services.feed_cache import STATE_EMPTY, STATE_POPULATED, FeedCache
from conftest import CountingLoader, ManualClock


def _result(rows: int) -> LoadResult:
    return LoadResult(records=(), rows_read=rows, rows_dropped=rows)


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock()


class TestStateMachine:
    def test_starts_empty(self, clock: ManualClock) -> None:
        cache = FeedCache(CountingLoader(), ttl_seconds=30, clock=clock)

        assert cache.state == STATE_EMPTY
        assert cache.entry is None
        assert cache.is_fresh() is False

    def test_first_get_populates(self, clock: ManualClock) -> None:
        first = _result(1)
        cache = FeedCache(CountingLoader(first), ttl_seconds=30, clock=clock)

        assert asyncio.run(cache.get()) is first
        assert cache.state == STATE_POPULATED
        assert cache.entry is not None
        assert cache.entry.stored_at == clock.now

    def test_two_gets_within_ttl_fetch_once(self, clock: ManualClock) -> None:
        loader = CountingLoader(_result(1), _result(2))
        cache = FeedCache(loader, ttl_seconds=30, clock=clock)

        first = asyncio.run(cache.get())
        clock.advance(29.9)
        second = asyncio.run(cache.get())

        assert loader.calls == 1
        assert second is first

    def test_expired_entry_reloads(self, clock: ManualClock) -> None:
        loader = CountingLoader(_result(1), _result(2))
        cache = FeedCache(loader, ttl_seconds=30, clock=clock)

        asyncio.run(cache.get())
        clock.advance(30)
        second = asyncio.run(cache.get())

        assert loader.calls == 2
        assert second.rows_read == 2

    def test_invalidate_then_get_always_fetches(self, clock: ManualClock) -> None:
        loader = CountingLoader(_result(1), _result(2))
        cache = FeedCache(loader, ttl_seconds=3_600, clock=clock)

        asyncio.run(cache.get())
        cache.invalidate()
        assert cache.state == STATE_EMPTY

        second = asyncio.run(cache.get())

        assert loader.calls == 2
        assert second.rows_read == 2

    def test_invalidate_is_idempotent(self, clock: ManualClock) -> None:
        cache = FeedCache(CountingLoader(), ttl_seconds=30, clock=clock)

        cache.invalidate()
        cache.invalidate()

        assert cache.state == STATE_EMPTY

    def test_zero_ttl_never_hits(self, clock: ManualClock) -> None:
        loader = CountingLoader(_result(1))
        cache = FeedCache(loader, ttl_seconds=0, clock=clock)

        asyncio.run(cache.get())
        asyncio.run(cache.get())

        assert loader.calls == 2


class TestFailures:
    def test_failure_from_empty_stays_empty(self, clock: ManualClock, transport_error: FeedFetchError) -> None:
        cache = FeedCache(CountingLoader(transport_error), ttl_seconds=30, clock=clock)

        with pytest.raises(FeedFetchError):
            asyncio.run(cache.get())

        assert cache.state == STATE_EMPTY

    def test_failure_keeps_previous_entry(self, clock: ManualClock, transport_error: FeedFetchError) -> None:
        first = _result(1)
        cache = FeedCache(CountingLoader(first, transport_error), ttl_seconds=30, clock=clock)

        asyncio.run(cache.get())
        stored = cache.entry
        clock.advance(31)

        with pytest.raises(FeedFetchError):
            asyncio.run(cache.get())

        assert cache.entry is stored
        assert cache.state == STATE_POPULATED

    def test_next_get_after_failure_retries(self, clock: ManualClock, transport_error: FeedFetchError) -> None:
        loader = CountingLoader(transport_error, _result(5))
        cache = FeedCache(loader, ttl_seconds=30, clock=clock)

        with pytest.raises(FeedFetchError):
            asyncio.run(cache.get())
        result = asyncio.run(cache.get())

        assert loader.calls == 2
        assert result.rows_read == 5


class GatedLoader:
    """Loader whose load() blocks until the test releases it."""

    def __init__(self) -> None:
        self.calls = 0
        self.release: asyncio.Event | None = None

    async def load(self) -> LoadResult:
        self.calls += 1
        call = self.calls
        assert self.release is not None
        await self.release.wait()
        return _result(call)


class TestSingleFlight:
    def test_concurrent_misses_share_one_fetch(self, clock: ManualClock) -> None:
        loader = GatedLoader()
        cache = FeedCache(loader, ttl_seconds=30, clock=clock)

        async def scenario() -> list[LoadResult]:
            loader.release = asyncio.Event()
            waiters = [asyncio.create_task(cache.get()) for _ in range(5)]
            await asyncio.sleep(0)
            loader.release.set()
            return await asyncio.gather(*waiters)

        results = asyncio.run(scenario())

        assert loader.calls == 1
        assert all(result is results[0] for result in results)

    def test_cancelled_waiter_does_not_cancel_shared_load(self, clock: ManualClock) -> None:
        loader = GatedLoader()
        cache = FeedCache(loader, ttl_seconds=30, clock=clock)

        async def scenario() -> LoadResult:
            loader.release = asyncio.Event()
            abandoned = asyncio.create_task(cache.get())
            kept = asyncio.create_task(cache.get())
            await asyncio.sleep(0)
            abandoned.cancel()
            loader.release.set()
            return await kept

        result = asyncio.run(scenario())

        assert loader.calls == 1
        assert result.rows_read == 1
        assert cache.state == STATE_POPULATED

    def test_invalidate_during_load_detaches_it(self, clock: ManualClock) -> None:
        loader = GatedLoader()
        cache = FeedCache(loader, ttl_seconds=30, clock=clock)

        async def scenario() -> tuple[LoadResult, LoadResult]:
            loader.release = asyncio.Event()
            stale = asyncio.create_task(cache.get())
            await asyncio.sleep(0)
            cache.invalidate()
            fresh = asyncio.create_task(cache.get())
            await asyncio.sleep(0)
            loader.release.set()
            return await stale, await fresh

        stale_result, fresh_result = asyncio.run(scenario())

        assert loader.calls == 2
        assert stale_result.rows_read == 1
        assert fresh_result.rows_read == 2
        assert cache.entry is not None
        assert cache.entry.result is fresh_result
