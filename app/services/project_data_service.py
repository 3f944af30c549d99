"""
app/services/project_data_service.py

Caller-side access to the cached project feed with stale-on-error fallback.

The cache itself never hides a transport failure. This service does: when a
load fails it serves the last collection it saw (or an empty one) and marks
the snapshot stale so the presentation layer can offer a retry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache

from app.config import get_feed_settings
from app.connectors.base import FeedFetchError
from app.connectors.feed_connector import build_feed_connector
from app.domain.project_record import LoadResult
from app.services.feed_cache import FeedCache
from app.services.feed_loader import FeedLoader

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectSnapshot:
    """
    The collection to present, and whether it is known to be out of date.
    """

    result: LoadResult
    stale: bool = False
    error: str | None = None
    status_code: int | None = None


class ProjectDataService:
    """
    Wraps a :class:`FeedCache` and remembers the last good load.
    """

    def __init__(self, cache: FeedCache) -> None:
        self._cache = cache
        self._last_good: LoadResult | None = None

    @property
    def cache(self) -> FeedCache:
        return self._cache

    @property
    def last_good(self) -> LoadResult | None:
        return self._last_good

    async def current(self) -> ProjectSnapshot:
        """
        Return the cached collection, falling back to the last good one on
        a transport failure.
        """

        try:
            result = await self._cache.get()
        except FeedFetchError as exc:
            fallback = self._last_good or LoadResult.empty()
            logger.warning(
                "Serving stale project data status=%s records=%d error=%s",
                exc.status_code,
                len(fallback.records),
                exc,
            )
            return ProjectSnapshot(
                result=fallback,
                stale=True,
                error=str(exc),
                status_code=exc.status_code,
            )

        self._last_good = result
        return ProjectSnapshot(result=result)

    async def refresh(self) -> ProjectSnapshot:
        """
        Invalidate the cache and load again.
        """

        self._cache.invalidate()
        return await self.current()

    async def reload(self) -> LoadResult:
        """
        Invalidate and load, propagating :class:`FeedFetchError`.
        """

        self._cache.invalidate()
        result = await self._cache.get()
        self._last_good = result
        return result


@lru_cache(maxsize=1)
def get_project_data_service() -> ProjectDataService:
    """
    Build the process-wide service from environment settings.
    """

    settings = get_feed_settings()
    loader = FeedLoader(build_feed_connector(settings))
    cache = FeedCache(loader, ttl_seconds=settings.cache_ttl_seconds)
    return ProjectDataService(cache)
