"""
app/connectors/feed_connector.py

Concrete project feed sources: the published spreadsheet export and the
packaged offline sample.
"""

from __future__ import annotations

import logging
from pathlib import Path

import requests

from app.config import FEED_SOURCE_STATIC, FeedSettings
from app.connectors.base import FeedConnector, FeedFetchError, HTTPFeedConnector

logger = logging.getLogger(__name__)

SAMPLE_FEED_PATH: Path = Path(__file__).resolve().parents[1] / "data" / "sample_projects.csv"


class RemoteFeedConnector(HTTPFeedConnector):
    """
    Fetches the feed with a single unauthenticated GET against a CSV export URL.
    """

    def __init__(
        self,
        *,
        url: str,
        timeout_seconds: float,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(source="remote_feed", timeout_seconds=timeout_seconds, session=session)
        self._url = url

    @property
    def url(self) -> str:
        return self._url

    def fetch_text(self) -> str:
        return self._request_text(method="GET", url=self._url)


class StaticFeedConnector(FeedConnector):
    """
    Serves a feed bundled with the package (offline mode and tests).
    """

    def __init__(self, *, path: Path = SAMPLE_FEED_PATH) -> None:
        self.source = "static_feed"
        self._path = path

    def fetch_text(self) -> str:
        try:
            return self._path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.error("Static feed unreadable path=%s error=%s", self._path, exc)
            raise FeedFetchError(f"{self.source}: cannot read {self._path.name}.") from exc


def build_feed_connector(settings: FeedSettings) -> FeedConnector:
    """
    Select the feed source configured by ``FEED_SOURCE``.
    """

    if settings.source == FEED_SOURCE_STATIC:
        return StaticFeedConnector()
    return RemoteFeedConnector(url=settings.url, timeout_seconds=settings.http_timeout_seconds)
