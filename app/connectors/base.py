"""
app/connectors/base.py

Feed connector abstraction and shared HTTP mechanics.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import requests

logger = logging.getLogger(__name__)


class FeedFetchError(RuntimeError):
    """
    Raised when the raw feed cannot be obtained.

    ``status_code`` is the HTTP status of a non-success response, or ``None``
    when no response was received (timeout, DNS, refused connection).
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class FeedConnector(ABC):
    """
    Source of raw delimited feed text.
    """

    source: str

    @abstractmethod
    def fetch_text(self) -> str:
        """
        Return the full feed body, header line included.
        """


class HTTPFeedConnector(FeedConnector):
    """
    Base for connectors that obtain the feed over HTTP.

    Requests are issued once; there is no retry or backoff.
    """

    def __init__(
        self,
        *,
        source: str,
        timeout_seconds: float,
        session: requests.Session | None = None,
    ) -> None:
        self.source = source
        self._session = session or requests.Session()
        self._timeout_seconds = timeout_seconds

    def _request_text(
        self,
        *,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> str:
        """
        Execute one HTTP request and return the response body as text.
        """

        try:
            response = self._session.request(
                method=method,
                url=url,
                params=params,
                headers=headers,
                timeout=self._timeout_seconds,
            )
        except requests.RequestException as exc:
            logger.error(
                "Feed request failed source=%s url=%s error=%s",
                self.source,
                url,
                exc,
            )
            raise FeedFetchError(f"{self.source}: feed unreachable.") from exc

        if not response.ok:
            logger.error(
                "Feed request failed source=%s status=%s url=%s",
                self.source,
                response.status_code,
                url,
            )
            raise FeedFetchError(
                f"{self.source}: failed to fetch data: {response.status_code}",
                status_code=response.status_code,
            )

        # Google Sheets exports omit the charset; the body is UTF-8.
        declared_charset = "charset" in response.headers.get("content-type", "").lower()
        if not declared_charset and (response.encoding is None or response.encoding.lower() == "iso-8859-1"):
            response.encoding = "utf-8"
        return response.text
