from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Any, Callable

import pytest

from app.connectors.base import FeedConnector, FeedFetchError
from app.connectors.feed_connector import SAMPLE_FEED_PATH
from app.domain.project_record import DeliveryStatus, LoadResult, ProjectRecord

FEED_HEADER = (
    "ProjectID,CustomerName,CustomerAddress,CustomerPhone,WebsiteName,ProjectPrice,"
    "Negotiated,DeliveredOnTime,DeliveryDate,DeliveryStatus,TechStack,DevelopersNeeded,"
    "AssignedDevelopers,DevelopmentTeamName"
)

_BASE_PROJECT = ProjectRecord(
    project_id=1,
    customer_name="Aarav Mehta",
    customer_address="12 MG Road, Bengaluru",
    customer_phone="+91-9845012345",
    website_name="mehtatextiles.in",
    project_price=100_000,
    negotiated=False,
    delivered_on_time=True,
    delivery_date=date(2024, 1, 14),
    delivery_status=DeliveryStatus.ON_TIME,
    tech_stack="MERN",
    developers_needed=2,
    assigned_developers="Rohan Das, Priya Nair",
    development_team_name="Sigma",
)


class FakeConnector(FeedConnector):
    """Returns queued bodies (or raises queued errors) in order."""

    def __init__(self, *responses: str | Exception) -> None:
        self.source = "fake_feed"
        self._responses = list(responses)
        self.calls = 0

    def fetch_text(self) -> str:
        self.calls += 1
        response = self._responses[min(self.calls, len(self._responses)) - 1]
        if isinstance(response, Exception):
            raise response
        return response


class CountingLoader:
    """Async loader double that counts calls and can fail on demand."""

    def __init__(self, *results: LoadResult | Exception) -> None:
        self._results = list(results) or [LoadResult.empty()]
        self.calls = 0

    async def load(self) -> LoadResult:
        self.calls += 1
        result = self._results[min(self.calls, len(self._results)) - 1]
        if isinstance(result, Exception):
            raise result
        return result


class ManualClock:
    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def make_project() -> Callable[..., ProjectRecord]:
    """Factory for records; keyword arguments override the defaults."""

    def _make(**overrides: Any) -> ProjectRecord:
        return replace(_BASE_PROJECT, **overrides)

    return _make


@pytest.fixture()
def sample_feed_text() -> str:
    return SAMPLE_FEED_PATH.read_text(encoding="utf-8")


@pytest.fixture()
def transport_error() -> FeedFetchError:
    return FeedFetchError("remote_feed: failed to fetch data: 503", status_code=503)
