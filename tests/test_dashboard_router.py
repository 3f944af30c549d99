"""
tests/test_dashboard_router.py

HTTP contract tests for the dashboard endpoints.

The project data service is overridden with one backed by the packaged
sample feed (or a failing fake), so no network is touched and the refresh
scheduler is never started.
"""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.connectors.base import FeedFetchError
from app.connectors.feed_connector import StaticFeedConnector
from app.main import create_app
from app.services.feed_cache import FeedCache
from app.services.feed_loader import FeedLoader
from app.services.project_data_service import ProjectDataService, get_project_data_service
from conftest import FakeConnector


def _client(data_service: ProjectDataService) -> TestClient:
    application: FastAPI = create_app()
    application.dependency_overrides[get_project_data_service] = lambda: data_service
    return TestClient(application)


@pytest.fixture()
def sample_service() -> ProjectDataService:
    cache = FeedCache(FeedLoader(StaticFeedConnector()), ttl_seconds=300)
    return ProjectDataService(cache)


@pytest.fixture()
def client(sample_service: ProjectDataService) -> TestClient:
    return _client(sample_service)


class TestReadEndpoints:
    def test_kpis(self, client: TestClient) -> None:
        response = client.get("/kpis")

        assert response.status_code == 200
        body = response.json()
        assert body["total_projects"] == 20
        assert body["unique_teams"] == 6
        assert body["total_price"] == 5_095_986
        assert body["on_time_rate"] == pytest.approx(60.0)
        assert body["feed"]["stale"] is False
        assert body["feed"]["rows_read"] == 20

    def test_kpis_respect_filters(self, client: TestClient) -> None:
        body = client.get("/kpis", params={"team": "Orion"}).json()

        assert body["total_projects"] == 3
        assert body["unique_teams"] == 1

    def test_kpis_on_empty_filter_result_have_null_rate(self, client: TestClient) -> None:
        body = client.get("/kpis", params={"team": "Nobody"}).json()

        assert body["total_projects"] == 0
        assert body["on_time_rate"] is None

    def test_projects_paginated_and_searched(self, client: TestClient) -> None:
        body = client.get("/projects", params={"search": "kolkata", "per_page": 2}).json()

        assert body["total_items"] == 3
        assert body["total_pages"] == 2
        assert [item["project_id"] for item in body["items"]] == [2, 10]
        assert body["items"][0]["delivery_date"] == "2024-02-02"

    def test_projects_status_filter_uses_status_param(self, client: TestClient) -> None:
        body = client.get("/projects", params={"status": "In Progress"}).json()

        assert [item["project_id"] for item in body["items"]] == [13, 15, 19]
        assert all(item["delivery_date"] is None for item in body["items"])

    def test_inverted_date_range_rejected(self, client: TestClient) -> None:
        response = client.get("/projects", params={"date_from": "2024-05-01", "date_to": "2024-01-01"})

        assert response.status_code == 400

    def test_team_distribution(self, client: TestClient) -> None:
        body = client.get("/distributions/team").json()

        assert body["field"] == "team"
        assert [group["name"] for group in body["groups"]] == [
            "Sigma",
            "Hydra",
            "Orion",
            "Nova",
            "Blaze",
            "Falcon",
        ]

    def test_unknown_distribution_field(self, client: TestClient) -> None:
        assert client.get("/distributions/customer_phone").status_code == 400

    def test_monthly_trend(self, client: TestClient) -> None:
        rows = client.get("/trends/monthly").json()["rows"]

        assert len(rows) == 12
        assert rows[0] == {
            "month": "2024-01",
            "deliveries": 1,
            "total_value": 1_171_387,
            "average_value": 1_171_387,
        }

    def test_price_bands(self, client: TestClient) -> None:
        bands = client.get("/price-bands").json()["bands"]

        assert [band["count"] for band in bands] == [3, 6, 4, 7]

    def test_filter_options(self, client: TestClient) -> None:
        body = client.get("/filters/options").json()

        assert len(body["teams"]) == 6
        assert body["statuses"] == ["On Time", "Delayed", "In Progress"]
        assert "MERN" in body["tech_stacks"]

    def test_health_reports_cache_state(self, client: TestClient) -> None:
        assert client.get("/health").json() == {"status": "ok", "cache_state": "empty"}
        client.get("/kpis")
        assert client.get("/health").json()["cache_state"] == "populated"


class TestFailures:
    def test_read_endpoint_serves_stale_fallback(self, transport_error: FeedFetchError) -> None:
        service = ProjectDataService(FeedCache(FeedLoader(FakeConnector(transport_error)), ttl_seconds=30))

        body = _client(service).get("/kpis").json()

        assert body["total_projects"] == 0
        assert body["on_time_rate"] is None
        assert body["feed"]["stale"] is True
        assert body["feed"]["status_code"] == 503
        assert body["feed"]["loaded_at"] is None

    def test_refresh_reports_transport_failure(self, transport_error: FeedFetchError) -> None:
        service = ProjectDataService(FeedCache(FeedLoader(FakeConnector(transport_error)), ttl_seconds=30))

        response = _client(service).post("/refresh")

        assert response.status_code == 502
        assert response.json()["detail"]["status_code"] == 503

    def test_refresh_reloads(self, client: TestClient) -> None:
        body = client.post("/refresh").json()

        assert body["rows_read"] == 20
        assert body["rows_loaded"] == 20
        assert body["rows_dropped"] == 0
        assert body["fields_defaulted"] == 0
