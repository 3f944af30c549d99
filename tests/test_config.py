from __future__ import annotations

from collections.abc import Iterator

import pytest

from app.config import DEFAULT_FEED_URL, FEED_SOURCE_STATIC, get_feed_settings
from app.main import _validate_env

_FEED_ENV = (
    "FEED_SOURCE",
    "FEED_URL",
    "FEED_CACHE_TTL_SECONDS",
    "FEED_HTTP_TIMEOUT_SECONDS",
    "FEED_REFRESH_ENABLED",
    "FEED_REFRESH_INTERVAL_SECONDS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in _FEED_ENV:
        monkeypatch.delenv(name, raising=False)
    get_feed_settings.cache_clear()
    yield
    get_feed_settings.cache_clear()


def test_defaults() -> None:
    settings = get_feed_settings()

    assert settings.source == "remote"
    assert settings.url == DEFAULT_FEED_URL
    assert settings.cache_ttl_seconds == 30.0
    assert settings.refresh_enabled is True
    assert settings.refresh_interval_seconds == 60.0


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FEED_SOURCE", "STATIC")
    monkeypatch.setenv("FEED_CACHE_TTL_SECONDS", "5")
    monkeypatch.setenv("FEED_REFRESH_ENABLED", "off")
    monkeypatch.setenv("FEED_REFRESH_INTERVAL_SECONDS", "120")

    settings = get_feed_settings()

    assert settings.source == FEED_SOURCE_STATIC
    assert settings.cache_ttl_seconds == 5.0
    assert settings.refresh_enabled is False
    assert settings.refresh_interval_seconds == 120.0


def test_unparseable_numbers_fall_back(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FEED_CACHE_TTL_SECONDS", "soon")

    assert get_feed_settings().cache_ttl_seconds == 30.0


def test_validate_env_accepts_defaults() -> None:
    _validate_env()


def test_validate_env_lists_every_problem(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FEED_SOURCE", "ftp")
    monkeypatch.setenv("FEED_CACHE_TTL_SECONDS", "-1")
    monkeypatch.setenv("FEED_REFRESH_INTERVAL_SECONDS", "often")

    with pytest.raises(RuntimeError) as ctx:
        _validate_env()

    message = str(ctx.value)
    assert "FEED_SOURCE" in message
    assert "FEED_CACHE_TTL_SECONDS" in message
    assert "FEED_REFRESH_INTERVAL_SECONDS" in message


def test_validate_env_rejects_non_http_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FEED_URL", "file:///tmp/feed.csv")

    with pytest.raises(RuntimeError, match="FEED_URL"):
        _validate_env()


def test_zero_cache_ttl_is_accepted(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FEED_CACHE_TTL_SECONDS", "0")

    _validate_env()

    assert get_feed_settings().cache_ttl_seconds == 0.0


def test_zero_refresh_interval_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FEED_REFRESH_INTERVAL_SECONDS", "0")

    with pytest.raises(RuntimeError, match="FEED_REFRESH_INTERVAL_SECONDS"):
        _validate_env()
