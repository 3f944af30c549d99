"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

DEFAULT_FEED_URL = (
    "https://docs.google.com/spreadsheets/d/"
    "1iV8cC7yr1ttK6x4xdk0QjUdP-N48RyFjQbYnATirJR8/export?format=csv"
)

FEED_SOURCE_REMOTE = "remote"
FEED_SOURCE_STATIC = "static"
ALLOWED_FEED_SOURCES = {FEED_SOURCE_REMOTE, FEED_SOURCE_STATIC}


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class FeedSettings:
    """
    Project feed source, cache and refresh settings.
    """

    source: str = FEED_SOURCE_REMOTE
    url: str = DEFAULT_FEED_URL
    cache_ttl_seconds: float = 30.0
    http_timeout_seconds: float = 15.0
    refresh_enabled: bool = True
    refresh_interval_seconds: float = 60.0


@lru_cache(maxsize=1)
def get_feed_settings() -> FeedSettings:
    """
    Return cached feed settings from environment variables.
    """

    return FeedSettings(
        source=_get_str_env("FEED_SOURCE", FEED_SOURCE_REMOTE).lower(),
        url=_get_str_env("FEED_URL", DEFAULT_FEED_URL),
        cache_ttl_seconds=max(0.0, _get_float_env("FEED_CACHE_TTL_SECONDS", 30.0)),
        http_timeout_seconds=max(1.0, _get_float_env("FEED_HTTP_TIMEOUT_SECONDS", 15.0)),
        refresh_enabled=_get_bool_env("FEED_REFRESH_ENABLED", True),
        refresh_interval_seconds=max(1.0, _get_float_env("FEED_REFRESH_INTERVAL_SECONDS", 60.0)),
    )
