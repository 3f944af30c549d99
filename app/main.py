from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import Depends, FastAPI

from app.schemas.dashboard import HealthResponse


def _validate_env() -> None:
    """
    Validate feed-related environment variables at startup.

    Raises RuntimeError listing every invalid variable so the operator can
    fix all problems in one restart cycle.

    Rules:
    - FEED_SOURCE, when set, must be 'remote' or 'static'.
    - FEED_URL, when set with a remote source, must be an http(s) URL.
    - FEED_CACHE_TTL_SECONDS, when set, must be zero or more (zero disables
      caching).
    - The other numeric settings, when set, must be positive numbers.
    """

    from app.config import ALLOWED_FEED_SOURCES, FEED_SOURCE_REMOTE, load_env_files

    load_env_files()

    errors: list[str] = []

    # --- FEED_SOURCE ----------------------------------------------------
    feed_source = os.getenv("FEED_SOURCE", FEED_SOURCE_REMOTE).strip().lower() or FEED_SOURCE_REMOTE
    if feed_source not in ALLOWED_FEED_SOURCES:
        errors.append(
            f"FEED_SOURCE='{feed_source}' is not valid. "
            f"Allowed values: {sorted(ALLOWED_FEED_SOURCES)}."
        )

    # --- FEED_URL -------------------------------------------------------
    feed_url = os.getenv("FEED_URL", "").strip()
    if feed_source == FEED_SOURCE_REMOTE and feed_url and not feed_url.startswith(("http://", "https://")):
        errors.append(f"FEED_URL='{feed_url}' must start with http:// or https://.")

    # --- Numeric settings -----------------------------------------------
    for name, allow_zero in (
        ("FEED_CACHE_TTL_SECONDS", True),
        ("FEED_HTTP_TIMEOUT_SECONDS", False),
        ("FEED_REFRESH_INTERVAL_SECONDS", False),
    ):
        raw = os.getenv(name, "").strip()
        if not raw:
            continue
        try:
            value = float(raw)
        except ValueError:
            errors.append(f"{name}='{raw}' is not a number.")
            continue
        if allow_zero and value < 0:
            errors.append(f"{name}='{raw}' must not be negative.")
        elif not allow_zero and value <= 0:
            errors.append(f"{name}='{raw}' must be greater than zero.")

    if errors:
        raise RuntimeError(
            "Startup validation failed, invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Start the feed refresh scheduler on boot; shut it down on exit."""
    from app.config import get_feed_settings
    from app.scheduler.jobs import build_scheduler
    from app.services.project_data_service import get_project_data_service

    log = logging.getLogger(__name__)
    settings = get_feed_settings()
    if not settings.refresh_enabled:
        log.info("Feed refresh scheduler disabled (FEED_REFRESH_ENABLED=false)")
        yield
        return

    data_service = application.dependency_overrides.get(
        get_project_data_service, get_project_data_service
    )()
    scheduler = build_scheduler(data_service, interval_seconds=settings.refresh_interval_seconds)
    scheduler.start()
    log.info(
        "Scheduler started with %d jobs source=%s interval_seconds=%.0f",
        len(scheduler.get_jobs()),
        settings.source,
        settings.refresh_interval_seconds,
    )
    try:
        yield
    finally:
        scheduler.shutdown(wait=False)
        log.info("Scheduler shut down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Delivery Insights API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import dashboard_router
    from app.services.project_data_service import ProjectDataService, get_project_data_service

    application.include_router(dashboard_router)

    @application.get("/health", response_model=HealthResponse)
    def healthcheck(
        data_service: ProjectDataService = Depends(get_project_data_service),
    ) -> HealthResponse:
        return HealthResponse(status="ok", cache_state=data_service.cache.state)

    return application


app = create_app()
