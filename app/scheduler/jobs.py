"""
app/scheduler/jobs.py

APScheduler-based periodic refresh of the project feed.

The cache only exposes ``get()`` and ``invalidate()``; this module is the
external driver that calls them on a fixed interval, independent of the
cache TTL.

Schedule
--------
  refresh_project_feed: every FEED_REFRESH_INTERVAL_SECONDS (default 60)

Lifecycle
----------
Call ``build_scheduler()`` once to get a configured ``AsyncIOScheduler``.
Start it inside the running event loop (the FastAPI ``lifespan`` in
main.py) and shut it down on exit.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from app.services.project_data_service import ProjectDataService

logger = logging.getLogger(__name__)

REFRESH_JOB_ID = "refresh_project_feed"


async def run_feed_refresh(data_service: ProjectDataService) -> None:
    """
    Invalidate the feed cache and reload it.

    A transport failure is logged; the previous good collection stays
    available through ``ProjectDataService``.
    """
    logger.info("Scheduler: %s starting", REFRESH_JOB_ID)
    snapshot = await data_service.refresh()
    if snapshot.stale:
        logger.warning(
            "Scheduler: %s failed status=%s error=%s; serving %d cached records",
            REFRESH_JOB_ID,
            snapshot.status_code,
            snapshot.error,
            len(snapshot.result.records),
        )
        return
    logger.info(
        "Scheduler: %s complete records=%d dropped=%d",
        REFRESH_JOB_ID,
        len(snapshot.result.records),
        snapshot.result.rows_dropped,
    )


def build_scheduler(
    data_service: ProjectDataService,
    *,
    interval_seconds: float,
) -> AsyncIOScheduler:
    """
    Build the refresh scheduler.

    Returns a configured but *not yet started* ``AsyncIOScheduler``.
    Overlapping runs are coalesced into one.
    """
    scheduler = AsyncIOScheduler(timezone="UTC")

    scheduler.add_job(
        run_feed_refresh,
        trigger="interval",
        seconds=interval_seconds,
        args=[data_service],
        id=REFRESH_JOB_ID,
        name="Project feed refresh",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=max(1, int(interval_seconds)),
    )

    return scheduler
