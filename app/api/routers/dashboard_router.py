"""
app/api/routers/dashboard_router.py

Read endpoints consumed by the dashboard presentation layer.

GET  /projects                filtered, searched, paginated project rows
GET  /kpis                    headline KPIs for the filtered collection
GET  /distributions/{field}   counts per team, tech_stack or status
GET  /trends/monthly          YYYY-MM delivery buckets
GET  /price-bands             counts per default price band
GET  /filters/options         distinct teams, tech stacks and statuses
POST /refresh                 invalidate the cache and reload the feed

Filter query parameters (shared by the data endpoints)
------------------------------------------------------
team, tech_stack, status : exact match
customer_name            : case-insensitive substring
date_from, date_to       : inclusive ISO date bounds on the delivery date

Every data endpoint answers from the cached collection. When the feed is
unreachable it answers from the last good collection with ``feed.stale``
set; it does not fail. Only ``POST /refresh`` reports transport failures
as HTTP 502. All transformation logic lives in the services; the router
only handles HTTP plumbing.
"""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.connectors.base import FeedFetchError
from app.schemas.dashboard import (
    DistributionResponse,
    FeedStatusResponse,
    FilterOptionsResponse,
    GroupCountResponse,
    KPISummaryResponse,
    MonthlyTrendResponse,
    MonthlyTrendRowResponse,
    PriceBandCountResponse,
    PriceBandsResponse,
    ProjectPageResponse,
    ProjectResponse,
    RefreshResponse,
)
from app.services.aggregation_service import (
    GroupField,
    group_by,
    monthly_trend,
    price_bands,
    summarize,
)
from app.services.project_data_service import (
    ProjectDataService,
    ProjectSnapshot,
    get_project_data_service,
)
from app.services.project_query_service import (
    DEFAULT_PAGE_SIZE,
    ProjectFilter,
    distinct_values,
    filter_projects,
    paginate,
    search_projects,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["dashboard"])


# ---------------------------------------------------------------------------
# Shared dependencies
# ---------------------------------------------------------------------------


def get_project_filter(
    team: str | None = Query(default=None),
    tech_stack: str | None = Query(default=None),
    status_filter: str | None = Query(default=None, alias="status"),
    customer_name: str | None = Query(default=None),
    date_from: date | None = Query(default=None, description="Inclusive lower bound (YYYY-MM-DD)."),
    date_to: date | None = Query(default=None, description="Inclusive upper bound (YYYY-MM-DD)."),
) -> ProjectFilter:
    if date_from is not None and date_to is not None and date_from > date_to:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="date_from must be on or before date_to.",
        )
    return ProjectFilter(
        team=team,
        tech_stack=tech_stack,
        status=status_filter,
        customer_name=customer_name,
        date_from=date_from,
        date_to=date_to,
    )


def _feed_status(snapshot: ProjectSnapshot) -> FeedStatusResponse:
    result = snapshot.result
    # A stale snapshot with nothing read is the empty fallback, never a real load.
    never_loaded = snapshot.stale and result.rows_read == 0
    return FeedStatusResponse(
        loaded_at=None if never_loaded else result.loaded_at,
        stale=snapshot.stale,
        error=snapshot.error,
        status_code=snapshot.status_code,
        rows_read=result.rows_read,
        rows_dropped=result.rows_dropped,
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("/projects", response_model=ProjectPageResponse)
async def list_projects(
    search: str | None = Query(default=None, description="Case-insensitive text across all fields."),
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=500),
    criteria: ProjectFilter = Depends(get_project_filter),
    data_service: ProjectDataService = Depends(get_project_data_service),
) -> ProjectPageResponse:
    snapshot = await data_service.current()
    records = search_projects(filter_projects(snapshot.result.records, criteria), search)
    project_page = paginate(records, page=page, per_page=per_page)
    return ProjectPageResponse(
        feed=_feed_status(snapshot),
        items=[ProjectResponse.model_validate(record) for record in project_page.items],
        page=project_page.page,
        per_page=project_page.per_page,
        total_items=project_page.total_items,
        total_pages=project_page.total_pages,
    )


@router.get("/kpis", response_model=KPISummaryResponse)
async def get_kpis(
    criteria: ProjectFilter = Depends(get_project_filter),
    data_service: ProjectDataService = Depends(get_project_data_service),
) -> KPISummaryResponse:
    snapshot = await data_service.current()
    summary = summarize(filter_projects(snapshot.result.records, criteria))
    return KPISummaryResponse(
        feed=_feed_status(snapshot),
        total_projects=summary.total_projects,
        completed_projects=summary.completed_projects,
        on_time_projects=summary.on_time_projects,
        total_price=summary.total_price,
        unique_teams=summary.unique_teams,
        on_time_rate=summary.on_time_rate,
    )


@router.get("/distributions/{field}", response_model=DistributionResponse)
async def get_distribution(
    field: str,
    criteria: ProjectFilter = Depends(get_project_filter),
    data_service: ProjectDataService = Depends(get_project_data_service),
) -> DistributionResponse:
    snapshot = await data_service.current()
    try:
        groups = group_by(filter_projects(snapshot.result.records, criteria), field)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return DistributionResponse(
        feed=_feed_status(snapshot),
        field=field,
        groups=[GroupCountResponse(name=group.name, count=group.count) for group in groups],
    )


@router.get("/trends/monthly", response_model=MonthlyTrendResponse)
async def get_monthly_trend(
    criteria: ProjectFilter = Depends(get_project_filter),
    data_service: ProjectDataService = Depends(get_project_data_service),
) -> MonthlyTrendResponse:
    snapshot = await data_service.current()
    rows = monthly_trend(filter_projects(snapshot.result.records, criteria))
    return MonthlyTrendResponse(
        feed=_feed_status(snapshot),
        rows=[
            MonthlyTrendRowResponse(
                month=row.month,
                deliveries=row.deliveries,
                total_value=row.total_value,
                average_value=row.average_value,
            )
            for row in rows
        ],
    )


@router.get("/price-bands", response_model=PriceBandsResponse)
async def get_price_bands(
    criteria: ProjectFilter = Depends(get_project_filter),
    data_service: ProjectDataService = Depends(get_project_data_service),
) -> PriceBandsResponse:
    snapshot = await data_service.current()
    bands = price_bands(filter_projects(snapshot.result.records, criteria))
    return PriceBandsResponse(
        feed=_feed_status(snapshot),
        bands=[PriceBandCountResponse(label=band.label, count=band.count) for band in bands],
    )


@router.get("/filters/options", response_model=FilterOptionsResponse)
async def get_filter_options(
    data_service: ProjectDataService = Depends(get_project_data_service),
) -> FilterOptionsResponse:
    snapshot = await data_service.current()
    records = snapshot.result.records
    return FilterOptionsResponse(
        feed=_feed_status(snapshot),
        teams=distinct_values(records, GroupField.TEAM),
        tech_stacks=distinct_values(records, GroupField.TECH_STACK),
        statuses=distinct_values(records, GroupField.STATUS),
    )


@router.post("/refresh", response_model=RefreshResponse)
async def refresh_feed(
    data_service: ProjectDataService = Depends(get_project_data_service),
) -> RefreshResponse:
    """
    Discard the cached collection and load the feed again.

    Raises HTTP 502 when the feed cannot be fetched; the previous good
    collection stays available to the read endpoints.
    """
    try:
        result = await data_service.reload()
    except FeedFetchError as exc:
        logger.warning("Manual refresh failed status=%s error=%s", exc.status_code, exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"message": str(exc), "status_code": exc.status_code},
        ) from exc

    logger.info(
        "Manual refresh complete records=%d dropped=%d",
        len(result.records),
        result.rows_dropped,
    )
    return RefreshResponse(
        loaded_at=result.loaded_at,
        rows_read=result.rows_read,
        rows_loaded=len(result.records),
        rows_dropped=result.rows_dropped,
        fields_defaulted=result.fields_defaulted,
    )
