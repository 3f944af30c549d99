"""
app/schemas/dashboard.py

Response schemas for the dashboard data endpoints.
"""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


class FeedStatusResponse(BaseModel):
    """
    Freshness metadata attached to every data response.
    """

    loaded_at: datetime | None = None
    stale: bool = False
    error: str | None = None
    status_code: int | None = None
    rows_read: int = Field(0, ge=0)
    rows_dropped: int = Field(0, ge=0)


class ProjectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    project_id: int = Field(..., gt=0)
    customer_name: str
    customer_address: str
    customer_phone: str
    website_name: str
    project_price: int = Field(..., ge=0)
    negotiated: bool
    delivered_on_time: bool
    delivery_date: date | None
    delivery_status: str
    tech_stack: str
    developers_needed: int = Field(..., ge=0)
    assigned_developers: str
    development_team_name: str


class ProjectPageResponse(BaseModel):
    feed: FeedStatusResponse
    items: list[ProjectResponse] = Field(default_factory=list)
    page: int = Field(..., ge=1)
    per_page: int = Field(..., ge=1)
    total_items: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=1)


class KPISummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    feed: FeedStatusResponse
    total_projects: int = Field(..., ge=0)
    completed_projects: int = Field(..., ge=0)
    on_time_projects: int = Field(..., ge=0)
    total_price: int = Field(..., ge=0)
    unique_teams: int = Field(..., ge=0)
    on_time_rate: float | None = None


class GroupCountResponse(BaseModel):
    name: str
    count: int = Field(..., ge=0)


class DistributionResponse(BaseModel):
    feed: FeedStatusResponse
    field: str
    groups: list[GroupCountResponse] = Field(default_factory=list)


class MonthlyTrendRowResponse(BaseModel):
    month: str
    deliveries: int = Field(..., ge=0)
    total_value: int = Field(..., ge=0)
    average_value: int = Field(..., ge=0)


class MonthlyTrendResponse(BaseModel):
    feed: FeedStatusResponse
    rows: list[MonthlyTrendRowResponse] = Field(default_factory=list)


class PriceBandCountResponse(BaseModel):
    label: str
    count: int = Field(..., ge=0)


class PriceBandsResponse(BaseModel):
    feed: FeedStatusResponse
    bands: list[PriceBandCountResponse] = Field(default_factory=list)


class FilterOptionsResponse(BaseModel):
    feed: FeedStatusResponse
    teams: list[str] = Field(default_factory=list)
    tech_stacks: list[str] = Field(default_factory=list)
    statuses: list[str] = Field(default_factory=list)


class RefreshResponse(BaseModel):
    loaded_at: datetime
    rows_read: int = Field(..., ge=0)
    rows_loaded: int = Field(..., ge=0)
    rows_dropped: int = Field(..., ge=0)
    fields_defaulted: int = Field(..., ge=0)


class HealthResponse(BaseModel):
    status: str
    cache_state: str
