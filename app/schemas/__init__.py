"""
app/schemas package marker.
"""

from app.schemas.dashboard import (
    DistributionResponse,
    FeedStatusResponse,
    FilterOptionsResponse,
    HealthResponse,
    KPISummaryResponse,
    MonthlyTrendResponse,
    PriceBandsResponse,
    ProjectPageResponse,
    ProjectResponse,
    RefreshResponse,
)

__all__ = [
    "DistributionResponse",
    "FeedStatusResponse",
    "FilterOptionsResponse",
    "HealthResponse",
    "KPISummaryResponse",
    "MonthlyTrendResponse",
    "PriceBandsResponse",
    "ProjectPageResponse",
    "ProjectResponse",
    "RefreshResponse",
]
