"""
app/domain package marker.
"""

from app.domain.project_record import (
    DeliveryStatus,
    GroupCount,
    KPISummary,
    LoadResult,
    MonthlyTrendRow,
    PriceBand,
    PriceBandCount,
    ProjectRecord,
    RowValidationError,
)

__all__ = [
    "DeliveryStatus",
    "GroupCount",
    "KPISummary",
    "LoadResult",
    "MonthlyTrendRow",
    "PriceBand",
    "PriceBandCount",
    "ProjectRecord",
    "RowValidationError",
]
