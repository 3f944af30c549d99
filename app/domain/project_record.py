"""
app/domain/project_record.py

Domain models for the project delivery feed and its aggregates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone


class DeliveryStatus:
    ON_TIME = "On Time"
    DELAYED = "Delayed"
    IN_PROGRESS = "In Progress"


ALL_DELIVERY_STATUSES: tuple[str, ...] = (
    DeliveryStatus.ON_TIME,
    DeliveryStatus.DELAYED,
    DeliveryStatus.IN_PROGRESS,
)

# Positional column order of the feed. The header row is never read by name.
FEED_COLUMNS: tuple[str, ...] = (
    "ProjectID",
    "CustomerName",
    "CustomerAddress",
    "CustomerPhone",
    "WebsiteName",
    "ProjectPrice",
    "Negotiated",
    "DeliveredOnTime",
    "DeliveryDate",
    "DeliveryStatus",
    "TechStack",
    "DevelopersNeeded",
    "AssignedDevelopers",
    "DevelopmentTeamName",
)


@dataclass(frozen=True)
class ProjectRecord:
    """
    One parsed project row.
    """

    project_id: int
    customer_name: str
    customer_address: str
    customer_phone: str
    website_name: str
    project_price: int
    negotiated: bool
    delivered_on_time: bool
    delivery_date: date | None
    delivery_status: str
    tech_stack: str
    developers_needed: int
    assigned_developers: str
    development_team_name: str


@dataclass(frozen=True)
class RowValidationError:
    """
    One field that had to be defaulted (or a row that was dropped) during load.
    """

    row_number: int
    message: str
    column: str | None = None
    value: str | None = None


@dataclass(frozen=True)
class LoadResult:
    """
    Outcome of one feed load.

    ``len(records) + rows_dropped == rows_read`` always holds.
    """

    records: tuple[ProjectRecord, ...]
    rows_read: int
    rows_dropped: int
    row_errors: tuple[RowValidationError, ...] = ()
    loaded_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))

    @property
    def fields_defaulted(self) -> int:
        """
        Number of fields on admitted rows that were defaulted or left unset.

        Row-level notes (no column) and drop reasons are not counted.
        """
        return sum(
            1 for error in self.row_errors if error.column is not None and error.column != FEED_COLUMNS[0]
        )

    @classmethod
    def empty(cls) -> "LoadResult":
        return cls(records=(), rows_read=0, rows_dropped=0)


# ---------------------------------------------------------------------------
# Aggregation outputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KPISummary:
    """
    Headline delivery KPIs for a collection.

    ``on_time_rate`` is a percentage, or ``None`` for an empty collection.
    """

    total_projects: int
    completed_projects: int
    on_time_projects: int
    total_price: int
    unique_teams: int
    on_time_rate: float | None


@dataclass(frozen=True)
class GroupCount:
    name: str
    count: int


@dataclass(frozen=True)
class MonthlyTrendRow:
    month: str
    deliveries: int
    total_value: int
    average_value: int


@dataclass(frozen=True)
class PriceBand:
    """
    Half-open price range ``[minimum, maximum)``. ``maximum=None`` is unbounded.
    """

    label: str
    minimum: int
    maximum: int | None = None

    def contains(self, price: int) -> bool:
        if price < self.minimum:
            return False
        return self.maximum is None or price < self.maximum


@dataclass(frozen=True)
class PriceBandCount:
    label: str
    count: int
