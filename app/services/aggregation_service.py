"""
app/services/aggregation_service.py

Pure reducers over a collection of project records.

Every function takes an ordered sequence of :class:`ProjectRecord` and
returns new values; nothing is cached and nothing is mutated, so repeated
calls on the same collection give identical results.

Exposed reducers
----------------
summarize      headline KPIs (delegates the arithmetic to DeliveryKPIFormula)
group_by       category counts for team, tech stack or status
monthly_trend  YYYY-MM delivery buckets, excluding in-progress projects
price_bands    counts per half-open price range
"""

from __future__ import annotations

from typing import Callable, Final, Iterable, Sequence

from app.domain.project_record import (
    DeliveryStatus,
    GroupCount,
    KPISummary,
    MonthlyTrendRow,
    PriceBand,
    PriceBandCount,
    ProjectRecord,
)
from kpi.delivery import DeliveryKPIFormula


class GroupField:
    TEAM = "team"
    TECH_STACK = "tech_stack"
    STATUS = "status"


GROUP_FIELD_GETTERS: Final[dict[str, Callable[[ProjectRecord], str]]] = {
    GroupField.TEAM: lambda record: record.development_team_name,
    GroupField.TECH_STACK: lambda record: record.tech_stack,
    GroupField.STATUS: lambda record: record.delivery_status,
}

DEFAULT_PRICE_BANDS: Final[tuple[PriceBand, ...]] = (
    PriceBand(label="0-50K", minimum=0, maximum=50_000),
    PriceBand(label="50K-100K", minimum=50_000, maximum=100_000),
    PriceBand(label="100K-200K", minimum=100_000, maximum=200_000),
    PriceBand(label="200K+", minimum=200_000, maximum=None),
)

_FORMULA = DeliveryKPIFormula()


def summarize(records: Sequence[ProjectRecord]) -> KPISummary:
    """
    Headline KPIs. ``on_time_rate`` is ``None`` for an empty collection.
    """
    metrics = _FORMULA.compute(
        {
            "project_prices": [record.project_price for record in records],
            "statuses": [record.delivery_status for record in records],
            "delivered_on_time_flags": [record.delivered_on_time for record in records],
            "team_names": [record.development_team_name for record in records],
        }
    )
    return KPISummary(**metrics)


def resolve_group_getter(field: str) -> Callable[[ProjectRecord], str]:
    """
    Return the accessor for a categorical field name.

    Raises ValueError for anything other than ``team``, ``tech_stack`` or
    ``status``.
    """
    try:
        return GROUP_FIELD_GETTERS[field]
    except KeyError:
        allowed = ", ".join(sorted(GROUP_FIELD_GETTERS))
        raise ValueError(f"Unsupported group field {field!r}. Allowed values: {allowed}.") from None


def group_by(records: Iterable[ProjectRecord], field: str) -> list[GroupCount]:
    """
    Count records per distinct value of *field*, in first-seen order.
    """
    getter = resolve_group_getter(field)
    counts: dict[str, int] = {}
    for record in records:
        key = getter(record)
        counts[key] = counts.get(key, 0) + 1
    return [GroupCount(name=name, count=count) for name, count in counts.items()]


def monthly_trend(records: Iterable[ProjectRecord]) -> list[MonthlyTrendRow]:
    """
    Bucket delivered projects by ``YYYY-MM`` of their delivery date.

    In-progress projects and projects without a parseable delivery date are
    left out. Buckets are sorted ascending by month key.
    """
    buckets: dict[str, list[int]] = {}
    for record in records:
        if record.delivery_status == DeliveryStatus.IN_PROGRESS:
            continue
        if record.delivery_date is None:
            continue
        month = f"{record.delivery_date.year:04d}-{record.delivery_date.month:02d}"
        bucket = buckets.setdefault(month, [0, 0])
        bucket[0] += 1
        bucket[1] += record.project_price

    return [
        MonthlyTrendRow(
            month=month,
            deliveries=deliveries,
            total_value=total_value,
            average_value=_round_half_up_ratio(total_value, deliveries),
        )
        for month, (deliveries, total_value) in sorted(buckets.items())
    ]


def price_bands(
    records: Sequence[ProjectRecord],
    bands: Sequence[PriceBand] = DEFAULT_PRICE_BANDS,
) -> list[PriceBandCount]:
    """
    Count records per band using ``minimum <= price < maximum``.

    Raises ValueError for a band whose maximum is not above its minimum.
    """
    for band in bands:
        if band.maximum is not None and band.maximum <= band.minimum:
            raise ValueError(
                f"Price band {band.label!r} has maximum {band.maximum} <= minimum {band.minimum}."
            )
    return [
        PriceBandCount(
            label=band.label,
            count=sum(1 for record in records if band.contains(record.project_price)),
        )
        for band in bands
    ]


def _round_half_up_ratio(numerator: int, denominator: int) -> int:
    # Integer-exact round-half-up for non-negative operands.
    return (2 * numerator + denominator) // (2 * denominator)
