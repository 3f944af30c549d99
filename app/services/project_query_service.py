"""
app/services/project_query_service.py

Filtering, free-text search and pagination over a project collection.

These back the dashboard's filter panel and project table. Like the
aggregation reducers they are pure and always return new tuples.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date
from typing import Sequence

from app.domain.project_record import ProjectRecord
from app.services.aggregation_service import resolve_group_getter

DEFAULT_PAGE_SIZE = 10


@dataclass(frozen=True)
class ProjectFilter:
    """
    Filter criteria. ``None`` or blank values do not restrict the result.

    ``team``, ``tech_stack`` and ``status`` match exactly;
    ``customer_name`` is a case-insensitive substring; ``date_from`` and
    ``date_to`` are inclusive bounds on the delivery date.
    """

    team: str | None = None
    tech_stack: str | None = None
    status: str | None = None
    customer_name: str | None = None
    date_from: date | None = None
    date_to: date | None = None

    def is_empty(self) -> bool:
        return not any(
            (
                self.team,
                self.tech_stack,
                self.status,
                self.customer_name and self.customer_name.strip(),
                self.date_from,
                self.date_to,
            )
        )


@dataclass(frozen=True)
class ProjectPage:
    items: tuple[ProjectRecord, ...]
    page: int
    per_page: int
    total_items: int
    total_pages: int


def filter_projects(
    records: Sequence[ProjectRecord],
    criteria: ProjectFilter,
) -> tuple[ProjectRecord, ...]:
    if criteria.is_empty():
        return tuple(records)

    needle = (criteria.customer_name or "").strip().lower()
    has_date_bound = criteria.date_from is not None or criteria.date_to is not None

    def _matches(record: ProjectRecord) -> bool:
        if criteria.team and record.development_team_name != criteria.team:
            return False
        if criteria.tech_stack and record.tech_stack != criteria.tech_stack:
            return False
        if criteria.status and record.delivery_status != criteria.status:
            return False
        if needle and needle not in record.customer_name.lower():
            return False
        if has_date_bound:
            if record.delivery_date is None:
                return False
            if criteria.date_from is not None and record.delivery_date < criteria.date_from:
                return False
            if criteria.date_to is not None and record.delivery_date > criteria.date_to:
                return False
        return True

    return tuple(record for record in records if _matches(record))


def search_projects(records: Sequence[ProjectRecord], term: str | None) -> tuple[ProjectRecord, ...]:
    """
    Keep records where any field's text contains *term*, ignoring case.
    """
    needle = (term or "").strip().lower()
    if not needle:
        return tuple(records)
    return tuple(record for record in records if needle in _searchable_text(record))


def paginate(
    records: Sequence[ProjectRecord],
    page: int = 1,
    per_page: int = DEFAULT_PAGE_SIZE,
) -> ProjectPage:
    """
    Slice one 1-based page. Out-of-range page numbers are clamped.
    """
    if per_page < 1:
        raise ValueError("per_page must be at least 1.")

    total_items = len(records)
    total_pages = max(1, -(-total_items // per_page))
    current = min(max(1, page), total_pages)
    start = (current - 1) * per_page
    return ProjectPage(
        items=tuple(records[start : start + per_page]),
        page=current,
        per_page=per_page,
        total_items=total_items,
        total_pages=total_pages,
    )


def distinct_values(records: Sequence[ProjectRecord], field: str) -> list[str]:
    """First-seen distinct values of a categorical field."""
    getter = resolve_group_getter(field)
    return list(dict.fromkeys(getter(record) for record in records))


def _searchable_text(record: ProjectRecord) -> str:
    parts: list[str] = []
    for item in fields(record):
        value = getattr(record, item.name)
        if value is None:
            continue
        if isinstance(value, date):
            parts.append(value.strftime("%d-%b-%Y"))
        parts.append(str(value))
    return "\n".join(parts).lower()
