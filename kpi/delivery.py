"""
kpi/delivery.py

Software-delivery KPI formula implementation.

Expected inputs
---------------
project_prices : list[int]
    Price of every project in the collection.
statuses : list[str]
    Delivery status of every project, same order as ``project_prices``.
delivered_on_time_flags : list[bool]
    ``DeliveredOnTime`` flag of every project.
team_names : list[str]
    Development team of every project.

Formulas
--------
Total Projects     = len(project_prices)
Completed Projects = count(status != "In Progress")
On-Time Projects   = count(delivered_on_time)
Total Price        = sum(project_prices)
Unique Teams       = |distinct(team_names)|
On-Time Rate       = on_time_projects / total_projects * 100

Division-by-zero cases return None for the affected metric.
"""

from __future__ import annotations

from typing import Any

from app.domain.project_record import DeliveryStatus
from kpi.base import BaseKPIFormula

_SENTINEL = None  # value stored when a metric cannot be computed


class DeliveryKPIFormula(BaseKPIFormula):
    """
    Deterministic delivery KPI calculations with safe division-by-zero handling.
    """

    required_inputs = (
        "project_prices",
        "statuses",
        "delivered_on_time_flags",
        "team_names",
    )

    def calculate(self, inputs: dict[str, Any]) -> dict[str, int | float | None]:
        """
        Compute the headline delivery metrics.

        Returns
        -------
        dict
            Keys: ``total_projects``, ``completed_projects``,
            ``on_time_projects``, ``total_price``, ``unique_teams``,
            ``on_time_rate``. ``on_time_rate`` is ``None`` when there are no
            projects.
        """
        project_prices: list[int] = inputs["project_prices"]
        statuses: list[str] = inputs["statuses"]
        delivered_on_time_flags: list[bool] = inputs["delivered_on_time_flags"]
        team_names: list[str] = inputs["team_names"]

        total_projects = len(project_prices)
        on_time_projects = _on_time_projects(delivered_on_time_flags)

        return {
            "total_projects": total_projects,
            "completed_projects": _completed_projects(statuses),
            "on_time_projects": on_time_projects,
            "total_price": _total_price(project_prices),
            "unique_teams": _unique_teams(team_names),
            "on_time_rate": _on_time_rate(on_time_projects, total_projects),
        }


# ---------------------------------------------------------------------------
# Pure formula functions
# ---------------------------------------------------------------------------


def _completed_projects(statuses: list[str]) -> int:
    return sum(1 for status in statuses if status != DeliveryStatus.IN_PROGRESS)


def _on_time_projects(delivered_on_time_flags: list[bool]) -> int:
    return sum(1 for flag in delivered_on_time_flags if flag)


def _total_price(project_prices: list[int]) -> int:
    return sum(project_prices)


def _unique_teams(team_names: list[str]) -> int:
    return len(set(team_names))


def _on_time_rate(on_time_projects: int, total_projects: int) -> float | None:
    """
    On-Time Rate = on_time_projects / total_projects * 100.

    Returns None when total_projects is zero.
    """
    if total_projects == 0:
        return _SENTINEL
    return on_time_projects / total_projects * 100
