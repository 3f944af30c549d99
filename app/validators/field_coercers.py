"""
app/validators/field_coercers.py

Field coercion and positional row parsing for the project feed.

Coercion is a defaulting policy, not a validation layer: a field that cannot
be parsed resolves to a type-appropriate default and the row is kept. The
only rejection is the ``project_id > 0`` admission check.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Sequence

from app.domain.project_record import (
    ALL_DELIVERY_STATUSES,
    FEED_COLUMNS,
    DeliveryStatus,
    ProjectRecord,
    RowValidationError,
)

MONTH_INDEX: dict[str, int] = {
    "Jan": 0,
    "Feb": 1,
    "Mar": 2,
    "Apr": 3,
    "May": 4,
    "Jun": 5,
    "Jul": 6,
    "Aug": 7,
    "Sep": 8,
    "Oct": 9,
    "Nov": 10,
    "Dec": 11,
}

YES_TOKEN = "Yes"

# Currency symbols, thousands separators and whitespace.
_CURRENCY_NOISE = re.compile(r"[₹$€£¥,\s]")
_LEADING_INT = re.compile(r"^[+-]?[0-9]+")
_ASCII_DIGITS = re.compile(r"[0-9]+")

_STATUS_BY_KEY: dict[str, str] = {
    status.replace(" ", "").lower(): status for status in ALL_DELIVERY_STATUSES
}


# ---------------------------------------------------------------------------
# Pure coercers
# ---------------------------------------------------------------------------


def parse_currency(raw: str | None) -> int:
    """
    Convert a price such as ``"₹1,171,387"`` to ``1171387``.

    Returns ``0`` for anything without a leading integer, and for negatives.
    """
    if not raw:
        return 0
    match = _LEADING_INT.match(_CURRENCY_NOISE.sub("", raw))
    if match is None:
        return 0
    return max(0, int(match.group()))


def parse_int(raw: str | None) -> int:
    """Non-negative integer with a ``0`` default."""
    if not raw:
        return 0
    match = _LEADING_INT.match(raw.strip())
    if match is None:
        return 0
    return max(0, int(match.group()))


def parse_yes_no(raw: str | None) -> bool:
    return raw == YES_TOKEN


def parse_delivery_date(raw: str | None) -> date | None:
    """
    Parse ``DD-Mon-YYYY`` (e.g. ``"05-Mar-2024"``).

    Returns ``None`` when the month token is unknown, a part is missing or
    non-numeric, or the day does not exist in that month.
    """
    if not raw:
        return None
    parts = raw.strip().split("-")
    if len(parts) != 3:
        return None
    day_raw, month_raw, year_raw = parts
    month_index = MONTH_INDEX.get(month_raw)
    if month_index is None:
        return None
    try:
        return date(int(year_raw), month_index + 1, int(day_raw))
    except ValueError:
        return None


def parse_delivery_status(raw: str | None) -> str | None:
    """
    Resolve a status token, ignoring case and spaces.

    Returns ``None`` for empty or unknown tokens so the caller can default.
    """
    if not raw:
        return None
    return _STATUS_BY_KEY.get(raw.replace(" ", "").lower())


def parse_project_id(raw: str | None) -> int:
    """
    Strict positive-integer parse of the identity column; ``0`` means reject.
    """
    if not raw:
        return 0
    stripped = raw.strip()
    if _ASCII_DIGITS.fullmatch(stripped) is None:
        return 0
    return int(stripped)


# ---------------------------------------------------------------------------
# Row parser
# ---------------------------------------------------------------------------


class ProjectRowParser:
    """
    Maps one decoded feed row, by position, onto a :class:`ProjectRecord`.
    """

    def parse_row(
        self,
        fields: Sequence[str],
        *,
        row_number: int,
    ) -> tuple[ProjectRecord | None, list[RowValidationError]]:
        """
        Parse one row. ``None`` is returned only when the project id is not a
        positive integer; every other problem is defaulted and reported.
        """

        errors: list[RowValidationError] = []

        project_id = parse_project_id(self._field(fields, 0))
        if project_id <= 0:
            errors.append(
                RowValidationError(
                    row_number=row_number,
                    column=FEED_COLUMNS[0],
                    message="Row dropped: project id is not a positive integer.",
                    value=self._field(fields, 0),
                )
            )
            return None, errors

        if len(fields) < len(FEED_COLUMNS):
            errors.append(
                RowValidationError(
                    row_number=row_number,
                    message=(
                        f"Row has {len(fields)} of {len(FEED_COLUMNS)} fields; "
                        "missing fields were defaulted."
                    ),
                )
            )

        project_price = self._coerce_price(fields, row_number, errors)
        delivery_date = self._coerce_date(fields, row_number, errors)
        delivery_status = self._coerce_status(fields, row_number, errors)

        record = ProjectRecord(
            project_id=project_id,
            customer_name=self._field(fields, 1),
            customer_address=self._field(fields, 2),
            customer_phone=self._field(fields, 3),
            website_name=self._field(fields, 4),
            project_price=project_price,
            negotiated=parse_yes_no(self._field(fields, 6)),
            delivered_on_time=parse_yes_no(self._field(fields, 7)),
            delivery_date=delivery_date,
            delivery_status=delivery_status,
            tech_stack=self._field(fields, 10),
            developers_needed=parse_int(self._field(fields, 11)),
            assigned_developers=self._field(fields, 12).replace('"', ""),
            development_team_name=self._field(fields, 13),
        )
        return record, errors

    def _coerce_price(
        self,
        fields: Sequence[str],
        row_number: int,
        errors: list[RowValidationError],
    ) -> int:
        raw = self._field(fields, 5)
        price = parse_currency(raw)
        if raw and _LEADING_INT.match(_CURRENCY_NOISE.sub("", raw)) is None:
            errors.append(
                RowValidationError(
                    row_number=row_number,
                    column=FEED_COLUMNS[5],
                    message="Price is not numeric; defaulted to 0.",
                    value=raw,
                )
            )
        return price

    def _coerce_date(
        self,
        fields: Sequence[str],
        row_number: int,
        errors: list[RowValidationError],
    ) -> date | None:
        raw = self._field(fields, 8)
        parsed = parse_delivery_date(raw)
        if parsed is None and raw:
            errors.append(
                RowValidationError(
                    row_number=row_number,
                    column=FEED_COLUMNS[8],
                    message="Delivery date is not DD-Mon-YYYY; left unset.",
                    value=raw,
                )
            )
        return parsed

    def _coerce_status(
        self,
        fields: Sequence[str],
        row_number: int,
        errors: list[RowValidationError],
    ) -> str:
        raw = self._field(fields, 9)
        status = parse_delivery_status(raw)
        if status is not None:
            return status
        if raw:
            errors.append(
                RowValidationError(
                    row_number=row_number,
                    column=FEED_COLUMNS[9],
                    message=f"Unknown delivery status; defaulted to {DeliveryStatus.IN_PROGRESS!r}.",
                    value=raw,
                )
            )
        return DeliveryStatus.IN_PROGRESS

    @staticmethod
    def _field(fields: Sequence[str], index: int) -> str:
        if index < len(fields):
            return fields[index]
        return ""
