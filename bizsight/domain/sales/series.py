"""Period series: chronological per-period totals and period label arithmetic."""

from __future__ import annotations

import calendar
import re
from collections.abc import Iterable
from datetime import date, datetime
from typing import Any, TypedDict, Union

from bizsight.core.errors import InvalidInputError

Period = Union[int, date, datetime, str]

_MONTH_LABEL = re.compile(r"^(\d{4})-(\d{2})$")
_DAY_LABEL = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


class PeriodPoint(TypedDict):
    """One aggregated value for one period (e.g. a month's revenue)."""

    period: Period
    value: float


class SaleRecord(TypedDict, total=False):
    """Sale invoice as supplied by the record store snapshot."""

    id: str
    date: date | datetime | str
    customer_id: str
    total: float
    items: list[dict[str, Any]]  # {"item_id": str, "quantity": float, "rate": float}


def _add_months(d: date, months: int) -> date:
    """Shift a date by whole calendar months, clamping the day."""
    month_index = d.month - 1 + months
    year = d.year + month_index // 12
    month = month_index % 12 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return d.replace(year=year, month=month, day=day)


def next_period(period: Period, steps: int = 1) -> Period:
    """Advance a period label by ``steps`` periods.

    Integer labels count periods directly; dates and ISO strings advance by
    calendar months, which is the bucket the revenue series is built on.

    Examples:
        >>> next_period(11, 2)
        13
        >>> next_period(date(2024, 1, 31))
        datetime.date(2024, 2, 29)
        >>> next_period("2024-12", 1)
        '2025-01'
    """
    if isinstance(period, bool):
        raise InvalidInputError(f"Unsupported period label: {period!r}")
    if isinstance(period, int):
        return period + steps
    if isinstance(period, date):  # datetime is a date subclass
        return _add_months(period, steps)
    if isinstance(period, str):
        m = _MONTH_LABEL.match(period)
        if m:
            try:
                start = date(int(m.group(1)), int(m.group(2)), 1)
            except ValueError as e:
                raise InvalidInputError(f"Invalid period label: {period!r}") from e
            return _add_months(start, steps).strftime("%Y-%m")
        if _DAY_LABEL.match(period):
            try:
                parsed = date.fromisoformat(period)
            except ValueError as e:
                raise InvalidInputError(f"Invalid period label: {period!r}") from e
            return _add_months(parsed, steps).isoformat()
    raise InvalidInputError(f"Unsupported period label: {period!r}")


def _as_date(value: date | datetime | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(value).date()
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Invalid sale date: {value!r}") from e


def build_monthly_series(
    sales: Iterable[SaleRecord],
    end: date,
    months: int = 12,
) -> list[PeriodPoint]:
    """Aggregate sale totals into one point per calendar month.

    Args:
        sales: Sale records with ``date`` and ``total``
        end: Any day inside the last month of the series
        months: Number of months ending at ``end``'s month

    Returns:
        Chronological series keyed by the first day of each month.
        Months without sales are zero-filled.

    """
    if months < 1:
        raise InvalidInputError(f"Months must be >= 1, got {months}")

    last_month = date(end.year, end.month, 1)
    first_month = _add_months(last_month, -(months - 1))
    buckets = {_add_months(first_month, i): 0.0 for i in range(months)}

    for sale in sales:
        d = _as_date(sale["date"])
        key = date(d.year, d.month, 1)
        if key in buckets:
            buckets[key] += float(sale.get("total", 0.0) or 0.0)

    return [{"period": period, "value": value} for period, value in buckets.items()]


def series_values(points: Iterable[PeriodPoint]) -> list[float]:
    """Extract the numeric values of a period series."""
    return [float(p["value"]) for p in points]
