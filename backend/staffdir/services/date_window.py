"""Calendar-date windows and the boundaries of the directory's range queries.

Dates are timezone-naive calendar days. A ``"YYYY-MM-DD"`` string always maps
to the same day regardless of the host's locale or offset.
"""

from __future__ import annotations

from calendar import monthrange
from datetime import date, datetime, timedelta
from typing import Any

from pydantic import BaseModel, model_validator

from staffdir.models.employee import QueryRange
from staffdir.services.field_normalizer import date_part

MAX_WINDOW_DAYS = 365


class DateWindow(BaseModel):
    """Closed interval ``[from_date, to_date]``."""

    from_date: date
    to_date: date

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_order(self) -> DateWindow:
        if self.from_date > self.to_date:
            raise ValueError("from_date must not be after to_date")
        return self

    @classmethod
    def from_values(cls, from_raw: Any, to_raw: Any) -> DateWindow | None:
        """Build a window from raw field values, or None if it is not usable."""
        start = parse_calendar_date(from_raw)
        end = parse_calendar_date(to_raw)
        if start is None or end is None or start > end:
            return None
        return cls(from_date=start, to_date=end)

    def contains(self, day: date) -> bool:
        return self.from_date <= day <= self.to_date

    @property
    def days(self) -> int:
        return days_between(self.from_date, self.to_date)


def parse_calendar_date(raw: Any) -> date | None:
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if not isinstance(raw, str):
        return None
    parts = date_part(raw.strip()).split("-")
    if len(parts) != 3:
        return None
    try:
        year, month, day = (int(p) for p in parts)
        return date(year, month, day)
    except ValueError:
        return None


def today(reference: date | None = None) -> date:
    return reference or date.today()


def start_of_week(reference: date | None = None) -> date:
    current = today(reference)
    return current - timedelta(days=current.weekday())


def end_of_week(reference: date | None = None) -> date:
    return start_of_week(reference) + timedelta(days=6)


def start_of_month(reference: date | None = None) -> date:
    return today(reference).replace(day=1)


def end_of_month(reference: date | None = None) -> date:
    current = today(reference)
    return current.replace(day=monthrange(current.year, current.month)[1])


def window_for_range(query_range: QueryRange, reference: date | None = None) -> DateWindow | None:
    if query_range == QueryRange.TODAY:
        current = today(reference)
        return DateWindow(from_date=current, to_date=current)
    if query_range == QueryRange.THIS_WEEK:
        return DateWindow(from_date=start_of_week(reference), to_date=end_of_week(reference))
    if query_range == QueryRange.THIS_MONTH:
        return DateWindow(from_date=start_of_month(reference), to_date=end_of_month(reference))
    return None


def overlaps(a: DateWindow | None, b: DateWindow | None) -> bool:
    if a is None or b is None:
        return False
    return a.from_date <= b.to_date and b.from_date <= a.to_date


def days_between(a: date, b: date) -> int:
    return abs((b - a).days)


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5
