from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date
from typing import Any

from staffdir.models.employee import AvailabilityStatus, DirectoryQuery, EmployeeRecord, QueryRange
from staffdir.services.date_window import DateWindow, overlaps, window_for_range

logger = logging.getLogger(__name__)

ALL_STATUSES = "All"

# Deployments label the third state either way.
_STATUS_ALIASES: dict[str, AvailabilityStatus] = {
    "available": AvailabilityStatus.AVAILABLE,
    "partially available": AvailabilityStatus.PARTIALLY_AVAILABLE,
    "occupied": AvailabilityStatus.OCCUPIED,
    "unavailable": AvailabilityStatus.OCCUPIED,
}


def parse_status(raw: Any) -> AvailabilityStatus | None:
    if raw is None:
        return None
    text = str(raw).strip().lower()
    if text in _STATUS_ALIASES:
        return _STATUS_ALIASES[text]
    if "partial" in text:
        return AvailabilityStatus.PARTIALLY_AVAILABLE
    return None


def matches(record: EmployeeRecord, query_range: QueryRange, reference: date | None = None) -> bool:
    """Decide whether a record is visible for the requested range."""
    if query_range == QueryRange.ANY:
        return True

    status = parse_status(record.availability)
    if status is None or status == AvailabilityStatus.OCCUPIED:
        return False

    requested = window_for_range(query_range, reference)
    has_both = record.from_date is not None and record.to_date is not None

    if status == AvailabilityStatus.AVAILABLE and not has_both:
        return True
    if not has_both:
        return False

    window = DateWindow.from_values(record.from_date, record.to_date)
    if window is None:
        logger.debug("Record %s has an inverted availability window", record.id)
        return False
    return overlaps(window, requested)


def matches_search(record: EmployeeRecord, term: str) -> bool:
    needle = term.strip().lower()
    if not needle:
        return True
    if record.name and needle in record.name.lower():
        return True
    if any(needle in skill.lower() for skill in record.current_skills):
        return True
    if record.location and needle in record.location.lower():
        return True
    return bool(record.role and needle in record.role.lower())


def filter_directory(
    records: Iterable[EmployeeRecord],
    query: DirectoryQuery,
    reference: date | None = None,
) -> list[EmployeeRecord]:
    """Apply search, exact status filter and range filter, in that order.

    The range filter is skipped when the status filter selects occupied
    employees, since they never match a time window.
    """
    filtered = [r for r in records if matches_search(r, query.search)]

    if query.status and query.status != ALL_STATUSES:
        filtered = [r for r in filtered if r.availability == query.status]

    apply_range = parse_status(query.status) != AvailabilityStatus.OCCUPIED
    if apply_range and query.range != QueryRange.ANY:
        filtered = [r for r in filtered if matches(r, query.range, reference)]

    return filtered
