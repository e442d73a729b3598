from __future__ import annotations

from datetime import date

import pytest

from staffdir.models.employee import AvailabilityStatus, DirectoryQuery, EmployeeRecord, QueryRange
from staffdir.services.availability_matcher import filter_directory, matches, matches_search, parse_status

TIMED_RANGES = [QueryRange.TODAY, QueryRange.THIS_WEEK, QueryRange.THIS_MONTH]


def _record(
    availability: str,
    from_date: str | None = None,
    to_date: str | None = None,
    **extra,
) -> EmployeeRecord:
    return EmployeeRecord(
        id=extra.pop("id", "E1"),
        availability=availability,
        from_date=date.fromisoformat(from_date) if from_date else None,
        to_date=date.fromisoformat(to_date) if to_date else None,
        **extra,
    )


class TestParseStatus:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Available", AvailabilityStatus.AVAILABLE),
            (" available ", AvailabilityStatus.AVAILABLE),
            ("Partially Available", AvailabilityStatus.PARTIALLY_AVAILABLE),
            ("PartiallyAvailable", AvailabilityStatus.PARTIALLY_AVAILABLE),
            ("Occupied", AvailabilityStatus.OCCUPIED),
            ("Unavailable", AvailabilityStatus.OCCUPIED),
            ("On leave", None),
            ("", None),
            (None, None),
        ],
    )
    def test_labels(self, raw, expected):
        assert parse_status(raw) == expected


class TestMatches:
    def test_any_range_always_matches(self):
        for availability in ("Available", "Partially Available", "Occupied", "???"):
            assert matches(_record(availability), QueryRange.ANY)

    def test_available_window_overlapping_today(self):
        record = _record("Available", "2025-01-10", "2025-01-12")
        assert matches(record, QueryRange.TODAY, date(2025, 1, 11))

    def test_available_window_outside_today(self):
        record = _record("Available", "2025-01-10", "2025-01-12")
        assert not matches(record, QueryRange.TODAY, date(2025, 2, 1))

    def test_available_without_window_is_always_available(self):
        for query_range in TIMED_RANGES:
            assert matches(_record("Available"), query_range, date(2025, 2, 1))

    def test_available_with_half_window_is_always_available(self):
        assert matches(_record("Available", from_date="2030-01-01"), QueryRange.TODAY, date(2025, 2, 1))

    def test_occupied_never_matches_a_time_range(self):
        for query_range in TIMED_RANGES:
            assert not matches(_record("Occupied", "2025-01-01", "2025-12-31"), query_range, date(2025, 6, 1))

    def test_partial_missing_to_date_never_matches(self):
        record = _record("Partially Available", from_date="2025-01-10")
        for query_range in TIMED_RANGES:
            assert not matches(record, query_range, date(2025, 1, 10))
        assert matches(record, QueryRange.ANY)

    def test_partial_missing_from_date_never_matches(self):
        record = _record("Partially Available", to_date="2025-01-10")
        assert not matches(record, QueryRange.THIS_MONTH, date(2025, 1, 10))

    def test_partial_window_overlapping_week(self):
        record = _record("Partially Available", "2025-01-17", "2025-01-24")
        assert matches(record, QueryRange.THIS_WEEK, date(2025, 1, 14))
        assert not matches(record, QueryRange.TODAY, date(2025, 1, 14))

    def test_partial_window_overlapping_month(self):
        record = _record("Partially Available", "2025-01-27", "2025-02-14")
        assert matches(record, QueryRange.THIS_MONTH, date(2025, 2, 20))
        assert not matches(record, QueryRange.THIS_MONTH, date(2025, 3, 1))

    def test_inverted_window_never_matches(self):
        record = _record("Available", "2025-01-12", "2025-01-10")
        assert not matches(record, QueryRange.THIS_MONTH, date(2025, 1, 11))

    def test_unknown_status_never_matches(self):
        assert not matches(_record("On leave"), QueryRange.TODAY, date(2025, 1, 1))


class TestMatchesSearch:
    def test_matches_name_skill_location_role(self):
        record = _record(
            "Available",
            name="Jane Doe",
            current_skills=["Kubernetes"],
            location="Pune",
            role="Tech Lead",
        )
        assert matches_search(record, "jane")
        assert matches_search(record, "KUBER")
        assert matches_search(record, "pune")
        assert matches_search(record, "lead")
        assert not matches_search(record, "berlin")

    def test_blank_term_matches_everything(self):
        assert matches_search(_record("Available"), "  ")


DIRECTORY = [
    _record("Available", id="A1", name="Ana"),
    _record("Available", "2025-03-01", "2025-03-10", id="A2", name="Ben"),
    _record("Partially Available", "2025-01-13", "2025-01-17", id="P1", name="Cid"),
    _record("Partially Available", id="P2", name="Dee"),
    _record("Occupied", id="O1", name="Eve"),
]


def _ids(records):
    return [r.id for r in records]


class TestFilterDirectory:
    def test_no_filters(self):
        assert _ids(filter_directory(DIRECTORY, DirectoryQuery())) == ["A1", "A2", "P1", "P2", "O1"]

    def test_range_only(self):
        query = DirectoryQuery(range=QueryRange.THIS_WEEK)
        assert _ids(filter_directory(DIRECTORY, query, date(2025, 1, 15))) == ["A1", "P1"]

    def test_status_and_range_compose(self):
        query = DirectoryQuery(status="Partially Available", range=QueryRange.THIS_WEEK)
        assert _ids(filter_directory(DIRECTORY, query, date(2025, 1, 15))) == ["P1"]

    def test_status_is_exact_label_match(self):
        query = DirectoryQuery(status="available")
        assert filter_directory(DIRECTORY, query) == []

    def test_range_suppressed_for_occupied_filter(self):
        query = DirectoryQuery(status="Occupied", range=QueryRange.TODAY)
        assert _ids(filter_directory(DIRECTORY, query, date(2025, 1, 15))) == ["O1"]

    def test_search_composes_with_range(self):
        query = DirectoryQuery(search="ben", range=QueryRange.THIS_MONTH)
        assert _ids(filter_directory(DIRECTORY, query, date(2025, 3, 5))) == ["A2"]
        assert filter_directory(DIRECTORY, query, date(2025, 1, 5)) == []
