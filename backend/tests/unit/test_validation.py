from __future__ import annotations

import pytest

from staffdir.models.auth import LoginRequest, SignupRequest
from staffdir.models.employee import DetailsForm, ProfileForm
from staffdir.services.validation import (
    RecordValidationError,
    build_details_payload,
    build_profile_payload,
    dedupe,
    parse_hours,
    validate_login,
    validate_profile,
    validate_signup,
    validate_write,
)

PARTIAL_PAYLOAD = {
    "availability": "Partially Available",
    "hours_available": 4,
    "from_date": "2025-01-13",
    "to_date": "2025-01-17",
}


def _errors(record_id, payload, **kwargs) -> dict[str, str]:
    with pytest.raises(RecordValidationError) as exc_info:
        validate_write(record_id, payload, **kwargs)
    return exc_info.value.field_errors


class TestValidateWrite:
    def test_valid_partial_payload_passes(self):
        validate_write("E1", PARTIAL_PAYLOAD)

    def test_missing_identity(self):
        assert "empid" in _errors("  ", {"name": "x"})
        assert "empid" in _errors(None, {"name": "x"})

    def test_partial_with_blank_hours_is_rejected(self):
        payload = {**PARTIAL_PAYLOAD, "availability": "PartiallyAvailable", "hours_available": ""}
        assert _errors("E1", payload) == {"hours_available": "Specify hours"}

    @pytest.mark.parametrize("hours", [None, "abc", 0, -2, "nan"])
    def test_partial_with_unusable_hours(self, hours):
        assert "hours_available" in _errors("E1", {**PARTIAL_PAYLOAD, "hours_available": hours})

    def test_hours_as_numeric_string_are_accepted(self):
        validate_write("E1", {**PARTIAL_PAYLOAD, "hours_available": " 3.5 "})

    def test_partial_requires_both_dates(self):
        errors = _errors("E1", {**PARTIAL_PAYLOAD, "from_date": None, "to_date": ""})
        assert errors == {"from_date": "From date required", "to_date": "To date required"}

    def test_inverted_dates(self):
        errors = _errors("E1", {**PARTIAL_PAYLOAD, "from_date": "2025-01-17", "to_date": "2025-01-13"})
        assert "to_date" in errors

    def test_weekend_dates(self):
        errors = _errors("E1", {**PARTIAL_PAYLOAD, "from_date": "2025-01-11", "to_date": "2025-01-19"})
        assert errors["from_date"] == "From date must be a weekday"
        assert errors["to_date"] == "To date must be a weekday"

    def test_window_longer_than_a_year(self):
        errors = _errors("E1", {**PARTIAL_PAYLOAD, "from_date": "2025-01-13", "to_date": "2026-01-14"})
        assert "365" in errors["to_date"]

    def test_custom_window_limit(self):
        assert "to_date" in _errors("E1", PARTIAL_PAYLOAD, max_window_days=2)

    def test_other_statuses_skip_window_checks(self):
        validate_write("E1", {"availability": "Available", "hours_available": None, "from_date": None})
        validate_write("E1", {"name": "Profile only"})


class TestProfile:
    def _form(self, **overrides) -> ProfileForm:
        data = {
            "empid": "E1",
            "name": "Jane",
            "email": "jane@example.com",
            "role": "Tech Lead",
            "cluster": "MEBM",
            "location": " Pune ",
        }
        data.update(overrides)
        return ProfileForm(**data)

    def test_valid_form(self):
        validate_profile(self._form())

    def test_collects_all_field_errors(self):
        with pytest.raises(RecordValidationError) as exc_info:
            validate_profile(ProfileForm())
        assert set(exc_info.value.field_errors) == {"name", "empid", "email", "role", "cluster"}

    def test_other_role_requires_text(self):
        with pytest.raises(RecordValidationError) as exc_info:
            validate_profile(self._form(role="Other", other_role="  "))
        assert exc_info.value.field_errors == {"otherRole": "Enter role"}

    def test_payload_for_listed_role(self):
        payload = build_profile_payload(self._form())
        assert payload == {
            "name": "Jane",
            "empid": "E1",
            "email": "jane@example.com",
            "role": "Tech Lead",
            "otherRole": "",
            "cluster": "MEBM",
            "location": "Pune",
        }

    def test_payload_for_custom_role(self):
        payload = build_profile_payload(self._form(role="Other", other_role=" Solution Owner "))
        assert payload["role"] == "Solution Owner"
        assert payload["otherRole"] == "Solution Owner"


class TestDetailsPayload:
    def test_partial_payload(self):
        form = DetailsForm(
            current_project="Atlas",
            availability="Partially Available",
            hours_available="4",
            from_date="2025-01-13",
            to_date="2025-01-17",
            skills=["Go", "Rust", "Go", " "],
            interests="ML, , Cloud",
            previous_projects="Borealis\n\nAtlas\n",
        )
        assert build_details_payload(form) == {
            "current_project": "Atlas",
            "availability": "Partially Available",
            "hours_available": 4.0,
            "from_date": "2025-01-13",
            "to_date": "2025-01-17",
            "current_skills": ["Go", "Rust"],
            "interests": ["ML", "Cloud"],
            "previous_projects": ["Borealis", "Atlas"],
        }

    def test_unparseable_hours_are_kept_for_validation(self):
        form = DetailsForm(availability="Partially Available", hours_available="")
        assert build_details_payload(form)["hours_available"] == ""

    def test_no_current_project_forces_available(self):
        form = DetailsForm(
            current_project="Atlas",
            no_current_project=True,
            availability="Partially Available",
            hours_available="4",
            from_date="2025-01-13",
            to_date="2025-01-17",
        )
        payload = build_details_payload(form)
        assert payload["availability"] == "Available"
        assert payload["current_project"] == ""
        assert payload["hours_available"] is None
        assert payload["from_date"] is None
        assert payload["to_date"] is None


class TestAuth:
    def test_login_requires_credentials(self):
        with pytest.raises(RecordValidationError):
            validate_login(LoginRequest(email="", password=""))

    def test_login_requires_valid_email(self):
        with pytest.raises(RecordValidationError) as exc_info:
            validate_login(LoginRequest(email="not-an-email", password="pw"))
        assert "email" in exc_info.value.field_errors

    def test_signup_requires_name(self):
        with pytest.raises(RecordValidationError) as exc_info:
            validate_signup(SignupRequest(email="a@b.co", password="pw", name=" "))
        assert "name" in exc_info.value.field_errors

    def test_valid_signup(self):
        validate_signup(SignupRequest(email="a@b.co", password="pw", name="A"))


def test_parse_hours():
    assert parse_hours("8") == 8.0
    assert parse_hours(2) == 2.0
    assert parse_hours(True) is None
    assert parse_hours("inf") is None


def test_dedupe_preserves_first_occurrence():
    assert dedupe(["b", "a", " b ", "c"]) == ["b", "a", "c"]
