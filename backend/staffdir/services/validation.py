"""Local checks run before anything is sent to the remote store."""

from __future__ import annotations

import math
import re
from typing import Any

from staffdir.models.auth import LoginRequest, SignupRequest
from staffdir.models.employee import AvailabilityStatus, DetailsForm, ProfileForm
from staffdir.services.availability_matcher import parse_status
from staffdir.services.date_window import MAX_WINDOW_DAYS, days_between, is_weekend, parse_calendar_date

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
OTHER_ROLE = "Other"


class RecordValidationError(ValueError):
    def __init__(self, field_errors: dict[str, str], message: str = "Fix errors before saving.") -> None:
        super().__init__(message)
        self.field_errors = field_errors


def _raise_if(errors: dict[str, str], message: str = "Fix errors before saving.") -> None:
    if errors:
        raise RecordValidationError(errors, message)


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_PATTERN.match(value or ""))


def parse_hours(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return None if math.isnan(number) or math.isinf(number) else number


def validate_login(request: LoginRequest) -> None:
    if not request.email.strip() or not request.password:
        raise RecordValidationError(
            {"credentials": "Email and password are required."},
            "Email and password are required.",
        )
    if not is_valid_email(request.email.strip()):
        raise RecordValidationError({"email": "Please enter a valid email address."}, "Please enter a valid email address.")


def validate_signup(request: SignupRequest) -> None:
    if not request.name.strip():
        raise RecordValidationError({"name": "Name is required."}, "Name is required.")
    validate_login(request)


def validate_profile(form: ProfileForm) -> None:
    errors: dict[str, str] = {}
    if not form.name.strip():
        errors["name"] = "Name is required"
    if not form.empid.strip():
        errors["empid"] = "Employee Id required"
    if not is_valid_email(form.email.strip()):
        errors["email"] = "Valid email required"
    if not form.role:
        errors["role"] = "Role required"
    if form.role == OTHER_ROLE and not form.other_role.strip():
        errors["otherRole"] = "Enter role"
    if not form.cluster:
        errors["cluster"] = "Cluster required"
    _raise_if(errors)


def build_profile_payload(form: ProfileForm) -> dict[str, Any]:
    custom_role = form.role == OTHER_ROLE
    return {
        "name": form.name.strip(),
        "empid": form.empid.strip(),
        "email": form.email.strip(),
        "role": form.other_role.strip() if custom_role else form.role,
        "otherRole": form.other_role.strip() if custom_role else "",
        "cluster": form.cluster,
        "location": form.location.strip(),
    }


def _split(text: str, separator: str) -> list[str]:
    return [part.strip() for part in (text or "").split(separator) if part.strip()]


def dedupe(values: list[str]) -> list[str]:
    seen: set[str] = set()
    unique: list[str] = []
    for value in values:
        item = value.strip()
        if item and item not in seen:
            seen.add(item)
            unique.append(item)
    return unique


def build_details_payload(form: DetailsForm) -> dict[str, Any]:
    """Turn the details form into the write payload.

    With no current project the status is forced to Available. Hours and
    dates are only sent for a partially available employee.
    """
    status = AvailabilityStatus.AVAILABLE.value if form.no_current_project else form.availability
    partial = parse_status(status) == AvailabilityStatus.PARTIALLY_AVAILABLE

    hours: Any = None
    if partial:
        parsed = parse_hours(form.hours_available)
        hours = parsed if parsed is not None else form.hours_available

    return {
        "current_project": "" if form.no_current_project else form.current_project or "",
        "availability": status,
        "hours_available": hours,
        "from_date": (form.from_date or None) if partial else None,
        "to_date": (form.to_date or None) if partial else None,
        "current_skills": dedupe(form.skills),
        "interests": _split(form.interests, ","),
        "previous_projects": _split(form.previous_projects, "\n"),
    }


def validate_write(record_id: Any, payload: dict[str, Any], max_window_days: int = MAX_WINDOW_DAYS) -> None:
    """Preconditions shared by every write, checked before any request."""
    errors: dict[str, str] = {}

    if not str(record_id or "").strip():
        errors["empid"] = "Missing employee ID — cannot save to server."

    if parse_status(payload.get("availability")) == AvailabilityStatus.PARTIALLY_AVAILABLE:
        hours = parse_hours(payload.get("hours_available"))
        if hours is None or hours <= 0:
            errors["hours_available"] = "Specify hours"

        start = parse_calendar_date(payload.get("from_date"))
        end = parse_calendar_date(payload.get("to_date"))
        if start is None:
            errors["from_date"] = "From date required"
        elif is_weekend(start):
            errors["from_date"] = "From date must be a weekday"
        if end is None:
            errors["to_date"] = "To date required"
        elif is_weekend(end):
            errors["to_date"] = "To date must be a weekday"

        if start is not None and end is not None and "to_date" not in errors:
            if start > end:
                errors["to_date"] = "To date must not be before from date"
            elif days_between(start, end) > max_window_days:
                errors["to_date"] = f"Availability window must not exceed {max_window_days} days"

    _raise_if(errors, "Please fix validation errors before saving.")
