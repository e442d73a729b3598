"""Employee models for the remote directory store."""

from __future__ import annotations

from datetime import date
from enum import Enum

from pydantic import BaseModel


class AvailabilityStatus(str, Enum):
    AVAILABLE = "Available"
    PARTIALLY_AVAILABLE = "Partially Available"
    OCCUPIED = "Occupied"


class QueryRange(str, Enum):
    ANY = "Any"
    TODAY = "Today"
    THIS_WEEK = "This Week"
    THIS_MONTH = "This Month"


class Freshness(str, Enum):
    FRESH = "fresh"
    AGING = "aging"
    STALE = "stale"
    NEUTRAL = "neutral"


class RelativeAge(BaseModel):
    label: str = ""
    severity: Freshness = Freshness.NEUTRAL


class EmployeeRecord(BaseModel):
    """Canonical view of one record from the remote store."""

    id: str
    name: str | None = None
    email: str | None = None
    role: str | None = None
    other_role: str | None = None
    location: str | None = None
    cluster: str | None = None
    current_project: str | None = None
    availability: str = ""
    status: AvailabilityStatus | None = None
    hours_available: float | None = None
    from_date: date | None = None
    to_date: date | None = None
    current_skills: list[str] = []
    interests: list[str] = []
    previous_projects: list[str] = []
    updated_at: str | None = None


class EmployeeCard(EmployeeRecord):
    """Directory listing entry with display-ready fields."""

    from_date_display: str = ""
    to_date_display: str = ""
    updated: RelativeAge = RelativeAge()


class DirectoryQuery(BaseModel):
    search: str = ""
    status: str = "All"
    range: QueryRange = QueryRange.ANY


class ProfileForm(BaseModel):
    empid: str = ""
    name: str = ""
    email: str = ""
    role: str = ""
    other_role: str = ""
    cluster: str = ""
    location: str = ""


class DetailsForm(BaseModel):
    current_project: str = ""
    no_current_project: bool = False
    availability: str = AvailabilityStatus.OCCUPIED.value
    hours_available: str = ""
    from_date: str = ""
    to_date: str = ""
    skills: list[str] = []
    interests: str = ""
    previous_projects: str = ""
