"""Directory reads: listing, single records and background hydration."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from staffdir.models.employee import DirectoryQuery, EmployeeCard, EmployeeRecord
from staffdir.services.availability_matcher import filter_directory, parse_status
from staffdir.services.date_window import parse_calendar_date
from staffdir.services.directory_client import DirectoryClient, directory_client, record_identity
from staffdir.services.field_normalizer import normalize_date_display, normalize_list, relative_age
from staffdir.services.record_cache import Facet, fill_empty, project_facet
from staffdir.services.validation import parse_hours

logger = logging.getLogger(__name__)

# Store field names (snake or camel case, depending on who wrote the row)
_FIELD_MAP: list[tuple[str, tuple[str, ...]]] = [
    ("name", ("name",)),
    ("email", ("email",)),
    ("role", ("role",)),
    ("other_role", ("otherRole", "other_role")),
    ("location", ("location",)),
    ("cluster", ("cluster",)),
    ("current_project", ("current_project", "currentProject")),
    ("updated_at", ("updated_at", "updatedAt")),
]

_LIST_FIELDS: list[tuple[str, tuple[str, ...]]] = [
    ("current_skills", ("current_skills", "currentSkills", "skills")),
    ("interests", ("interests",)),
    ("previous_projects", ("previous_projects", "previousProjects")),
]

_FROM_KEYS = ("from_date", "fromDate")
_TO_KEYS = ("to_date", "toDate")
_HOURS_KEYS = ("hours_available", "hoursAvailable")


def _first(raw: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None and value != "":
            return value
    return None


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class CancellationToken:
    """Handle tied to a consumer's lifetime; a cancelled hydration is discarded."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class EmployeeService:
    def __init__(self, client: DirectoryClient) -> None:
        self.client = client

    @property
    def initialized(self) -> bool:
        return self.client.initialized

    async def get_employees(
        self,
        query: DirectoryQuery | None = None,
        today: date | None = None,
        now: datetime | None = None,
    ) -> list[EmployeeCard]:
        raw_records = await self.client.list_employees()
        logger.debug("Fetched %d employees", len(raw_records))

        records = [self._transform_employee(raw) for raw in raw_records]
        raw_by_record = {id(record): raw for record, raw in zip(records, raw_records)}

        visible = filter_directory(records, query or DirectoryQuery(), today)
        return [self._to_card(record, raw_by_record[id(record)], now) for record in visible]

    async def get_employee(self, record_id: str, now: datetime | None = None) -> EmployeeCard | None:
        raw = await self.client.fetch_employee(record_id)
        if raw is None:
            return None
        return self._to_card(self._transform_employee(raw), raw, now)

    async def hydrate(
        self,
        record_id: str,
        local: Mapping[str, Any],
        facet: Facet,
        token: CancellationToken | None = None,
    ) -> dict[str, Any]:
        """Fill only the empty local fields of ``facet`` from the server copy."""
        if not record_id:
            return dict(local)

        try:
            fetched = await self.client.fetch_employee(record_id)
        except Exception:
            logger.warning("Background refresh of %s failed", record_id, exc_info=True)
            return dict(local)
        if token is not None and token.cancelled:
            logger.debug("Discarding hydration of %s — consumer went away", record_id)
            return dict(local)
        if fetched is None:
            logger.warning("Background refresh of %s returned nothing", record_id)
            return dict(local)

        server = project_facet(fetched, facet)
        for key, _ in _LIST_FIELDS:
            if key in server:
                server[key] = normalize_list(server[key])
        return fill_empty(local, server)

    def _transform_employee(self, raw: Mapping[str, Any]) -> EmployeeRecord:
        data: dict[str, Any] = {"id": record_identity(dict(raw)) or "unknown"}

        for python_key, store_keys in _FIELD_MAP:
            data[python_key] = _text(_first(raw, store_keys))

        for python_key, store_keys in _LIST_FIELDS:
            data[python_key] = normalize_list(_first(raw, store_keys))

        data["availability"] = _text(raw.get("availability")) or ""
        data["status"] = parse_status(data["availability"])

        hours = parse_hours(_first(raw, _HOURS_KEYS))
        data["hours_available"] = hours if hours is not None and hours > 0 else None

        data["from_date"] = parse_calendar_date(_first(raw, _FROM_KEYS))
        data["to_date"] = parse_calendar_date(_first(raw, _TO_KEYS))

        return EmployeeRecord(**data)

    def _to_card(self, record: EmployeeRecord, raw: Mapping[str, Any], now: datetime | None) -> EmployeeCard:
        return EmployeeCard(
            **record.model_dump(),
            from_date_display=normalize_date_display(_first(raw, _FROM_KEYS)),
            to_date_display=normalize_date_display(_first(raw, _TO_KEYS)),
            updated=relative_age(_first(raw, ("updated_at", "updatedAt")), now),
        )


employee_service = EmployeeService(directory_client)
