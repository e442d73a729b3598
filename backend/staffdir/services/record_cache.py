"""Session-scoped cache of the logged-in user's own record.

The cached user is an accumulation of facet-scoped writes, not a copy of the
server record: the profile flow merges identity fields and the details flow
merges availability fields, so saving one facet never clobbers the other.
"""

from __future__ import annotations

import copy
import json
import logging
import secrets
import threading
from collections.abc import Mapping, MutableMapping
from enum import Enum
from typing import Any

from staffdir.core.config import settings

logger = logging.getLogger(__name__)


class Facet(str, Enum):
    PROFILE = "profile"
    DETAILS = "details"


# (cache key, alternate server keys, default when absent)
PROFILE_FIELDS: list[tuple[str, tuple[str, ...], Any]] = [
    ("empid", ("id",), ""),
    ("name", (), ""),
    ("email", (), ""),
    ("role", (), ""),
    ("otherRole", ("other_role",), ""),
    ("cluster", (), ""),
    ("location", (), ""),
]

DETAIL_FIELDS: list[tuple[str, tuple[str, ...], Any]] = [
    ("current_project", ("currentProject",), ""),
    ("availability", (), ""),
    ("hours_available", ("hoursAvailable",), None),
    ("from_date", ("fromDate",), None),
    ("to_date", ("toDate",), None),
    ("current_skills", ("currentSkills",), []),
    ("interests", (), []),
    ("previous_projects", ("previousProjects",), []),
]

FACET_FIELDS: dict[Facet, list[tuple[str, tuple[str, ...], Any]]] = {
    Facet.PROFILE: PROFILE_FIELDS,
    Facet.DETAILS: DETAIL_FIELDS,
}

PROFILE_KEYS = tuple(key for key, _, _ in PROFILE_FIELDS)
DETAIL_KEYS = tuple(key for key, _, _ in DETAIL_FIELDS)


def project_facet(record: Mapping[str, Any], facet: Facet) -> dict[str, Any]:
    """Pick one facet's keys out of a server record."""
    projected: dict[str, Any] = {}
    for key, alternates, default in FACET_FIELDS[facet]:
        value = None
        for candidate in (key, *alternates):
            if record.get(candidate) is not None:
                value = record[candidate]
                break
        projected[key] = copy.copy(default) if value is None else value
    return projected


def is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def fill_empty(current: Mapping[str, Any], incoming: Mapping[str, Any]) -> dict[str, Any]:
    """Non-destructive merge: only keys that are empty in ``current`` take ``incoming``."""
    filled = dict(current)
    for key, value in incoming.items():
        if is_empty(filled.get(key)) and not is_empty(value):
            filled[key] = value
    return filled


class RecordCache:
    def __init__(self, storage: MutableMapping[str, str] | None = None, key: str = "user") -> None:
        self.storage: MutableMapping[str, str] = storage if storage is not None else {}
        self.key = key
        self._lock = threading.Lock()

    def _read(self) -> dict[str, Any]:
        raw = self.storage.get(self.key)
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Cached user under %r is not valid JSON — ignoring it", self.key)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Mapping[str, Any]) -> None:
        self.storage[self.key] = json.dumps(data, default=str)

    def get(self) -> dict[str, Any]:
        with self._lock:
            return self._read()

    def replace(self, user: Mapping[str, Any]) -> dict[str, Any]:
        with self._lock:
            self._write(user)
            return dict(user)

    def merge(self, patch: Mapping[str, Any]) -> dict[str, Any]:
        """Overwrite exactly the keys present in ``patch``; leave the rest alone."""
        with self._lock:
            merged = {**self._read(), **patch}
            self._write(merged)
            return merged

    def merge_facet(self, record: Mapping[str, Any], facet: Facet) -> dict[str, Any]:
        return self.merge(project_facet(record, facet))

    def clear(self) -> None:
        with self._lock:
            self.storage.pop(self.key, None)

    @property
    def has_user(self) -> bool:
        return bool(self.get())


class SessionStore:
    """One ``RecordCache`` per login session, addressed by an opaque token.

    All caches share one backing mapping; each session's user lives under
    ``"<key>:<token>"``.
    """

    def __init__(self, storage: MutableMapping[str, str] | None = None, key: str = "user") -> None:
        self.storage: MutableMapping[str, str] = storage if storage is not None else {}
        self.key = key
        self._caches: dict[str, RecordCache] = {}
        self._lock = threading.Lock()

    def open(self, user: Mapping[str, Any]) -> tuple[str, RecordCache]:
        token = secrets.token_urlsafe(32)
        cache = RecordCache(self.storage, key=f"{self.key}:{token}")
        cache.replace(user)
        with self._lock:
            self._caches[token] = cache
        return token, cache

    def get(self, token: str | None) -> RecordCache | None:
        if not token:
            return None
        with self._lock:
            return self._caches.get(token)

    def close(self, token: str | None) -> bool:
        if not token:
            return False
        with self._lock:
            cache = self._caches.pop(token, None)
        if cache is None:
            return False
        cache.clear()
        return True

    def clear(self) -> None:
        with self._lock:
            caches = list(self._caches.values())
            self._caches.clear()
        for cache in caches:
            cache.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._caches)


session_store = SessionStore(key=settings.SESSION_CACHE_KEY)
