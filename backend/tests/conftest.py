from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from starlette.testclient import TestClient

from staffdir.main import app
from staffdir.services.directory_client import HttpAttempt
from staffdir.services.record_cache import session_store

SAMPLE_USER: dict[str, Any] = {
    "empid": "E100",
    "name": "Jane Doe",
    "email": "jane.doe@example.com",
    "role": "Tech Lead",
    "otherRole": "",
    "cluster": "MEBM",
    "location": "Pune",
    "current_project": "Atlas",
    "availability": "Occupied",
    "hours_available": None,
    "from_date": None,
    "to_date": None,
    "current_skills": ["Python"],
    "interests": [],
    "previous_projects": [],
}

SAMPLE_STORE_ROWS: list[dict[str, Any]] = [
    {
        "empid": "E100",
        "name": "Jane Doe",
        "role": "Tech Lead",
        "location": "Pune",
        "availability": "Available",
        "from_date": "2025-01-10",
        "to_date": "2025-01-12T00:00:00",
        "current_skills": "Go, Rust; C++",
        "updated_at": "2025-01-09 10:00:00",
    },
    {
        "empid": "E200",
        "name": "Ravi Kumar",
        "role": "Data Analyst",
        "location": "Berlin",
        "availability": "Partially Available",
        "hours_available": "4",
        "from_date": "2025-01-13",
        "current_skills": ["SQL", "", "Python"],
    },
    {
        "id": "E300",
        "name": "Mia Chen",
        "role": "Software Developer",
        "location": "Munich",
        "availability": "Occupied",
        "current_skills": {"0": "Java", "1": "Kotlin"},
    },
]


def make_attempt(method: str, status: int | None, body: Any = None, path: str = "/api/employees") -> HttpAttempt:
    return HttpAttempt(
        method=method,
        url=f"http://store.test{path}",
        status=status,
        body=body,
        error=None if status is not None else "Cannot connect to host",
    )


def make_fake_client() -> MagicMock:
    client = MagicMock()
    client.initialized = True
    client.base_url = "http://store.test"
    client.request = AsyncMock()
    client.get_employee = AsyncMock()
    client.fetch_employee = AsyncMock()
    client.list_employees = AsyncMock()
    return client


@pytest.fixture(autouse=True)
def _clear_sessions():
    session_store.clear()
    yield
    session_store.clear()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def logged_in_client():
    token, _ = session_store.open(SAMPLE_USER)
    with TestClient(app) as c:
        c.headers["Authorization"] = f"Bearer {token}"
        yield c
    app.dependency_overrides.clear()
