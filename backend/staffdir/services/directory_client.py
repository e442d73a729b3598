from __future__ import annotations

import asyncio
import logging
from typing import Any
from urllib.parse import quote

import aiohttp
from pydantic import BaseModel

from staffdir.core.config import Settings

logger = logging.getLogger(__name__)

EMPLOYEES_PATH = "/api/employees"
LOGIN_PATH = "/api/auth/login"
SIGNUP_PATH = "/api/auth/signup"

UNREADABLE_BODY = "<unreadable response>"

_HEADERS = {"Content-Type": "application/json"}


class DirectoryUnavailableError(Exception):
    pass


class HttpAttempt(BaseModel):
    """One request against the remote store and what came back."""

    method: str
    url: str
    status: int | None = None
    body: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is not None and 200 <= self.status < 300


def record_identity(raw: dict[str, Any]) -> str:
    value = raw.get("empid") or raw.get("id") or ""
    return str(value).strip()


def employee_path(record_id: str | None = None) -> str:
    if record_id is None:
        return EMPLOYEES_PATH
    return f"{EMPLOYEES_PATH}/{quote(str(record_id), safe='')}"


async def _read_body(response: Any) -> Any:
    try:
        if "json" in (response.content_type or ""):
            return await response.json()
        return await response.text()
    except (aiohttp.ClientError, ValueError):
        return UNREADABLE_BODY


class DirectoryClient:
    def __init__(self) -> None:
        self.initialized = False
        self.base_url = ""
        self.timeout = 30.0

    async def initialize(self, settings: Settings) -> None:
        if self.initialized:
            return

        if not settings.DIRECTORY_API_URL:
            logger.warning("Directory API URL missing — DirectoryClient not initialized")
            return

        self.base_url = settings.DIRECTORY_API_URL.rstrip("/")
        self.timeout = settings.DIRECTORY_HTTP_TIMEOUT
        self.initialized = True
        logger.info("DirectoryClient initialized (base_url=%s)", self.base_url)

    async def close(self) -> None:
        self.initialized = False
        self.base_url = ""

    async def request(self, method: str, path: str, payload: dict[str, Any] | None = None) -> HttpAttempt:
        """Send one request; network failures come back as an attempt without a status."""
        if not self.initialized:
            raise RuntimeError("DirectoryClient not initialized")

        url = f"{self.base_url}{path}"
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.request(method, url, headers=_HEADERS, json=payload) as response:
                    body = await _read_body(response)
                    return HttpAttempt(method=method, url=url, status=response.status, body=body)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("%s %s failed to reach the server: %s", method, url, e)
            return HttpAttempt(method=method, url=url, error=str(e) or type(e).__name__)

    async def list_employees(self) -> list[dict[str, Any]]:
        attempt = await self.request("GET", employee_path())
        if not attempt.ok:
            reason = attempt.status if attempt.status is not None else attempt.error
            raise DirectoryUnavailableError(f"HTTP {reason}: Failed to fetch employees")
        if not isinstance(attempt.body, list):
            raise DirectoryUnavailableError("Unexpected list format from employees endpoint")
        return [item for item in attempt.body if isinstance(item, dict)]

    async def get_employee(self, record_id: str) -> HttpAttempt:
        return await self.request("GET", employee_path(record_id))

    async def fetch_employee(self, record_id: str) -> dict[str, Any] | None:
        """Single-record read that tolerates a one-element array body."""
        attempt = await self.get_employee(record_id)
        if not attempt.ok:
            return None
        return single_record(attempt.body, record_id)

    async def check_connection(self) -> bool:
        if not self.initialized:
            return False
        try:
            attempt = await self.request("GET", employee_path())
            return attempt.ok
        except Exception:
            logger.exception("DirectoryClient connection check failed")
            return False


def single_record(body: Any, record_id: str) -> dict[str, Any] | None:
    """Return ``body`` as one record, or None if it is not one.

    A one-element array is accepted only when its identity matches.
    """
    if isinstance(body, dict):
        return body
    if isinstance(body, list) and len(body) == 1 and isinstance(body[0], dict):
        if record_identity(body[0]) == str(record_id):
            return body[0]
    return None


directory_client = DirectoryClient()
