"""Write-and-confirm protocol for record updates.

A save walks a fixed sequence of steps::

    PUT /employees/{id} -> PATCH /employees/{id} -> POST /employees -> FAILED
    first 2xx write     -> CONFIRM -> SUCCEEDED | FAILED

The first 2xx write moves to CONFIRM. A network failure counts the same as a
non-2xx status. There are no retries beyond the chain. CONFIRM reads the
record back by id once, falling back to a scan of the whole collection, and
the record it finds is the authoritative result of the save.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any

from pydantic import BaseModel

from staffdir.services.date_window import MAX_WINDOW_DAYS
from staffdir.services.directory_client import (
    DirectoryClient,
    HttpAttempt,
    employee_path,
    record_identity,
    single_record,
)
from staffdir.services.validation import validate_write

logger = logging.getLogger(__name__)


class MutationStep(str, Enum):
    PUT = "PUT"
    PATCH = "PATCH"
    POST = "POST"
    CONFIRM = "CONFIRM"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


_NEXT_ON_WRITE_FAILURE: dict[MutationStep, MutationStep] = {
    MutationStep.PUT: MutationStep.PATCH,
    MutationStep.PATCH: MutationStep.POST,
    MutationStep.POST: MutationStep.FAILED,
}


class MutationError(Exception):
    def __init__(self, message: str, attempts: list[HttpAttempt] | None = None) -> None:
        super().__init__(message)
        self.attempts = attempts or []


class TransportError(MutationError):
    def __init__(self, last: HttpAttempt, attempts: list[HttpAttempt]) -> None:
        status = last.status if last.status is not None else last.error
        body = json.dumps(last.body, default=str)
        super().__init__(f"All update attempts failed. Last status: {status}. Body: {body}", attempts)
        self.status = last.status
        self.body = last.body


class ConfirmationError(MutationError):
    pass


class MutationResult(BaseModel):
    record: dict[str, Any]
    attempts: list[HttpAttempt]
    steps: list[MutationStep]


class RecordMutator:
    def __init__(self, client: DirectoryClient, max_window_days: int = MAX_WINDOW_DAYS) -> None:
        self.client = client
        self.max_window_days = max_window_days

    async def save(
        self,
        record_id: str,
        payload: dict[str, Any],
        confirm_id: str | None = None,
    ) -> MutationResult:
        """Write ``payload`` to ``record_id`` and return the confirmed server record.

        ``confirm_id`` is the identity to read back when the write renames
        the record; the original id is still accepted in the collection scan.
        """
        validate_write(record_id, payload, self.max_window_days)
        record_id = str(record_id).strip()
        confirm_target = str(confirm_id).strip() if confirm_id else record_id

        attempts: list[HttpAttempt] = []
        steps: list[MutationStep] = []
        step = MutationStep.PUT

        while True:
            steps.append(step)
            if step == MutationStep.CONFIRM:
                record = await self._confirm(record_id, confirm_target, attempts)
                if record is None:
                    steps.append(MutationStep.FAILED)
                    logger.error("Write to %s succeeded but the record could not be read back", record_id)
                    raise ConfirmationError("Could not fetch record after save — check backend.", attempts)
                steps.append(MutationStep.SUCCEEDED)
                return MutationResult(record=record, attempts=attempts, steps=steps)

            attempt = await self._write(step, record_id, payload)
            attempts.append(attempt)
            if attempt.ok:
                step = MutationStep.CONFIRM
                continue

            step = _NEXT_ON_WRITE_FAILURE[step]
            if step == MutationStep.FAILED:
                steps.append(step)
                logger.error("All update attempts for %s failed (last status %s)", record_id, attempt.status)
                raise TransportError(attempt, attempts)
            logger.warning("%s %s failed; trying %s", attempt.method, attempt.url, step.value)

    async def _write(self, step: MutationStep, record_id: str, payload: dict[str, Any]) -> HttpAttempt:
        if step == MutationStep.POST:
            attempt = await self.client.request(step.value, employee_path(), {"empid": record_id, **payload})
        else:
            attempt = await self.client.request(step.value, employee_path(record_id), payload)
        logger.info("%s %s -> %s %s", attempt.method, attempt.url, attempt.status, attempt.body)
        return attempt

    async def _confirm(
        self,
        record_id: str,
        confirm_target: str,
        attempts: list[HttpAttempt],
    ) -> dict[str, Any] | None:
        by_id = await self.client.get_employee(confirm_target)
        attempts.append(by_id)
        if by_id.ok:
            record = single_record(by_id.body, confirm_target)
            if record is not None:
                return record

        logger.info("Confirmation read for %s inconclusive (%s); scanning collection", confirm_target, by_id.status)
        listing = await self.client.request("GET", employee_path())
        attempts.append(listing)
        if not listing.ok or not isinstance(listing.body, list):
            return None

        candidates = [item for item in listing.body if isinstance(item, dict)]
        for wanted in dict.fromkeys((confirm_target, record_id)):
            for item in candidates:
                if record_identity(item) == wanted:
                    return item
        return None
