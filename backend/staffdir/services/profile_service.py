from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from staffdir.core.config import settings
from staffdir.models.employee import DetailsForm, ProfileForm
from staffdir.services.directory_client import directory_client, record_identity
from staffdir.services.record_cache import Facet, RecordCache
from staffdir.services.record_mutator import MutationError, RecordMutator
from staffdir.services.validation import (
    RecordValidationError,
    build_details_payload,
    build_profile_payload,
    validate_profile,
)

logger = logging.getLogger(__name__)


class SaveInProgressError(MutationError):
    pass


class ProfileService:
    """Saves the logged-in user's own record, one facet at a time.

    Each save is validate, write, confirm, merge. The session's cache only
    changes after a confirmed read-back, and only for the saved facet's keys.
    """

    def __init__(self, mutator: RecordMutator) -> None:
        self.mutator = mutator
        self._in_flight: set[str] = set()

    @contextmanager
    def _exclusive(self, record_id: str) -> Iterator[None]:
        if record_id in self._in_flight:
            raise SaveInProgressError(f"A save for {record_id} is already in progress")
        self._in_flight.add(record_id)
        try:
            yield
        finally:
            self._in_flight.discard(record_id)

    async def save_profile(
        self,
        form: ProfileForm,
        cache: RecordCache,
        original_id: str | None = None,
    ) -> dict[str, Any]:
        validate_profile(form)
        target = (original_id or record_identity(cache.get())).strip()
        if not target:
            raise RecordValidationError({"empid": "Missing original employee ID."}, "Missing original employee ID.")

        payload = build_profile_payload(form)
        with self._exclusive(target):
            result = await self.mutator.save(target, payload, confirm_id=payload["empid"])

        merged = cache.merge_facet(result.record, Facet.PROFILE)
        logger.info("Profile of %s saved and confirmed", payload["empid"])
        return merged

    async def save_details(
        self,
        form: DetailsForm,
        cache: RecordCache,
        record_id: str | None = None,
    ) -> dict[str, Any]:
        target = (record_id or record_identity(cache.get())).strip()
        payload = build_details_payload(form)
        with self._exclusive(target):
            result = await self.mutator.save(target, payload)

        merged = cache.merge_facet(result.record, Facet.DETAILS)
        logger.info("Details of %s saved and confirmed", target)
        return merged


record_mutator = RecordMutator(directory_client, settings.MAX_WINDOW_DAYS)
profile_service = ProfileService(record_mutator)
