from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status

from staffdir.core.dependencies import get_current_user, get_record_cache
from staffdir.models.employee import DetailsForm, ProfileForm
from staffdir.services.directory_client import record_identity
from staffdir.services.employee_service import CancellationToken, employee_service
from staffdir.services.profile_service import SaveInProgressError, profile_service
from staffdir.services.record_cache import Facet, RecordCache, project_facet
from staffdir.services.record_mutator import ConfirmationError, TransportError
from staffdir.services.validation import RecordValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/me", tags=["me"])

DISCONNECT_POLL_SECONDS = 0.1


def _save_failed(err: Exception) -> HTTPException:
    if isinstance(err, RecordValidationError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": str(err), "fields": err.field_errors},
        )
    if isinstance(err, SaveInProgressError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(err))
    if isinstance(err, ConfirmationError):
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Saved, but the server copy could not be confirmed: {err}",
        )
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Save failed: {err}")


async def _cancel_on_disconnect(request: Request, token: CancellationToken) -> None:
    while not token.cancelled:
        if await request.is_disconnected():
            token.cancel()
            return
        await asyncio.sleep(DISCONNECT_POLL_SECONDS)


async def _hydrated_facet(request: Request, user: dict[str, Any], facet: Facet) -> dict[str, Any]:
    """The cached facet with its empty fields filled from the server copy."""
    token = CancellationToken()
    watcher = asyncio.create_task(_cancel_on_disconnect(request, token))
    try:
        return await employee_service.hydrate(record_identity(user), project_facet(user, facet), facet, token)
    finally:
        watcher.cancel()


@router.get("/profile")
async def get_profile(
    request: Request,
    user: dict[str, Any] = Depends(get_current_user),  # noqa: B008
):
    return await _hydrated_facet(request, user, Facet.PROFILE)


@router.get("/details")
async def get_details(
    request: Request,
    user: dict[str, Any] = Depends(get_current_user),  # noqa: B008
):
    return await _hydrated_facet(request, user, Facet.DETAILS)


@router.put("/profile")
async def save_profile(
    form: ProfileForm,
    user: dict[str, Any] = Depends(get_current_user),  # noqa: B008
    cache: RecordCache = Depends(get_record_cache),  # noqa: B008
):
    try:
        return await profile_service.save_profile(form, cache)
    except (RecordValidationError, SaveInProgressError, ConfirmationError, TransportError) as err:
        logger.warning("Profile save failed: %s", err)
        raise _save_failed(err) from err


@router.put("/details")
async def save_details(
    form: DetailsForm,
    user: dict[str, Any] = Depends(get_current_user),  # noqa: B008
    cache: RecordCache = Depends(get_record_cache),  # noqa: B008
):
    try:
        return await profile_service.save_details(form, cache)
    except (RecordValidationError, SaveInProgressError, ConfirmationError, TransportError) as err:
        logger.warning("Details save failed: %s", err)
        raise _save_failed(err) from err
