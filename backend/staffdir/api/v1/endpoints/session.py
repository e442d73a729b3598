from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from staffdir.core.dependencies import get_current_user, get_session_token
from staffdir.models.auth import LoginRequest, LoginResult, SignupRequest
from staffdir.services.session_service import AuthenticationError, session_service
from staffdir.services.validation import RecordValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/session", tags=["session"])


@router.post("/login", response_model=LoginResult)
async def login(request: LoginRequest):
    try:
        return await session_service.login(request)
    except RecordValidationError as err:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": str(err), "fields": err.field_errors},
        ) from err
    except AuthenticationError as err:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(err)) from err


@router.post("/signup")
async def signup(request: SignupRequest):
    try:
        message = await session_service.signup(request)
    except RecordValidationError as err:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": str(err), "fields": err.field_errors},
        ) from err
    except AuthenticationError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err
    return {"message": message}


@router.post("/logout")
async def logout(token: str = Depends(get_session_token)):  # noqa: B008
    session_service.logout(token)
    return {"status": "ok"}


@router.get("/me")
async def current_user(user: dict[str, Any] = Depends(get_current_user)):  # noqa: B008
    return user
