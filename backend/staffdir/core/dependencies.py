from __future__ import annotations

import logging
from typing import Any

from fastapi import Depends, Header, HTTPException, status

from staffdir.services.record_cache import RecordCache, session_store

logger = logging.getLogger(__name__)


def get_session_token(authorization: str | None = Header(None)) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not logged in",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return authorization.split(" ", 1)[1].strip()


def get_record_cache(token: str = Depends(get_session_token)) -> RecordCache:  # noqa: B008
    cache = session_store.get(token)
    if cache is None:
        logger.debug("Rejected unknown session token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired or unknown",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return cache


def get_current_user(cache: RecordCache = Depends(get_record_cache)) -> dict[str, Any]:  # noqa: B008
    user = cache.get()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not logged in",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
