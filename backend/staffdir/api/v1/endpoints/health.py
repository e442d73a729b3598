from __future__ import annotations

from fastapi import APIRouter

from staffdir.core.config import settings
from staffdir.services.directory_client import directory_client

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check():
    services: dict[str, str] = {}

    try:
        if directory_client.initialized:
            ok = await directory_client.check_connection()
            services["directory_api"] = "ok" if ok else "error"
        else:
            services["directory_api"] = "not_configured"
    except Exception:
        services["directory_api"] = "error"

    all_ok = all(v in ("ok", "not_configured") for v in services.values())

    return {
        "status": "healthy" if all_ok else "degraded",
        "version": settings.APP_VERSION,
        "services": services,
    }


@router.get("/ready")
async def readiness_probe():
    return {"ready": True}
