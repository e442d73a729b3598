from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from staffdir.api.v1.router import api_router
from staffdir.core.config import settings
from staffdir.services.directory_client import directory_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    try:
        await directory_client.initialize(settings)
    except Exception:
        logger.exception("Failed to initialize DirectoryClient — continuing without the remote store")
    yield
    await directory_client.close()


app = FastAPI(
    title="Staff Directory API",
    description="Employee directory with availability filtering and confirmed profile updates",
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/")
async def root():
    return {"message": "Staff Directory API"}
