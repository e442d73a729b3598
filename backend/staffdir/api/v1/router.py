from fastapi import APIRouter

from staffdir.api.v1.endpoints import employees, health, me, session

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health.router)
api_router.include_router(session.router)
api_router.include_router(employees.router)
api_router.include_router(me.router)
