from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status

from staffdir.core.dependencies import get_current_user
from staffdir.models.employee import DirectoryQuery, EmployeeCard, QueryRange
from staffdir.services.directory_client import DirectoryUnavailableError
from staffdir.services.employee_service import employee_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["employees"])


@router.get("", response_model=list[EmployeeCard])
async def list_employees(
    q: str = "",
    availability: str = Query("All", alias="status"),
    window: QueryRange = Query(QueryRange.ANY, alias="range"),
    user: dict[str, Any] = Depends(get_current_user),  # noqa: B008
):
    query = DirectoryQuery(search=q, status=availability, range=window)
    try:
        return await employee_service.get_employees(query)
    except DirectoryUnavailableError as err:
        logger.error("Failed to list employees: %s", err)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to load employees: {err}",
        ) from err


@router.get("/{record_id}", response_model=EmployeeCard)
async def get_employee(
    record_id: str,
    user: dict[str, Any] = Depends(get_current_user),  # noqa: B008
):
    try:
        employee = await employee_service.get_employee(record_id)
    except Exception as err:
        logger.exception("Failed to get employee %s", record_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve employee",
        ) from err

    if not employee:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Employee '{record_id}' not found",
        )
    return employee
