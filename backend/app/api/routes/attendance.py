"""Attendance endpoints."""

from fastapi import APIRouter, Depends, Request, Response

from backend.app.api.gateway import AuthGateway, get_gateway
from backend.app.api.routes.policies import STAFF_AND_GUARDIANS, STAFF_AND_GUARDIANS_ANY_ORG
from backend.app.handlers.attendance import (
    delete_attendance,
    list_attendance,
    save_attendance,
    save_attendance_batch,
    update_attendance,
)
from backend.app.models.attendance import (
    AttendanceBatchCreate,
    AttendanceCreate,
    AttendanceDeleteQuery,
    AttendanceQuery,
    AttendanceUpdate,
)

router = APIRouter(prefix="/api/attendance", tags=["attendance"])


@router.get("")
async def attendance_list(
    request: Request, gateway: AuthGateway = Depends(get_gateway)
) -> Response:
    return await gateway.dispatch(
        request,
        STAFF_AND_GUARDIANS,
        list_attendance,
        route="GET /api/attendance",
        query=AttendanceQuery,
    )


@router.post("")
async def attendance_save(
    request: Request, gateway: AuthGateway = Depends(get_gateway)
) -> Response:
    return await gateway.dispatch(
        request,
        STAFF_AND_GUARDIANS,
        save_attendance,
        route="POST /api/attendance",
        body=AttendanceCreate,
    )


@router.post("/batch")
async def attendance_save_batch(
    request: Request, gateway: AuthGateway = Depends(get_gateway)
) -> Response:
    return await gateway.dispatch(
        request,
        STAFF_AND_GUARDIANS,
        save_attendance_batch,
        route="POST /api/attendance/batch",
        body=AttendanceBatchCreate,
    )


@router.put("")
async def attendance_update(
    request: Request, gateway: AuthGateway = Depends(get_gateway)
) -> Response:
    """Update a record; callers without an organization may update any record."""
    return await gateway.dispatch(
        request,
        STAFF_AND_GUARDIANS_ANY_ORG,
        update_attendance,
        route="PUT /api/attendance",
        body=AttendanceUpdate,
    )


@router.delete("")
async def attendance_delete(
    request: Request, gateway: AuthGateway = Depends(get_gateway)
) -> Response:
    return await gateway.dispatch(
        request,
        STAFF_AND_GUARDIANS,
        delete_attendance,
        route="DELETE /api/attendance",
        query=AttendanceDeleteQuery,
    )
