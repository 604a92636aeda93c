"""Student endpoints."""

from fastapi import APIRouter, Depends, Request, Response

from backend.app.api.gateway import AuthGateway, get_gateway
from backend.app.api.routes.policies import STAFF_IN_ORG
from backend.app.handlers.students import (
    create_student,
    delete_student,
    list_students,
    update_student,
)
from backend.app.models.students import (
    StudentCreate,
    StudentDeleteQuery,
    StudentQuery,
    StudentUpdate,
)

router = APIRouter(prefix="/api/students", tags=["students"])


@router.get("")
async def students_list(
    request: Request, gateway: AuthGateway = Depends(get_gateway)
) -> Response:
    return await gateway.dispatch(
        request, STAFF_IN_ORG, list_students, route="GET /api/students", query=StudentQuery
    )


@router.post("")
async def students_create(
    request: Request, gateway: AuthGateway = Depends(get_gateway)
) -> Response:
    return await gateway.dispatch(
        request, STAFF_IN_ORG, create_student, route="POST /api/students", body=StudentCreate
    )


@router.put("")
async def students_update(
    request: Request, gateway: AuthGateway = Depends(get_gateway)
) -> Response:
    return await gateway.dispatch(
        request, STAFF_IN_ORG, update_student, route="PUT /api/students", body=StudentUpdate
    )


@router.delete("")
async def students_delete(
    request: Request, gateway: AuthGateway = Depends(get_gateway)
) -> Response:
    return await gateway.dispatch(
        request,
        STAFF_IN_ORG,
        delete_student,
        route="DELETE /api/students",
        query=StudentDeleteQuery,
    )
