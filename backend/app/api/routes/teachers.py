"""Teacher endpoints."""

from fastapi import APIRouter, Depends, Request, Response

from backend.app.api.gateway import AuthGateway, get_gateway
from backend.app.api.routes.policies import LEADERSHIP
from backend.app.handlers.teachers import get_teacher_details

router = APIRouter(prefix="/api/teachers", tags=["teachers"])


@router.get("/{teacher_id}")
async def teacher_details(
    teacher_id: str, request: Request, gateway: AuthGateway = Depends(get_gateway)
) -> Response:
    """Teacher profile with assigned classes and student counts."""
    return await gateway.dispatch(
        request, LEADERSHIP, get_teacher_details, teacher_id, route="GET /api/teachers/{id}"
    )
