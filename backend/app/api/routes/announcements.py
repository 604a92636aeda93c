"""Announcement endpoints."""

from fastapi import APIRouter, Depends, Request, Response

from backend.app.api.gateway import AuthGateway, get_gateway
from backend.app.api.routes.policies import STAFF_AND_GUARDIANS, STAFF_IN_ORG
from backend.app.handlers.announcements import create_announcement, list_announcements
from backend.app.models.announcements import AnnouncementCreate, AnnouncementQuery

router = APIRouter(prefix="/api/announcements", tags=["announcements"])


@router.get("")
async def announcements_list(
    request: Request, gateway: AuthGateway = Depends(get_gateway)
) -> Response:
    return await gateway.dispatch(
        request,
        STAFF_AND_GUARDIANS,
        list_announcements,
        route="GET /api/announcements",
        query=AnnouncementQuery,
    )


@router.post("")
async def announcements_create(
    request: Request, gateway: AuthGateway = Depends(get_gateway)
) -> Response:
    return await gateway.dispatch(
        request,
        STAFF_IN_ORG,
        create_announcement,
        route="POST /api/announcements",
        body=AnnouncementCreate,
    )
