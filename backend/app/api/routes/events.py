"""Calendar event endpoints."""

from fastapi import APIRouter, Depends, Request, Response

from backend.app.api.gateway import AuthGateway, get_gateway
from backend.app.api.routes.policies import SCHOOL_MEMBERS, STAFF_IN_ORG
from backend.app.handlers.events import create_event, list_events
from backend.app.models.events import EventCreate, EventQuery

router = APIRouter(prefix="/api/events", tags=["events"])


@router.get("")
async def events_list(request: Request, gateway: AuthGateway = Depends(get_gateway)) -> Response:
    return await gateway.dispatch(
        request, SCHOOL_MEMBERS, list_events, route="GET /api/events", query=EventQuery
    )


@router.post("")
async def events_create(request: Request, gateway: AuthGateway = Depends(get_gateway)) -> Response:
    return await gateway.dispatch(
        request, STAFF_IN_ORG, create_event, route="POST /api/events", body=EventCreate
    )
