"""Messaging endpoints."""

from fastapi import APIRouter, Depends, Request, Response

from backend.app.api.gateway import AuthGateway, get_gateway
from backend.app.api.routes.policies import STAFF_AND_GUARDIANS
from backend.app.handlers.messages import (
    delete_thread,
    list_items,
    list_threads,
    post_item,
    start_thread,
    update_thread,
)
from backend.app.models.messages import (
    MessageCreate,
    MessageDeleteQuery,
    MessageItemCreate,
    MessageItemQuery,
    MessageUpdate,
)

router = APIRouter(prefix="/api/messages", tags=["messages"])


@router.get("")
async def threads_list(request: Request, gateway: AuthGateway = Depends(get_gateway)) -> Response:
    return await gateway.dispatch(
        request, STAFF_AND_GUARDIANS, list_threads, route="GET /api/messages"
    )


@router.post("")
async def threads_start(request: Request, gateway: AuthGateway = Depends(get_gateway)) -> Response:
    """Start a thread; an existing one-to-one thread is returned with 200."""
    return await gateway.dispatch(
        request, STAFF_AND_GUARDIANS, start_thread, route="POST /api/messages", body=MessageCreate
    )


@router.put("")
async def threads_update(request: Request, gateway: AuthGateway = Depends(get_gateway)) -> Response:
    return await gateway.dispatch(
        request, STAFF_AND_GUARDIANS, update_thread, route="PUT /api/messages", body=MessageUpdate
    )


@router.delete("")
async def threads_delete(request: Request, gateway: AuthGateway = Depends(get_gateway)) -> Response:
    return await gateway.dispatch(
        request,
        STAFF_AND_GUARDIANS,
        delete_thread,
        route="DELETE /api/messages",
        query=MessageDeleteQuery,
    )


@router.get("/{message_id}/items")
async def items_list(
    message_id: str, request: Request, gateway: AuthGateway = Depends(get_gateway)
) -> Response:
    return await gateway.dispatch(
        request,
        STAFF_AND_GUARDIANS,
        list_items,
        message_id,
        route="GET /api/messages/{id}/items",
        query=MessageItemQuery,
    )


@router.post("/{message_id}/items")
async def items_post(
    message_id: str, request: Request, gateway: AuthGateway = Depends(get_gateway)
) -> Response:
    return await gateway.dispatch(
        request,
        STAFF_AND_GUARDIANS,
        post_item,
        message_id,
        route="POST /api/messages/{id}/items",
        body=MessageItemCreate,
    )
