"""Organization endpoints (platform admins, no org membership required)."""

from fastapi import APIRouter, Depends, Request, Response

from backend.app.api.gateway import AuthGateway, get_gateway
from backend.app.api.routes.policies import ADMIN_ONLY
from backend.app.handlers.orgs import (
    create_org,
    delete_org,
    get_org_details,
    list_orgs,
    update_org,
)
from backend.app.models.orgs import OrgCreate, OrgDeleteQuery, OrgListQuery, OrgUpdate

router = APIRouter(prefix="/api/orgs", tags=["orgs"])


@router.get("")
async def orgs_list(request: Request, gateway: AuthGateway = Depends(get_gateway)) -> Response:
    return await gateway.dispatch(
        request, ADMIN_ONLY, list_orgs, route="GET /api/orgs", query=OrgListQuery
    )


@router.post("")
async def orgs_create(request: Request, gateway: AuthGateway = Depends(get_gateway)) -> Response:
    return await gateway.dispatch(
        request, ADMIN_ONLY, create_org, route="POST /api/orgs", body=OrgCreate
    )


@router.put("")
async def orgs_update(request: Request, gateway: AuthGateway = Depends(get_gateway)) -> Response:
    return await gateway.dispatch(
        request, ADMIN_ONLY, update_org, route="PUT /api/orgs", body=OrgUpdate
    )


@router.delete("")
async def orgs_delete(request: Request, gateway: AuthGateway = Depends(get_gateway)) -> Response:
    """Soft-delete an organization."""
    return await gateway.dispatch(
        request, ADMIN_ONLY, delete_org, route="DELETE /api/orgs", query=OrgDeleteQuery
    )


@router.get("/{org_id}")
async def org_details(
    org_id: str, request: Request, gateway: AuthGateway = Depends(get_gateway)
) -> Response:
    return await gateway.dispatch(
        request, ADMIN_ONLY, get_org_details, org_id, route="GET /api/orgs/{id}"
    )
