"""User organization lookup and caller context endpoints."""

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from backend.app.api.error_handlers import error_response
from backend.app.api.errors import ApiError, BackendUnavailable
from backend.app.api.gateway import ADMIN_CLIENT_MISSING, AuthGateway, get_gateway
from backend.app.api.routes.policies import ANY_MEMBER
from backend.app.api.validation import validate_query
from backend.app.handlers.users import get_user_context, lookup_user_org_id
from backend.app.models.users import UserOrgIdQuery

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["users"])


@router.get("/user-org-id")
async def user_org_id(
    request: Request, gateway: AuthGateway = Depends(get_gateway)
) -> Response:
    """Look up a user's organization.

    Called during sign-in before a session exists, so it is not behind the
    authenticated gateway.
    """
    try:
        if gateway.client is None:
            raise BackendUnavailable(ADMIN_CLIENT_MISSING)
        query = validate_query(UserOrgIdQuery, request.query_params)
        async with gateway.client.session() as session:
            result = await lookup_user_org_id(session, query)
    except ApiError as e:
        return error_response(e)
    except SQLAlchemyError:
        logger.exception("User organization lookup failed")
        return error_response(BackendUnavailable())

    return JSONResponse(content=jsonable_encoder(result))


@router.get("/auth/user-context")
async def user_context(
    request: Request, gateway: AuthGateway = Depends(get_gateway)
) -> Response:
    """Return the caller's resolved identity."""
    return await gateway.dispatch(
        request, ANY_MEMBER, get_user_context, route="GET /api/auth/user-context"
    )
