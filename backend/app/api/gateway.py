"""Authenticated-route gateway.

Every resource route is dispatched through ``AuthGateway.dispatch``, which
runs identity resolution, the organization check, the role check and request
validation in that order, stopping at the first failure. Only when all of
them pass does the handler run, once, with the verified identity and a
session on the privileged client.
"""

import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from fastapi import Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from backend.app.api.auth import IdentityResolver
from backend.app.api.error_handlers import error_response
from backend.app.api.errors import (
    ApiError,
    BackendUnavailable,
    Forbidden,
    MissingOrganization,
    Unknown,
)
from backend.app.api.validation import decode_json_body, validate_body, validate_query
from backend.app.db.context import RequestContext
from backend.app.db.engine import AdminClient
from backend.app.models.common import Role
from backend.app.utils.logging import StructuredGatewayLogger
from backend.app.utils.metrics import PrometheusGatewayMetrics

logger = logging.getLogger(__name__)

ADMIN_CLIENT_MISSING = (
    "Admin client not configured. Set DATABASE_URL to the service-role connection string."
)

Handler = Callable[..., Awaitable[dict[str, Any] | Response]]


@dataclass(frozen=True)
class RoutePolicy:
    """Per-route access policy.

    Attributes:
        require_org: Reject callers without an organization
        allowed_roles: Roles permitted on the route; None admits any
            authenticated caller
    """

    require_org: bool = True
    allowed_roles: frozenset[Role] | None = None

    def __post_init__(self) -> None:
        if self.allowed_roles is None:
            return
        # Raises ValueError for strings outside the role vocabulary
        roles = frozenset(Role(role) for role in self.allowed_roles)
        if not roles:
            raise ValueError("allowed_roles must name at least one role (use None for any role)")
        object.__setattr__(self, "allowed_roles", roles)

    @classmethod
    def for_roles(cls, *roles: Role | str, require_org: bool = True) -> "RoutePolicy":
        return cls(require_org=require_org, allowed_roles=frozenset(roles))  # type: ignore[arg-type]


def authorize(ctx: RequestContext, policy: RoutePolicy) -> None:
    """Apply a route policy to a resolved identity.

    The organization check runs first, so a caller without an organization is
    rejected on org-scoped routes whatever roles it holds.

    Raises:
        MissingOrganization: If the route requires an org and the caller has none
        Forbidden: If none of the caller's roles is allowed
    """
    if policy.require_org and ctx.org_id is None:
        raise MissingOrganization()
    if policy.allowed_roles is not None and not ctx.has_any_role(policy.allowed_roles):
        raise Forbidden()


class AuthGateway:
    """Dispatch requests to route handlers behind authentication and authorization."""

    def __init__(
        self,
        resolver: IdentityResolver,
        client: AdminClient | None,
        metrics: PrometheusGatewayMetrics | None = None,
        decision_logger: StructuredGatewayLogger | None = None,
    ) -> None:
        self._resolver = resolver
        self._client = client
        self._metrics = metrics or PrometheusGatewayMetrics()
        self._decisions = decision_logger or StructuredGatewayLogger()

    @property
    def client(self) -> AdminClient | None:
        return self._client

    async def dispatch(
        self,
        request: Request,
        policy: RoutePolicy,
        handler: Handler,
        *params: Any,
        route: str,
        query: type[BaseModel] | None = None,
        body: type[BaseModel] | None = None,
    ) -> Response:
        """Run the access checks and, if they pass, the handler.

        Args:
            request: Incoming request
            policy: Route access policy
            handler: Coroutine called as ``handler(ctx, session, *params, **validated)``
            *params: Path parameters forwarded to the handler
            route: Route label for logs and metrics
            query: Schema for query parameters, passed to the handler as ``query=``
            body: Schema for the JSON body, passed to the handler as ``body=``

        Returns:
            The handler's response, or an error response for the first failed check
        """
        ctx: RequestContext | None = None
        try:
            if self._client is None:
                raise BackendUnavailable(ADMIN_CLIENT_MISSING)

            ctx = await self._resolver.resolve(request)
            authorize(ctx, policy)

            validated: dict[str, BaseModel] = {}
            if query is not None:
                validated["query"] = validate_query(query, request.query_params)
            if body is not None:
                payload = decode_json_body(await request.body())
                validated["body"] = validate_body(body, payload)
        except ApiError as e:
            self._record_decision(route, e.code, ctx, e.message)
            return error_response(e)

        self._record_decision(route, "allowed", ctx)
        return await self._invoke(route, handler, ctx, params, validated)

    async def _invoke(
        self,
        route: str,
        handler: Handler,
        ctx: RequestContext,
        params: tuple[Any, ...],
        validated: dict[str, BaseModel],
    ) -> Response:
        assert self._client is not None
        start = time.perf_counter()
        try:
            async with self._client.session() as session:
                result = await handler(ctx, session, *params, **validated)
            response = self._to_response(result)
        except ApiError as e:
            response = error_response(e)
        except SQLAlchemyError:
            logger.exception("Database request failed on %s", route)
            response = error_response(BackendUnavailable())
        except Exception:
            logger.exception("Unhandled handler error on %s", route)
            response = error_response(Unknown())

        latency_ms = (time.perf_counter() - start) * 1000
        self._metrics.record_latency(route, response.status_code, latency_ms)
        return response

    @staticmethod
    def _to_response(result: dict[str, Any] | Response) -> Response:
        if isinstance(result, Response):
            return result
        return JSONResponse(content=jsonable_encoder(result))

    def _record_decision(
        self,
        route: str,
        outcome: str,
        ctx: RequestContext | None,
        reason: str | None = None,
    ) -> None:
        self._metrics.inc_decision(route, outcome)
        self._decisions.log_decision(route, outcome, ctx=ctx, reason=reason)


def get_gateway(request: Request) -> AuthGateway:
    """FastAPI dependency returning the app's gateway."""
    return request.app.state.gateway
