"""Identity resolution for authenticated routes.

Verifies the hosted auth service's access token (a signed JWT) and builds the
caller's RequestContext from its claims. The organization falls back to the
user's profile row when the token metadata does not carry one, and so do
the roles when the metadata names none.
"""

import logging
import uuid
from collections.abc import Iterable, Mapping
from typing import Any

import jwt
from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError

from backend.app.api.errors import BackendUnavailable, Unauthenticated
from backend.app.config import Settings
from backend.app.db.context import RequestContext
from backend.app.db.repositories import UserDirectory, UserRecord
from backend.app.models.common import Role

logger = logging.getLogger(__name__)

# Metadata keys that may carry the organization, in priority order
ORG_ID_KEYS = ("org_id", "organization_id", "orgId")


def extract_token(request: Request, cookie_name: str) -> str | None:
    """Pull the access token from the Authorization header or session cookie.

    Args:
        request: Incoming request
        cookie_name: Session cookie consulted when no header is present

    Returns:
        Raw token string, or None if the request carries no credentials

    Raises:
        Unauthenticated: If an Authorization header uses a scheme other than Bearer
    """
    authorization = request.headers.get("authorization")
    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            raise Unauthenticated()
        return token.strip()

    token = request.cookies.get(cookie_name)
    return token or None


def parse_roles(values: Iterable[Any]) -> frozenset[Role]:
    """Coerce raw role strings to Role, dropping anything unrecognized."""
    roles: set[Role] = set()
    for value in values:
        try:
            roles.add(Role(value))
        except ValueError:
            logger.warning("Ignoring unknown role in token metadata: %r", value)
    return frozenset(roles)


def roles_from_metadata(metadata: Mapping[str, Any]) -> tuple[frozenset[Role], Role | None]:
    """Resolve assigned roles and the active role from user metadata.

    Returns:
        Tuple of (roles, active_role)
    """
    raw_roles = metadata.get("roles")
    roles = parse_roles(raw_roles) if isinstance(raw_roles, list) else frozenset()

    if not roles:
        single = metadata.get("activeRole") or metadata.get("role")
        if isinstance(single, str):
            roles = parse_roles([single])

    active_role: Role | None = None
    requested = metadata.get("activeRole")
    if isinstance(requested, str) and requested in {role.value for role in roles}:
        active_role = Role(requested)
    elif roles:
        # Stable choice when the metadata does not name one
        active_role = min(roles, key=list(Role).index)

    return roles, active_role


def org_id_from_metadata(metadata: Mapping[str, Any]) -> uuid.UUID | None:
    for key in ORG_ID_KEYS:
        value = metadata.get(key)
        if not value:
            continue
        try:
            return uuid.UUID(str(value))
        except ValueError:
            logger.warning("Ignoring malformed %s in token metadata", key)
    return None


class IdentityResolver:
    """Build a RequestContext from request credentials.

    A fresh context is resolved on every request; nothing is cached.
    """

    def __init__(self, settings: Settings, directory: UserDirectory | None = None) -> None:
        self._settings = settings
        self._directory = directory

    def decode(self, token: str) -> dict[str, Any]:
        """Verify a token's signature, expiry and audience.

        Args:
            token: Raw JWT

        Returns:
            Verified claims

        Raises:
            BackendUnavailable: If no signing secret is configured
            Unauthenticated: If the token fails verification
        """
        if not self._settings.supabase_jwt_secret:
            logger.error("SUPABASE_JWT_SECRET is not set; cannot verify access tokens")
            raise BackendUnavailable("Authentication is not configured")

        try:
            return jwt.decode(
                token,
                self._settings.supabase_jwt_secret,
                algorithms=self._settings.jwt_algorithms,
                audience=self._settings.jwt_audience,
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            logger.info("Rejected expired access token")
            raise Unauthenticated() from None
        except jwt.InvalidTokenError as e:
            logger.info("Rejected invalid access token: %s", e)
            raise Unauthenticated() from None

    async def resolve(self, request: Request) -> RequestContext:
        """Resolve the caller identity for a request.

        Raises:
            Unauthenticated: If credentials are missing or invalid
            BackendUnavailable: If token verification is not configured
        """
        token = extract_token(request, self._settings.auth_cookie_name)
        if token is None:
            raise Unauthenticated()

        claims = self.decode(token)

        try:
            user_id = uuid.UUID(str(claims["sub"]))
        except (KeyError, ValueError):
            raise Unauthenticated() from None

        metadata = claims.get("user_metadata")
        if not isinstance(metadata, dict):
            metadata = {}

        roles, active_role = roles_from_metadata(metadata)
        org_id = org_id_from_metadata(metadata)
        email = claims.get("email")
        email = email if isinstance(email, str) else None

        if org_id is None or not roles:
            profile = await self._lookup_profile(user_id)
            if profile is not None:
                if org_id is None:
                    org_id = profile.org_id
                if not roles:
                    roles, active_role = roles_from_metadata({"role": profile.role})
                email = email or profile.email

        return RequestContext(
            user_id=user_id,
            org_id=org_id,
            roles=roles,
            active_role=active_role,
            email=email,
        )

    async def _lookup_profile(self, user_id: uuid.UUID) -> UserRecord | None:
        if self._directory is None:
            return None
        try:
            return await self._directory.get_user(user_id)
        except SQLAlchemyError:
            logger.exception("Profile lookup failed for user %s", user_id)
            return None
