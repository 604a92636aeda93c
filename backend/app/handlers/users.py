"""User lookup handlers."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.api.errors import NotFound
from backend.app.db.context import RequestContext
from backend.app.db.models import User
from backend.app.models.users import UserOrgIdQuery


async def lookup_user_org_id(session: AsyncSession, query: UserOrgIdQuery) -> dict[str, Any]:
    """Return the organization of a user.

    Args:
        session: Privileged database session
        query: Validated query with the user id

    Returns:
        ``{"org_id": ...}``; org_id may be null for users outside any org

    Raises:
        NotFound: If no such user exists
    """
    user = await session.scalar(
        select(User).where(User.id == query.user_id, User.deleted_at.is_(None))
    )
    if user is None:
        raise NotFound("User not found")
    return {"org_id": user.org_id}


async def get_user_context(ctx: RequestContext, session: AsyncSession) -> dict[str, Any]:
    """Echo the caller's resolved identity."""
    return {
        "userId": ctx.user_id,
        "orgId": ctx.org_id,
        "roles": sorted(role.value for role in ctx.roles),
        "activeRole": ctx.active_role.value if ctx.active_role else None,
    }
