"""Organization handlers (admin only)."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from fastapi.responses import JSONResponse
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.api.errors import NotFound, ValidationFailed
from backend.app.api.validation import parse_resource_id
from backend.app.db.context import RequestContext
from backend.app.db.models import Org, Student, User
from backend.app.handlers.serializers import created, serialize_org
from backend.app.models.common import UUID_RE, Role
from backend.app.models.orgs import OrgCreate, OrgDeleteQuery, OrgListQuery, OrgUpdate

logger = logging.getLogger(__name__)


def parse_id_list(raw: str | None) -> list[uuid.UUID]:
    """Parse a comma-separated id list, skipping blanks and malformed entries."""
    ids: list[uuid.UUID] = []
    for part in (raw or "").split(","):
        part = part.strip()
        if not part:
            continue
        if UUID_RE.fullmatch(part):
            ids.append(uuid.UUID(part))
        else:
            logger.debug("Skipping malformed org id %r", part)
    return ids


async def list_orgs(
    ctx: RequestContext, session: AsyncSession, query: OrgListQuery
) -> dict[str, Any]:
    """List organizations, newest first.

    With ``ids`` the listing is restricted to those organizations.
    """
    stmt = select(Org).where(Org.deleted_at.is_(None))
    ids = parse_id_list(query.ids)
    if ids:
        stmt = stmt.where(Org.id.in_(ids))

    total = await session.scalar(select(func.count()).select_from(stmt.subquery())) or 0
    result = await session.scalars(
        stmt.order_by(Org.created_at.desc(), Org.name)
        .offset((query.page - 1) * query.page_size)
        .limit(query.page_size)
    )

    return {
        "orgs": [serialize_org(org) for org in result],
        "page": query.page,
        "pageSize": query.page_size,
        "total": total,
    }


async def _count_users(session: AsyncSession, org_id: uuid.UUID, role: Role) -> int:
    count = await session.scalar(
        select(func.count(User.id)).where(
            User.org_id == org_id,
            User.role == role.value,
            User.deleted_at.is_(None),
        )
    )
    return count or 0


async def get_org_details(
    ctx: RequestContext, session: AsyncSession, org_id: str
) -> dict[str, Any]:
    """Return an organization with member counts.

    Raises:
        ValidationFailed: If the id is not a UUID
        NotFound: If no such organization exists
    """
    parsed_id = parse_resource_id(org_id, "Invalid organization ID")

    org = await session.scalar(select(Org).where(Org.id == parsed_id, Org.deleted_at.is_(None)))
    if org is None:
        raise NotFound("Organization not found")

    students = await session.scalar(
        select(func.count(Student.id)).where(
            Student.org_id == parsed_id, Student.deleted_at.is_(None)
        )
    )
    metrics = {
        "students": students or 0,
        "teachers": await _count_users(session, parsed_id, Role.teacher),
        "parents": await _count_users(session, parsed_id, Role.guardian),
        "principals": await _count_users(session, parsed_id, Role.principal),
    }
    metrics["totalUsers"] = sum(metrics.values())

    return {"org": {**serialize_org(org), "metrics": metrics}}


async def _ensure_slug_free(
    session: AsyncSession, slug: str, exclude: uuid.UUID | None = None
) -> None:
    # Slugs stay reserved by soft-deleted organizations
    stmt = select(Org.id).where(Org.slug == slug)
    if exclude is not None:
        stmt = stmt.where(Org.id != exclude)
    if await session.scalar(stmt) is not None:
        raise ValidationFailed("Slug already in use")


async def _live_org(session: AsyncSession, org_id: uuid.UUID) -> Org:
    org = await session.scalar(select(Org).where(Org.id == org_id, Org.deleted_at.is_(None)))
    if org is None:
        raise NotFound("Organization not found")
    return org


async def create_org(ctx: RequestContext, session: AsyncSession, body: OrgCreate) -> JSONResponse:
    """Create an organization.

    Raises:
        ValidationFailed: If the slug is taken
    """
    await _ensure_slug_free(session, body.slug)

    org = Org(
        name=body.name,
        slug=body.slug,
        timezone=body.timezone,
        email=body.email,
        phone=body.phone,
    )
    session.add(org)
    await session.commit()
    await session.refresh(org)

    logger.info("Created organization %s (%s)", org.id, org.slug)
    return created({"org": serialize_org(org)})


async def update_org(ctx: RequestContext, session: AsyncSession, body: OrgUpdate) -> dict[str, Any]:
    """Update the fields present in the body.

    ``name``, ``slug`` and ``timezone`` cannot be cleared; ``email`` and
    ``phone`` can.

    Raises:
        NotFound: If the organization does not exist
        ValidationFailed: If the new slug is taken
    """
    org = await _live_org(session, body.id)
    fields = body.model_fields_set

    if body.slug is not None and body.slug != org.slug:
        await _ensure_slug_free(session, body.slug, exclude=org.id)
    for name in ("name", "slug", "timezone"):
        value = getattr(body, name)
        if name in fields and value is not None:
            setattr(org, name, value)
    for name in ("email", "phone"):
        if name in fields:
            setattr(org, name, getattr(body, name))

    await session.commit()
    await session.refresh(org)
    return {"org": serialize_org(org)}


async def delete_org(
    ctx: RequestContext, session: AsyncSession, query: OrgDeleteQuery
) -> dict[str, Any]:
    """Soft-delete an organization and mark it inactive."""
    org = await _live_org(session, query.id)
    org.deleted_at = datetime.now(timezone.utc)
    org.is_active = False
    await session.commit()

    logger.info("Deleted organization %s", org.id)
    return {"success": True}
