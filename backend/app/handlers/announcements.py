"""Announcement handlers."""

from typing import Any

from fastapi.responses import JSONResponse
from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.context import RequestContext
from backend.app.db.models import Announcement
from backend.app.db.queries import select_announcements
from backend.app.handlers.scope import is_guardian_only, require_class
from backend.app.handlers.serializers import created, serialize_announcement
from backend.app.models.announcements import AnnouncementCreate, AnnouncementQuery


async def list_announcements(
    ctx: RequestContext, session: AsyncSession, query: AnnouncementQuery
) -> dict[str, Any]:
    """List announcements, newest first.

    A class filter also includes organization-wide announcements. Guardians
    and parents only see public announcements.
    """
    stmt = select_announcements(ctx)
    if query.class_id is not None:
        stmt = stmt.where(
            or_(Announcement.class_id == query.class_id, Announcement.class_id.is_(None))
        )
    if is_guardian_only(ctx):
        stmt = stmt.where(Announcement.is_public.is_(True))

    result = await session.scalars(
        stmt.order_by(Announcement.created_at.desc()).limit(query.limit)
    )
    return {"announcements": [serialize_announcement(a) for a in result]}


async def create_announcement(
    ctx: RequestContext, session: AsyncSession, body: AnnouncementCreate
) -> JSONResponse:
    """Post an announcement to the organization or one of its classes."""
    await require_class(ctx, session, body.class_id)

    announcement = Announcement(
        org_id=ctx.org_id,
        class_id=body.class_id,
        author_id=ctx.user_id,
        title=body.title,
        body=body.body,
        week_start=body.week_start,
        is_public=body.is_public,
    )
    session.add(announcement)
    await session.commit()
    await session.refresh(announcement)

    return created({"announcement": serialize_announcement(announcement)})
