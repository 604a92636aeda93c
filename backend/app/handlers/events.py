"""Calendar event handlers."""

from datetime import datetime, time, timedelta, timezone
from typing import Any

from fastapi.responses import JSONResponse
from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.context import RequestContext
from backend.app.db.models import Event
from backend.app.db.queries import select_events
from backend.app.handlers.scope import require_class
from backend.app.handlers.serializers import created, serialize_event
from backend.app.models.events import EventCreate, EventQuery


def _as_utc(value: datetime | None) -> datetime | None:
    return value.astimezone(timezone.utc) if value is not None else None


async def list_events(
    ctx: RequestContext, session: AsyncSession, query: EventQuery
) -> dict[str, Any]:
    """List events ordered by start time.

    ``from`` and ``to`` are inclusive calendar dates (UTC).
    """
    stmt = select_events(ctx)
    if query.class_id is not None:
        stmt = stmt.where(or_(Event.class_id == query.class_id, Event.class_id.is_(None)))
    if query.date_from is not None:
        stmt = stmt.where(
            Event.start_at >= datetime.combine(query.date_from, time.min, tzinfo=timezone.utc)
        )
    if query.date_to is not None:
        end = query.date_to + timedelta(days=1)
        stmt = stmt.where(Event.start_at < datetime.combine(end, time.min, tzinfo=timezone.utc))

    result = await session.scalars(stmt.order_by(Event.start_at, Event.title))
    return {"events": [serialize_event(e) for e in result]}


async def create_event(
    ctx: RequestContext, session: AsyncSession, body: EventCreate
) -> JSONResponse:
    """Create an event for the organization or one of its classes."""
    await require_class(ctx, session, body.class_id)

    event = Event(
        org_id=ctx.org_id,
        class_id=body.class_id,
        title=body.title,
        description=body.description,
        start_at=_as_utc(body.start_at),
        end_at=_as_utc(body.end_at),
        location=body.location,
        created_by=ctx.user_id,
    )
    session.add(event)
    await session.commit()
    await session.refresh(event)

    return created({"event": serialize_event(event)})
