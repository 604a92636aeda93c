"""Attendance handlers.

Records are unique per (student, date); saving a second record for the same
day updates the first. Guardian-only callers work with the records of their
linked students only.
"""

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Any

from fastapi.responses import JSONResponse
from sqlalchemy import Insert, Select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.api.errors import NotFound
from backend.app.db.context import RequestContext
from backend.app.db.models import Attendance
from backend.app.db.queries import linked_student_ids, select_attendance
from backend.app.handlers.scope import is_guardian_only, require_class, require_student
from backend.app.handlers.serializers import created, serialize_attendance
from backend.app.models.attendance import (
    AttendanceBatchCreate,
    AttendanceCreate,
    AttendanceDeleteQuery,
    AttendanceQuery,
    AttendanceUpdate,
)

logger = logging.getLogger(__name__)

_UPSERT_INSERTS = {"postgresql": pg_insert, "sqlite": sqlite_insert}


def _visible_attendance(ctx: RequestContext) -> Select:
    stmt = select_attendance(ctx)
    if is_guardian_only(ctx):
        stmt = stmt.where(Attendance.student_id.in_(linked_student_ids(ctx)))
    return stmt


async def list_attendance(
    ctx: RequestContext, session: AsyncSession, query: AttendanceQuery
) -> dict[str, Any]:
    """List attendance records filtered by class, student and date."""
    stmt = _visible_attendance(ctx)
    if query.class_id is not None:
        stmt = stmt.where(Attendance.class_id == query.class_id)
    if query.student_id is not None:
        stmt = stmt.where(Attendance.student_id == query.student_id)
    if query.date is not None:
        stmt = stmt.where(Attendance.date == query.date)

    result = await session.scalars(
        stmt.order_by(Attendance.date.desc(), Attendance.created_at.desc())
    )
    records = [serialize_attendance(record) for record in result]
    return {"attendance": records, "total": len(records)}


def _upsert_statement(session: AsyncSession, values: dict[str, Any]) -> Insert:
    dialect = session.bind.dialect.name
    insert = _UPSERT_INSERTS.get(dialect)
    if insert is None:
        raise RuntimeError(f"Attendance upsert is not supported on {dialect}")

    stmt = insert(Attendance).values(**values)
    return stmt.on_conflict_do_update(
        index_elements=[Attendance.student_id, Attendance.date],
        set_={
            "status": stmt.excluded.status,
            "class_id": stmt.excluded.class_id,
            "notes": stmt.excluded.notes,
            "recorded_by": stmt.excluded.recorded_by,
            "updated_at": datetime.now(timezone.utc),
        },
    )


async def _upsert(
    ctx: RequestContext,
    session: AsyncSession,
    *,
    student_id: uuid.UUID,
    date: date,
    status: str,
    class_id: uuid.UUID | None,
    notes: str | None,
) -> Attendance:
    await require_student(ctx, session, student_id)
    await require_class(ctx, session, class_id)

    # A single statement, so concurrent saves for one (student, date) both land
    stmt = _upsert_statement(
        session,
        {
            "id": uuid.uuid4(),
            "org_id": ctx.org_id,
            "student_id": student_id,
            "date": date,
            "status": status,
            "class_id": class_id,
            "notes": notes,
            "recorded_by": ctx.user_id,
        },
    )
    result = await session.scalars(
        stmt.returning(Attendance), execution_options={"populate_existing": True}
    )
    return result.one()


async def save_attendance(
    ctx: RequestContext, session: AsyncSession, body: AttendanceCreate
) -> JSONResponse:
    """Create or update the record for a student on a date."""
    record = await _upsert(
        ctx,
        session,
        student_id=body.student_id,
        date=body.date,
        status=body.status.value,
        class_id=body.class_id,
        notes=body.notes,
    )
    await session.commit()

    return created(
        {"attendance": serialize_attendance(record), "message": "Attendance saved successfully!"}
    )


async def save_attendance_batch(
    ctx: RequestContext, session: AsyncSession, body: AttendanceBatchCreate
) -> JSONResponse:
    """Save several records in one transaction; any unknown student aborts the batch."""
    records = []
    for item in body.records:
        records.append(
            await _upsert(
                ctx,
                session,
                student_id=item.student_id,
                date=item.date,
                status=item.status.value,
                class_id=item.class_id,
                notes=item.notes,
            )
        )
    await session.commit()

    logger.info("Saved %d attendance record(s) via batch", len(records))
    return created(
        {
            "attendance": [serialize_attendance(record) for record in records],
            "message": f"Successfully saved {len(records)} attendance record(s)!",
            "count": len(records),
        }
    )


async def update_attendance(
    ctx: RequestContext, session: AsyncSession, body: AttendanceUpdate
) -> dict[str, Any]:
    """Update status and/or notes of an existing record.

    Raises:
        NotFound: If the record does not exist (in the caller's org, when it has one)
    """
    record = await session.scalar(_visible_attendance(ctx).where(Attendance.id == body.id))
    if record is None:
        raise NotFound("Attendance record not found")

    if body.status is not None:
        record.status = body.status.value
    if "notes" in body.model_fields_set:
        record.notes = body.notes
    record.recorded_by = ctx.user_id

    await session.commit()
    await session.refresh(record)
    return {
        "attendance": serialize_attendance(record),
        "message": "Attendance updated successfully!",
    }


async def delete_attendance(
    ctx: RequestContext, session: AsyncSession, query: AttendanceDeleteQuery
) -> dict[str, Any]:
    """Delete a record in the caller's organization.

    Raises:
        NotFound: If the record does not exist there
    """
    record = await session.scalar(_visible_attendance(ctx).where(Attendance.id == query.id))
    if record is None:
        raise NotFound("Attendance record not found")

    await session.delete(record)
    await session.commit()
    return {"message": "Attendance deleted successfully!"}
