"""Student handlers."""

import logging
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any

from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.context import RequestContext
from backend.app.db.models import GuardianStudent, SchoolClass, Student, User
from backend.app.db.queries import select_students
from backend.app.handlers.scope import require_class, require_student
from backend.app.handlers.serializers import created, serialize_relationship, serialize_student
from backend.app.models.common import Gender, Role
from backend.app.models.students import (
    StudentCreate,
    StudentDeleteQuery,
    StudentQuery,
    StudentUpdate,
)

logger = logging.getLogger(__name__)

DEFAULT_RELATION = "parent"


async def list_students(
    ctx: RequestContext, session: AsyncSession, query: StudentQuery
) -> dict[str, Any]:
    """List non-deleted students with class name and linked guardians, newest first."""
    stmt = (
        select_students(ctx)
        .add_columns(SchoolClass.name)
        .outerjoin(SchoolClass, SchoolClass.id == Student.class_id)
    )
    if query.class_id is not None:
        stmt = stmt.where(Student.class_id == query.class_id)

    rows = (await session.execute(stmt.order_by(Student.created_at.desc()))).all()

    guardians: dict[Any, list[dict[str, Any]]] = defaultdict(list)
    if rows:
        links = await session.execute(
            select(GuardianStudent, User)
            .join(User, User.id == GuardianStudent.guardian_id)
            .where(GuardianStudent.student_id.in_([student.id for student, _ in rows]))
        )
        for link, guardian in links.all():
            guardians[link.student_id].append(
                {
                    "id": guardian.id,
                    "first_name": guardian.first_name,
                    "last_name": guardian.last_name,
                    "email": guardian.email,
                    "relation": link.relation,
                }
            )

    students = [
        {**serialize_student(student, class_name), "guardians": guardians[student.id]}
        for student, class_name in rows
    ]
    return {"students": students, "total_students": len(students)}


async def _guardians_in_org(
    ctx: RequestContext, session: AsyncSession, guardian_ids: list[uuid.UUID]
) -> set[uuid.UUID]:
    """Return the subset of ``guardian_ids`` that are guardians of the caller's org."""
    if not guardian_ids:
        return set()
    found = set(
        await session.scalars(
            select(User.id).where(
                User.id.in_(guardian_ids),
                User.org_id == ctx.org_id,
                User.role == Role.guardian.value,
                User.deleted_at.is_(None),
            )
        )
    )
    skipped = len(set(guardian_ids) - found)
    if skipped:
        logger.debug("Skipped %d guardian id(s) outside org %s", skipped, ctx.org_id)
    return found


async def _relationships(session: AsyncSession, student_id: uuid.UUID) -> list[dict[str, Any]]:
    links = await session.scalars(
        select(GuardianStudent).where(GuardianStudent.student_id == student_id)
    )
    return [serialize_relationship(link) for link in links]


async def _class_name(session: AsyncSession, class_id: uuid.UUID | None) -> str | None:
    if class_id is None:
        return None
    return await session.scalar(select(SchoolClass.name).where(SchoolClass.id == class_id))


async def create_student(
    ctx: RequestContext, session: AsyncSession, body: StudentCreate
) -> JSONResponse:
    """Enroll a student and link the listed guardians.

    Guardian ids that are not guardians of the caller's organization are
    skipped.

    Raises:
        NotFound: If ``class_id`` names a class outside the caller's org
    """
    school_class = await require_class(ctx, session, body.class_id)

    student = Student(
        org_id=ctx.org_id,
        class_id=body.class_id,
        first_name=body.first_name,
        last_name=body.last_name,
        dob=body.dob,
        gender=(body.gender or Gender.unknown).value,
    )
    session.add(student)
    await session.flush()

    for guardian_id in await _guardians_in_org(ctx, session, body.guardian_ids):
        session.add(
            GuardianStudent(
                guardian_id=guardian_id, student_id=student.id, relation=DEFAULT_RELATION
            )
        )
    await session.flush()
    relationships = await _relationships(session, student.id)
    await session.commit()
    await session.refresh(student)

    logger.info("Created student %s in org %s", student.id, ctx.org_id)
    return created(
        {
            "student": serialize_student(student, school_class.name if school_class else None),
            "relationships": relationships,
            "message": "Student created successfully!",
        }
    )


async def _sync_guardians(
    ctx: RequestContext, session: AsyncSession, student_id: uuid.UUID, guardian_ids: list[uuid.UUID]
) -> None:
    wanted = await _guardians_in_org(ctx, session, guardian_ids)
    links = await session.scalars(
        select(GuardianStudent).where(GuardianStudent.student_id == student_id)
    )
    current = set()
    for link in links:
        if link.guardian_id in wanted:
            current.add(link.guardian_id)
        else:
            await session.delete(link)
    for guardian_id in wanted - current:
        session.add(
            GuardianStudent(
                guardian_id=guardian_id, student_id=student_id, relation=DEFAULT_RELATION
            )
        )
    await session.flush()


async def update_student(
    ctx: RequestContext, session: AsyncSession, body: StudentUpdate
) -> dict[str, Any]:
    """Update a student in the caller's organization.

    Optional fields change only when present in the body. A present
    ``guardian_ids`` replaces the student's guardian links.

    Raises:
        NotFound: If the student or the new class is not in the caller's org
    """
    student = await require_student(ctx, session, body.id)
    fields = body.model_fields_set

    student.first_name = body.first_name
    if "last_name" in fields:
        student.last_name = body.last_name
    if "dob" in fields:
        student.dob = body.dob
    if "gender" in fields:
        student.gender = (body.gender or Gender.unknown).value
    if "class_id" in fields:
        await require_class(ctx, session, body.class_id)
        student.class_id = body.class_id
    if "guardian_ids" in fields:
        await _sync_guardians(ctx, session, student.id, body.guardian_ids)

    await session.flush()
    relationships = await _relationships(session, student.id)
    await session.commit()
    await session.refresh(student)

    return {
        "student": serialize_student(student, await _class_name(session, student.class_id)),
        "relationships": relationships,
        "message": "Student updated successfully!",
    }


async def delete_student(
    ctx: RequestContext, session: AsyncSession, query: StudentDeleteQuery
) -> dict[str, Any]:
    """Soft-delete a student in the caller's organization.

    Raises:
        NotFound: If the student does not exist there
    """
    student = await require_student(ctx, session, query.id)
    student.deleted_at = datetime.now(timezone.utc)
    await session.commit()

    logger.info("Deleted student %s in org %s", student.id, ctx.org_id)
    return {"message": "Student deleted successfully!"}
