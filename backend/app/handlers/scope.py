"""Checks that ids referenced in request bodies belong to the caller's organization."""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.api.errors import NotFound
from backend.app.db.context import RequestContext
from backend.app.db.models import SchoolClass, Student
from backend.app.db.queries import linked_student_ids, select_classes, select_students
from backend.app.models.common import Role


def is_guardian_only(ctx: RequestContext) -> bool:
    """True when the caller holds no role beyond guardian/parent."""
    return ctx.only_roles(Role.guardian, Role.parent)


async def require_student(
    ctx: RequestContext, session: AsyncSession, student_id: uuid.UUID
) -> Student:
    """Load a student in the caller's organization.

    Guardian-only callers can only reach the students linked to them.

    Raises:
        NotFound: If the student does not exist there
    """
    stmt = select_students(ctx).where(Student.id == student_id)
    if is_guardian_only(ctx):
        stmt = stmt.where(Student.id.in_(linked_student_ids(ctx)))
    student = await session.scalar(stmt)
    if student is None:
        raise NotFound("Student not found")
    return student


async def require_class(
    ctx: RequestContext, session: AsyncSession, class_id: uuid.UUID | None
) -> SchoolClass | None:
    """Load a class in the caller's organization; None passes through.

    Raises:
        NotFound: If the class does not exist there
    """
    if class_id is None:
        return None
    school_class = await session.scalar(select_classes(ctx).where(SchoolClass.id == class_id))
    if school_class is None:
        raise NotFound("Class not found")
    return school_class
