"""Teacher detail handler."""

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.api.errors import NotFound, ValidationFailed
from backend.app.api.validation import parse_resource_id
from backend.app.db.context import RequestContext
from backend.app.db.models import ClassMembership, SchoolClass, Student, User
from backend.app.handlers.serializers import serialize_class, serialize_user
from backend.app.models.common import Role


async def get_teacher_details(
    ctx: RequestContext, session: AsyncSession, teacher_id: str
) -> dict[str, Any]:
    """Return a teacher with their classes and per-class student counts.

    Args:
        ctx: Caller identity (org-scoped)
        session: Privileged database session
        teacher_id: Raw path parameter

    Raises:
        ValidationFailed: If the id is not a UUID, or the user is not a teacher
        NotFound: If no such user exists in the caller's organization
    """
    user_id = parse_resource_id(teacher_id, "Invalid teacher ID")

    teacher = await session.scalar(
        select(User).where(
            User.id == user_id,
            User.org_id == ctx.org_id,
            User.deleted_at.is_(None),
        )
    )
    if teacher is None:
        raise NotFound("Teacher not found")
    if teacher.role != Role.teacher.value:
        raise ValidationFailed("User is not a teacher")

    classes_result = await session.scalars(
        select(SchoolClass)
        .join(ClassMembership, ClassMembership.class_id == SchoolClass.id)
        .where(
            ClassMembership.user_id == user_id,
            ClassMembership.membership_role == Role.teacher.value,
            ClassMembership.org_id == ctx.org_id,
        )
        .order_by(SchoolClass.name)
    )
    classes = list(classes_result)

    counts: dict[Any, int] = {}
    if classes:
        count_rows = await session.execute(
            select(Student.class_id, func.count(Student.id))
            .where(
                Student.org_id == ctx.org_id,
                Student.deleted_at.is_(None),
                Student.class_id.in_([c.id for c in classes]),
            )
            .group_by(Student.class_id)
        )
        counts = {class_id: count for class_id, count in count_rows.all()}

    class_payloads = [
        {**serialize_class(c), "student_count": counts.get(c.id, 0)} for c in classes
    ]

    return {
        "teacher": serialize_user(teacher),
        "classes": class_payloads,
        "total_students": sum(c["student_count"] for c in class_payloads),
        "total_classes": len(class_payloads),
    }
