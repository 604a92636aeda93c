"""Tenancy-safe query helpers."""

from sqlalchemy import Select, select

from backend.app.db.context import RequestContext
from backend.app.db.models import (
    Announcement,
    Attendance,
    Event,
    GuardianStudent,
    Message,
    MessageParticipant,
    SchoolClass,
    Student,
)


def select_classes(ctx: RequestContext) -> Select:
    """Select classes with org scoping enforced.

    Args:
        ctx: Request context with org_id

    Returns:
        Select filtered by org_id
    """
    return select(SchoolClass).where(SchoolClass.org_id == ctx.org_id)


def select_students(ctx: RequestContext) -> Select:
    """Select non-deleted students with org scoping enforced.

    Args:
        ctx: Request context with org_id

    Returns:
        Select filtered by org_id, excluding soft-deleted rows
    """
    return select(Student).where(Student.org_id == ctx.org_id, Student.deleted_at.is_(None))


def select_attendance(ctx: RequestContext) -> Select:
    """Select attendance records with org scoping enforced.

    Callers without an organization (admins on org-optional routes) are not
    scoped.
    """
    stmt = select(Attendance)
    if ctx.org_id is not None:
        stmt = stmt.where(Attendance.org_id == ctx.org_id)
    return stmt


def select_announcements(ctx: RequestContext) -> Select:
    return select(Announcement).where(Announcement.org_id == ctx.org_id)


def select_events(ctx: RequestContext) -> Select:
    return select(Event).where(Event.org_id == ctx.org_id)


def linked_student_ids(ctx: RequestContext) -> Select:
    """Select ids of the students linked to the caller as guardian."""
    return select(GuardianStudent.student_id).where(GuardianStudent.guardian_id == ctx.user_id)


def select_threads(ctx: RequestContext) -> Select:
    """Select live message threads in the caller's org that the caller takes part in."""
    joined = select(MessageParticipant.message_id).where(
        MessageParticipant.user_id == ctx.user_id,
        MessageParticipant.org_id == ctx.org_id,
    )
    return select(Message).where(
        Message.org_id == ctx.org_id,
        Message.deleted_at.is_(None),
        Message.id.in_(joined),
    )
