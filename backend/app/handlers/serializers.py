"""Row-to-JSON serialization shared by route handlers."""

from typing import Any

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from backend.app.db.models import (
    Announcement,
    Attendance,
    Event,
    GuardianStudent,
    Message,
    MessageItem,
    Org,
    SchoolClass,
    Student,
    User,
)


def created(content: dict[str, Any]) -> JSONResponse:
    """Build a 201 response."""
    return JSONResponse(status_code=status.HTTP_201_CREATED, content=jsonable_encoder(content))


def serialize_org(org: Org) -> dict[str, Any]:
    return {
        "id": org.id,
        "name": org.name,
        "slug": org.slug,
        "email": org.email,
        "phone": org.phone,
        "timezone": org.timezone,
        "is_active": org.is_active,
        "created_at": org.created_at,
        "updated_at": org.updated_at,
    }


def serialize_user(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "phone": user.phone,
        "org_id": user.org_id,
        "role": user.role,
        "is_active": user.is_active,
        "created_at": user.created_at,
    }


def serialize_class(school_class: SchoolClass) -> dict[str, Any]:
    return {
        "id": school_class.id,
        "name": school_class.name,
        "code": school_class.code,
        "created_at": school_class.created_at,
    }


def serialize_student(student: Student, class_name: str | None = None) -> dict[str, Any]:
    return {
        "id": student.id,
        "org_id": student.org_id,
        "class_id": student.class_id,
        "class_name": class_name,
        "first_name": student.first_name,
        "last_name": student.last_name,
        "dob": student.dob,
        "gender": student.gender,
        "created_at": student.created_at,
    }


def serialize_attendance(record: Attendance) -> dict[str, Any]:
    return {
        "id": record.id,
        "org_id": record.org_id,
        "class_id": record.class_id,
        "student_id": record.student_id,
        "date": record.date,
        "status": record.status,
        "notes": record.notes,
        "recorded_by": record.recorded_by,
        "created_at": record.created_at,
        "updated_at": record.updated_at,
    }


def serialize_announcement(announcement: Announcement) -> dict[str, Any]:
    return {
        "id": announcement.id,
        "org_id": announcement.org_id,
        "class_id": announcement.class_id,
        "author_id": announcement.author_id,
        "title": announcement.title,
        "body": announcement.body,
        "week_start": announcement.week_start,
        "is_public": announcement.is_public,
        "created_at": announcement.created_at,
    }


def serialize_event(event: Event) -> dict[str, Any]:
    return {
        "id": event.id,
        "org_id": event.org_id,
        "class_id": event.class_id,
        "title": event.title,
        "description": event.description,
        "start_at": event.start_at,
        "end_at": event.end_at,
        "location": event.location,
        "created_by": event.created_by,
        "created_at": event.created_at,
    }


def serialize_relationship(link: GuardianStudent) -> dict[str, Any]:
    return {
        "guardian_id": link.guardian_id,
        "student_id": link.student_id,
        "relation": link.relation,
    }


def serialize_message(message: Message) -> dict[str, Any]:
    return {
        "id": message.id,
        "org_id": message.org_id,
        "thread_type": message.thread_type,
        "subject": message.subject,
        "created_by": message.created_by,
        "created_at": message.created_at,
        "updated_at": message.updated_at,
        "deleted_at": message.deleted_at,
    }


def serialize_message_item(item: MessageItem, author: User | None = None) -> dict[str, Any]:
    """Serialize a thread item with its author's display fields."""
    author_name = None
    if author is not None:
        parts = (author.first_name, author.last_name)
        author_name = " ".join(part for part in parts if part) or None
    return {
        "id": item.id,
        "message_id": item.message_id,
        "author_id": item.author_id,
        "author_name": author_name,
        "author_email": author.email if author is not None else None,
        "author_role": author.role if author is not None else None,
        "body": item.body,
        "attachments": item.attachments or [],
        "created_at": item.created_at,
    }
