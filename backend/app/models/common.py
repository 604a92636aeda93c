"""Common types, enums and constrained field types shared across all schemas."""

import re
from datetime import date, datetime
from enum import Enum
from typing import Annotated, Any
from uuid import UUID

from pydantic import BeforeValidator, StringConstraints
from pydantic_core import PydanticCustomError


class Role(str, Enum):
    """Closed role vocabulary."""

    admin = "admin"
    principal = "principal"
    teacher = "teacher"
    guardian = "guardian"
    parent = "parent"
    student = "student"


class AttendanceStatus(str, Enum):
    """Attendance status."""

    present = "present"
    absent = "absent"
    late = "late"
    excused = "excused"


class Gender(str, Enum):
    """Student gender as stored on the profile."""

    male = "male"
    female = "female"
    other = "other"
    unknown = "unknown"


class ThreadType(str, Enum):
    """Message thread kinds."""

    dm = "dm"
    class_ = "class"
    individual = "individual"
    group = "group"
    announcement = "announcement"


_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Canonical 8-4-4-4-12 hex form only
UUID_RE = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.IGNORECASE
)


def _parse_uuid(value: Any) -> UUID:
    if isinstance(value, UUID):
        return value
    if not isinstance(value, str) or not UUID_RE.fullmatch(value):
        raise PydanticCustomError("uuid_format", "Invalid UUID format")
    return UUID(value)


def _parse_iso_date(value: Any) -> date:
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not _DATE_RE.match(value):
        raise PydanticCustomError("date_format", "Date must be in YYYY-MM-DD format")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise PydanticCustomError("date_value", "Date is not a valid calendar date") from None


def _parse_iso_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            raise PydanticCustomError("datetime_format", "Invalid ISO datetime format") from None
    else:
        raise PydanticCustomError("datetime_format", "Invalid ISO datetime format")

    # Offsets are mandatory so that comparisons stay well-defined
    if parsed.tzinfo is None:
        raise PydanticCustomError("datetime_format", "Invalid ISO datetime format")
    return parsed


def member_of(enum_cls: type[Enum], label: str) -> BeforeValidator:
    """Build a validator that accepts exact (case-sensitive) enum values.

    Args:
        enum_cls: Enum class defining the closed vocabulary
        label: Field label used in the error message

    Returns:
        BeforeValidator for use in an Annotated type
    """
    allowed = ", ".join(str(member.value) for member in enum_cls)
    message = f"Invalid {label}. Must be one of: {allowed}"

    def check(value: Any) -> Enum:
        if isinstance(value, enum_cls):
            return value
        try:
            return enum_cls(value)
        except ValueError:
            raise PydanticCustomError("enum_member", message) from None

    return BeforeValidator(check)


def _normalize_gender(value: Any) -> Gender:
    # Free-form input is lowercased; anything unrecognized is stored as unknown
    if isinstance(value, Gender):
        return value
    if not isinstance(value, str):
        raise PydanticCustomError(
            "enum_member", "Invalid gender. Must be one of: male, female, other, unknown"
        )
    try:
        return Gender(value.strip().lower())
    except ValueError:
        return Gender.unknown


def _parse_optional_uuid(value: Any) -> UUID | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return _parse_uuid(value)


UuidField = Annotated[UUID, BeforeValidator(_parse_uuid)]
IsoDate = Annotated[date, BeforeValidator(_parse_iso_date)]
IsoDateTime = Annotated[datetime, BeforeValidator(_parse_iso_datetime)]

AttendanceStatusField = Annotated[AttendanceStatus, member_of(AttendanceStatus, "status")]
GenderField = Annotated[Gender, BeforeValidator(_normalize_gender)]
ThreadTypeField = Annotated[ThreadType, member_of(ThreadType, "thread type")]

NotesText = Annotated[str, StringConstraints(max_length=5000)]
TitleText = Annotated[str, StringConstraints(min_length=1, max_length=500)]

# Optional UUID where an empty string means "not set"
OptionalUuid = Annotated[UUID | None, BeforeValidator(_parse_optional_uuid)]
