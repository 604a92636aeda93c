"""Attendance request schemas."""

from pydantic import BaseModel, ConfigDict, Field

from backend.app.models.common import (
    AttendanceStatus,
    AttendanceStatusField,
    IsoDate,
    NotesText,
    UuidField,
)


class AttendanceQuery(BaseModel):
    """Query parameters for GET /api/attendance."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    class_id: UuidField | None = Field(None, alias="classId")
    student_id: UuidField | None = Field(None, alias="studentId")
    date: IsoDate | None = None


class AttendanceCreate(BaseModel):
    """Request body for POST /api/attendance."""

    model_config = ConfigDict(extra="ignore")

    student_id: UuidField
    date: IsoDate
    status: AttendanceStatusField = AttendanceStatus.present
    class_id: UuidField | None = None
    notes: NotesText | None = None


class AttendanceUpdate(BaseModel):
    """Request body for PUT /api/attendance."""

    model_config = ConfigDict(extra="ignore")

    id: UuidField
    status: AttendanceStatusField | None = None
    notes: NotesText | None = None


class AttendanceDeleteQuery(BaseModel):
    """Query parameters for DELETE /api/attendance."""

    model_config = ConfigDict(extra="ignore")

    id: UuidField


class AttendanceBatchRecord(BaseModel):
    """Single record within a batch save."""

    model_config = ConfigDict(extra="ignore")

    student_id: UuidField
    status: AttendanceStatusField
    date: IsoDate
    class_id: UuidField | None = None
    notes: NotesText | None = None


class AttendanceBatchCreate(BaseModel):
    """Request body for POST /api/attendance/batch."""

    model_config = ConfigDict(extra="ignore")

    records: list[AttendanceBatchRecord] = Field(..., min_length=1)
