"""Announcement request schemas."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from backend.app.models.common import IsoDate, NotesText, UuidField


class AnnouncementQuery(BaseModel):
    """Query parameters for GET /api/announcements."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    class_id: UuidField | None = Field(None, alias="classId")
    limit: int = Field(20, ge=1, le=100)


class AnnouncementCreate(BaseModel):
    """Request body for POST /api/announcements."""

    model_config = ConfigDict(extra="ignore")

    title: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=500)]
    body: NotesText | None = None
    class_id: UuidField | None = None
    week_start: IsoDate | None = None
    is_public: bool = True
