"""Calendar event request schemas."""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

from backend.app.models.common import IsoDate, IsoDateTime, NotesText, TitleText, UuidField


class EventQuery(BaseModel):
    """Query parameters for GET /api/events."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    class_id: UuidField | None = Field(None, alias="classId")
    date_from: IsoDate | None = Field(None, alias="from")
    date_to: IsoDate | None = Field(None, alias="to")


class EventCreate(BaseModel):
    """Request body for POST /api/events."""

    model_config = ConfigDict(extra="ignore")

    title: TitleText
    start_at: IsoDateTime
    end_at: IsoDateTime | None = None
    description: NotesText | None = None
    location: Annotated[str, StringConstraints(max_length=200)] | None = None
    class_id: UuidField | None = None

    @field_validator("end_at")
    @classmethod
    def end_not_before_start(cls, value: datetime | None, info: ValidationInfo) -> datetime | None:
        """Reject events that end before they start."""
        start_at = info.data.get("start_at")
        if value is not None and start_at is not None and value < start_at:
            raise PydanticCustomError(
                "event_range", "End date must be after or equal to start date"
            )
        return value
