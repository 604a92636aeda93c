"""Messaging request schemas."""

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator, model_validator
from pydantic_core import PydanticCustomError

from backend.app.models.common import IsoDateTime, ThreadType, ThreadTypeField, UuidField

SubjectText = Annotated[str, StringConstraints(max_length=500)]

MAX_MESSAGE_BODY = 10000


class MessageCreate(BaseModel):
    """Request body for POST /api/messages (start a thread)."""

    model_config = ConfigDict(extra="ignore")

    thread_type: ThreadTypeField = ThreadType.dm
    subject: SubjectText | None = None
    recipient_id: UuidField | None = None
    recipient_ids: list[UuidField] | None = None

    @model_validator(mode="after")
    def has_recipient(self) -> "MessageCreate":
        if self.recipient_id is None and not self.recipient_ids:
            raise PydanticCustomError("recipients", "recipient_id or recipient_ids is required")
        return self

    def recipients(self) -> list[Any]:
        """Recipient ids in request order, without duplicates."""
        ids = self.recipient_ids or [self.recipient_id]
        return list(dict.fromkeys(ids))


class MessageUpdate(BaseModel):
    """Request body for PUT /api/messages."""

    model_config = ConfigDict(extra="ignore")

    id: UuidField
    subject: SubjectText | None = None
    deleted_at: IsoDateTime | None = None


class MessageDeleteQuery(BaseModel):
    """Query parameters for DELETE /api/messages."""

    model_config = ConfigDict(extra="ignore")

    id: UuidField


class MessageItemQuery(BaseModel):
    """Query parameters for GET /api/messages/{id}/items."""

    model_config = ConfigDict(extra="ignore")

    limit: int = Field(50, ge=1, le=100)
    offset: int = Field(0, ge=0)


class MessageItemCreate(BaseModel):
    """Request body for POST /api/messages/{id}/items."""

    model_config = ConfigDict(extra="ignore")

    body: str
    attachments: list[Any] = Field(default_factory=list)

    @field_validator("body")
    @classmethod
    def body_present(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise PydanticCustomError("message_body", "Message body is required")
        if len(value) > MAX_MESSAGE_BODY:
            raise PydanticCustomError("message_body", "Message body is too long")
        return value
