"""User lookup schemas."""

from pydantic import BaseModel, ConfigDict

from backend.app.models.common import UuidField


class UserOrgIdQuery(BaseModel):
    """Query parameters for GET /api/user-org-id."""

    model_config = ConfigDict(extra="ignore")

    user_id: UuidField


class ResourceIdParam(BaseModel):
    """Path parameter carrying a resource identifier."""

    model_config = ConfigDict(extra="ignore")

    id: UuidField
