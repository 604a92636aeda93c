"""Organization request schemas."""

import re
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, StringConstraints
from pydantic_core import PydanticCustomError

from backend.app.models.common import UuidField

_SLUG_RE = re.compile(r"[a-z0-9-]+")


def _check_slug(value: str) -> str:
    if not _SLUG_RE.fullmatch(value):
        raise PydanticCustomError(
            "slug_format", "Slug must contain only lowercase letters, numbers, and hyphens"
        )
    return value


OrgName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
Slug = Annotated[str, StringConstraints(min_length=1, max_length=100), AfterValidator(_check_slug)]
Timezone = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=64)]
Phone = Annotated[str, StringConstraints(max_length=50)]


class OrgListQuery(BaseModel):
    """Query parameters for GET /api/orgs.

    ``ids`` is a comma-separated list; malformed entries are skipped.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    ids: str | None = None
    page: int = Field(1, ge=1)
    page_size: int = Field(20, ge=1, le=100, alias="pageSize")


class OrgCreate(BaseModel):
    """Request body for POST /api/orgs."""

    model_config = ConfigDict(extra="ignore")

    name: OrgName
    slug: Slug
    timezone: Timezone = "UTC"
    email: EmailStr | None = None
    phone: Phone | None = None


class OrgUpdate(BaseModel):
    """Request body for PUT /api/orgs; only fields present in the body change."""

    model_config = ConfigDict(extra="ignore")

    id: UuidField
    name: OrgName | None = None
    slug: Slug | None = None
    timezone: Timezone | None = None
    email: EmailStr | None = None
    phone: Phone | None = None


class OrgDeleteQuery(BaseModel):
    """Query parameters for DELETE /api/orgs."""

    model_config = ConfigDict(extra="ignore")

    id: UuidField
