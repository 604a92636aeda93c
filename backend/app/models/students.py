"""Student request schemas."""

from datetime import date
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator
from pydantic_core import PydanticCustomError

from backend.app.models.common import GenderField, IsoDate, OptionalUuid, UuidField

MIN_STUDENT_AGE = 3
MAX_STUDENT_AGE = 18

LastName = Annotated[str, StringConstraints(strip_whitespace=True, max_length=100)]


def age_on(dob: date, today: date) -> int:
    """Whole years between ``dob`` and ``today``."""
    before_birthday = (today.month, today.day) < (dob.month, dob.day)
    return today.year - dob.year - int(before_birthday)


class StudentQuery(BaseModel):
    """Query parameters for GET /api/students."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    class_id: UuidField | None = Field(None, alias="classId")


class StudentWrite(BaseModel):
    """Fields shared by student create and update bodies."""

    model_config = ConfigDict(extra="ignore")

    first_name: str
    last_name: LastName | None = None
    dob: IsoDate | None = None
    gender: GenderField | None = None
    class_id: OptionalUuid = None
    guardian_ids: list[UuidField] = Field(default_factory=list)

    @field_validator("first_name")
    @classmethod
    def first_name_present(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise PydanticCustomError("first_name", "First name is required")
        if len(value) > 100:
            raise PydanticCustomError("first_name", "First name must be 100 characters or less")
        return value

    @field_validator("dob")
    @classmethod
    def dob_in_school_age_range(cls, value: date | None) -> date | None:
        if value is None:
            return value
        age = age_on(value, date.today())
        if not MIN_STUDENT_AGE <= age <= MAX_STUDENT_AGE:
            raise PydanticCustomError(
                "student_age",
                "Student age must be between {low} and {high} years old",
                {"low": MIN_STUDENT_AGE, "high": MAX_STUDENT_AGE},
            )
        return value


class StudentCreate(StudentWrite):
    """Request body for POST /api/students."""


class StudentUpdate(StudentWrite):
    """Request body for PUT /api/students.

    Optional fields replace the stored value only when present in the body;
    ``guardian_ids``, when present, becomes the full set of linked guardians.
    """

    id: UuidField


class StudentDeleteQuery(BaseModel):
    """Query parameters for DELETE /api/students."""

    model_config = ConfigDict(extra="ignore")

    id: UuidField
