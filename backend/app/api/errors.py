"""Error taxonomy for API routes.

Every failure reaching the route boundary is one of these types and is
rendered as a JSON ``{"error": ...}`` body with a non-2xx status code.
Messages are safe to show to callers; internal details are logged instead.
"""

from dataclasses import dataclass
from typing import Any

from fastapi import status


@dataclass(frozen=True)
class FieldError:
    """Single field-level validation failure."""

    field: str
    message: str

    def render(self) -> str:
        if self.message == "is required":
            return f"{self.field} is required" if self.field else "Value is required"
        return f"{self.field}: {self.message}" if self.field else self.message


class ApiError(Exception):
    """Base class for errors converted to JSON responses."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "unknown"
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def headers(self) -> dict[str, str] | None:
        return None

    def to_response(self) -> dict[str, Any]:
        """Build the JSON response body."""
        return {"error": self.message}


class Unauthenticated(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthenticated"
    default_message = "Authentication required"

    @property
    def headers(self) -> dict[str, str] | None:
        return {"WWW-Authenticate": "Bearer"}


class MissingOrganization(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "missing_org"
    default_message = "User organization ID not found. Please contact support."


class Forbidden(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    default_message = "Access denied. Valid role required."


class ValidationFailed(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_failed"
    default_message = "Validation failed"

    def __init__(self, message: str | None = None, details: list[FieldError] | None = None) -> None:
        self.details = details or []
        if message is None and self.details:
            message = "; ".join(detail.render() for detail in self.details)
        super().__init__(message)

    def to_response(self) -> dict[str, Any]:
        body = super().to_response()
        if self.details:
            body["details"] = [
                {"field": detail.field, "message": detail.message} for detail in self.details
            ]
        return body


class NotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_message = "Resource not found"


class BackendUnavailable(ApiError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "backend_unavailable"
    default_message = "Database request failed"


class Unknown(ApiError):
    code = "unknown"
