"""Request validation helpers.

Schemas are pydantic models; these helpers run them against raw query
parameters, JSON bodies or path parameters and turn any failure into a single
aggregated ``ValidationFailed`` error. Validation is pure: the same input
always produces the same model or the same error.
"""

import json
from collections.abc import Mapping, Sequence
from typing import Any, TypeVar
from uuid import UUID

from pydantic import BaseModel, ValidationError

from backend.app.api.errors import FieldError, ValidationFailed
from backend.app.models.users import ResourceIdParam

ModelT = TypeVar("ModelT", bound=BaseModel)

# Location prefixes FastAPI adds to RequestValidationError entries
_REQUEST_LOCATIONS = {"query", "body", "path", "header", "cookie"}


def field_errors(errors: Sequence[Mapping[str, Any]]) -> list[FieldError]:
    """Convert pydantic error entries to field errors.

    Args:
        errors: Entries as returned by ``ValidationError.errors()``

    Returns:
        One FieldError per entry, in the order pydantic reported them
    """
    results: list[FieldError] = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in _REQUEST_LOCATIONS:
            loc = loc[1:]
        field = ".".join(loc)

        if error.get("type") == "missing":
            message = "is required"
        else:
            message = str(error.get("msg", "Invalid value"))
            # Plain ValueErrors raised in validators carry this prefix
            message = message.removeprefix("Value error, ")

        results.append(FieldError(field=field, message=message))
    return results


def _validate(schema: type[ModelT], data: Any) -> ModelT:
    try:
        return schema.model_validate(data)
    except ValidationError as exc:
        raise ValidationFailed(details=field_errors(exc.errors())) from None


def validate_query(schema: type[ModelT], params: Mapping[str, str]) -> ModelT:
    """Validate query parameters against a schema.

    Empty-string values are treated as absent.

    Args:
        schema: Pydantic model describing the query
        params: Raw query parameters

    Returns:
        Validated model instance

    Raises:
        ValidationFailed: If any field fails validation
    """
    cleaned = {key: value for key, value in params.items() if value != ""}
    return _validate(schema, cleaned)


def validate_body(schema: type[ModelT], payload: Any) -> ModelT:
    """Validate a decoded JSON body against a schema.

    Raises:
        ValidationFailed: If the body is not an object or any field fails
    """
    if not isinstance(payload, dict):
        raise ValidationFailed("Request body must be a JSON object")
    return _validate(schema, payload)


def validate_params(schema: type[ModelT], params: Mapping[str, str]) -> ModelT:
    """Validate path parameters against a schema."""
    return _validate(schema, dict(params))


def decode_json_body(raw: bytes) -> Any:
    """Decode a raw request body as JSON.

    Raises:
        ValidationFailed: If the body is empty or not valid JSON
    """
    if not raw:
        raise ValidationFailed("Request body is required")
    try:
        return json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise ValidationFailed("Invalid JSON body") from None


def parse_resource_id(raw: str, message: str) -> UUID:
    """Parse a path identifier, reporting failures with a route-specific message.

    Raises:
        ValidationFailed: If ``raw`` is not a UUID
    """
    try:
        return validate_params(ResourceIdParam, {"id": raw}).id
    except ValidationFailed:
        raise ValidationFailed(message) from None
