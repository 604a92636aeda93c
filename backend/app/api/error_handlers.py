"""Global exception handlers.

Every failure leaving the app is a JSON ``{"error": ...}`` body; internal
details are logged, never returned.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from backend.app.api.errors import ApiError, Unknown, ValidationFailed
from backend.app.api.validation import field_errors

logger = logging.getLogger(__name__)


def error_response(exc: ApiError) -> JSONResponse:
    """Render an ApiError as a JSON response."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response(),
        headers=exc.headers,
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_api_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_api_error_handler(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
        logger.warning(
            "ApiError on %s: %s",
            request.url.path,
            exc.message,
            extra={"structured": {"error_code": exc.code, "path": request.url.path}},
        )
        return error_response(exc)


def _register_validation_error_handler(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Map FastAPI's typed-parameter failures to the aggregated 400 shape."""
        logger.warning("Validation error on %s: %s", request.url.path, exc.errors())
        return error_response(ValidationFailed(details=field_errors(exc.errors())))


def _register_generic_error_handler(app: FastAPI) -> None:
    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all; never leaks internal details."""
        logger.error("Unhandled exception on %s: %s", request.url.path, exc, exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=Unknown().to_response(),
        )
