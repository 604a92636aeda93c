"""Health check endpoints."""

import logging
from typing import Any

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse

from backend.app.db.engine import AdminClient

logger = logging.getLogger(__name__)

router = APIRouter()


async def check_db(client: AdminClient | None) -> tuple[bool, str]:
    """Check database connectivity.

    Returns:
        (is_ok, status_message)
    """
    if client is None:
        return (False, "not_configured")

    try:
        await client.ping()
        return (True, "ok")
    except Exception as e:
        logger.warning("Database health check failed: %s", type(e).__name__)
        return (False, f"error: {type(e).__name__}")


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/api/health", response_model=None)
async def api_health(request: Request) -> dict[str, Any] | Response:
    """Readiness probe.

    Returns:
        200 with component status if the database answers, 503 otherwise
    """
    db_ok, db_status = await check_db(request.app.state.admin_client)

    body = {
        "status": "healthy" if db_ok else "unhealthy",
        "components": {"db": db_status},
    }
    if not db_ok:
        return JSONResponse(content=body, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    return body
