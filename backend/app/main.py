"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.app.api.auth import IdentityResolver
from backend.app.api.error_handlers import register_error_handlers
from backend.app.api.gateway import AuthGateway
from backend.app.api.routes.announcements import router as announcements_router
from backend.app.api.routes.attendance import router as attendance_router
from backend.app.api.routes.events import router as events_router
from backend.app.api.routes.health import router as health_router
from backend.app.api.routes.metrics import router as metrics_router
from backend.app.api.routes.messages import router as messages_router
from backend.app.api.routes.orgs import router as orgs_router
from backend.app.api.routes.students import router as students_router
from backend.app.api.routes.teachers import router as teachers_router
from backend.app.api.routes.user_org import router as user_org_router
from backend.app.config import Settings, get_settings
from backend.app.db.engine import AdminClient, create_admin_client
from backend.app.db.sql_repositories import SqlUserDirectory
from backend.app.utils.logging import setup_logging

logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup/shutdown lifecycle."""
    logger.info("SchoolHub API started")
    yield
    client: AdminClient | None = app.state.admin_client
    if client is not None:
        await client.dispose()
    logger.info("SchoolHub API shutting down")


def create_app(settings: Settings | None = None, admin_client: AdminClient | None = None) -> FastAPI:
    """Build the application.

    The privileged client is constructed here, once, and handed to the
    gateway; route handlers only ever receive sessions from it.

    Args:
        settings: Application settings (defaults to environment)
        admin_client: Pre-built client, e.g. over a test database

    Returns:
        Configured FastAPI app
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_format)

    client = admin_client if admin_client is not None else create_admin_client(settings)
    directory = SqlUserDirectory(client) if client is not None else None

    app = FastAPI(title="SchoolHub API", version=API_VERSION, lifespan=lifespan)
    app.state.settings = settings
    app.state.admin_client = client
    app.state.gateway = AuthGateway(IdentityResolver(settings, directory), client)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.ui_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    # Register routes
    app.include_router(health_router, tags=["health"])
    app.include_router(metrics_router, tags=["metrics"])
    app.include_router(user_org_router)
    app.include_router(teachers_router)
    app.include_router(orgs_router)
    app.include_router(attendance_router)
    app.include_router(students_router)
    app.include_router(announcements_router)
    app.include_router(events_router)
    app.include_router(messages_router)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {"message": "SchoolHub API", "version": API_VERSION}

    return app


app = create_app()
