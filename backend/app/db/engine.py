"""Privileged database client built from the service-role connection string."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from backend.app.config import Settings

logger = logging.getLogger(__name__)


class AdminClient:
    """Service-role data-access client.

    Constructed once at process start and passed explicitly to the gateway,
    which hands out sessions to route handlers only after authorization.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._session_factory = async_sessionmaker(engine, expire_on_commit=False)

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Open a session for the duration of one handler call.

        Yields:
            AsyncSession bound to the service-role engine
        """
        async with self._session_factory() as session:
            yield session

    async def ping(self) -> None:
        """Run a trivial query; raises on connectivity problems."""
        async with self._engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        await self._engine.dispose()


def normalize_database_url(database_url: str) -> str:
    """Convert postgresql:// to postgresql+asyncpg://."""
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if database_url.startswith("postgres://"):
        return database_url.replace("postgres://", "postgresql+asyncpg://", 1)
    return database_url


def create_admin_client(settings: Settings) -> AdminClient | None:
    """Create the privileged client from settings.

    A missing connection string is a configuration error surfaced per request
    as HTTP 500, so this returns None instead of raising.

    Args:
        settings: Application settings

    Returns:
        AdminClient, or None if DATABASE_URL is unset
    """
    if not settings.database_url:
        logger.error("DATABASE_URL is not set; privileged database client disabled")
        return None

    database_url = normalize_database_url(settings.database_url)
    if database_url.startswith("sqlite"):
        engine = create_async_engine(database_url, echo=False)
    else:
        engine = create_async_engine(
            database_url,
            pool_pre_ping=True,
            pool_size=settings.db_pool_size,
            echo=False,
        )
    return AdminClient(engine)
