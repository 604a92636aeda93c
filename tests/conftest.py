"""Shared pytest fixtures for all test suites."""

import os
import time
import uuid
from collections.abc import AsyncGenerator, Callable
from dataclasses import dataclass
from datetime import date
from typing import Any

import jwt
import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from backend.app.config import Settings
from backend.app.db.engine import AdminClient, normalize_database_url
from backend.app.db.models import (
    Base,
    ClassMembership,
    GuardianStudent,
    Org,
    SchoolClass,
    Student,
    User,
)
from backend.app.main import create_app

TEST_JWT_SECRET = "test-jwt-secret-with-at-least-32-bytes!"

TokenFactory = Callable[..., str]


@dataclass
class School:
    """IDs of the rows created by the ``school`` fixture."""

    org_a: uuid.UUID
    org_b: uuid.UUID
    admin: uuid.UUID
    principal_a: uuid.UUID
    teacher_a: uuid.UUID
    guardian_a: uuid.UUID
    teacher_b: uuid.UUID
    class_a: uuid.UUID
    class_b: uuid.UUID
    student_linked: uuid.UUID
    student_unlinked: uuid.UUID
    student_b: uuid.UUID


@pytest.fixture
def settings() -> Settings:
    """Settings for tests: no DATABASE_URL, fixed JWT secret."""
    return Settings(
        database_url=None,
        supabase_jwt_secret=TEST_JWT_SECRET,
        log_format="text",
    )


@pytest.fixture
def token_factory() -> TokenFactory:
    """Mint access tokens shaped like the hosted auth service's.

    Usage:
        token = token_factory(user_id, roles=["teacher"], org_id=org_id)
    """

    def mint(
        user_id: uuid.UUID | str,
        *,
        roles: list[str] | None = None,
        org_id: uuid.UUID | str | None = None,
        active_role: str | None = None,
        secret: str = TEST_JWT_SECRET,
        audience: str = "authenticated",
        expires_in: int = 3600,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        user_metadata: dict[str, Any] = dict(metadata or {})
        if roles is not None:
            user_metadata["roles"] = roles
        if org_id is not None:
            user_metadata["org_id"] = str(org_id)
        if active_role is not None:
            user_metadata["activeRole"] = active_role

        now = int(time.time())
        claims = {
            "sub": str(user_id),
            "aud": audience,
            "iat": now,
            "exp": now + expires_in,
            "email": f"{user_id}@example.com",
            "user_metadata": user_metadata,
        }
        return jwt.encode(claims, secret, algorithm="HS256")

    return mint


@pytest_asyncio.fixture
async def sqlite_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with all tables created.

    StaticPool keeps the single in-memory database alive across sessions.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def admin_client(sqlite_engine: AsyncEngine) -> AdminClient:
    return AdminClient(sqlite_engine)


@pytest_asyncio.fixture
async def school(admin_client: AdminClient) -> School:
    """Seed two organizations with staff, guardians, classes and students."""
    ids = School(
        org_a=uuid.uuid4(),
        org_b=uuid.uuid4(),
        admin=uuid.uuid4(),
        principal_a=uuid.uuid4(),
        teacher_a=uuid.uuid4(),
        guardian_a=uuid.uuid4(),
        teacher_b=uuid.uuid4(),
        class_a=uuid.uuid4(),
        class_b=uuid.uuid4(),
        student_linked=uuid.uuid4(),
        student_unlinked=uuid.uuid4(),
        student_b=uuid.uuid4(),
    )

    async with admin_client.session() as session:
        session.add_all(
            [
                Org(id=ids.org_a, name="Alpha School", slug="alpha"),
                Org(id=ids.org_b, name="Beta School", slug="beta"),
            ]
        )
        await session.flush()
        session.add_all(
            [
                User(id=ids.admin, org_id=None, role="admin", email="admin@example.com"),
                User(id=ids.principal_a, org_id=ids.org_a, role="principal", first_name="Pia"),
                User(id=ids.teacher_a, org_id=ids.org_a, role="teacher", first_name="Tom"),
                User(id=ids.guardian_a, org_id=ids.org_a, role="guardian", first_name="Gus"),
                User(id=ids.teacher_b, org_id=ids.org_b, role="teacher", first_name="Tia"),
                SchoolClass(id=ids.class_a, org_id=ids.org_a, name="Owls"),
                SchoolClass(id=ids.class_b, org_id=ids.org_b, name="Foxes"),
            ]
        )
        await session.flush()
        session.add_all(
            [
                Student(
                    id=ids.student_linked,
                    org_id=ids.org_a,
                    class_id=ids.class_a,
                    first_name="Lina",
                    dob=date(2020, 1, 2),
                ),
                Student(
                    id=ids.student_unlinked,
                    org_id=ids.org_a,
                    class_id=ids.class_a,
                    first_name="Uma",
                ),
                Student(
                    id=ids.student_b,
                    org_id=ids.org_b,
                    class_id=ids.class_b,
                    first_name="Bo",
                ),
            ]
        )
        await session.flush()
        session.add_all(
            [
                ClassMembership(
                    org_id=ids.org_a,
                    class_id=ids.class_a,
                    user_id=ids.teacher_a,
                    membership_role="teacher",
                ),
                GuardianStudent(
                    guardian_id=ids.guardian_a, student_id=ids.student_linked, relation="mother"
                ),
            ]
        )
        await session.commit()

    return ids


@pytest_asyncio.fixture
async def app(settings: Settings, admin_client: AdminClient) -> FastAPI:
    return create_app(settings, admin_client=admin_client)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the app (same event loop as the DB fixtures)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as http:
        yield http


@pytest_asyncio.fixture
async def postgres_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create async engine for PostgreSQL integration tests.

    Requires DATABASE_URL to be set to a real PostgreSQL connection string.
    Tests using this fixture should be marked with @pytest.mark.postgres.
    """
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        pytest.skip("DATABASE_URL not set - skipping postgres test")

    if not database_url.startswith(("postgres://", "postgresql://", "postgresql+asyncpg://")):
        pytest.skip(f"DATABASE_URL is not PostgreSQL: {database_url}")

    engine = create_async_engine(
        normalize_database_url(database_url),
        poolclass=NullPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()
