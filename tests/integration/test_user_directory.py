"""Integration tests for the SQL user directory."""

import uuid
from datetime import datetime, timezone

import pytest

from backend.app.db.engine import AdminClient
from backend.app.db.models import User
from backend.app.db.sql_repositories import SqlUserDirectory


@pytest.mark.asyncio
async def test_get_user(admin_client: AdminClient, school) -> None:
    directory = SqlUserDirectory(admin_client)

    record = await directory.get_user(school.teacher_a)

    assert record is not None
    assert record.org_id == school.org_a
    assert record.role == "teacher"


@pytest.mark.asyncio
async def test_admin_has_no_org(admin_client: AdminClient, school) -> None:
    record = await SqlUserDirectory(admin_client).get_user(school.admin)

    assert record is not None
    assert record.org_id is None
    assert record.email == "admin@example.com"


@pytest.mark.asyncio
async def test_unknown_user(admin_client: AdminClient, school) -> None:
    assert await SqlUserDirectory(admin_client).get_user(uuid.uuid4()) is None


@pytest.mark.asyncio
async def test_soft_deleted_user_is_hidden(admin_client: AdminClient, school) -> None:
    async with admin_client.session() as session:
        user = await session.get(User, school.teacher_b)
        user.deleted_at = datetime.now(timezone.utc)
        await session.commit()

    assert await SqlUserDirectory(admin_client).get_user(school.teacher_b) is None
