"""SQL implementations of repository interfaces."""

import uuid

from sqlalchemy import select

from backend.app.db.engine import AdminClient
from backend.app.db.models import User
from backend.app.db.repositories import UserRecord


class SqlUserDirectory:
    """SQL implementation of UserDirectory backed by the privileged client."""

    def __init__(self, client: AdminClient) -> None:
        self._client = client

    async def get_user(self, user_id: uuid.UUID) -> UserRecord | None:
        """Get a user profile, ignoring soft-deleted rows."""
        async with self._client.session() as session:
            user = await session.scalar(
                select(User).where(User.id == user_id, User.deleted_at.is_(None))
            )

        if user is None:
            return None

        return UserRecord(user_id=user.id, org_id=user.org_id, role=user.role, email=user.email)
