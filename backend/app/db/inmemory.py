"""In-memory implementations of repository interfaces."""

import uuid

from backend.app.db.repositories import UserRecord


class InMemoryUserDirectory:
    """In-memory implementation of UserDirectory."""

    def __init__(self, users: list[UserRecord] | None = None) -> None:
        self._users: dict[uuid.UUID, UserRecord] = {}
        self.lookups = 0
        for user in users or []:
            self.add(user)

    def add(self, user: UserRecord) -> None:
        """Register a user profile."""
        self._users[user.user_id] = user

    async def get_user(self, user_id: uuid.UUID) -> UserRecord | None:
        """Get a user profile."""
        self.lookups += 1
        return self._users.get(user_id)
