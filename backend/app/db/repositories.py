"""Repository protocol interfaces for data access."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID


@dataclass
class UserRecord:
    """User profile data record."""

    user_id: UUID
    org_id: UUID | None
    role: str
    email: str | None = None


class UserDirectory(Protocol):
    """Lookup of user profiles by id.

    Used by the identity resolver to fill in the organization and role when
    the token metadata does not carry them.
    """

    async def get_user(self, user_id: UUID) -> UserRecord | None:
        """Get a user profile.

        Args:
            user_id: User ID (token subject)

        Returns:
            UserRecord or None if not found
        """
        ...
