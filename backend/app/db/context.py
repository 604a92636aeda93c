"""Request context for tenancy and role enforcement."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from uuid import UUID

from backend.app.models.common import Role


@dataclass(frozen=True)
class RequestContext:
    """Verified caller identity.

    Rebuilt from the request's credentials on every request and used to
    enforce tenancy boundaries in all database operations.
    """

    user_id: UUID
    org_id: UUID | None = None
    roles: frozenset[Role] = field(default_factory=frozenset)
    active_role: Role | None = None
    email: str | None = None

    def has_any_role(self, allowed: Iterable[Role]) -> bool:
        """Return True if at least one assigned role is in ``allowed``."""
        return not self.roles.isdisjoint(allowed)

    def only_roles(self, *roles: Role) -> bool:
        """Return True if every assigned role is one of ``roles``."""
        return bool(self.roles) and self.roles <= set(roles)
