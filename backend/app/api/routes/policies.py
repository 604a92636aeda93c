"""Access policies shared by route modules.

Policies are built at import time, so a typo in a role name fails startup.
"""

from backend.app.api.gateway import RoutePolicy
from backend.app.models.common import Role

STAFF = (Role.principal, Role.admin, Role.teacher)
STAFF_AND_GUARDIAN_ROLES = (*STAFF, Role.guardian)
SCHOOL_ROLES = (*STAFF_AND_GUARDIAN_ROLES, Role.parent)

ANY_MEMBER = RoutePolicy(require_org=True, allowed_roles=None)
ADMIN_ONLY = RoutePolicy.for_roles(Role.admin, require_org=False)
LEADERSHIP = RoutePolicy.for_roles(Role.principal, Role.admin)
STAFF_IN_ORG = RoutePolicy.for_roles(*STAFF)
STAFF_AND_GUARDIANS = RoutePolicy.for_roles(*STAFF_AND_GUARDIAN_ROLES)
STAFF_AND_GUARDIANS_ANY_ORG = RoutePolicy.for_roles(*STAFF_AND_GUARDIAN_ROLES, require_org=False)
SCHOOL_MEMBERS = RoutePolicy.for_roles(*SCHOOL_ROLES)
