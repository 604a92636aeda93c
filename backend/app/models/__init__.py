"""Models package - re-exports for convenience."""

from backend.app.models.announcements import AnnouncementCreate, AnnouncementQuery
from backend.app.models.attendance import (
    AttendanceBatchCreate,
    AttendanceBatchRecord,
    AttendanceCreate,
    AttendanceDeleteQuery,
    AttendanceQuery,
    AttendanceUpdate,
)
from backend.app.models.common import AttendanceStatus, Gender, Role, ThreadType
from backend.app.models.events import EventCreate, EventQuery
from backend.app.models.messages import (
    MessageCreate,
    MessageDeleteQuery,
    MessageItemCreate,
    MessageItemQuery,
    MessageUpdate,
)
from backend.app.models.orgs import OrgCreate, OrgDeleteQuery, OrgListQuery, OrgUpdate
from backend.app.models.students import (
    StudentCreate,
    StudentDeleteQuery,
    StudentQuery,
    StudentUpdate,
)
from backend.app.models.users import ResourceIdParam, UserOrgIdQuery

__all__ = [
    # Common
    "Role",
    "AttendanceStatus",
    "Gender",
    "ThreadType",
    # Users
    "UserOrgIdQuery",
    "ResourceIdParam",
    # Orgs
    "OrgListQuery",
    "OrgCreate",
    "OrgUpdate",
    "OrgDeleteQuery",
    # Attendance
    "AttendanceQuery",
    "AttendanceCreate",
    "AttendanceBatchRecord",
    "AttendanceBatchCreate",
    "AttendanceUpdate",
    "AttendanceDeleteQuery",
    # Students
    "StudentQuery",
    "StudentCreate",
    "StudentUpdate",
    "StudentDeleteQuery",
    # Messages
    "MessageCreate",
    "MessageUpdate",
    "MessageDeleteQuery",
    "MessageItemQuery",
    "MessageItemCreate",
    # Announcements
    "AnnouncementQuery",
    "AnnouncementCreate",
    # Events
    "EventQuery",
    "EventCreate",
]
