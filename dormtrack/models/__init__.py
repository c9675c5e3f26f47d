"""
ORM models.

Importing this package registers every table on ``Base.metadata``.
"""

from dormtrack.models.enums import (
    EventType,
    ReportCategory,
    ReportPriority,
    ReportStatus,
    UserRole,
)
from dormtrack.models.report import Report
from dormtrack.models.report_event import ReportEvent
from dormtrack.models.user import User

__all__ = [
    "EventType",
    "Report",
    "ReportCategory",
    "ReportEvent",
    "ReportPriority",
    "ReportStatus",
    "User",
    "UserRole",
]
