from dormtrack.repositories.analytics_repository import ReportAnalyticsRepository
from dormtrack.repositories.base_repository import BaseRepository
from dormtrack.repositories.event_repository import ReportEventRepository
from dormtrack.repositories.report_repository import ReportRepository
from dormtrack.repositories.user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "ReportAnalyticsRepository",
    "ReportEventRepository",
    "ReportRepository",
    "UserRepository",
]
