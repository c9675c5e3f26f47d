from dormtrack.services.report.report_analytics_service import ReportAnalyticsService
from dormtrack.services.report.report_lifecycle_service import (
    TRANSITIONS,
    ReportLifecycleService,
    TransitionRule,
)
from dormtrack.services.report.report_service import ReportService
from dormtrack.services.report.technician_service import TechnicianService

__all__ = [
    "ReportAnalyticsService",
    "ReportLifecycleService",
    "ReportService",
    "TRANSITIONS",
    "TechnicianService",
    "TransitionRule",
]
