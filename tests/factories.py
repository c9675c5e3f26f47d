"""
Helpers for tests that need rows with hand-picked timestamps.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, select

from dormtrack.db.session import Database
from dormtrack.models.enums import EventType, ReportCategory, ReportPriority, ReportStatus
from dormtrack.models.report import Report
from dormtrack.models.report_event import ReportEvent

TEST_SECRET = "test-secret-key-for-dormtrack-tests"


def utc(year: int, month: int, day: int, hour: int = 0, minute: int = 0, second: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)


def insert_report(
    db: Database,
    user_id: str,
    created_at: datetime,
    status: ReportStatus = ReportStatus.BARU,
    received_at: Optional[datetime] = None,
    started_at: Optional[datetime] = None,
    resolved_at: Optional[datetime] = None,
    assigned_to_id: Optional[str] = None,
) -> str:
    """Insert a report directly, bypassing the workflow."""
    with db.primary_session() as session:
        report = Report(
            user_id=user_id,
            category=ReportCategory.LISTRIK,
            title="Lampu mati",
            description="Lampu koridor mati sejak kemarin.",
            priority=ReportPriority.RENDAH,
            location="Koridor",
            status=status,
            assigned_to_id=assigned_to_id,
            created_at=created_at,
            updated_at=resolved_at or started_at or received_at or created_at,
            received_at=received_at,
            started_at=started_at,
            resolved_at=resolved_at,
        )
        session.add(report)
        session.commit()
        return report.id


def count_events(db: Database, report_id: str, event_type: Optional[EventType] = None) -> int:
    stmt = select(func.count()).select_from(ReportEvent).where(ReportEvent.report_id == report_id)
    if event_type is not None:
        stmt = stmt.where(ReportEvent.type == event_type)
    with db.primary_session() as session:
        return session.execute(stmt).scalar_one()
