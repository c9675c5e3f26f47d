"""
Read-only queries behind the dashboards.

All range filters are half-open on ``created_at``: ``start <= created_at < end``.
Duration arithmetic happens in the service on the rows returned here, so
the same code runs on PostgreSQL and SQLite.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import desc, func, select
from sqlalchemy.engine import Row
from sqlalchemy.orm import Session

from dormtrack.models.enums import ReportStatus
from dormtrack.models.report import Report


class ReportAnalyticsRepository:
    """Aggregation queries over reports; works on either store copy."""

    def __init__(self, session: Session):
        self.session = session

    def _in_range(self, start: datetime, end: datetime) -> List[Any]:
        return [Report.created_at >= start, Report.created_at < end]

    def status_counts(self, start: datetime, end: datetime) -> Dict[ReportStatus, int]:
        stmt = (
            select(Report.status, func.count())
            .where(*self._in_range(start, end))
            .group_by(Report.status)
        )
        return {status: total for status, total in self.session.execute(stmt).all()}

    def count_in_range(self, start: datetime, end: datetime) -> int:
        stmt = select(func.count()).select_from(Report).where(*self._in_range(start, end))
        return self.session.execute(stmt).scalar_one()

    def timing_rows(
        self,
        start: datetime,
        end: datetime,
        *,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[Row]:
        """
        Lightweight rows carrying only the lifecycle timestamps, newest first.
        """
        stmt = (
            select(
                Report.id,
                Report.status,
                Report.category,
                Report.title,
                Report.created_at,
                Report.received_at,
                Report.started_at,
                Report.resolved_at,
            )
            .where(*self._in_range(start, end))
            .order_by(desc(Report.created_at), desc(Report.id))
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.session.execute(stmt).all())

    def created_timestamps(self, start: datetime, end: datetime) -> List[datetime]:
        stmt = select(Report.created_at).where(*self._in_range(start, end))
        return list(self.session.execute(stmt).scalars().all())

    def timing_page(
        self,
        start: datetime,
        end: datetime,
        offset: int,
        limit: int,
    ) -> Tuple[List[Row], int]:
        return self.timing_rows(start, end, offset=offset, limit=limit), self.count_in_range(start, end)
