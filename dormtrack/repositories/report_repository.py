"""
Report repository: conditional workflow writes and report queries.

Every workflow mutation is a single ``UPDATE ... WHERE id = :id AND
status IN (...)`` (plus an actor predicate where the transition is
restricted to the owner or the assignee). The affected row count tells
the caller whether it won; losers re-read the row to learn why.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import and_, delete, desc, or_, select, update
from sqlalchemy.orm import Session

from dormtrack.core.utils import utc_now
from dormtrack.models.enums import ReportCategory, ReportStatus
from dormtrack.models.report import Report
from dormtrack.repositories.base_repository import BaseRepository


class ReportRepository(BaseRepository[Report]):
    """
    Data access for reports.

    Write methods return booleans rather than raising, so the lifecycle
    engine can classify a lost race itself.
    """

    def __init__(self, session: Session):
        super().__init__(Report, session)

    # ==================== Creation ====================

    def create_report(
        self,
        user_id: str,
        category: ReportCategory,
        title: str,
        description: str,
        priority: Any,
        location: str,
        photo_url: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Report:
        now = now or utc_now()
        report = Report(
            user_id=user_id,
            category=category,
            title=title,
            description=description,
            photo_url=photo_url,
            priority=priority,
            location=location,
            status=ReportStatus.BARU,
            created_at=now,
            updated_at=now,
        )
        return self.create(report)

    # ==================== Conditional writes ====================

    def _guard(
        self,
        report_id: str,
        from_statuses: Optional[Iterable[ReportStatus]],
        assigned_to: Optional[str],
        owner_id: Optional[str],
    ) -> List[Any]:
        criteria: List[Any] = [Report.id == report_id]
        if from_statuses is not None:
            criteria.append(Report.status.in_(list(from_statuses)))
        if assigned_to is not None:
            criteria.append(Report.assigned_to_id == assigned_to)
        if owner_id is not None:
            criteria.append(Report.user_id == owner_id)
        return criteria

    def compare_and_set(
        self,
        report_id: str,
        from_statuses: Iterable[ReportStatus],
        values: Dict[str, Any],
        *,
        assigned_to: Optional[str] = None,
        owner_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> bool:
        """
        Apply ``values`` only if the row still matches the expected state.

        Args:
            report_id: Target report
            from_statuses: Statuses the row must currently be in
            values: Column values to write
            assigned_to: Required current assignee, if any
            owner_id: Required reporter, if any
            now: Value for ``updated_at``

        Returns:
            True if exactly one row was updated
        """
        values = dict(values)
        values.setdefault("updated_at", now or utc_now())
        stmt = (
            update(Report)
            .where(*self._guard(report_id, from_statuses, assigned_to, owner_id))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return result.rowcount == 1

    def delete_if(
        self,
        report_id: str,
        from_statuses: Optional[Iterable[ReportStatus]] = None,
        *,
        owner_id: Optional[str] = None,
    ) -> bool:
        """
        Delete the report if it still matches; events go with it through
        the ``ON DELETE CASCADE`` foreign key.
        """
        stmt = (
            delete(Report)
            .where(*self._guard(report_id, from_statuses, None, owner_id))
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return result.rowcount == 1

    def reload(self, report_id: str) -> Optional[Report]:
        """Fresh copy of the row, ignoring anything cached in the session."""
        return self.find_by_id(report_id, refresh=True)

    # ==================== Listing ====================

    def list_reports(
        self,
        *,
        user_id: Optional[str] = None,
        status: Optional[ReportStatus] = None,
        category: Optional[ReportCategory] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> Tuple[List[Report], int]:
        """
        Page of reports, newest first, with the total matching count.
        """
        criteria: List[Any] = []
        if user_id is not None:
            criteria.append(Report.user_id == user_id)
        if status is not None:
            criteria.append(Report.status == status)
        if category is not None:
            criteria.append(Report.category == category)

        total = self.count(*criteria)
        stmt = (
            select(Report)
            .where(*criteria)
            .order_by(desc(Report.created_at), desc(Report.id))
            .offset(offset)
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars().all()), total

    def find_assigned(
        self,
        technician_id: str,
        statuses: Iterable[ReportStatus],
    ) -> List[Report]:
        """Reports assigned to ``technician_id`` in ``statuses``, newest first."""
        stmt = (
            select(Report)
            .where(
                Report.assigned_to_id == technician_id,
                Report.status.in_(list(statuses)),
            )
            .order_by(desc(Report.created_at), desc(Report.id))
        )
        return list(self.session.execute(stmt).scalars().all())

    def find_assigned_page(
        self,
        technician_id: str,
        statuses: Iterable[ReportStatus],
        *,
        cursor: Optional[str] = None,
        limit: int = 20,
    ) -> Tuple[List[Report], bool]:
        """
        Keyset page ordered by ``updated_at`` desc, then id desc.

        ``cursor`` is the id of the last report of the previous page. An
        unknown cursor starts from the beginning.

        Returns:
            (reports, has_more)
        """
        criteria: List[Any] = [
            Report.assigned_to_id == technician_id,
            Report.status.in_(list(statuses)),
        ]
        if cursor:
            anchor = self.session.execute(
                select(Report.updated_at, Report.id).where(Report.id == cursor)
            ).first()
            if anchor is not None:
                criteria.append(
                    or_(
                        Report.updated_at < anchor.updated_at,
                        and_(Report.updated_at == anchor.updated_at, Report.id < anchor.id),
                    )
                )

        stmt = (
            select(Report)
            .where(*criteria)
            .order_by(desc(Report.updated_at), desc(Report.id))
            .limit(limit + 1)
        )
        rows = list(self.session.execute(stmt).scalars().all())
        return rows[:limit], len(rows) > limit
