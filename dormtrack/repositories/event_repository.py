"""
Event repository. Append and read only; there is no update path.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import asc, select
from sqlalchemy.orm import Session

from dormtrack.core.utils import utc_now
from dormtrack.models.enums import EventType
from dormtrack.models.report_event import ReportEvent
from dormtrack.repositories.base_repository import BaseRepository


class ReportEventRepository(BaseRepository[ReportEvent]):

    def __init__(self, session: Session):
        super().__init__(ReportEvent, session)

    def append(
        self,
        report_id: str,
        actor_id: str,
        event_type: EventType,
        note: Optional[str] = None,
        at: Optional[datetime] = None,
    ) -> ReportEvent:
        event = ReportEvent(
            report_id=report_id,
            actor_id=actor_id,
            type=event_type,
            note=note,
            at=at or utc_now(),
        )
        return self.create(event)

    def list_for_report(self, report_id: str) -> List[ReportEvent]:
        """Events of one report, oldest first."""
        stmt = (
            select(ReportEvent)
            .where(ReportEvent.report_id == report_id)
            .order_by(asc(ReportEvent.at), asc(ReportEvent.id))
        )
        return list(self.session.execute(stmt).scalars().all())
