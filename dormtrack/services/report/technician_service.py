"""
Technician-facing queues and the admin's assignee picker.

All reads here use the primary store: a technician who was just assigned
a report must see it immediately.
"""

import logging
from typing import List, Optional

from dormtrack.core.constants import DEFAULT_HISTORY_LIMIT, MAX_HISTORY_LIMIT
from dormtrack.core.pagination import clamp_limit
from dormtrack.core.security import Identity
from dormtrack.db.read_mode import ReadMode
from dormtrack.db.session import Database
from dormtrack.models.enums import ReportStatus, UserRole
from dormtrack.repositories.report_repository import ReportRepository
from dormtrack.repositories.user_repository import UserRepository
from dormtrack.schemas.common import CursorPaginationMeta
from dormtrack.schemas.report import ReportResponse, TechnicianHistoryResponse, TechnicianTasksResponse
from dormtrack.schemas.user import TechnicianResponse
from dormtrack.services.common import permissions

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = (ReportStatus.DIPROSES, ReportStatus.DIKERJAKAN)
FINISHED_STATUSES = (ReportStatus.SELESAI, ReportStatus.DITOLAK)


class TechnicianService:

    def __init__(self, database: Database):
        self._db = database

    def list_technicians(self, actor: Identity) -> List[TechnicianResponse]:
        """Technicians ordered by name, for the assignment form."""
        permissions.LIST_TECHNICIANS.require_role(actor)
        with self._db.reading(ReadMode.STRONG) as session:
            users = UserRepository(session).list_by_role(UserRole.TEKNISI)
            return [TechnicianResponse.model_validate(u) for u in users]

    def tasks(self, actor: Identity) -> TechnicianTasksResponse:
        """Reports assigned to the caller that still need work."""
        permissions.VIEW_OWN_TASKS.require_role(actor)
        with self._db.reading(ReadMode.STRONG) as session:
            reports = ReportRepository(session).find_assigned(actor.id, ACTIVE_STATUSES)
            items = [ReportResponse.model_validate(r) for r in reports]
        return TechnicianTasksResponse(items=items, total=len(items))

    def history(
        self,
        actor: Identity,
        cursor: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> TechnicianHistoryResponse:
        """Finished or rejected reports of the caller, most recently updated first."""
        permissions.VIEW_OWN_TASKS.require_role(actor)
        limit = clamp_limit(limit, DEFAULT_HISTORY_LIMIT, 1, MAX_HISTORY_LIMIT)

        with self._db.reading(ReadMode.STRONG) as session:
            reports, has_more = ReportRepository(session).find_assigned_page(
                actor.id, FINISHED_STATUSES, cursor=cursor, limit=limit,
            )
            items = [ReportResponse.model_validate(r) for r in reports]

        next_cursor = items[-1].id if has_more and items else None
        return TechnicianHistoryResponse(
            items=items,
            meta=CursorPaginationMeta(next_cursor=next_cursor, has_more=has_more),
        )
