"""
Report service: creation, owner edits, deletion and the read paths.

Writes go through a unit of work on the primary store. Listing takes a
read mode and may be served by the secondary store; single-report reads
(detail, events) always use the primary so access checks see the
current assignee.
"""

import logging
from typing import Callable, Optional

from dormtrack.config.settings import Settings
from dormtrack.core.constants import UNKNOWN_LOCATION
from dormtrack.core.exceptions import (
    ForbiddenError,
    InvalidStateTransitionError,
    NotFoundError,
    ValidationError,
)
from dormtrack.core.pagination import normalize_pagination, paginate_items
from dormtrack.core.security import Identity
from dormtrack.core.utils import utc_now
from dormtrack.db.read_mode import ReadMode
from dormtrack.db.session import Database
from dormtrack.models.enums import EventType, ReportCategory, ReportStatus, UserRole
from dormtrack.models.report import Report
from dormtrack.repositories.event_repository import ReportEventRepository
from dormtrack.repositories.report_repository import ReportRepository
from dormtrack.schemas.event import ReportEventListResponse, ReportEventResponse
from dormtrack.schemas.report import (
    ReportCreate,
    ReportDetailResponse,
    ReportListResponse,
    ReportResponse,
    ReportUpdate,
)
from dormtrack.services.common import permissions
from dormtrack.services.common.permissions import Relation
from dormtrack.services.common.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

REPORTED_NOTE = "Penghuni membuat laporan."


class ReportService:
    """
    Report CRUD and scoped listing.

    Args:
        database: Primary and optional secondary store
        config: Workflow policy flags
    """

    def __init__(self, database: Database, config: Settings, clock: Callable = utc_now):
        self._db = database
        self._config = config
        self._clock = clock

    # ------------------------------------------------------------------ #
    # Create
    # ------------------------------------------------------------------ #

    def create(self, actor: Identity, request: ReportCreate) -> ReportResponse:
        """File a new report in status BARU with its REPORTED event."""
        permissions.CREATE_REPORT.require_role(actor)

        location = request.location or actor.room_number or UNKNOWN_LOCATION
        now = self._clock()

        with UnitOfWork(self._db.session_factory) as uow:
            reports = uow.get_repo(ReportRepository)
            report = reports.create_report(
                user_id=actor.id,
                category=request.category,
                title=request.title,
                description=request.description,
                priority=request.priority,
                location=location,
                photo_url=request.photo_url,
                now=now,
            )
            uow.get_repo(ReportEventRepository).append(
                report.id, actor.id, EventType.REPORTED, REPORTED_NOTE, at=now,
            )
            response = ReportResponse.model_validate(reports.reload(report.id))

        logger.info(
            "Report created",
            extra={"report_id": response.id, "actor_id": actor.id, "transition": "create"},
        )
        return response

    # ------------------------------------------------------------------ #
    # Edit / delete
    # ------------------------------------------------------------------ #

    def update(self, report_id: str, actor: Identity, request: ReportUpdate) -> ReportResponse:
        """
        Apply an owner's edit while the report is still BARU.

        Raises:
            ForbiddenError: Not the owner, or the request tries to set status
            ValidationError: Nothing to change
            NotFoundError: Unknown report
            InvalidStateTransitionError: Report has left BARU
        """
        permissions.EDIT_REPORT.require_role(actor)
        if "status" in request.model_fields_set:
            raise ForbiddenError("Status cannot be changed by editing a report")

        changes = request.changes()
        if not changes:
            raise ValidationError("No fields to update")

        with UnitOfWork(self._db.session_factory) as uow:
            reports = uow.get_repo(ReportRepository)
            won = reports.compare_and_set(
                report_id,
                {ReportStatus.BARU},
                changes,
                owner_id=actor.id,
                now=self._clock(),
            )
            if not won:
                current = reports.reload(report_id)
                self._raise_for_owner_write(current, report_id, actor, "edit")
            response = ReportResponse.model_validate(reports.reload(report_id))

        logger.info(
            "Report edited: %s",
            ", ".join(sorted(changes)),
            extra={"report_id": report_id, "actor_id": actor.id, "transition": "edit"},
        )
        return response

    def delete(self, report_id: str, actor: Identity) -> None:
        """
        Remove a report and its events.

        Owners may delete only while BARU. Admins may delete in any status
        when ``ADMIN_DELETE_ANY_STATUS`` is on, otherwise only while BARU.
        """
        policy = permissions.DELETE_REPORT
        policy.require_role(actor)
        relation = policy.relation_for(actor)

        statuses = {ReportStatus.BARU}
        if actor.has_role(UserRole.ADMIN) and self._config.ADMIN_DELETE_ANY_STATUS:
            statuses = None

        with UnitOfWork(self._db.session_factory) as uow:
            reports = uow.get_repo(ReportRepository)
            won = reports.delete_if(
                report_id,
                statuses,
                owner_id=actor.id if relation is Relation.OWNER else None,
            )
            if not won:
                current = reports.reload(report_id)
                self._raise_for_owner_write(
                    current, report_id, actor, "delete", owner_scoped=relation is Relation.OWNER,
                )

        logger.info(
            "Report deleted",
            extra={"report_id": report_id, "actor_id": actor.id, "transition": "delete"},
        )

    def _raise_for_owner_write(
        self,
        current: Optional[Report],
        report_id: str,
        actor: Identity,
        operation: str,
        owner_scoped: bool = True,
    ) -> None:
        extra = {"report_id": report_id, "actor_id": actor.id, "transition": operation}
        if current is None:
            logger.warning("%s refused: not found", operation, extra=extra)
            raise NotFoundError("Report", report_id)
        if owner_scoped and not current.is_owned_by(actor.id):
            logger.warning("%s refused: not the owner", operation, extra=extra)
            raise ForbiddenError(f"Only the reporter may {operation} this report")
        logger.warning("%s refused: status %s", operation, current.status.value, extra=extra)
        raise InvalidStateTransitionError(
            f"Cannot {operation} a report with status {current.status.value}",
            current_status=current.status.value,
            expected_statuses=[ReportStatus.BARU.value],
        )

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    def list_reports(
        self,
        actor: Identity,
        mode: ReadMode,
        *,
        status: Optional[ReportStatus] = None,
        category: Optional[ReportCategory] = None,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> ReportListResponse:
        """
        Paged listing, newest first. Residents see their own reports,
        admins see everything, technicians use their task queue instead.
        """
        policy = permissions.LIST_REPORTS
        policy.require_role(actor)
        owner_id = actor.id if policy.relation_for(actor) is Relation.OWNER else None

        params = normalize_pagination(page, page_size)

        with self._db.reading(mode) as session:
            items, total = ReportRepository(session).list_reports(
                user_id=owner_id,
                status=status,
                category=category,
                offset=params.offset,
                limit=params.limit,
            )
            page_data = paginate_items(
                items=items,
                total_items=total,
                params=params,
                mapper=ReportResponse.model_validate,
            )

        return ReportListResponse(
            items=page_data.items,
            meta=page_data.meta,
            mode=mode,
        )

    def _load_visible(self, session, report_id: str, actor: Identity) -> Report:
        report = ReportRepository(session).find_by_id(report_id)
        if report is None:
            raise NotFoundError("Report", report_id)
        permissions.VIEW_REPORT.enforce(actor, report)
        return report

    def get_detail(self, report_id: str, actor: Identity) -> ReportDetailResponse:
        with self._db.reading(ReadMode.STRONG) as session:
            report = self._load_visible(session, report_id, actor)
            return ReportDetailResponse(
                report=ReportResponse.model_validate(report),
                viewer_role=actor.role,
            )

    def get_events(self, report_id: str, actor: Identity) -> ReportEventListResponse:
        """Audit trail, oldest first, for the owner, the assignee or an admin."""
        with self._db.reading(ReadMode.STRONG) as session:
            report = self._load_visible(session, report_id, actor)
            events = ReportEventRepository(session).list_for_report(report_id)
            return ReportEventListResponse(
                report_id=report.id,
                status=report.status,
                events=[ReportEventResponse.model_validate(e) for e in events],
            )
