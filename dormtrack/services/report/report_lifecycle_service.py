"""
Report lifecycle engine.

Workflow:

    BARU --receive--> DIPROSES --start--> DIKERJAKAN --resolve--> SELESAI
      \\                 |  (assign)          |
       +-----reject------+--------------------+-----> DITOLAK

Every transition is declared once in ``TRANSITIONS``: who may trigger it,
which statuses it leaves from, what it writes and which event documents
it. Applying a transition is a single conditional UPDATE on the primary
store followed by the event insert, both in one unit of work. When the
UPDATE matches no row the report is re-read to tell the caller whether it
is missing, belongs to someone else or has already moved on.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, FrozenSet, Optional

from sqlalchemy.orm import Session

from dormtrack.core.exceptions import (
    ForbiddenError,
    InvalidStateTransitionError,
    NotFoundError,
    ValidationError,
)
from dormtrack.core.security import Identity
from dormtrack.core.utils import utc_now
from dormtrack.models.enums import EventType, ReportStatus, UserRole
from dormtrack.models.report import Report
from dormtrack.repositories.event_repository import ReportEventRepository
from dormtrack.repositories.report_repository import ReportRepository
from dormtrack.repositories.user_repository import UserRepository
from dormtrack.schemas.report import ReportResponse
from dormtrack.services.common import permissions
from dormtrack.services.common.permissions import AccessPolicy, Relation, relation_holds
from dormtrack.services.common.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransitionRule:
    """
    Declarative description of one workflow transition.

    Attributes:
        name: Transition name (receive, assign, ...)
        policy: Roles allowed and the caller-report relation required
        from_statuses: Statuses the report must be in
        to_status: Status written, or None when the status is unchanged
        stamp: Timestamp column set to the transition time
        event_type: Type of the audit event appended
        note: Default event note
    """
    name: str
    policy: AccessPolicy
    from_statuses: FrozenSet[ReportStatus]
    to_status: Optional[ReportStatus]
    event_type: EventType
    stamp: Optional[str] = None
    note: str = ""


TRANSITIONS: Dict[str, TransitionRule] = {
    rule.name: rule
    for rule in (
        TransitionRule(
            name="receive",
            policy=permissions.RECEIVE_REPORT,
            from_statuses=frozenset({ReportStatus.BARU}),
            to_status=ReportStatus.DIPROSES,
            stamp="received_at",
            event_type=EventType.RECEIVED,
            note="Admin menerima laporan.",
        ),
        TransitionRule(
            name="assign",
            policy=permissions.ASSIGN_REPORT,
            from_statuses=frozenset({ReportStatus.DIPROSES}),
            to_status=None,
            event_type=EventType.ASSIGNED,
            note="Admin assign teknisi.",
        ),
        TransitionRule(
            name="start",
            policy=permissions.START_REPORT,
            from_statuses=frozenset({ReportStatus.DIPROSES}),
            to_status=ReportStatus.DIKERJAKAN,
            stamp="started_at",
            event_type=EventType.STARTED,
            note="Teknisi mulai mengerjakan laporan.",
        ),
        TransitionRule(
            name="resolve",
            policy=permissions.RESOLVE_REPORT,
            from_statuses=frozenset({ReportStatus.DIKERJAKAN}),
            to_status=ReportStatus.SELESAI,
            stamp="resolved_at",
            event_type=EventType.RESOLVED,
            note="Teknisi menyelesaikan laporan.",
        ),
        TransitionRule(
            name="reject",
            policy=permissions.REJECT_REPORT,
            from_statuses=ReportStatus.open_statuses(),
            to_status=ReportStatus.DITOLAK,
            event_type=EventType.STATUS_CHANGED,
            note="Admin menolak laporan.",
        ),
    )
}


def _sorted_statuses(statuses: FrozenSet[ReportStatus]) -> list:
    order = list(ReportStatus)
    return [s.value for s in sorted(statuses, key=order.index)]


class ReportLifecycleService:
    """
    Applies workflow transitions against the primary store.

    Args:
        session_factory: Factory for primary-store sessions
        clock: Source of transition timestamps
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        clock: Callable[[], datetime] = utc_now,
    ):
        self._session_factory = session_factory
        self._clock = clock

    # ------------------------------------------------------------------ #
    # Public transitions
    # ------------------------------------------------------------------ #

    def receive(self, report_id: str, actor: Identity) -> ReportResponse:
        return self.apply("receive", report_id, actor)

    def assign(self, report_id: str, actor: Identity, technician_id: str) -> ReportResponse:
        if not technician_id or not technician_id.strip():
            raise ValidationError(
                "Technician is required",
                field_errors={"technician_id": ["must not be empty"]},
            )
        return self.apply("assign", report_id, actor, technician_id=technician_id.strip())

    def start(self, report_id: str, actor: Identity) -> ReportResponse:
        return self.apply("start", report_id, actor)

    def resolve(self, report_id: str, actor: Identity) -> ReportResponse:
        return self.apply("resolve", report_id, actor)

    def reject(self, report_id: str, actor: Identity, note: Optional[str] = None) -> ReportResponse:
        return self.apply("reject", report_id, actor, note=note)

    # ------------------------------------------------------------------ #
    # Engine
    # ------------------------------------------------------------------ #

    def apply(
        self,
        transition: str,
        report_id: str,
        actor: Identity,
        *,
        technician_id: Optional[str] = None,
        note: Optional[str] = None,
    ) -> ReportResponse:
        """
        Run one transition atomically.

        Raises:
            ForbiddenError: Wrong role, or not the assignee
            NotFoundError: Unknown report or technician
            ValidationError: Assignment target is not a technician
            InvalidStateTransitionError: Report is not in a source status
        """
        rule = TRANSITIONS[transition]
        try:
            rule.policy.require_role(actor)
        except ForbiddenError:
            logger.warning(
                "Transition refused: role",
                extra={"report_id": report_id, "actor_id": actor.id, "transition": rule.name},
            )
            raise

        relation = rule.policy.relation_for(actor)
        now = self._clock()

        with UnitOfWork(self._session_factory) as uow:
            reports = uow.get_repo(ReportRepository)
            events = uow.get_repo(ReportEventRepository)

            values: Dict[str, Any] = {}
            if rule.to_status is not None:
                values["status"] = rule.to_status
            if rule.stamp is not None:
                values[rule.stamp] = now

            event_note = rule.note
            if rule.name == "assign":
                self._check_technician(uow.get_repo(UserRepository), technician_id)
                values["assigned_to_id"] = technician_id
                event_note = f"Admin assign teknisi ({technician_id})."
            elif rule.name == "reject" and note and note.strip():
                event_note = f"Admin menolak laporan: {note.strip()}"

            won = reports.compare_and_set(
                report_id,
                rule.from_statuses,
                values,
                assigned_to=actor.id if relation is Relation.ASSIGNEE else None,
                now=now,
            )
            if not won:
                self._raise_for_lost_update(reports, rule, report_id, actor, relation)

            events.append(report_id, actor.id, rule.event_type, event_note, at=now)
            report = reports.reload(report_id)
            response = ReportResponse.model_validate(report)

        logger.info(
            "Report %s: %s -> %s",
            report_id,
            rule.name,
            response.status.value,
            extra={"report_id": report_id, "actor_id": actor.id, "transition": rule.name},
        )
        return response

    def _check_technician(self, users: UserRepository, technician_id: Optional[str]) -> None:
        """Role read inside the transaction, locked until commit."""
        role = users.find_role_locked(technician_id)
        if role is None:
            raise NotFoundError("Technician", technician_id)
        if role is not UserRole.TEKNISI:
            raise ValidationError(
                "Assignee must be a technician",
                field_errors={"technician_id": [f"user has role {role.value}"]},
            )

    def _raise_for_lost_update(
        self,
        reports: ReportRepository,
        rule: TransitionRule,
        report_id: str,
        actor: Identity,
        relation: Relation,
    ) -> None:
        """Re-read the row and raise the precise reason the update missed."""
        current: Optional[Report] = reports.reload(report_id)
        extra = {"report_id": report_id, "actor_id": actor.id, "transition": rule.name}

        if current is None:
            logger.warning("Transition refused: not found", extra=extra)
            raise NotFoundError("Report", report_id)

        if not relation_holds(relation, actor, current):
            logger.warning("Transition refused: not the assignee", extra=extra)
            raise ForbiddenError(
                "This report is not assigned to you",
                details={"report_id": report_id, "operation": rule.name},
            )

        logger.warning(
            "Transition refused: status %s", current.status.value, extra=extra,
        )
        raise InvalidStateTransitionError(
            f"Cannot {rule.name} a report with status {current.status.value}",
            current_status=current.status.value,
            expected_statuses=_sorted_statuses(rule.from_statuses),
        )
