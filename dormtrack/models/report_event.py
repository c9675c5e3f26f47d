"""
Append-only audit trail, one row per successful report transition.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dormtrack.core.utils import utc_now
from dormtrack.models.base import BaseModel
from dormtrack.models.enums import EventType

if TYPE_CHECKING:
    from dormtrack.models.report import Report
    from dormtrack.models.user import User

__all__ = ["ReportEvent"]


class ReportEvent(BaseModel):
    """
    Immutable record of one report transition.

    Rows are inserted in the same transaction as the report update they
    document and are never updated afterwards.
    """

    __tablename__ = "report_events"
    __table_args__ = (
        Index("ix_report_events_report_at", "report_id", "at"),
    )

    report_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("reports.id", ondelete="CASCADE"),
        nullable=False,
        comment="Report the event documents",
    )

    actor_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        comment="Identity that triggered the transition",
    )

    type: Mapped[EventType] = mapped_column(
        Enum(EventType, name="report_event_type_enum"),
        nullable=False,
        comment="Transition kind",
    )

    note: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Free-text note",
    )

    at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        comment="Event timestamp (UTC)",
    )

    report: Mapped["Report"] = relationship(
        "Report",
        back_populates="events",
    )

    actor: Mapped["User"] = relationship(
        "User",
        foreign_keys=[actor_id],
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<ReportEvent(report={self.report_id}, type={self.type.value})>"
