"""
Report model: a single facility complaint and its workflow state.

Content fields are fixed at creation (editable only while BARU); the
workflow fields are written exclusively by conditional updates issued
from the lifecycle engine.
"""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import CheckConstraint, DateTime, Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dormtrack.models.base import BaseModel, TimestampMixin
from dormtrack.models.enums import ReportCategory, ReportPriority, ReportStatus

if TYPE_CHECKING:
    from dormtrack.models.report_event import ReportEvent
    from dormtrack.models.user import User

__all__ = ["Report"]


class Report(BaseModel, TimestampMixin):
    """
    Facility complaint filed by a resident.

    Attributes:
        user_id: Reporter identity
        category: Facility area
        title: Short summary
        description: Full description
        photo_url: Optional photo reference
        priority: Reporter-declared urgency
        location: Where the problem is

        status: Current workflow status
        assigned_to_id: Technician handling the report, kept after rejection

        received_at: Set when an admin receives the report
        started_at: Set when the assigned technician starts work
        resolved_at: Set when the assigned technician resolves it
    """

    __tablename__ = "reports"
    __table_args__ = (
        Index("ix_reports_status_created", "status", "created_at"),
        Index("ix_reports_user_created", "user_id", "created_at"),
        Index("ix_reports_assignee_status", "assigned_to_id", "status"),
        Index("ix_reports_assignee_updated", "assigned_to_id", "updated_at"),
        CheckConstraint(
            "assigned_to_id IS NULL OR status <> 'BARU'",
            name="check_reports_unassigned_while_new",
        ),
    )

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        comment="Reporter identity",
    )

    # Content
    category: Mapped[ReportCategory] = mapped_column(
        Enum(ReportCategory, name="report_category_enum"),
        nullable=False,
        comment="Facility area",
    )

    title: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        comment="Short summary",
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Full description",
    )

    photo_url: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
        comment="Optional photo reference",
    )

    priority: Mapped[ReportPriority] = mapped_column(
        Enum(ReportPriority, name="report_priority_enum"),
        nullable=False,
        default=ReportPriority.SEDANG,
        comment="Reporter-declared urgency",
    )

    location: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Room number or area",
    )

    # Workflow
    status: Mapped[ReportStatus] = mapped_column(
        Enum(ReportStatus, name="report_status_enum"),
        nullable=False,
        default=ReportStatus.BARU,
        comment="Current workflow status",
    )

    assigned_to_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=True,
        comment="Assigned technician",
    )

    received_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Admin receipt timestamp",
    )

    started_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Work start timestamp",
    )

    resolved_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Resolution timestamp",
    )

    # Relationships
    reporter: Mapped["User"] = relationship(
        "User",
        foreign_keys=[user_id],
        lazy="selectin",
    )

    assignee: Mapped[Optional["User"]] = relationship(
        "User",
        foreign_keys=[assigned_to_id],
        lazy="selectin",
    )

    events: Mapped[List["ReportEvent"]] = relationship(
        "ReportEvent",
        back_populates="report",
        lazy="select",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ReportEvent.at.asc()",
    )

    def __repr__(self) -> str:
        return (
            f"<Report(id={self.id}, "
            f"status={self.status.value}, "
            f"assigned_to={self.assigned_to_id})>"
        )

    def is_owned_by(self, user_id: str) -> bool:
        return self.user_id == user_id

    def is_assigned_to(self, user_id: str) -> bool:
        return self.assigned_to_id is not None and self.assigned_to_id == user_id
