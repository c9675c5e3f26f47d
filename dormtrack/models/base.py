"""
Shared column definitions for dormtrack tables.

Ids are UUID strings generated client-side, and timestamps are UTC-aware.
"""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from dormtrack.core.utils import generate_uuid, utc_now
from dormtrack.db.base import Base


class BaseModel(Base):
    """Abstract table with a string UUID primary key."""

    __abstract__ = True

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=generate_uuid,
        nullable=False,
        comment="Primary key (UUID)"
    )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.id})>"


class TimestampMixin:
    """
    ``created_at`` and ``updated_at`` columns.

    Timestamps are generated in Python rather than by the server so every
    value written within one transition shares the same clock reading.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        index=True,
        comment="Row insert time, UTC"
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
        comment="Last modification time, UTC"
    )
