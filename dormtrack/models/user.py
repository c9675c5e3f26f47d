"""
Identity rows.

The table belongs to the external authentication collaborator; this
application only reads it (role checks, reporter and actor summaries).
"""

from typing import Optional

from sqlalchemy import Enum, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from dormtrack.models.base import BaseModel, TimestampMixin
from dormtrack.models.enums import UserRole

__all__ = ["User"]


class User(BaseModel, TimestampMixin):
    """Resident, administrator or technician."""

    __tablename__ = "users"
    __table_args__ = (
        Index("ix_users_role_name", "role", "full_name"),
    )

    full_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Display name",
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Login email",
    )

    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role_enum"),
        nullable=False,
        default=UserRole.USER,
        comment="Identity role",
    )

    room_number: Mapped[Optional[str]] = mapped_column(
        String(20),
        nullable=True,
        comment="Dormitory room, residents only",
    )
