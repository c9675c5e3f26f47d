"""
Identity summaries embedded in report responses.
"""

from typing import Optional

from pydantic import Field

from dormtrack.models.enums import UserRole
from dormtrack.schemas.common import BaseSchema

__all__ = ["UserSummary", "TechnicianResponse"]


class UserSummary(BaseSchema):
    id: str
    full_name: str
    room_number: Optional[str] = None


class TechnicianResponse(BaseSchema):
    """Assignable technician."""

    id: str
    full_name: str = Field(..., description="Display name")
    email: str
    role: UserRole = UserRole.TEKNISI
