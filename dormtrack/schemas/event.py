"""
Audit trail schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import field_validator

from dormtrack.core.utils import as_utc
from dormtrack.models.enums import EventType, ReportStatus
from dormtrack.schemas.common import BaseSchema
from dormtrack.schemas.user import UserSummary

__all__ = ["ReportEventResponse", "ReportEventListResponse"]


class ReportEventResponse(BaseSchema):
    id: str
    report_id: str
    actor_id: str
    type: EventType
    note: Optional[str] = None
    at: datetime
    actor: Optional[UserSummary] = None

    @field_validator("at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        return as_utc(v)


class ReportEventListResponse(BaseSchema):
    report_id: str
    status: ReportStatus
    events: List[ReportEventResponse]
