"""
Dashboard schemas: status counts and lifecycle timing.
"""

from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import Field

from dormtrack.db.read_mode import ReadMode
from dormtrack.models.enums import ReportCategory, ReportStatus
from dormtrack.schemas.common import BaseSchema, PaginationMeta

__all__ = [
    "DateRange",
    "DailyCount",
    "StatusStatsResponse",
    "TimingRow",
    "TimingSummary",
    "TimingHuman",
    "TimingResponse",
    "TimingDetailsResponse",
]


class DateRange(BaseSchema):
    """Half-open UTC window ``[start, end)``."""

    start: datetime
    end: datetime


class DailyCount(BaseSchema):
    day: date
    total: int = Field(..., ge=0)


class StatusStatsResponse(BaseSchema):
    mode: ReadMode
    range: DateRange
    per_status: Dict[ReportStatus, int]
    per_day: List[DailyCount]


class TimingRow(BaseSchema):
    id: str
    title: str
    category: ReportCategory
    status: ReportStatus
    created_at: datetime
    received_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    response_ms: Optional[int] = Field(default=None, description="received_at - created_at")
    work_ms: Optional[int] = Field(default=None, description="resolved_at - started_at")
    total_ms: Optional[int] = Field(default=None, description="resolved_at - created_at")


class TimingSummary(BaseSchema):
    """
    Counts and average durations over every report in the range.

    Averages are whole milliseconds; a metric with no qualifying report
    averages to 0.
    """

    total: int = 0
    finished: int = 0
    rejected: int = 0
    received: int = 0
    in_progress: int = 0
    avg_response_ms: int = 0
    avg_work_ms: int = 0
    avg_total_ms: int = 0


class TimingHuman(BaseSchema):
    """Averages floored to whole minutes."""

    avg_response_min: int = 0
    avg_work_min: int = 0
    avg_total_min: int = 0


class TimingResponse(BaseSchema):
    mode: ReadMode
    range: DateRange
    limit: int
    summary: TimingSummary
    human: TimingHuman
    reports: List[TimingRow]


class TimingDetailsResponse(BaseSchema):
    mode: ReadMode
    range: DateRange
    items: List[TimingRow]
    meta: PaginationMeta
