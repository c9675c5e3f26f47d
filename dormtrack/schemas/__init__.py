from dormtrack.schemas.common import (
    BaseSchema,
    CursorPaginationMeta,
    MessageResponse,
    PaginatedResponse,
    PaginationMeta,
    PaginationParams,
)
from dormtrack.schemas.event import ReportEventListResponse, ReportEventResponse
from dormtrack.schemas.report import (
    AssignRequest,
    RejectRequest,
    ReportCreate,
    ReportDetailResponse,
    ReportListResponse,
    ReportResponse,
    ReportUpdate,
    TechnicianHistoryResponse,
    TechnicianTasksResponse,
)
from dormtrack.schemas.stats import (
    DailyCount,
    DateRange,
    StatusStatsResponse,
    TimingDetailsResponse,
    TimingResponse,
    TimingRow,
    TimingSummary,
)
from dormtrack.schemas.user import TechnicianResponse, UserSummary

__all__ = [
    "AssignRequest",
    "BaseSchema",
    "CursorPaginationMeta",
    "DailyCount",
    "DateRange",
    "MessageResponse",
    "PaginatedResponse",
    "PaginationMeta",
    "PaginationParams",
    "RejectRequest",
    "ReportCreate",
    "ReportDetailResponse",
    "ReportEventListResponse",
    "ReportEventResponse",
    "ReportListResponse",
    "ReportResponse",
    "ReportUpdate",
    "StatusStatsResponse",
    "TechnicianHistoryResponse",
    "TechnicianResponse",
    "TechnicianTasksResponse",
    "TimingDetailsResponse",
    "TimingResponse",
    "TimingRow",
    "TimingSummary",
    "UserSummary",
]
