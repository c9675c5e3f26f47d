"""
Report request and response schemas.

Length limits mirror the resident-facing form: title 3-200, description
5-2000, photo URL up to 500, location 1-100.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from pydantic import AliasChoices, Field, field_validator

from dormtrack.core.utils import as_utc
from dormtrack.db.read_mode import ReadMode
from dormtrack.models.enums import ReportCategory, ReportPriority, ReportStatus, UserRole
from dormtrack.schemas.common import BaseSchema, CursorPaginatedResponse, PaginationMeta
from dormtrack.schemas.user import UserSummary

__all__ = [
    "ReportCreate",
    "ReportUpdate",
    "AssignRequest",
    "RejectRequest",
    "ReportResponse",
    "ReportDetailResponse",
    "ReportListResponse",
    "TechnicianTasksResponse",
    "TechnicianHistoryResponse",
]

_REPORT_FIELDS = ("title", "description", "photo_url", "priority", "location")


def _normalize_photo_url(v: Optional[str]) -> Optional[str]:
    """Blank means no photo; anything else must be an http(s) URL."""
    if v is None:
        return None
    v = v.strip()
    if not v:
        return None
    if len(v) > 500:
        raise ValueError("Photo URL must be at most 500 characters")
    parsed = urlparse(v)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("Photo URL must be a valid http(s) URL")
    return v


class ReportCreate(BaseSchema):
    """
    New report filed by a resident.

    ``location`` may be omitted or blank; the service then uses the
    reporter's room number.
    """

    category: ReportCategory = Field(..., validation_alias=AliasChoices("category", "kategori"))
    title: str = Field(..., min_length=3, max_length=200, validation_alias=AliasChoices("title", "judul"))
    description: str = Field(
        ...,
        min_length=5,
        max_length=2000,
        validation_alias=AliasChoices("description", "deskripsi"),
    )
    photo_url: Optional[str] = Field(default=None, validation_alias=AliasChoices("photo_url", "fotoUrl"))
    priority: ReportPriority = Field(
        default=ReportPriority.SEDANG,
        validation_alias=AliasChoices("priority", "prioritas"),
    )
    location: Optional[str] = Field(
        default=None,
        max_length=100,
        validation_alias=AliasChoices("location", "lokasi"),
    )

    @field_validator("photo_url")
    @classmethod
    def validate_photo_url(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_photo_url(v)

    @field_validator("location")
    @classmethod
    def blank_location_is_missing(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v


class ReportUpdate(BaseSchema):
    """
    Owner edit of a report that is still BARU.

    Only fields present in the request are applied. ``status`` is accepted
    by the parser so the service can refuse it explicitly.
    """

    title: Optional[str] = Field(default=None, min_length=3, max_length=200, validation_alias=AliasChoices("title", "judul"))
    description: Optional[str] = Field(
        default=None,
        min_length=5,
        max_length=2000,
        validation_alias=AliasChoices("description", "deskripsi"),
    )
    photo_url: Optional[str] = Field(default=None, validation_alias=AliasChoices("photo_url", "fotoUrl"))
    priority: Optional[ReportPriority] = Field(default=None, validation_alias=AliasChoices("priority", "prioritas"))
    location: Optional[str] = Field(
        default=None,
        min_length=1,
        max_length=100,
        validation_alias=AliasChoices("location", "lokasi"),
    )
    status: Optional[str] = None

    @field_validator("photo_url")
    @classmethod
    def validate_photo_url(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_photo_url(v)

    def changes(self) -> Dict[str, Any]:
        """Fields explicitly sent, excluding ``status``."""
        sent = self.model_fields_set
        changes = {name: getattr(self, name) for name in _REPORT_FIELDS if name in sent}
        for required in ("title", "description", "priority", "location"):
            if required in changes and changes[required] is None:
                changes.pop(required)
        return changes


class AssignRequest(BaseSchema):
    technician_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("technician_id", "teknisiId"),
        description="Identity to assign; must currently hold the TEKNISI role",
    )


class RejectRequest(BaseSchema):
    note: Optional[str] = Field(default=None, max_length=500, description="Reason shown in the audit trail")


class ReportResponse(BaseSchema):
    id: str
    user_id: str
    category: ReportCategory
    title: str
    description: str
    photo_url: Optional[str] = None
    priority: ReportPriority
    location: str
    status: ReportStatus
    assigned_to_id: Optional[str] = None
    received_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    reporter: Optional[UserSummary] = None
    assignee: Optional[UserSummary] = None

    @field_validator("received_at", "started_at", "resolved_at", "created_at", "updated_at")
    @classmethod
    def ensure_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v) if v is not None else None


class ReportDetailResponse(BaseSchema):
    report: ReportResponse
    viewer_role: UserRole


class ReportListResponse(BaseSchema):
    items: List[ReportResponse]
    meta: PaginationMeta
    mode: ReadMode


class TechnicianTasksResponse(BaseSchema):
    items: List[ReportResponse]
    total: int


class TechnicianHistoryResponse(CursorPaginatedResponse[ReportResponse]):
    """Finished or rejected reports of one technician, newest update first."""
