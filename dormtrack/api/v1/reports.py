"""
Report endpoints: filing, listing, owner edits and workflow transitions.
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, status

from dormtrack.api import deps
from dormtrack.core.security import Identity
from dormtrack.db.read_mode import ReadMode
from dormtrack.models.enums import ReportCategory, ReportStatus
from dormtrack.schemas.common import MessageResponse
from dormtrack.schemas.event import ReportEventListResponse
from dormtrack.schemas.report import (
    AssignRequest,
    RejectRequest,
    ReportCreate,
    ReportDetailResponse,
    ReportListResponse,
    ReportResponse,
    ReportUpdate,
)
from dormtrack.services.report import ReportLifecycleService, ReportService

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.post("", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
def create_report(
    payload: ReportCreate,
    actor: Identity = Depends(deps.get_current_identity),
    service: ReportService = Depends(deps.get_report_service),
) -> ReportResponse:
    return service.create(actor, payload)


@router.get("", response_model=ReportListResponse)
def list_reports(
    status_filter: Optional[ReportStatus] = Query(None, alias="status"),
    category: Optional[ReportCategory] = Query(None),
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    mode: ReadMode = Depends(deps.get_list_read_mode),
    actor: Identity = Depends(deps.get_current_identity),
    service: ReportService = Depends(deps.get_report_service),
) -> ReportListResponse:
    return service.list_reports(
        actor,
        mode,
        status=status_filter,
        category=category,
        page=page,
        page_size=limit,
    )


@router.get("/{report_id}", response_model=ReportDetailResponse)
def get_report(
    report_id: str,
    actor: Identity = Depends(deps.get_current_identity),
    service: ReportService = Depends(deps.get_report_service),
) -> ReportDetailResponse:
    return service.get_detail(report_id, actor)


@router.patch("/{report_id}", response_model=ReportResponse)
@router.put("/{report_id}", response_model=ReportResponse)
def update_report(
    report_id: str,
    payload: ReportUpdate,
    actor: Identity = Depends(deps.get_current_identity),
    service: ReportService = Depends(deps.get_report_service),
) -> ReportResponse:
    return service.update(report_id, actor, payload)


@router.delete("/{report_id}", response_model=MessageResponse)
def delete_report(
    report_id: str,
    actor: Identity = Depends(deps.get_current_identity),
    service: ReportService = Depends(deps.get_report_service),
) -> MessageResponse:
    service.delete(report_id, actor)
    return MessageResponse(message="Report deleted")


@router.get("/{report_id}/events", response_model=ReportEventListResponse)
def get_report_events(
    report_id: str,
    actor: Identity = Depends(deps.get_current_identity),
    service: ReportService = Depends(deps.get_report_service),
) -> ReportEventListResponse:
    return service.get_events(report_id, actor)


# --- Workflow transitions -------------------------------------------------------


@router.post("/{report_id}/receive", response_model=ReportResponse)
def receive_report(
    report_id: str,
    actor: Identity = Depends(deps.get_current_identity),
    lifecycle: ReportLifecycleService = Depends(deps.get_lifecycle_service),
) -> ReportResponse:
    return lifecycle.receive(report_id, actor)


@router.post("/{report_id}/assign", response_model=ReportResponse)
def assign_report(
    report_id: str,
    payload: AssignRequest,
    actor: Identity = Depends(deps.get_current_identity),
    lifecycle: ReportLifecycleService = Depends(deps.get_lifecycle_service),
) -> ReportResponse:
    return lifecycle.assign(report_id, actor, payload.technician_id)


@router.post("/{report_id}/start", response_model=ReportResponse)
def start_report(
    report_id: str,
    actor: Identity = Depends(deps.get_current_identity),
    lifecycle: ReportLifecycleService = Depends(deps.get_lifecycle_service),
) -> ReportResponse:
    return lifecycle.start(report_id, actor)


@router.post("/{report_id}/resolve", response_model=ReportResponse)
def resolve_report(
    report_id: str,
    actor: Identity = Depends(deps.get_current_identity),
    lifecycle: ReportLifecycleService = Depends(deps.get_lifecycle_service),
) -> ReportResponse:
    return lifecycle.resolve(report_id, actor)


@router.post("/{report_id}/reject", response_model=ReportResponse)
def reject_report(
    report_id: str,
    payload: Optional[RejectRequest] = Body(None),
    actor: Identity = Depends(deps.get_current_identity),
    lifecycle: ReportLifecycleService = Depends(deps.get_lifecycle_service),
) -> ReportResponse:
    return lifecycle.reject(report_id, actor, payload.note if payload else None)
