"""
Admin dashboards. Reads default to the secondary store (mode ``weak``).
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from dormtrack.api import deps
from dormtrack.core.security import Identity
from dormtrack.db.read_mode import ReadMode
from dormtrack.schemas.stats import StatusStatsResponse, TimingDetailsResponse, TimingResponse
from dormtrack.services.report import ReportAnalyticsService

router = APIRouter(prefix="/stats", tags=["Statistics"])


@router.get("", response_model=StatusStatsResponse)
def status_stats(
    date_from: Optional[str] = Query(None, alias="from", description="YYYY-MM-DD, inclusive"),
    date_to: Optional[str] = Query(None, alias="to", description="YYYY-MM-DD, inclusive"),
    mode: ReadMode = Depends(deps.get_stats_read_mode),
    actor: Identity = Depends(deps.get_current_identity),
    service: ReportAnalyticsService = Depends(deps.get_analytics_service),
) -> StatusStatsResponse:
    return service.status_stats(actor, mode, date_from, date_to)


@router.get("/timing", response_model=TimingResponse)
def timing(
    date_from: Optional[str] = Query(None, alias="from"),
    date_to: Optional[str] = Query(None, alias="to"),
    limit: Optional[int] = Query(None, description="Row sample size, clamped to [10, 200]"),
    mode: ReadMode = Depends(deps.get_stats_read_mode),
    actor: Identity = Depends(deps.get_current_identity),
    service: ReportAnalyticsService = Depends(deps.get_analytics_service),
) -> TimingResponse:
    return service.timing(actor, mode, date_from, date_to, limit)


@router.get("/timing/details", response_model=TimingDetailsResponse)
def timing_details(
    date_from: Optional[str] = Query(None, alias="from"),
    date_to: Optional[str] = Query(None, alias="to"),
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    mode: ReadMode = Depends(deps.get_stats_read_mode),
    actor: Identity = Depends(deps.get_current_identity),
    service: ReportAnalyticsService = Depends(deps.get_analytics_service),
) -> TimingDetailsResponse:
    return service.timing_details(actor, mode, date_from, date_to, page, limit)
