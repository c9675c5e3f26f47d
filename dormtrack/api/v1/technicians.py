"""
Technician endpoints and the admin's technician picker.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from dormtrack.api import deps
from dormtrack.core.security import Identity
from dormtrack.schemas.report import TechnicianHistoryResponse, TechnicianTasksResponse
from dormtrack.schemas.user import TechnicianResponse
from dormtrack.services.report import TechnicianService

router = APIRouter(tags=["Technicians"])


@router.get("/technicians", response_model=List[TechnicianResponse])
def list_technicians(
    actor: Identity = Depends(deps.get_current_identity),
    service: TechnicianService = Depends(deps.get_technician_service),
) -> List[TechnicianResponse]:
    return service.list_technicians(actor)


@router.get("/technician/tasks", response_model=TechnicianTasksResponse)
def technician_tasks(
    actor: Identity = Depends(deps.get_current_identity),
    service: TechnicianService = Depends(deps.get_technician_service),
) -> TechnicianTasksResponse:
    return service.tasks(actor)


@router.get("/technician/history", response_model=TechnicianHistoryResponse)
def technician_history(
    cursor: Optional[str] = Query(None, description="Id of the last report of the previous page"),
    limit: Optional[int] = Query(None, description="Page size, at most 50"),
    actor: Identity = Depends(deps.get_current_identity),
    service: TechnicianService = Depends(deps.get_technician_service),
) -> TechnicianHistoryResponse:
    return service.history(actor, cursor=cursor, limit=limit)
