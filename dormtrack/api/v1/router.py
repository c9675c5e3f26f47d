"""
API v1 router. Aggregates all v1 endpoints.
"""
from fastapi import APIRouter

from dormtrack.api.v1 import reports, stats, technicians

router = APIRouter(
    responses={
        401: {"description": "Unauthenticated"},
        403: {"description": "Forbidden"},
        404: {"description": "Not Found"},
        409: {"description": "Invalid status for this transition"},
        422: {"description": "Validation Error"},
        500: {"description": "Internal Server Error"},
    }
)

router.include_router(reports.router)
router.include_router(technicians.router)
router.include_router(stats.router)
