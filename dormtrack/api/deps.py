"""
FastAPI dependencies.

The database, settings and identity resolver live on ``app.state``; they
are created by the application factory and reach endpoints only through
these functions.

Example usage in a router:
    @router.get("/reports")
    def list_reports(actor: Identity = Depends(deps.get_current_identity)):
        ...
"""

from typing import Optional

from fastapi import Depends, Query, Request

from dormtrack.config.settings import Settings
from dormtrack.core.security import Identity, IdentityResolver
from dormtrack.db.read_mode import ReadMode, parse_read_mode
from dormtrack.db.session import Database
from dormtrack.services.report import (
    ReportAnalyticsService,
    ReportLifecycleService,
    ReportService,
    TechnicianService,
)

# --- Application state ----------------------------------------------------------


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_identity_resolver(request: Request) -> IdentityResolver:
    return request.app.state.identity_resolver


# --- Authentication -------------------------------------------------------------


def get_credential(request: Request, config: Settings = Depends(get_settings_dep)) -> Optional[str]:
    """Bearer token from the Authorization header, else the auth cookie."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return request.cookies.get(config.AUTH_COOKIE_NAME)


def get_current_identity(
    credential: Optional[str] = Depends(get_credential),
    database: Database = Depends(get_database),
    resolver: IdentityResolver = Depends(get_identity_resolver),
) -> Identity:
    """Resolve the caller against the primary store."""
    with database.reading(ReadMode.STRONG) as session:
        return resolver.resolve(credential, session)


# --- Read modes -----------------------------------------------------------------


def get_list_read_mode(
    mode: Optional[str] = Query(None, description="strong | eventual | weak"),
    config: Settings = Depends(get_settings_dep),
) -> ReadMode:
    return parse_read_mode(mode, config.DEFAULT_LIST_READ_MODE)


def get_stats_read_mode(
    mode: Optional[str] = Query(None, description="strong | eventual | weak"),
    config: Settings = Depends(get_settings_dep),
) -> ReadMode:
    return parse_read_mode(mode, config.DEFAULT_STATS_READ_MODE)


# --- Services -------------------------------------------------------------------


def get_lifecycle_service(database: Database = Depends(get_database)) -> ReportLifecycleService:
    return ReportLifecycleService(database.session_factory)


def get_report_service(
    database: Database = Depends(get_database),
    config: Settings = Depends(get_settings_dep),
) -> ReportService:
    return ReportService(database, config)


def get_analytics_service(
    database: Database = Depends(get_database),
    config: Settings = Depends(get_settings_dep),
) -> ReportAnalyticsService:
    return ReportAnalyticsService(database, default_range_days=config.STATS_DEFAULT_RANGE_DAYS)


def get_technician_service(database: Database = Depends(get_database)) -> TechnicianService:
    return TechnicianService(database)


__all__ = [
    "get_analytics_service",
    "get_credential",
    "get_current_identity",
    "get_database",
    "get_identity_resolver",
    "get_lifecycle_service",
    "get_list_read_mode",
    "get_report_service",
    "get_settings_dep",
    "get_stats_read_mode",
    "get_technician_service",
]
