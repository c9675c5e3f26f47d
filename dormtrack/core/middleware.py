"""
HTTP plumbing shared by every dormtrack route.

Request ids, access logging and the error envelope live here. Every
failure, request validation included, is rendered as
``{"error": {...}, "request_id": ...}``.
"""
from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Callable, Dict, List, Optional

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from dormtrack.core.constants import HEADER_PROCESS_TIME, HEADER_REQUEST_ID
from dormtrack.core.exceptions import BaseAppException, ErrorCode, StorageError
from dormtrack.core.utils import utc_now

logger = logging.getLogger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id, reusing one set by an upstream proxy."""

    def __init__(self, app: ASGIApp, header_name: str = HEADER_REQUEST_ID):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(self.header_name) or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers[self.header_name] = request_id
        return response


class TimingMiddleware(BaseHTTPMiddleware):
    """Access log line plus a processing-time header."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        process_time = time.perf_counter() - start_time

        response.headers[HEADER_PROCESS_TIME] = f"{process_time:.4f}"
        logger.info(
            "%s %s -> %d (%.4fs)",
            request.method,
            request.url.path,
            response.status_code,
            process_time,
            extra={"request_id": get_request_id(request)},
        )
        return response


class ErrorLoggingMiddleware(BaseHTTPMiddleware):
    """Last-resort logging for server-side failures."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "Unhandled error on %s %s: %s",
                request.method,
                request.url.path,
                exc,
                extra={"request_id": get_request_id(request)},
                exc_info=True,
            )
            raise

        if response.status_code >= 500:
            logger.warning(
                "%s %s answered %d",
                request.method,
                request.url.path,
                response.status_code,
                extra={"request_id": get_request_id(request)},
            )
        return response


def register_middlewares(app: FastAPI) -> None:
    # Registration order is the reverse of execution order.
    app.add_middleware(ErrorLoggingMiddleware)
    app.add_middleware(TimingMiddleware)
    app.add_middleware(RequestIDMiddleware)


def get_request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)


# ---------------------------------------------------------------------- #
# Exception handlers
# ---------------------------------------------------------------------- #

def error_body(
    request: Request,
    code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details or {},
            "timestamp": utc_now().isoformat(),
        },
        "request_id": get_request_id(request),
    }


def _field_errors(exc: RequestValidationError) -> Dict[str, List[str]]:
    errors: Dict[str, List[str]] = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc) or "body"
        errors.setdefault(field, []).append(err.get("msg", "invalid"))
    return errors


async def app_exception_handler(request: Request, exc: BaseAppException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s: %s", exc.error_code.value, exc.message, extra={"request_id": get_request_id(request)})
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(request, exc.error_code.value, exc.message, exc.details),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content=error_body(
            request,
            ErrorCode.VALIDATION_ERROR.value,
            "Validation failed",
            {"field_errors": _field_errors(exc)},
        ),
    )


async def storage_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(
        "Unhandled storage error",
        extra={"request_id": get_request_id(request)},
        exc_info=exc,
    )
    wrapped = StorageError(original_error=exc)
    return JSONResponse(
        status_code=wrapped.status_code,
        content=error_body(request, wrapped.error_code.value, wrapped.message, wrapped.details),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BaseAppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, storage_exception_handler)
