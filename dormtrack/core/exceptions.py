"""
Error types raised by dormtrack services.

Every failure a caller can observe is one of the classes below, so the
HTTP layer can map each to the right response without string matching.
"""

from typing import Any, Dict, List, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Machine-readable codes carried in the error envelope."""
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # Identity
    UNAUTHENTICATED = "UNAUTHENTICATED"
    FORBIDDEN = "FORBIDDEN"

    # Lookup and workflow
    NOT_FOUND = "NOT_FOUND"
    INVALID_STATUS = "INVALID_STATUS"

    # Input
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Persistence
    STORAGE_ERROR = "STORAGE_ERROR"


class BaseAppException(Exception):
    """
    Root of the service errors.

    Carries the HTTP status and a code so the handler in
    ``dormtrack.core.middleware`` renders it without inspecting the type.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"


class UnauthenticatedError(BaseAppException):
    """No valid identity could be resolved from the request"""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, ErrorCode.UNAUTHENTICATED, None, 401)


class ForbiddenError(BaseAppException):
    """Identity resolved but lacks the role or ownership for the action"""

    def __init__(
        self,
        message: str = "Forbidden",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, ErrorCode.FORBIDDEN, details, 403)


class NotFoundError(BaseAppException):
    """Referenced report or identity does not exist"""

    def __init__(
        self,
        resource_type: str = "Resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None
    ):
        if not message:
            message = f"{resource_type} {resource_id} not found" if resource_id else f"{resource_type} not found"

        details = {
            "resource_type": resource_type,
            "resource_id": resource_id
        }
        super().__init__(message, ErrorCode.NOT_FOUND, details, 404)
        self.resource_type = resource_type
        self.resource_id = resource_id


class InvalidStateTransitionError(BaseAppException):
    """
    Precondition on the current status was not met.

    Also raised for the losing side of a concurrent transition; the caller
    may re-fetch the report and reconsider.
    """

    def __init__(
        self,
        message: str,
        current_status: Optional[str] = None,
        expected_statuses: Optional[List[str]] = None,
    ):
        details: Dict[str, Any] = {}
        if current_status is not None:
            details["current_status"] = current_status
        if expected_statuses:
            details["expected_statuses"] = expected_statuses
        super().__init__(message, ErrorCode.INVALID_STATUS, details, 409)
        self.current_status = current_status


class ValidationError(BaseAppException):
    """Input rejected by a service-level check"""

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[Dict[str, List[str]]] = None,
    ):
        details = {"field_errors": field_errors} if field_errors else {}
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details, 422)
        self.field_errors = field_errors or {}


class StorageError(BaseAppException):
    """Unexpected persistence failure; the message never leaks internals"""

    def __init__(self, message: str = "Internal server error", original_error: Optional[Exception] = None):
        details = {}
        if original_error is not None:
            details["error_type"] = type(original_error).__name__
        super().__init__(message, ErrorCode.STORAGE_ERROR, details, 500)
        self.original_error = original_error
