"""
Custom exceptions and error handlers for consistent error responses.

Provides standardized error codes and global exception handlers.
"""

import logging
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from sqlalchemy.exc import SQLAlchemyError
from typing import Any, Dict

logger = logging.getLogger("parcel_backend.errors")


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, error_code: str, status_code: int = 500, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class InsufficientPermissionsError(AppException):
    """Raised when the principal's role does not grant the requested capability."""

    def __init__(self, message: str = "Forbidden access", details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code="ERR_PERM_001",
            status_code=status.HTTP_403_FORBIDDEN,
            details=details
        )


class ResourceNotFoundError(AppException):
    """Raised when requested resource is not found."""

    def __init__(self, resource: str, resource_id: Any = None, message: str = None):
        if message is None:
            message = f"{resource} not found"
            if resource_id:
                message = f"{resource} with ID {resource_id} not found"
        super().__init__(
            message=message,
            error_code="ERR_NOT_FOUND_001",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": resource_id}
        )


class NoContentError(AppException):
    """Raised when a query ran fine but matched nothing the caller can act on."""

    def __init__(self, message: str = "No matching records found"):
        super().__init__(
            message=message,
            error_code="ERR_NO_CONTENT",
            status_code=status.HTTP_404_NOT_FOUND
        )


class InvalidInputError(AppException):
    """Raised for malformed or empty payloads and invalid enumerated values."""

    def __init__(self, message: str = "Invalid input", details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code="ERR_INPUT_001",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details
        )


class InvalidTransitionError(AppException):
    """Raised when a lifecycle change is not allowed from the current state."""

    def __init__(self, message: str, current: Any = None, target: Any = None):
        super().__init__(
            message=message,
            error_code="ERR_TRANSITION_001",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"current": current, "target": target}
        )


class RiderNotAssignableError(AppException):
    """Raised when dispatch is attempted with a rider that is not approved."""

    def __init__(self, rider_id: int, rider_status: str):
        super().__init__(
            message=f"Rider {rider_id} is {rider_status} and cannot be assigned",
            error_code="ERR_RIDER_001",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"rider_id": rider_id, "status": rider_status}
        )


class UpstreamFailureError(AppException):
    """Raised when the store or the payment gateway fails."""

    def __init__(self, message: str = "Upstream service failure", details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code="ERR_UPSTREAM_001",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details
        )


class AuthenticationError(AppException):
    """Raised for authentication failures."""

    def __init__(self, message: str = "Unauthorized access"):
        super().__init__(
            message=message,
            error_code="ERR_AUTH_001",
            status_code=status.HTTP_401_UNAUTHORIZED
        )


class TokenRevokedError(AppException):
    """Raised when token has been revoked."""

    def __init__(self):
        super().__init__(
            message="Token has been revoked",
            error_code="ERR_AUTH_002",
            status_code=status.HTTP_401_UNAUTHORIZED
        )


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions."""
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": jsonable_encoder(exc.details)
        },
        headers=headers
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for FastAPI HTTPException with standardized format."""
    # Map status code to error code
    error_code_map = {
        400: "ERR_BAD_REQUEST",
        401: "ERR_UNAUTHORIZED",
        403: "ERR_FORBIDDEN",
        404: "ERR_NOT_FOUND",
        500: "ERR_INTERNAL_SERVER"
    }

    error_code = error_code_map.get(exc.status_code, "ERR_UNKNOWN")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": exc.detail,
            "details": {}
        }
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for Pydantic validation errors (malformed payloads are a 400)."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error_code": "ERR_VALIDATION",
            "message": "Validation error",
            "details": {
                "errors": jsonable_encoder(exc.errors())
            }
        }
    )


async def storage_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Handler for storage failures escaping a service operation."""
    logger.error(
        "Storage failure on %s %s: %s",
        request.method, request.url.path, exc.__class__.__name__
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error_code": "ERR_UPSTREAM_001",
            "message": "Storage operation failed",
            "details": {"reason": exc.__class__.__name__}
        }
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.exception("Unhandled exception: %s: %s", type(exc).__name__, exc)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error_code": "ERR_INTERNAL_SERVER",
            "message": "An internal server error occurred",
            "details": {}
        }
    )
