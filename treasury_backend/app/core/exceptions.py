"""
Custom exceptions and error handlers for consistent error responses.

Provides standardized error codes and global exception handlers.
"""

import logging
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from typing import Any, Dict

logger = logging.getLogger("treasury.errors")


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, error_code: str, status_code: int = 500, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class ValidationFailedError(AppException):
    """
    Raised when a write-path invariant is violated.

    `reason` is a stable machine-readable code (e.g. PAYMENT_EXCEEDS_REMAINING)
    and `field` names the offending input so callers can render a field-level message.
    """

    def __init__(self, reason: str, message: str, field: str = None, details: Dict[str, Any] = None):
        self.reason = reason
        self.field = field
        payload = {"reason": reason}
        if field:
            payload["field"] = field
        if details:
            payload.update(details)
        super().__init__(
            message=message,
            error_code=f"ERR_VALIDATION_{reason}",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=payload
        )


class ResourceNotFoundError(AppException):
    """Raised when requested resource is not found or belongs to another tenant."""

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(
            message=message,
            error_code="ERR_NOT_FOUND_001",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": resource_id}
        )


class InvalidInputError(ValueError):
    """Raised by pure calculators on malformed input (e.g. a negative window)."""


# Validation reasons shared by the write paths
class ValidationReason:
    """Standardized validation reason constants."""
    REFERENCE_EXISTS = "DOCUMENT_REFERENCE_EXISTS"
    REFERENCE_EMPTY = "DOCUMENT_REFERENCE_EMPTY"
    INVALID_DOCUMENT_AMOUNT = "DOCUMENT_INVALID_AMOUNT"
    INVALID_DATES = "DOCUMENT_INVALID_DATES"
    PAYMENT_EXCEEDS_REMAINING = "PAYMENT_EXCEEDS_REMAINING"
    HAS_PAYMENTS = "DOCUMENT_HAS_PAYMENTS"
    AMOUNT_TOO_LOW = "DOCUMENT_AMOUNT_TOO_LOW"
    AMOUNT_EXCEEDS_REMAINING = "AMOUNT_EXCEEDS_REMAINING"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INACTIVE_INTERVENANT = "INACTIVE_INTERVENANT"


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": exc.details
        }
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for FastAPI HTTPException with standardized format."""
    # Map status code to error code
    error_code_map = {
        400: "ERR_BAD_REQUEST",
        422: "ERR_VALIDATION",
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
    """Handler for Pydantic validation errors."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error_code": "ERR_VALIDATION",
            "message": "Validation error",
            "details": {
                "errors": exc.errors()
            }
        }
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.exception("Unhandled exception: %s", type(exc).__name__)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error_code": "ERR_INTERNAL_SERVER",
            "message": "An internal server error occurred",
            "details": {}
        }
    )


async def invalid_input_exception_handler(request: Request, exc: InvalidInputError) -> JSONResponse:
    """Handler for calculator input errors that reach the API layer."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error_code": "ERR_INVALID_INPUT",
            "message": str(exc),
            "details": {}
        }
    )
