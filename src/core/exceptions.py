"""
Error hierarchy and FastAPI handlers.

Services raise BackofficeException subclasses; routers never build error
responses. Every failure leaves the API in the same envelope:

{
    "error": {
        "code": "NOT_FOUND",
        "message": "EdasNotification with identifier '...' not found",
        "details": {},
        "request_id": "uuid",
        "timestamp": "ISO8601",
        "path": "/api/v1/edas/notifications/...",
        "method": "GET"
    }
}
"""
from datetime import datetime, timezone
from typing import Any

import sentry_sdk
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.core.config import settings
from src.core.logging import REQUEST_ID_HEADER, get_logger, request_id_for

logger = get_logger(__name__)


class BackofficeException(Exception):
    code = "INTERNAL_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "An error occurred"

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(BackofficeException):
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            f"{resource} with identifier '{identifier}' not found",
            details={"resource": resource, "identifier": str(identifier)},
        )


class ValidationError(BackofficeException):
    code = "VALIDATION_ERROR"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class UnauthorizedError(BackofficeException):
    code = "UNAUTHORIZED"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class ForbiddenError(BackofficeException):
    code = "FORBIDDEN"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Permission denied"


class ConflictError(BackofficeException):
    """Duplicate unique key (ref_no, email)."""
    code = "CONFLICT"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource conflict"


class StorageError(BackofficeException):
    """Upload directory could not be written or read."""
    code = "STORAGE_ERROR"
    default_message = "File storage error"


_HTTP_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    413: "PAYLOAD_TOO_LARGE",
}


def error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> ORJSONResponse:
    request_id = request_id_for(request)
    return ORJSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": details or {},
                "request_id": request_id,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "path": request.url.path,
                "method": request.method,
            }
        },
        headers={REQUEST_ID_HEADER: request_id},
    )


async def backoffice_exception_handler(request: Request, exc: BackofficeException) -> ORJSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log("Request failed", error_code=exc.code, status_code=exc.status_code, message=exc.message)
    if exc.status_code >= 500:
        sentry_sdk.capture_exception(exc)
    return error_response(request, exc.status_code, exc.code, exc.message, exc.details)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> ORJSONResponse:
    code = _HTTP_CODES.get(exc.status_code, "HTTP_ERROR")
    logger.warning("HTTP error", error_code=code, status_code=exc.status_code, detail=exc.detail)
    return error_response(request, exc.status_code, code, str(exc.detail))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> ORJSONResponse:
    """Malformed request bodies/params are a 400, with one entry per field."""
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())),
            "message": err.get("msg", "Invalid value"),
            "type": err.get("type", "value_error"),
        }
        for err in exc.errors()
    ]
    logger.warning("Validation error", errors=errors)
    return error_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        "VALIDATION_ERROR",
        f"Validation failed: {len(errors)} error(s)",
        {"validation_errors": errors},
    )


async def generic_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
    logger.exception("Unhandled exception", error_type=type(exc).__name__)
    sentry_sdk.capture_exception(exc)

    details: dict[str, Any] = {"error_id": request_id_for(request)}
    if settings.environment == "development":
        details["error_type"] = type(exc).__name__
        details["error_message"] = str(exc)

    return error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_ERROR",
        "An unexpected error occurred. Please try again later.",
        details,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BackofficeException, backoffice_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
