"""Domain exceptions and their HTTP mapping."""

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class FisioHubError(Exception):
    """Base class for errors that map to a structured HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, errors: Optional[list[Any]] = None) -> None:
        self.message = message or self.message
        self.errors = errors
        super().__init__(self.message)


class TenantNotFoundError(FisioHubError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "TENANT_NOT_FOUND"
    message = "Tenant not found"


class UnauthenticatedError(FisioHubError):
    """Missing, malformed, expired or forged credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHENTICATED"
    message = "Authentication required"


class TenantMismatchError(FisioHubError):
    """Valid identity presented against a tenant it does not belong to."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "TENANT_MISMATCH"
    message = "Token is not valid for this tenant"


class ForbiddenError(FisioHubError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"
    message = "Insufficient permissions"


class ValidationFailedError(FisioHubError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"
    message = "Invalid request data"


class ConflictError(FisioHubError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"
    message = "Resource already exists"


class ResourceNotFoundError(FisioHubError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    message = "Resource not found"


def _error_body(code: str, message: str, errors: Optional[list[Any]] = None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": False, "code": code, "message": message}
    if errors:
        body["errors"] = errors
    return body


async def fisiohub_error_handler(request: Request, exc: FisioHubError) -> JSONResponse:
    """Render domain errors; authentication failures carry WWW-Authenticate."""
    logger.warning(
        "Request rejected",
        extra={
            "error_code": exc.code,
            "status_code": exc.status_code,
            "method": request.method,
            "path": request.url.path,
            "tenant_key": getattr(request.state, "tenant_key", None),
            "detail": exc.message,
        },
    )
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.code, exc.message, exc.errors),
        headers=headers,
    )


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed request bodies and parameters are 400, not FastAPI's 422."""
    errors = [
        {
            "loc": [str(part) for part in error.get("loc", ())],
            "msg": error.get("msg"),
            "type": error.get("type"),
        }
        for error in exc.errors()
    ]
    logger.info(
        "Request validation failed",
        extra={"method": request.method, "path": request.url.path, "error_count": len(errors)},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body(ValidationFailedError.code, ValidationFailedError.message, errors),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Keep framework-level errors (404 route, 405 method) in the same envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body("HTTP_ERROR", str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log with traceback, answer with a generic message."""
    logger.exception(
        "Unhandled error",
        extra={"method": request.method, "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(FisioHubError.code, FisioHubError.message),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install all error handlers on the application."""
    app.add_exception_handler(FisioHubError, fisiohub_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)
