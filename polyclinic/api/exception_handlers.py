"""
Exception handlers for the FastAPI application.

Every error leaves a service as `{timestamp, status, error, path}`.
Client-fixable errors (400) carry their message lower-cased, like the
aggregated constraint messages.
"""

import logging
from datetime import UTC, datetime

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from polyclinic.core.domain import DomainException
from polyclinic.core.validation import ValidationResult, Violation

logger = logging.getLogger(__name__)

HTTP_MESSAGES = {
    status.HTTP_404_NOT_FOUND: "Not found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "Method not allowed",
}


def error_response(request: Request, status_code: int, error: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "timestamp": datetime.now(UTC).isoformat(),
            "status": status_code,
            "error": error,
            "path": request.url.path,
        },
    )


async def domain_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render a domain exception with its own status code."""
    if not isinstance(exc, DomainException):
        return await global_exception_handler(request, exc)

    message = exc.message.lower() if exc.status_code == status.HTTP_400_BAD_REQUEST else exc.message
    return error_response(request, exc.status_code, message)


async def validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Malformed request bodies are reported like constraint violations."""
    if not isinstance(exc, RequestValidationError):
        return await global_exception_handler(request, exc)

    violations = []
    for error in exc.errors():
        location = [str(part) for part in error["loc"] if part not in ("body", "query", "path")]
        field = ".".join(location)
        violations.append(Violation(field, f"{field}: {error['msg']}" if field else error["msg"]))
    result = ValidationResult(tuple(violations))

    logger.warning(f"Request validation error on {request.method} {request.url.path}: {result.message}")
    return error_response(request, status.HTTP_400_BAD_REQUEST, result.message)


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    if not isinstance(exc, StarletteHTTPException):
        return await global_exception_handler(request, exc)

    error = HTTP_MESSAGES.get(exc.status_code, str(exc.detail))
    return error_response(request, exc.status_code, error)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything unclassified: logged with its traceback, reported as "Unknown error"."""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc!s}", exc_info=exc)
    return error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Unknown error")


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    logger.info("Exception handlers registered")
