"""Global exception handlers for consistent error responses.

Every error leaves the API as `{"type": ..., "message": ...}`; Google token
failures also carry a `reason` so clients can tell a malformed token from an
expired or tampered one.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exceptions import AppException
from app.core.request_logging import redact_path

logger = logging.getLogger("app.exception")


def _error_content(error_type: str, message: str, **fields: str) -> dict[str, str]:
    return {"type": error_type, "message": message, **fields}


def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle all AppException subclasses."""
    path = redact_path(request.url.path)
    extra = {
        "method": request.method,
        "path": path,
        "status_code": exc.status_code,
        "error_type": exc.error_type,
    }
    log = logger.error if exc.status_code >= 500 else logger.info
    log("%s %s failed: %s", request.method, path, exc.error_type, extra=extra)

    fields = {}
    reason = getattr(exc, "reason", None)
    if reason:
        fields["reason"] = reason
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_content(exc.error_type, exc.message, **fields),
    )


def http_exception_handler(
    _request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Handle HTTPException raised by routing (404, 405) or Starlette."""
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_content("http_error", str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


def _format_validation_error(error: dict) -> str:
    field = ".".join(str(loc) for loc in error["loc"] if loc != "body")
    # Messages from our own validators arrive as "Value error, <message>"
    message = error["msg"].removeprefix("Value error, ")
    return f"{field}: {message}" if field else message


def validation_exception_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors with unified format."""
    message = "; ".join(_format_validation_error(error) for error in exc.errors())
    return JSONResponse(
        status_code=422,
        content=_error_content("validation_error", message),
    )


def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected errors."""
    path = redact_path(request.url.path)
    logger.error(
        "Unhandled exception: %s %s - %s",
        request.method,
        path,
        type(exc).__name__,
        extra={"method": request.method, "path": path, "status_code": 500},
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content=_error_content("internal_error", "An unexpected error occurred"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
