"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Maps pipeline and
framework exceptions to JSON error responses of the form
{"error": <code>, "message": <text>, "details": {...}}.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskboard.core.config import get_settings
from taskboard.domain.exceptions import TaskboardException

logger = logging.getLogger(__name__)

# Map error_code to HTTP status
_ERROR_CODE_STATUS: dict[str, int] = {
    "CONFIGURATION_ERROR": 400,
    "DEPARTMENT_NOT_FOUND": 404,
    "UPSTREAM_TIMEOUT": 504,
    "UPSTREAM_ERROR": 502,
    "CHUNK_ASSEMBLY_ERROR": 502,
    "STREAM_FAILED": 502,
}


def status_for(exc: TaskboardException) -> int:
    """HTTP status for a TaskboardException (400 when the code is unmapped)."""
    return _ERROR_CODE_STATUS.get(exc.error_code, 400)


def _taskboard_exception_handler(
    request: Request, exc: TaskboardException
) -> JSONResponse:
    """Return JSON from TaskboardException.to_dict() with the mapped status code."""
    status = status_for(exc)
    if status >= 500:
        logger.warning("%s on %s: %s", exc.error_code, request.url.path, exc.message)
    return JSONResponse(status_code=status, content=exc.to_dict())


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 422 with validation error details."""
    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": exc.errors(),
        },
    )


def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Return JSON for Starlette HTTP exceptions (status + detail)."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTP_ERROR", "message": exc.detail, "details": {}},
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception: %s", exc)
    detail: Any = str(exc) if get_settings().debug else "Internal server error"
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": detail, "details": {}},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Handlers: TaskboardException (and subclasses), RequestValidationError,
    StarletteHTTPException, generic Exception.
    """
    app.add_exception_handler(TaskboardException, _taskboard_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
