"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Maps domain, storage and
framework exceptions to HTTP responses.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from labelflow.core.config import get_settings
from labelflow.domain.exceptions import LabelflowException
from labelflow.infrastructure.exceptions import StorageException
from labelflow.shared.telemetry.tracing import get_trace_id

logger = logging.getLogger(__name__)

_ERROR_CODE_STATUS: dict[str, int] = {
    "VALIDATION_ERROR": 400,
    "RESOURCE_NOT_FOUND": 404,
    "INVALID_STATUS_TRANSITION": 409,
    "TASK_VERSION_CONFLICT": 409,
    "PERSISTENCE_ERROR": 500,
    "INVALID_STAGE_GRAPH": 500,
    "INVALID_BUCKET_NAME": 500,
    "SERVICE_UNAVAILABLE": 503,
    "ASSET_TRANSFER_UNAVAILABLE": 503,
}

# Object-store failures are upstream errors unless mapped above.
_STORAGE_DEFAULT_STATUS = 502


def status_for(exc: LabelflowException) -> int:
    """HTTP status for a LabelflowException (400 when the code is unmapped)."""
    status = _ERROR_CODE_STATUS.get(exc.error_code)
    if status is not None:
        return status
    if isinstance(exc, StorageException):
        return _STORAGE_DEFAULT_STATUS
    return 400


def _labelflow_exception_handler(
    request: Request, exc: LabelflowException
) -> JSONResponse:
    """Return JSON from LabelflowException.to_dict() with the mapped status code."""
    status = status_for(exc)
    if status >= 500:
        logger.error(
            "%s on %s %s: %s", exc.error_code, request.method, request.url.path, exc.message
        )
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
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTP_ERROR", "message": exc.detail},
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception (trace_id=%s): %s", get_trace_id(), exc)
    detail: Any = str(exc) if get_settings().debug else "Internal server error"
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": detail},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Handlers: LabelflowException (and subclasses, storage errors included),
    RequestValidationError, StarletteHTTPException, generic Exception.
    """
    app.add_exception_handler(LabelflowException, _labelflow_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
