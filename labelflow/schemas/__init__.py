"""Pydantic request/response schemas for the API."""

from labelflow.schemas.health import (
    HealthResponse,
    ReadinessErrorResponse,
    ReadinessResponse,
)
from labelflow.schemas.task import (
    TaskEventResponse,
    TaskResponse,
    TaskStatusUpdate,
    VetoRequest,
    VetoResponse,
)

__all__ = [
    "HealthResponse",
    "ReadinessResponse",
    "ReadinessErrorResponse",
    "TaskStatusUpdate",
    "VetoRequest",
    "TaskResponse",
    "TaskEventResponse",
    "VetoResponse",
]
