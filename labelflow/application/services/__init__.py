"""Application services: status validation, asset movement, audit recording."""

from labelflow.application.services.asset_movement_coordinator import (
    AssetMovementCoordinator,
)
from labelflow.application.services.task_event_recorder import TaskEventRecorder
from labelflow.application.services.task_status_validator import (
    TaskStatusValidator,
    TransitionDecision,
)

__all__ = [
    "AssetMovementCoordinator",
    "TaskEventRecorder",
    "TaskStatusValidator",
    "TransitionDecision",
]
