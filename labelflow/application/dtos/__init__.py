"""Application DTOs: frozen dataclasses crossing the application boundary."""

from labelflow.application.dtos.actor import ActorContext
from labelflow.application.dtos.task import TaskEventResult, TaskResult, VetoOutcome

__all__ = [
    "ActorContext",
    "TaskEventResult",
    "TaskResult",
    "VetoOutcome",
]
