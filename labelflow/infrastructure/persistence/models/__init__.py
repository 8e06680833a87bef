"""Persistence models: ORM entities and mixins."""

from labelflow.infrastructure.persistence.models.asset import Asset
from labelflow.infrastructure.persistence.models.data_source import DataSource
from labelflow.infrastructure.persistence.models.mixins import (
    IntegerIdMixin,
    LabelflowModel,
    TimestampMixin,
)
from labelflow.infrastructure.persistence.models.task import Task
from labelflow.infrastructure.persistence.models.task_event import TaskEvent
from labelflow.infrastructure.persistence.models.workflow_stage import WorkflowStage

__all__ = [
    "Asset",
    "DataSource",
    "Task",
    "TaskEvent",
    "WorkflowStage",
    "IntegerIdMixin",
    "LabelflowModel",
    "TimestampMixin",
]
