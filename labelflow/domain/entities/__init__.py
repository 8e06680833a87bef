"""Domain entities and aggregates.

Pure domain models; no ORM or persistence concerns.
"""

from labelflow.domain.entities.asset import AssetEntity, DataSourceEntity
from labelflow.domain.entities.task import StatusChange, TaskEntity
from labelflow.domain.entities.task_event import TaskEventEntity
from labelflow.domain.entities.workflow_stage import WorkflowStageEntity

__all__ = [
    "AssetEntity",
    "DataSourceEntity",
    "StatusChange",
    "TaskEntity",
    "TaskEventEntity",
    "WorkflowStageEntity",
]
