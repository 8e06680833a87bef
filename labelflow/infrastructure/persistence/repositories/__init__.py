"""Persistence repositories. Re-exports for dependency injection."""

from labelflow.infrastructure.persistence.repositories.asset_repo import (
    AssetRepository,
    DataSourceRepository,
)
from labelflow.infrastructure.persistence.repositories.base import BaseRepository
from labelflow.infrastructure.persistence.repositories.task_event_repo import (
    TaskEventRepository,
)
from labelflow.infrastructure.persistence.repositories.task_repo import TaskRepository
from labelflow.infrastructure.persistence.repositories.unit_of_work import (
    SqlAlchemyUnitOfWork,
)
from labelflow.infrastructure.persistence.repositories.workflow_stage_repo import (
    WorkflowStageRepository,
)

__all__ = [
    "AssetRepository",
    "BaseRepository",
    "DataSourceRepository",
    "SqlAlchemyUnitOfWork",
    "TaskEventRepository",
    "TaskRepository",
    "WorkflowStageRepository",
]
