"""Application layer: interfaces, services, use cases.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (repos, storage, unit of work).
"""

from labelflow.application.interfaces import (
    IAssetMovementCoordinator,
    IAssetRepository,
    IBucketNamer,
    IDataSourceRepository,
    IObjectStorage,
    ITaskEventRecorder,
    ITaskEventRepository,
    ITaskRepository,
    IUnitOfWork,
    IWorkflowStageRepository,
)
from labelflow.application.services import (
    AssetMovementCoordinator,
    TaskEventRecorder,
    TaskStatusValidator,
)
from labelflow.application.use_cases.tasks import TaskLifecycleService

__all__ = [
    "AssetMovementCoordinator",
    "IAssetMovementCoordinator",
    "IAssetRepository",
    "IBucketNamer",
    "IDataSourceRepository",
    "IObjectStorage",
    "ITaskEventRecorder",
    "ITaskEventRepository",
    "ITaskRepository",
    "IUnitOfWork",
    "IWorkflowStageRepository",
    "TaskEventRecorder",
    "TaskLifecycleService",
    "TaskStatusValidator",
]
