"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from labelflow.infrastructure or labelflow.api.
"""

from labelflow.application.interfaces.repositories import (
    IAssetRepository,
    IDataSourceRepository,
    ITaskEventRepository,
    ITaskRepository,
    IUnitOfWork,
    IWorkflowStageRepository,
)
from labelflow.application.interfaces.services import (
    IAssetMovementCoordinator,
    IBucketNamer,
    IObjectStorage,
    ITaskEventRecorder,
)

__all__ = [
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
]
