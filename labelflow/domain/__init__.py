"""Domain layer: entities, value objects, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from labelflow.domain.entities import (
    AssetEntity,
    DataSourceEntity,
    StatusChange,
    TaskEntity,
    TaskEventEntity,
    WorkflowStageEntity,
)
from labelflow.domain.enums import (
    ProjectRole,
    TaskEventType,
    TaskStatus,
    WorkflowStageType,
)
from labelflow.domain.exceptions import (
    AssetTransferException,
    InvalidStageGraphException,
    InvalidStatusTransitionException,
    LabelflowException,
    PersistenceException,
    ResourceNotFoundException,
    TaskVersionConflictException,
    ValidationException,
)
from labelflow.domain.stage_graph import StageGraph
from labelflow.domain.value_objects import AssetMovementResult

__all__ = [
    # Entities
    "AssetEntity",
    "DataSourceEntity",
    "StatusChange",
    "TaskEntity",
    "TaskEventEntity",
    "WorkflowStageEntity",
    "StageGraph",
    # Enums
    "ProjectRole",
    "TaskEventType",
    "TaskStatus",
    "WorkflowStageType",
    # Exceptions
    "AssetTransferException",
    "InvalidStageGraphException",
    "InvalidStatusTransitionException",
    "LabelflowException",
    "PersistenceException",
    "ResourceNotFoundException",
    "TaskVersionConflictException",
    "ValidationException",
    # Value objects
    "AssetMovementResult",
]
