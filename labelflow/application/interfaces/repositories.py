"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference domain entities only; no infrastructure imports.
Repositories stage changes in the shared unit of work; only
``IUnitOfWork.commit`` makes them durable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from labelflow.domain.entities import (
        AssetEntity,
        DataSourceEntity,
        TaskEntity,
        TaskEventEntity,
        WorkflowStageEntity,
    )


# Task repository interface
class ITaskRepository(Protocol):
    """Protocol for task repository (DIP)."""

    async def get_by_id(self, task_id: int) -> TaskEntity | None:
        """Return task by ID, or None if absent."""

    async def find_by_asset_and_stage(
        self, asset_id: int, workflow_stage_id: int
    ) -> TaskEntity | None:
        """Return the task for an asset in a stage, if one exists."""

    async def add(self, task: TaskEntity) -> TaskEntity:
        """Stage a new task; returns it with its assigned ID."""

    async def save(self, task: TaskEntity) -> int:
        """Stage the task's changes; return the number of affected rows."""


# Workflow stage repository interface
class IWorkflowStageRepository(Protocol):
    """Protocol for workflow stage lookups (DIP)."""

    async def get_by_id(self, stage_id: int) -> WorkflowStageEntity | None:
        """Return stage by ID."""

    async def get_next_stage(
        self, current_stage_id: int, condition: str | None = None
    ) -> WorkflowStageEntity | None:
        """Return the stage following current_stage_id, or None at the end of the workflow."""

    async def get_initial_stage(self, workflow_id: int) -> WorkflowStageEntity | None:
        """Return the workflow's first (annotation) stage."""


# Data source repository interface
class IDataSourceRepository(Protocol):
    """Protocol for data source (storage location) lookups (DIP)."""

    async def get_by_id(self, data_source_id: int) -> DataSourceEntity | None:
        """Return data source by ID."""


# Asset repository interface
class IAssetRepository(Protocol):
    """Protocol for asset repository (DIP)."""

    async def get_by_id(self, asset_id: int) -> AssetEntity | None:
        """Return asset by ID."""

    async def save(self, asset: AssetEntity) -> int:
        """Stage the asset's data source pointer; return the number of affected rows."""


# Task event (audit) repository interface
class ITaskEventRepository(Protocol):
    """Protocol for the append-only task audit log (DIP)."""

    async def add(self, event: TaskEventEntity) -> TaskEventEntity:
        """Stage a new event; returns it with its assigned ID."""

    async def save(self) -> None:
        """Flush staged events to the session."""

    async def list_by_task(
        self, task_id: int, skip: int = 0, limit: int = 100
    ) -> list[TaskEventEntity]:
        """Return events for a task, oldest first."""


# Unit of work interface
class IUnitOfWork(Protocol):
    """Protocol for the transaction shared by the repositories of one request."""

    async def commit(self) -> None:
        """Make all staged changes durable."""

    async def rollback(self) -> None:
        """Discard all staged changes."""
