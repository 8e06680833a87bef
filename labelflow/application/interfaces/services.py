"""Service interfaces (ports) for the application layer.

Protocols define contracts for object storage, bucket naming, and the
lifecycle collaborators (DIP).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from labelflow.application.dtos.actor import ActorContext
    from labelflow.domain.entities import TaskEntity, TaskEventEntity
    from labelflow.domain.enums import TaskStatus
    from labelflow.domain.value_objects import AssetMovementResult


# Object storage interface
class IObjectStorage(Protocol):
    """Protocol for bucket/key object storage (S3, local filesystem)."""

    async def bucket_exists(self, bucket: str) -> bool:
        """Return whether the bucket exists."""

    async def create_bucket(self, bucket: str) -> None:
        """Create the bucket if it does not exist."""

    async def file_exists(self, bucket: str, key: str) -> bool:
        """Return whether key exists in bucket."""

    def download(self, bucket: str, key: str) -> AsyncIterator[bytes]:
        """Stream object content in chunks."""

    async def upload(self, stream: AsyncIterator[bytes], bucket: str, key: str) -> str:
        """Store streamed content under key; return the key."""


# Bucket naming interface
class IBucketNamer(Protocol):
    """Deterministic (project_id, data source name) -> bucket name."""

    def __call__(self, project_id: int, data_source_name: str) -> str:
        """Return the bucket name for a project's data source."""


# Asset movement coordinator interface
class IAssetMovementCoordinator(Protocol):
    """Protocol for relocating a task's asset between stage data sources."""

    async def move_forward(
        self, task: TaskEntity, new_status: TaskStatus, actor: ActorContext
    ) -> AssetMovementResult:
        """Move the asset to the next stage's data source."""

    async def move_back_on_veto(
        self, task: TaskEntity, actor: ActorContext
    ) -> AssetMovementResult:
        """Move the asset back to the workflow's initial stage data source."""


# Task event recorder interface
class ITaskEventRecorder(Protocol):
    """Protocol for appending status changes to the audit log."""

    async def record(
        self,
        task_id: int,
        from_status: TaskStatus,
        to_status: TaskStatus,
        user_id: str | None,
        *,
        from_stage_id: int | None = None,
        to_stage_id: int | None = None,
        note: str | None = None,
    ) -> TaskEventEntity:
        """Record a status change and return the staged event."""

    async def record_created(
        self,
        task_id: int,
        status: TaskStatus,
        user_id: str | None,
        *,
        stage_id: int | None = None,
        note: str | None = None,
    ) -> TaskEventEntity:
        """Record creation of a task directly in status."""
