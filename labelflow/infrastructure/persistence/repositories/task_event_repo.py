"""Task event repository: append-only audit log."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from labelflow.domain.entities import TaskEventEntity
from labelflow.domain.enums import TaskEventType
from labelflow.infrastructure.persistence.models.task_event import TaskEvent
from labelflow.infrastructure.persistence.repositories.base import BaseRepository
from labelflow.shared.utils.datetime import ensure_utc


def _to_entity(e: TaskEvent) -> TaskEventEntity:
    return TaskEventEntity(
        id=e.id,
        event_type=TaskEventType(e.event_type),
        details=e.details,
        task_id=e.task_id,
        user_id=e.user_id,
        created_at=ensure_utc(e.created_at),
        from_workflow_stage_id=e.from_workflow_stage_id,
        to_workflow_stage_id=e.to_workflow_stage_id,
    )


class TaskEventRepository(BaseRepository[TaskEvent]):
    """Task event repository. Implements ITaskEventRepository. No update or delete."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, TaskEvent)

    async def add(self, event: TaskEventEntity) -> TaskEventEntity:
        row = TaskEvent(
            task_id=event.task_id,
            event_type=event.event_type.value,
            details=event.details,
            user_id=event.user_id,
            from_workflow_stage_id=event.from_workflow_stage_id,
            to_workflow_stage_id=event.to_workflow_stage_id,
            created_at=event.created_at,
        )
        self.db.add(row)
        await self.db.flush()
        return _to_entity(row)

    async def save(self) -> None:
        await self.db.flush()

    async def list_by_task(
        self, task_id: int, skip: int = 0, limit: int = 100
    ) -> list[TaskEventEntity]:
        result = await self.db.execute(
            select(TaskEvent)
            .where(TaskEvent.task_id == task_id)
            .order_by(TaskEvent.created_at, TaskEvent.id)
            .offset(skip)
            .limit(limit)
        )
        return [_to_entity(row) for row in result.scalars().all()]
