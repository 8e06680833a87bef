"""Task repository: maps task rows to TaskEntity with explicit status history."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from labelflow.domain.entities import StatusChange, TaskEntity
from labelflow.domain.enums import TaskStatus
from labelflow.domain.exceptions import TaskVersionConflictException
from labelflow.infrastructure.persistence.models.task import Task
from labelflow.infrastructure.persistence.repositories.base import BaseRepository
from labelflow.shared.telemetry.logging import get_logger
from labelflow.shared.utils.datetime import ensure_utc, parse_utc

logger = get_logger(__name__)


def _history_to_json(history: tuple[StatusChange, ...]) -> list[dict[str, Any]]:
    return [
        {"status": c.status.value, "at": c.at.isoformat(), "by": c.by_user_id}
        for c in history
    ]


def _history_from_json(raw: list[dict[str, Any]] | None) -> tuple[StatusChange, ...]:
    return tuple(
        StatusChange(
            status=TaskStatus(item["status"]),
            at=parse_utc(item["at"]),
            by_user_id=item.get("by"),
        )
        for item in raw or []
    )


def _to_entity(t: Task) -> TaskEntity:
    """Map Task ORM row to TaskEntity (derived timestamps are not read back)."""
    return TaskEntity(
        id=t.id,
        project_id=t.project_id,
        workflow_id=t.workflow_id,
        workflow_stage_id=t.workflow_stage_id,
        asset_id=t.asset_id,
        status=TaskStatus(t.status),
        status_changed_at=ensure_utc(t.status_changed_at),
        archived_at=ensure_utc(t.archived_at),
        history=_history_from_json(t.status_history),
        priority=t.priority,
        due_date=ensure_utc(t.due_date),
        assigned_to_user_id=t.assigned_to_user_id,
        last_worked_on_by_user_id=t.last_worked_on_by_user_id,
        working_time_ms=t.working_time_ms,
        version=t.version,
        created_at=t.created_at,
        updated_at=t.updated_at,
    )


def _row_values(task: TaskEntity) -> dict[str, Any]:
    return {
        "project_id": task.project_id,
        "workflow_id": task.workflow_id,
        "workflow_stage_id": task.workflow_stage_id,
        "asset_id": task.asset_id,
        "status": task.status.value,
        "status_changed_at": task.status_changed_at,
        "status_history": _history_to_json(task.history),
        "archived_at": task.archived_at,
        "completed_at": task.completed_at,
        "suspended_at": task.suspended_at,
        "deferred_at": task.deferred_at,
        "vetoed_at": task.vetoed_at,
        "changes_required_at": task.changes_required_at,
        "priority": task.priority,
        "due_date": task.due_date,
        "assigned_to_user_id": task.assigned_to_user_id,
        "last_worked_on_by_user_id": task.last_worked_on_by_user_id,
        "working_time_ms": task.working_time_ms,
    }


class TaskRepository(BaseRepository[Task]):
    """Task repository. Implements ITaskRepository.

    Writes are flushed but not committed; the unit of work commits. The
    row's version column makes a concurrent update of the same task fail
    with TaskVersionConflictException.
    """

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Task)

    async def get_by_id(self, task_id: int) -> TaskEntity | None:
        row = await self._get_row(task_id)
        return _to_entity(row) if row else None

    async def find_by_asset_and_stage(
        self, asset_id: int, workflow_stage_id: int
    ) -> TaskEntity | None:
        result = await self.db.execute(
            select(Task).where(
                Task.asset_id == asset_id,
                Task.workflow_stage_id == workflow_stage_id,
            )
        )
        row = result.scalar_one_or_none()
        return _to_entity(row) if row else None

    async def add(self, task: TaskEntity) -> TaskEntity:
        row = await self._insert(Task(**_row_values(task)))
        return _to_entity(row)

    async def save(self, task: TaskEntity) -> int:
        """Flush the entity's state onto its row; return affected rows (0 if missing)."""
        if task.id is None:
            return 0
        row = await self._get_row(task.id)
        if row is None:
            return 0
        if row.version != task.version:
            raise TaskVersionConflictException(task.id)
        if not self._apply(row, _row_values(task)):
            return 1
        try:
            await self.db.flush()
        except StaleDataError as exc:
            logger.warning("Concurrent update detected for task %s", task.id)
            raise TaskVersionConflictException(task.id) from exc
        task.version = row.version
        return 1
