"""Appends task status changes to the audit log."""

from __future__ import annotations

from typing import TYPE_CHECKING

from labelflow.domain.entities import TaskEventEntity
from labelflow.domain.enums import TaskEventType, TaskStatus
from labelflow.shared.telemetry.logging import get_logger
from labelflow.shared.utils.datetime import utc_now

if TYPE_CHECKING:
    from labelflow.application.interfaces.repositories import ITaskEventRepository

logger = get_logger(__name__)

def event_type_for(
    from_status: TaskStatus | None, to_status: TaskStatus
) -> TaskEventType:
    """Return the audit category for a transition.

    Status transitions share one category; the pair is kept in the signature so
    unrecognized pairs still produce a record instead of failing.
    """
    return TaskEventType.STATUS_CHANGED


def _label(status: TaskStatus | str | None) -> str:
    if isinstance(status, TaskStatus):
        return status.name
    return str(status)


class TaskEventRecorder:
    """Builds immutable audit events and stages them in the audit store.

    The timestamp is taken when the event is built. Committing is left to the
    caller's unit of work so the event lands with the task change.
    """

    def __init__(self, event_repo: ITaskEventRepository) -> None:
        self._event_repo = event_repo

    async def record(
        self,
        task_id: int,
        from_status: TaskStatus | None,
        to_status: TaskStatus,
        user_id: str | None,
        *,
        from_stage_id: int | None = None,
        to_stage_id: int | None = None,
        note: str | None = None,
    ) -> TaskEventEntity:
        details = f"Task status changed from {_label(from_status)} to {_label(to_status)}"
        if note:
            details = f"{details}: {note}"
        event = TaskEventEntity(
            id=None,
            event_type=event_type_for(from_status, to_status),
            details=details,
            task_id=task_id,
            user_id=user_id,
            created_at=utc_now(),
            from_workflow_stage_id=from_stage_id,
            to_workflow_stage_id=to_stage_id,
        )
        stored = await self._event_repo.add(event)
        await self._event_repo.save()
        logger.debug("Recorded %s event for task %s", stored.event_type.value, task_id)
        return stored

    async def record_created(
        self,
        task_id: int,
        status: TaskStatus,
        user_id: str | None,
        *,
        stage_id: int | None = None,
        note: str | None = None,
    ) -> TaskEventEntity:
        """Record creation of a task directly in ``status``."""
        details = f"Task created with status {status.name}"
        if note:
            details = f"{details}: {note}"
        event = TaskEventEntity(
            id=None,
            event_type=TaskEventType.TASK_CREATED,
            details=details,
            task_id=task_id,
            user_id=user_id,
            created_at=utc_now(),
            to_workflow_stage_id=stage_id,
        )
        stored = await self._event_repo.add(event)
        await self._event_repo.save()
        return stored
