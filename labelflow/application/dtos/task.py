"""DTOs for task lifecycle results (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from labelflow.domain.entities import TaskEntity, TaskEventEntity


@dataclass(frozen=True)
class TaskResult:
    """Read projection of a task, including the derived timestamps."""

    id: int
    project_id: int
    workflow_id: int
    workflow_stage_id: int
    asset_id: int
    status: str
    current_status: str
    priority: int
    due_date: datetime | None
    assigned_to_user_id: str | None
    last_worked_on_by_user_id: str | None
    working_time_ms: int
    status_changed_at: datetime | None
    completed_at: datetime | None
    suspended_at: datetime | None
    deferred_at: datetime | None
    archived_at: datetime | None
    vetoed_at: datetime | None
    changes_required_at: datetime | None
    version: int

    @classmethod
    def from_entity(cls, task: TaskEntity) -> TaskResult:
        return cls(
            id=task.id,
            project_id=task.project_id,
            workflow_id=task.workflow_id,
            workflow_stage_id=task.workflow_stage_id,
            asset_id=task.asset_id,
            status=task.status.value,
            current_status=task.current_status.value,
            priority=task.priority,
            due_date=task.due_date,
            assigned_to_user_id=task.assigned_to_user_id,
            last_worked_on_by_user_id=task.last_worked_on_by_user_id,
            working_time_ms=task.working_time_ms,
            status_changed_at=task.status_changed_at,
            completed_at=task.completed_at,
            suspended_at=task.suspended_at,
            deferred_at=task.deferred_at,
            archived_at=task.archived_at,
            vetoed_at=task.vetoed_at,
            changes_required_at=task.changes_required_at,
            version=task.version,
        )


@dataclass(frozen=True)
class TaskEventResult:
    """Read projection of one audit event."""

    id: int
    event_type: str
    details: str
    task_id: int
    user_id: str | None
    created_at: datetime
    from_workflow_stage_id: int | None
    to_workflow_stage_id: int | None

    @classmethod
    def from_entity(cls, event: TaskEventEntity) -> TaskEventResult:
        return cls(
            id=event.id,
            event_type=event.event_type.value,
            details=event.details,
            task_id=event.task_id,
            user_id=event.user_id,
            created_at=event.created_at,
            from_workflow_stage_id=event.from_workflow_stage_id,
            to_workflow_stage_id=event.to_workflow_stage_id,
        )


@dataclass(frozen=True)
class VetoOutcome:
    """Result of returning a task for rework."""

    task: TaskResult
    asset_data_source_id: int | None
    rework_task: TaskResult | None
    error_message: str | None = None
