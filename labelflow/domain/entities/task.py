"""Task domain entity.

A task is one unit of annotation work bound to one asset and one workflow
stage. Status is an explicit tagged value plus an immutable history of
(status, timestamp) changes; the per-reason timestamps are derived from it
so that at most one of suspended/deferred/changes-required/vetoed can ever
be set.
"""

from dataclasses import dataclass
from datetime import datetime

from labelflow.domain.enums import TaskStatus

# Statuses whose timestamp is the time the task entered them.
_REASON_STATUSES = frozenset(
    {
        TaskStatus.SUSPENDED,
        TaskStatus.DEFERRED,
        TaskStatus.CHANGES_REQUIRED,
        TaskStatus.VETOED,
    }
)


@dataclass(frozen=True)
class StatusChange:
    """One entry of a task's status history."""

    status: TaskStatus
    at: datetime
    by_user_id: str | None = None


@dataclass
class TaskEntity:
    """Domain entity for an annotation task.

    Relations (project, workflow, stage, asset) are integer ids resolved
    through repositories. Status changes go through ``record_status`` and
    ``mark_archived``; callers never write the derived timestamps.
    """

    id: int | None
    project_id: int
    workflow_id: int
    workflow_stage_id: int
    asset_id: int
    status: TaskStatus
    status_changed_at: datetime | None = None
    archived_at: datetime | None = None
    history: tuple[StatusChange, ...] = ()
    priority: int = 1
    due_date: datetime | None = None
    assigned_to_user_id: str | None = None
    last_worked_on_by_user_id: str | None = None
    working_time_ms: int = 0
    version: int = 1
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def current_status(self) -> TaskStatus:
        """Status as seen by the lifecycle: ARCHIVED wins once the task is archived."""
        if self.is_archived:
            return TaskStatus.ARCHIVED
        return self.status

    @property
    def is_archived(self) -> bool:
        return self.archived_at is not None

    def _reason_timestamp(self, status: TaskStatus) -> datetime | None:
        if self.status is status and status in _REASON_STATUSES:
            return self.status_changed_at
        return None

    @property
    def suspended_at(self) -> datetime | None:
        return self._reason_timestamp(TaskStatus.SUSPENDED)

    @property
    def deferred_at(self) -> datetime | None:
        return self._reason_timestamp(TaskStatus.DEFERRED)

    @property
    def changes_required_at(self) -> datetime | None:
        return self._reason_timestamp(TaskStatus.CHANGES_REQUIRED)

    @property
    def vetoed_at(self) -> datetime | None:
        return self._reason_timestamp(TaskStatus.VETOED)

    @property
    def completed_at(self) -> datetime | None:
        """Time of the last completion, kept while the task is completed or archived."""
        if self.status not in (TaskStatus.COMPLETED, TaskStatus.ARCHIVED):
            return None
        for change in reversed(self.history):
            if change.status is TaskStatus.COMPLETED:
                return change.at
        return None

    def record_status(
        self,
        status: TaskStatus,
        at: datetime,
        by_user_id: str | None,
    ) -> None:
        """Set the status and append the change to history."""
        self.status = status
        self.status_changed_at = at
        self.history = (*self.history, StatusChange(status, at, by_user_id))

    def mark_archived(self, at: datetime) -> None:
        """Set the archive marker; status and completion history are preserved."""
        self.archived_at = at

    def clear_archived(self) -> None:
        self.archived_at = None
