"""Task event domain entity.

Audit record of a task status change. Events are append-only; use a
frozen entity.
"""

from dataclasses import dataclass
from datetime import datetime

from labelflow.domain.enums import TaskEventType


@dataclass(frozen=True)
class TaskEventEntity:
    """Immutable audit record for one task status change."""

    id: int | None
    event_type: TaskEventType
    details: str
    task_id: int
    user_id: str | None
    created_at: datetime
    from_workflow_stage_id: int | None = None
    to_workflow_stage_id: int | None = None
