"""Transition effects keyed by target status.

Each target status maps to a small descriptor of what entering it does to
a task. ``apply_transition`` is the single routine that consumes the table.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from labelflow.domain.entities.task import TaskEntity
from labelflow.domain.enums import TaskStatus, WorkflowStageType


class WorkedOn(str, Enum):
    """What happens to ``last_worked_on_by_user_id``."""

    SET = "set"
    CLEAR = "clear"
    KEEP = "keep"


@dataclass(frozen=True)
class TransitionEffect:
    worked_on: WorkedOn = WorkedOn.KEEP
    moves_asset: bool = False
    archives: bool = False


TRANSITION_EFFECTS: dict[TaskStatus, TransitionEffect] = {
    TaskStatus.NOT_STARTED: TransitionEffect(),
    TaskStatus.READY_FOR_ANNOTATION: TransitionEffect(),
    TaskStatus.READY_FOR_REVIEW: TransitionEffect(),
    TaskStatus.READY_FOR_COMPLETION: TransitionEffect(),
    TaskStatus.IN_PROGRESS: TransitionEffect(worked_on=WorkedOn.SET),
    TaskStatus.SUSPENDED: TransitionEffect(worked_on=WorkedOn.CLEAR),
    TaskStatus.DEFERRED: TransitionEffect(),
    TaskStatus.COMPLETED: TransitionEffect(worked_on=WorkedOn.SET, moves_asset=True),
    TaskStatus.ARCHIVED: TransitionEffect(archives=True),
    TaskStatus.CHANGES_REQUIRED: TransitionEffect(),
    TaskStatus.VETOED: TransitionEffect(),
}

# Status a task is given when work for its stage becomes available.
READY_STATUS_BY_STAGE_TYPE: dict[WorkflowStageType, TaskStatus] = {
    WorkflowStageType.ANNOTATION: TaskStatus.READY_FOR_ANNOTATION,
    WorkflowStageType.REVISION: TaskStatus.READY_FOR_REVIEW,
    WorkflowStageType.COMPLETION: TaskStatus.READY_FOR_COMPLETION,
}


def effect_for(target: TaskStatus) -> TransitionEffect:
    return TRANSITION_EFFECTS[target]


def apply_transition(
    task: TaskEntity,
    target: TaskStatus,
    user_id: str | None,
    at: datetime,
) -> TransitionEffect:
    """Mutate ``task`` into ``target`` and return the effect that was applied.

    The archive marker is set only by archiving targets and cleared by every
    other target; reason timestamps follow from the new status.
    """
    effect = effect_for(target)
    task.record_status(target, at, user_id)
    if effect.worked_on is WorkedOn.SET:
        task.last_worked_on_by_user_id = user_id
    elif effect.worked_on is WorkedOn.CLEAR:
        task.last_worked_on_by_user_id = None
    if effect.archives:
        task.mark_archived(at)
    else:
        task.clear_archived()
    return effect
