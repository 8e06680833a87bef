"""Decides whether a manual task status change is allowed.

Pure decision logic: no I/O, no mutation. Denials carry a human-readable
reason and are logged at WARNING.
"""

from __future__ import annotations

from dataclasses import dataclass

from labelflow.application.dtos.actor import ActorContext
from labelflow.domain.entities import TaskEntity
from labelflow.domain.enums import ProjectRole, TaskStatus, WorkflowStageType
from labelflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_READY_STATUSES = frozenset(
    {
        TaskStatus.READY_FOR_ANNOTATION,
        TaskStatus.READY_FOR_REVIEW,
        TaskStatus.READY_FOR_COMPLETION,
    }
)

# Target -> sources it may be entered from. Anything not listed is denied.
ALLOWED_TRANSITIONS: dict[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.IN_PROGRESS: _READY_STATUSES
    | {TaskStatus.SUSPENDED, TaskStatus.NOT_STARTED},
    TaskStatus.COMPLETED: frozenset({TaskStatus.IN_PROGRESS}),
    TaskStatus.SUSPENDED: _READY_STATUSES | {TaskStatus.IN_PROGRESS},
    TaskStatus.DEFERRED: _READY_STATUSES
    | {TaskStatus.IN_PROGRESS, TaskStatus.NOT_STARTED},
    TaskStatus.ARCHIVED: frozenset({TaskStatus.COMPLETED}),
}

# Statuses assigned by the system during stage handoff or creation, never manually.
SYSTEM_ASSIGNED_STATUSES: dict[TaskStatus, str] = {
    TaskStatus.READY_FOR_REVIEW: (
        "READY_FOR_REVIEW status is typically set automatically during workflow progression"
    ),
    TaskStatus.READY_FOR_COMPLETION: (
        "READY_FOR_COMPLETION status is typically set automatically during workflow progression"
    ),
    TaskStatus.NOT_STARTED: "NOT_STARTED is typically only set during task creation",
}

VETO_SOURCE_STATUSES = frozenset({TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED})
VETO_ROLES = (ProjectRole.MANAGER, ProjectRole.REVIEWER)


@dataclass(frozen=True)
class TransitionDecision:
    """Allow/deny outcome with the reason for a denial."""

    allowed: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = TransitionDecision(allowed=True)


def _deny(reason: str) -> TransitionDecision:
    return TransitionDecision(allowed=False, reason=reason)


def _status_or_none(value: TaskStatus | str | None) -> TaskStatus | None:
    if value is None:
        return None
    return TaskStatus.parse(value)


def _denial_for_target(source: TaskStatus, target: TaskStatus) -> str:
    if target is TaskStatus.IN_PROGRESS:
        return f"Cannot change status from {source.name} to IN_PROGRESS"
    if target is TaskStatus.COMPLETED:
        return f"Cannot complete task from status {source.name}"
    if target is TaskStatus.ARCHIVED:
        return f"Cannot archive task from status {source.name}"
    if target is TaskStatus.SUSPENDED:
        return f"Cannot suspend task from status {source.name}"
    if target is TaskStatus.DEFERRED:
        return f"Cannot defer task from status {source.name}"
    return f"Status {target.name} cannot be set manually"


class TaskStatusValidator:
    """Validates manual status transitions against the allow-table.

    Role is consulted only for manager-gated operations, and only when the
    caller supplied one; an actor without a role leaves the role check to
    the caller.
    """

    def validate(
        self,
        task: TaskEntity,
        from_status: TaskStatus | str | None,
        to_status: TaskStatus | str | None,
        actor: ActorContext,
        *,
        stage_type: WorkflowStageType | None = None,
    ) -> TransitionDecision:
        """Return whether ``task`` may move from ``from_status`` to ``to_status``.

        Args:
            task: Task being changed (used for logging context).
            from_status: Current derived status; strings are parsed.
            to_status: Requested status; strings are parsed.
            actor: Acting user and optional project role.
            stage_type: Type of the task's current stage, when known.

        Returns:
            TransitionDecision; ``reason`` is set on denial.
        """
        decision = self._decide(from_status, to_status, actor, stage_type)
        if not decision.allowed:
            logger.warning(
                "Denied status change for task %s from %s to %s by user %s: %s",
                task.id,
                from_status,
                to_status,
                actor.user_id,
                decision.reason,
            )
        return decision

    def _decide(
        self,
        from_status: TaskStatus | str | None,
        to_status: TaskStatus | str | None,
        actor: ActorContext,
        stage_type: WorkflowStageType | None,
    ) -> TransitionDecision:
        source = _status_or_none(from_status)
        target = _status_or_none(to_status)
        if source is None:
            return _deny(f"Unknown current status: {from_status!r}")
        if target is None:
            return _deny(f"Unknown target status: {to_status!r}")

        system_denial = SYSTEM_ASSIGNED_STATUSES.get(target)
        if system_denial is not None:
            return _deny(system_denial)
        if source is TaskStatus.COMPLETED and target is TaskStatus.READY_FOR_ANNOTATION:
            return _deny(
                "Cannot send a completed task back to annotation; use veto to return it for rework"
            )

        allowed_sources = ALLOWED_TRANSITIONS.get(target)
        if allowed_sources is None:
            return _deny(f"Status {target.name} cannot be set manually")
        if source not in allowed_sources:
            return _deny(_denial_for_target(source, target))

        if (
            target is TaskStatus.COMPLETED
            and stage_type is WorkflowStageType.COMPLETION
            and actor.role is not None
            and actor.role is not ProjectRole.MANAGER
        ):
            return _deny("Only a project manager can complete a task in the completion stage")
        return ALLOW

    def validate_veto(
        self,
        task: TaskEntity,
        actor: ActorContext,
        stage_type: WorkflowStageType,
    ) -> TransitionDecision:
        """Return whether ``task`` may be returned to the annotation stage for rework."""
        decision = self._decide_veto(task, actor, stage_type)
        if not decision.allowed:
            logger.warning(
                "Denied veto for task %s by user %s: %s",
                task.id,
                actor.user_id,
                decision.reason,
            )
        return decision

    def _decide_veto(
        self,
        task: TaskEntity,
        actor: ActorContext,
        stage_type: WorkflowStageType,
    ) -> TransitionDecision:
        current = task.current_status
        if current is TaskStatus.VETOED:
            return _deny("Task has already been vetoed")
        if stage_type is WorkflowStageType.ANNOTATION:
            return _deny("Tasks in the annotation stage cannot be vetoed")
        if current not in VETO_SOURCE_STATUSES:
            return _deny(f"Cannot veto task from status {current.name}")
        if actor.role is not None and not actor.has_role(*VETO_ROLES):
            return _deny("Only a reviewer or manager can veto a task")
        return ALLOW
