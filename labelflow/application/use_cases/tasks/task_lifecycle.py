"""Task lifecycle use cases: status change, veto, and audit listing.

Order within one operation is fixed: validate, mutate, move the asset,
record events, commit. Everything an operation stages is committed once
through the unit of work, or rolled back if any step raises.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from labelflow.application.dtos.task import TaskEventResult, TaskResult, VetoOutcome
from labelflow.domain.entities import TaskEntity
from labelflow.domain.enums import TaskStatus
from labelflow.domain.exceptions import (
    InvalidStatusTransitionException,
    PersistenceException,
    ResourceNotFoundException,
)
from labelflow.domain.transitions import READY_STATUS_BY_STAGE_TYPE, apply_transition
from labelflow.shared.telemetry.logging import get_logger
from labelflow.shared.telemetry.tracing import traced
from labelflow.shared.utils.datetime import utc_now

if TYPE_CHECKING:
    from labelflow.application.dtos.actor import ActorContext
    from labelflow.application.interfaces.repositories import (
        ITaskEventRepository,
        ITaskRepository,
        IUnitOfWork,
        IWorkflowStageRepository,
    )
    from labelflow.application.interfaces.services import (
        IAssetMovementCoordinator,
        ITaskEventRecorder,
    )
    from labelflow.application.services.task_status_validator import TaskStatusValidator
    from labelflow.domain.value_objects import AssetMovementResult

logger = get_logger(__name__)


def _status_label(status: TaskStatus | str) -> str:
    return status.name if isinstance(status, TaskStatus) else str(status)


class TaskLifecycleService:
    """Orchestrates validated status changes, asset movement and audit events."""

    def __init__(
        self,
        task_repo: ITaskRepository,
        stage_repo: IWorkflowStageRepository,
        event_repo: ITaskEventRepository,
        validator: TaskStatusValidator,
        coordinator: IAssetMovementCoordinator,
        recorder: ITaskEventRecorder,
        uow: IUnitOfWork,
    ) -> None:
        self.task_repo = task_repo
        self.stage_repo = stage_repo
        self.event_repo = event_repo
        self.validator = validator
        self.coordinator = coordinator
        self.recorder = recorder
        self.uow = uow

    @traced("task_lifecycle.change_status")
    async def change_status(
        self,
        task_id: int,
        target: TaskStatus | str,
        actor: ActorContext,
        move_asset: bool = True,
    ) -> TaskResult | None:
        """Move a task to ``target`` status.

        Returns None when the task does not exist, and the unchanged task when
        it is already in ``target``.

        Raises:
            InvalidStatusTransitionException: If the validator denies the change.
            ResourceNotFoundException: If the task's workflow stage no longer exists.
            AssetTransferException: If an object-store call timed out (rolled back).
        """
        task = await self.task_repo.get_by_id(task_id)
        if task is None:
            logger.info("Status change requested for missing task %s", task_id)
            return None

        from_status = task.current_status
        if from_status == TaskStatus.parse(target):
            logger.debug("Task %s already %s; nothing to change", task_id, from_status.name)
            return TaskResult.from_entity(task)

        stage = await self.stage_repo.get_by_id(task.workflow_stage_id)
        if stage is None:
            raise ResourceNotFoundException("workflow_stage", task.workflow_stage_id)
        decision = self.validator.validate(
            task, from_status, target, actor, stage_type=stage.stage_type
        )
        if not decision.allowed:
            raise InvalidStatusTransitionException(
                from_status.name, _status_label(target), decision.reason or "", task_id
            )
        target_status = TaskStatus.parse(target)

        try:
            now = utc_now()
            effect = apply_transition(task, target_status, actor.user_id, now)
            movement: AssetMovementResult | None = None
            if move_asset and effect.moves_asset:
                movement = await self.coordinator.move_forward(task, target_status, actor)
                if movement.should_archive_task:
                    logger.warning(
                        "Archiving task %s after failed asset movement: %s",
                        task_id,
                        movement.error_message,
                    )
                    task.mark_archived(now)

            await self._save(task)
            await self.recorder.record(
                task.id,
                from_status,
                target_status,
                actor.user_id,
                from_stage_id=task.workflow_stage_id,
                to_stage_id=movement.target_workflow_stage_id if movement else None,
            )
            if movement is not None and movement.should_archive_task:
                await self.recorder.record(
                    task.id,
                    target_status,
                    TaskStatus.ARCHIVED,
                    actor.user_id,
                    note=movement.error_message,
                )
            elif movement is not None and movement.asset_moved:
                await self._hand_off(task, movement.target_workflow_stage_id, actor)

            await self.uow.commit()
        except Exception:
            await self.uow.rollback()
            raise

        logger.info(
            "Task %s changed from %s to %s by user %s",
            task_id,
            from_status.name,
            task.current_status.name,
            actor.user_id,
        )
        return TaskResult.from_entity(task)

    @traced("task_lifecycle.veto_task")
    async def veto_task(
        self,
        task_id: int,
        actor: ActorContext,
        reason: str | None = None,
    ) -> VetoOutcome | None:
        """Return a task to the annotation stage for rework.

        The task becomes VETOED, its asset moves back to the initial stage's
        data source, and the annotation task for the asset is set to
        CHANGES_REQUIRED (created if missing). If the asset cannot be moved
        the vetoed task is archived instead.
        """
        task = await self.task_repo.get_by_id(task_id)
        if task is None:
            logger.info("Veto requested for missing task %s", task_id)
            return None

        stage = await self.stage_repo.get_by_id(task.workflow_stage_id)
        if stage is None:
            raise ResourceNotFoundException("workflow_stage", task.workflow_stage_id)

        from_status = task.current_status
        decision = self.validator.validate_veto(task, actor, stage.stage_type)
        if not decision.allowed:
            raise InvalidStatusTransitionException(
                from_status.name, TaskStatus.VETOED.name, decision.reason or "", task_id
            )

        rework: TaskEntity | None = None
        try:
            now = utc_now()
            apply_transition(task, TaskStatus.VETOED, actor.user_id, now)
            movement = await self.coordinator.move_back_on_veto(task, actor)
            if movement.should_archive_task:
                logger.warning(
                    "Archiving vetoed task %s: %s", task_id, movement.error_message
                )
                task.mark_archived(now)

            await self._save(task)
            await self.recorder.record(
                task.id,
                from_status,
                TaskStatus.VETOED,
                actor.user_id,
                from_stage_id=stage.id,
                to_stage_id=movement.target_workflow_stage_id,
                note=reason,
            )
            if movement.should_archive_task:
                await self.recorder.record(
                    task.id,
                    TaskStatus.VETOED,
                    TaskStatus.ARCHIVED,
                    actor.user_id,
                    note=movement.error_message,
                )
            elif movement.target_workflow_stage_id is not None:
                rework = await self._provision(
                    task,
                    movement.target_workflow_stage_id,
                    TaskStatus.CHANGES_REQUIRED,
                    actor,
                    note=reason,
                )

            await self.uow.commit()
        except Exception:
            await self.uow.rollback()
            raise

        logger.info("Task %s vetoed by user %s", task_id, actor.user_id)
        return VetoOutcome(
            task=TaskResult.from_entity(task),
            asset_data_source_id=movement.target_data_source_id,
            rework_task=TaskResult.from_entity(rework) if rework is not None else None,
            error_message=movement.error_message,
        )

    async def list_events(
        self, task_id: int, skip: int = 0, limit: int = 100
    ) -> list[TaskEventResult]:
        """Return the audit trail for a task, oldest first."""
        task = await self.task_repo.get_by_id(task_id)
        if task is None:
            raise ResourceNotFoundException("task", task_id)
        events = await self.event_repo.list_by_task(task_id, skip=skip, limit=limit)
        return [TaskEventResult.from_entity(e) for e in events]

    async def _hand_off(
        self, task: TaskEntity, stage_id: int | None, actor: ActorContext
    ) -> TaskEntity | None:
        """Make the asset's work available in the stage it was moved into."""
        if stage_id is None:
            return None
        stage = await self.stage_repo.get_by_id(stage_id)
        if stage is None:
            logger.warning("Next stage %s for task %s not found; no handoff", stage_id, task.id)
            return None
        ready = READY_STATUS_BY_STAGE_TYPE[stage.stage_type]
        return await self._provision(task, stage.id, ready, actor)

    async def _provision(
        self,
        source: TaskEntity,
        stage_id: int,
        status: TaskStatus,
        actor: ActorContext,
        note: str | None = None,
    ) -> TaskEntity:
        """Put the asset's task in ``stage_id`` into ``status``, creating it if missing.

        System-assigned statuses bypass the manual validator.
        """
        now = utc_now()
        existing = await self.task_repo.find_by_asset_and_stage(source.asset_id, stage_id)
        if existing is None:
            created = TaskEntity(
                id=None,
                project_id=source.project_id,
                workflow_id=source.workflow_id,
                workflow_stage_id=stage_id,
                asset_id=source.asset_id,
                status=status,
                priority=source.priority,
                due_date=source.due_date,
            )
            created.record_status(status, now, actor.user_id)
            created = await self.task_repo.add(created)
            await self.recorder.record_created(
                created.id, status, actor.user_id, stage_id=stage_id, note=note
            )
            logger.info(
                "Created %s task %s for asset %s in stage %s",
                status.name,
                created.id,
                source.asset_id,
                stage_id,
            )
            return created

        previous = existing.current_status
        if previous is status:
            return existing
        apply_transition(existing, status, actor.user_id, now)
        await self._save(existing)
        await self.recorder.record(
            existing.id,
            previous,
            status,
            actor.user_id,
            from_stage_id=source.workflow_stage_id,
            to_stage_id=stage_id,
            note=note,
        )
        return existing

    async def _save(self, task: TaskEntity) -> None:
        if await self.task_repo.save(task) == 0:
            raise PersistenceException("task", task.id)
