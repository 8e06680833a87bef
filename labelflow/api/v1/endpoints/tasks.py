"""Task lifecycle API: thin routes delegating to TaskLifecycleService."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from labelflow.api.v1.dependencies import get_actor, get_task_lifecycle_service
from labelflow.application.dtos.actor import ActorContext
from labelflow.application.use_cases.tasks import TaskLifecycleService
from labelflow.domain.enums import TaskStatus
from labelflow.domain.exceptions import ResourceNotFoundException, ValidationException
from labelflow.schemas.task import (
    TaskEventResponse,
    TaskResponse,
    TaskStatusUpdate,
    VetoRequest,
    VetoResponse,
)

router = APIRouter()


@router.patch("/{task_id}/status", response_model=TaskResponse)
async def change_task_status(
    task_id: int,
    body: TaskStatusUpdate,
    actor: Annotated[ActorContext, Depends(get_actor)],
    service: Annotated[TaskLifecycleService, Depends(get_task_lifecycle_service)],
):
    """Change a task's status; completing a task moves its asset to the next stage."""
    target = TaskStatus.parse(body.status)
    if target is None:
        raise ValidationException(f"Unknown task status '{body.status}'", field="status")
    result = await service.change_status(
        task_id, target, actor, move_asset=body.move_asset
    )
    if result is None:
        raise ResourceNotFoundException("task", task_id)
    return TaskResponse.model_validate(result)


@router.post("/{task_id}/veto", response_model=VetoResponse)
async def veto_task(
    task_id: int,
    actor: Annotated[ActorContext, Depends(get_actor)],
    service: Annotated[TaskLifecycleService, Depends(get_task_lifecycle_service)],
    body: VetoRequest | None = None,
):
    """Return a reviewed task to the annotation stage for rework."""
    outcome = await service.veto_task(
        task_id, actor, reason=body.reason if body is not None else None
    )
    if outcome is None:
        raise ResourceNotFoundException("task", task_id)
    return VetoResponse.model_validate(outcome)


@router.get("/{task_id}/events", response_model=list[TaskEventResponse])
async def list_task_events(
    task_id: int,
    service: Annotated[TaskLifecycleService, Depends(get_task_lifecycle_service)],
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
):
    """Audit trail for a task, oldest first."""
    events = await service.list_events(task_id, skip=skip, limit=limit)
    return [TaskEventResponse.model_validate(e) for e in events]
