"""Task lifecycle API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class TaskStatusUpdate(BaseModel):
    """Request body for PATCH /tasks/{task_id}/status.

    ``status`` accepts the wire value (``in_progress``) or the enum name
    (``IN_PROGRESS``).
    """

    status: str = Field(..., min_length=1, max_length=64)
    move_asset: bool = Field(
        default=True, description="Move the asset to the next stage on completion"
    )


class VetoRequest(BaseModel):
    """Request body for POST /tasks/{task_id}/veto."""

    reason: str | None = Field(default=None, max_length=2000)


class TaskResponse(BaseModel):
    """Task projection including derived status timestamps."""

    model_config = ConfigDict(from_attributes=True)

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


class TaskEventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_type: str
    details: str
    task_id: int
    user_id: str | None
    created_at: datetime
    from_workflow_stage_id: int | None
    to_workflow_stage_id: int | None


class VetoResponse(BaseModel):
    """Vetoed task, where its asset now lives, and the rework task if one was provisioned."""

    model_config = ConfigDict(from_attributes=True)

    task: TaskResponse
    asset_data_source_id: int | None
    rework_task: TaskResponse | None
    error_message: str | None = None
