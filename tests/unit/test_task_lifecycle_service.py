"""TaskLifecycleService: status changes, asset handoff, veto and audit listing."""

import pytest

from conftest import (
    ANNOTATION_DS_ID,
    ANNOTATION_STAGE_ID,
    ASSET_BYTES,
    ASSET_ID,
    ASSET_KEY,
    COMPLETION_DS_ID,
    COMPLETION_STAGE_ID,
    REVIEW_DS_ID,
    REVISION_STAGE_ID,
    LifecycleHarness,
)
from labelflow.application.dtos.actor import ActorContext
from labelflow.domain.enums import ProjectRole, TaskEventType, TaskStatus
from labelflow.domain.exceptions import (
    AssetTransferException,
    InvalidStatusTransitionException,
    PersistenceException,
    ResourceNotFoundException,
)
from labelflow.domain.value_objects import ASSET_NOT_FOUND_MESSAGE


async def test_missing_task_returns_none(harness: LifecycleHarness, annotator) -> None:
    assert await harness.service.change_status(999, TaskStatus.IN_PROGRESS, annotator) is None
    assert harness.events.events == []
    assert harness.uow.commits == 0


async def test_start_work_records_one_event(harness: LifecycleHarness, annotator) -> None:
    task = harness.add_task(TaskStatus.READY_FOR_ANNOTATION)

    result = await harness.service.change_status(task.id, "in_progress", annotator)

    assert result.status == "in_progress"
    assert result.last_worked_on_by_user_id == "annotator-1"
    events = harness.events.for_task(task.id)
    assert len(events) == 1
    assert events[0].event_type is TaskEventType.STATUS_CHANGED
    assert events[0].details == "Task status changed from READY_FOR_ANNOTATION to IN_PROGRESS"
    assert events[0].user_id == "annotator-1"
    assert harness.uow.commits == 1
    assert harness.storage.calls == []


async def test_completion_moves_asset_and_hands_off(
    harness: LifecycleHarness, annotator
) -> None:
    task = harness.add_task(TaskStatus.IN_PROGRESS)

    result = await harness.service.change_status(task.id, TaskStatus.COMPLETED, annotator)

    assert result.status == "completed"
    assert result.current_status == "completed"
    assert result.completed_at is not None
    assert result.archived_at is None
    assert harness.assets.rows[ASSET_ID].data_source_id == REVIEW_DS_ID
    assert harness.storage.buckets[harness.bucket("review")][ASSET_KEY] == ASSET_BYTES

    events = harness.events.for_task(task.id)
    assert len(events) == 1
    assert events[0].from_workflow_stage_id == ANNOTATION_STAGE_ID
    assert events[0].to_workflow_stage_id == REVISION_STAGE_ID

    review_task = await harness.tasks.find_by_asset_and_stage(ASSET_ID, REVISION_STAGE_ID)
    assert review_task is not None
    assert review_task.status is TaskStatus.READY_FOR_REVIEW
    assert review_task.priority == task.priority
    created = harness.events.for_task(review_task.id)
    assert [e.event_type for e in created] == [TaskEventType.TASK_CREATED]
    assert harness.uow.commits == 1


async def test_handoff_resets_existing_next_stage_task(
    harness: LifecycleHarness, annotator
) -> None:
    task = harness.add_task(TaskStatus.IN_PROGRESS)
    existing = harness.add_task(TaskStatus.VETOED, stage_id=REVISION_STAGE_ID)

    await harness.service.change_status(task.id, TaskStatus.COMPLETED, annotator)

    reset = harness.tasks.rows[existing.id]
    assert reset.status is TaskStatus.READY_FOR_REVIEW
    assert reset.vetoed_at is None
    events = harness.events.for_task(existing.id)
    assert events[-1].details == "Task status changed from VETOED to READY_FOR_REVIEW"


async def test_idempotent_repeat_has_no_event(harness: LifecycleHarness, annotator) -> None:
    task = harness.add_task(TaskStatus.IN_PROGRESS)
    first = await harness.service.change_status(task.id, TaskStatus.COMPLETED, annotator)
    events_before = list(harness.events.events)
    calls_before = list(harness.storage.calls)

    second = await harness.service.change_status(task.id, TaskStatus.COMPLETED, annotator)

    assert second == first
    assert harness.events.events == events_before
    assert harness.storage.calls == calls_before
    assert harness.uow.commits == 1


async def test_denied_transition_changes_nothing(
    harness: LifecycleHarness, annotator
) -> None:
    task = harness.add_task(TaskStatus.IN_PROGRESS)
    before = await harness.tasks.get_by_id(task.id)

    with pytest.raises(InvalidStatusTransitionException) as exc_info:
        await harness.service.change_status(task.id, TaskStatus.ARCHIVED, annotator)

    assert "Cannot archive task from status IN_PROGRESS" in exc_info.value.reason
    assert "IN_PROGRESS" in exc_info.value.message
    assert harness.tasks.rows[task.id] == before
    assert harness.tasks.save_calls == 0
    assert harness.events.events == []
    assert harness.uow.commits == 0


async def test_completion_stage_has_no_storage_io(
    harness: LifecycleHarness, manager
) -> None:
    task = harness.add_task(TaskStatus.IN_PROGRESS, stage_id=COMPLETION_STAGE_ID)

    result = await harness.service.change_status(
        task.id, TaskStatus.COMPLETED, manager, move_asset=True
    )

    assert result.current_status == "completed"
    assert result.archived_at is None
    assert harness.storage.calls == []
    assert harness.assets.rows[ASSET_ID].data_source_id == ANNOTATION_DS_ID


async def test_completion_stage_denies_non_manager(harness: LifecycleHarness, annotator) -> None:
    task = harness.add_task(TaskStatus.IN_PROGRESS, stage_id=COMPLETION_STAGE_ID)
    with pytest.raises(InvalidStatusTransitionException):
        await harness.service.change_status(task.id, TaskStatus.COMPLETED, annotator)


async def test_missing_stage_raises_before_validation(harness: LifecycleHarness, manager) -> None:
    task = harness.add_task(TaskStatus.IN_PROGRESS, stage_id=COMPLETION_STAGE_ID)
    before = await harness.tasks.get_by_id(task.id)
    del harness.stages.stages[COMPLETION_STAGE_ID]

    with pytest.raises(ResourceNotFoundException) as exc_info:
        await harness.service.change_status(task.id, TaskStatus.COMPLETED, manager)

    assert exc_info.value.details["resource_id"] == COMPLETION_STAGE_ID
    assert harness.tasks.rows[task.id] == before
    assert harness.tasks.save_calls == 0
    assert harness.events.events == []
    assert harness.storage.calls == []
    assert harness.uow.commits == 0


async def test_missing_asset_archives_task(
    harness: LifecycleHarness, annotator
) -> None:
    harness.assets.rows.clear()
    task = harness.add_task(TaskStatus.IN_PROGRESS)

    result = await harness.service.change_status(task.id, TaskStatus.COMPLETED, annotator)

    assert result.status == "completed"
    assert result.current_status == "archived"
    assert result.archived_at is not None
    assert result.completed_at is not None
    events = harness.events.for_task(task.id)
    assert [e.details for e in events] == [
        "Task status changed from IN_PROGRESS to COMPLETED",
        f"Task status changed from COMPLETED to ARCHIVED: {ASSET_NOT_FOUND_MESSAGE}",
    ]
    assert await harness.tasks.find_by_asset_and_stage(ASSET_ID, REVISION_STAGE_ID) is None


async def test_move_asset_false_skips_coordinator(harness: LifecycleHarness, annotator) -> None:
    task = harness.add_task(TaskStatus.IN_PROGRESS)

    result = await harness.service.change_status(
        task.id, TaskStatus.COMPLETED, annotator, move_asset=False
    )

    assert result.status == "completed"
    assert harness.storage.calls == []
    assert harness.assets.rows[ASSET_ID].data_source_id == ANNOTATION_DS_ID
    assert await harness.tasks.find_by_asset_and_stage(ASSET_ID, REVISION_STAGE_ID) is None


async def test_zero_row_save_raises_and_rolls_back(harness: LifecycleHarness, annotator) -> None:
    task = harness.add_task(TaskStatus.READY_FOR_ANNOTATION)
    harness.tasks.fail_saves = True

    with pytest.raises(PersistenceException):
        await harness.service.change_status(task.id, TaskStatus.IN_PROGRESS, annotator)

    assert harness.uow.rollbacks == 1
    assert harness.uow.commits == 0
    assert harness.events.events == []


async def test_transfer_timeout_rolls_back(harness: LifecycleHarness, annotator) -> None:
    async def timed_out(*args, **kwargs):
        raise AssetTransferException(ASSET_ID, "copy", "timeout")

    harness.coordinator.move_forward = timed_out
    task = harness.add_task(TaskStatus.IN_PROGRESS)

    with pytest.raises(AssetTransferException):
        await harness.service.change_status(task.id, TaskStatus.COMPLETED, annotator)

    assert harness.uow.rollbacks == 1
    assert harness.tasks.rows[task.id].status is TaskStatus.IN_PROGRESS


async def test_suspend_then_resume(harness: LifecycleHarness, annotator) -> None:
    task = harness.add_task(TaskStatus.IN_PROGRESS)

    suspended = await harness.service.change_status(task.id, TaskStatus.SUSPENDED, annotator)
    assert suspended.suspended_at is not None
    assert suspended.last_worked_on_by_user_id is None

    resumed = await harness.service.change_status(task.id, TaskStatus.IN_PROGRESS, annotator)
    assert resumed.suspended_at is None
    assert resumed.last_worked_on_by_user_id == "annotator-1"


async def test_veto_moves_asset_back_to_annotation(
    harness: LifecycleHarness, manager
) -> None:
    harness.assets.rows[ASSET_ID].relocate_to(COMPLETION_DS_ID)
    harness.storage.put(harness.bucket("completion"), ASSET_KEY, ASSET_BYTES)
    harness.storage.buckets[harness.bucket("annotation")].clear()
    annotation_task = harness.add_task(TaskStatus.COMPLETED, stage_id=ANNOTATION_STAGE_ID)
    task = harness.add_task(TaskStatus.COMPLETED, stage_id=COMPLETION_STAGE_ID)

    outcome = await harness.service.veto_task(task.id, manager, reason="Boxes misaligned")

    assert outcome.asset_data_source_id == ANNOTATION_DS_ID
    assert outcome.task.status == "vetoed"
    assert outcome.task.vetoed_at is not None
    assert outcome.task.assigned_to_user_id == "annotator-1"
    assert outcome.rework_task.id == annotation_task.id
    assert outcome.rework_task.status == "changes_required"
    assert outcome.rework_task.changes_required_at is not None
    assert outcome.error_message is None
    assert harness.assets.rows[ASSET_ID].data_source_id == ANNOTATION_DS_ID

    veto_event = harness.events.for_task(task.id)[-1]
    assert veto_event.details == (
        "Task status changed from COMPLETED to VETOED: Boxes misaligned"
    )
    assert veto_event.from_workflow_stage_id == COMPLETION_STAGE_ID
    assert veto_event.to_workflow_stage_id == ANNOTATION_STAGE_ID
    assert harness.uow.commits == 1


async def test_veto_creates_rework_task_when_missing(
    harness: LifecycleHarness, reviewer
) -> None:
    task = harness.add_task(TaskStatus.IN_PROGRESS, stage_id=REVISION_STAGE_ID)

    outcome = await harness.service.veto_task(task.id, reviewer)

    assert outcome.rework_task is not None
    assert outcome.rework_task.workflow_stage_id == ANNOTATION_STAGE_ID
    assert outcome.rework_task.status == "changes_required"
    created = harness.events.for_task(outcome.rework_task.id)
    assert created[0].event_type is TaskEventType.TASK_CREATED


async def test_veto_without_asset_archives_vetoed_task(
    harness: LifecycleHarness, manager
) -> None:
    harness.assets.rows.clear()
    task = harness.add_task(TaskStatus.COMPLETED, stage_id=REVISION_STAGE_ID)

    outcome = await harness.service.veto_task(task.id, manager)

    assert outcome.task.current_status == "archived"
    assert outcome.rework_task is None
    assert outcome.error_message == ASSET_NOT_FOUND_MESSAGE


async def test_veto_denied_in_annotation_stage(harness: LifecycleHarness, manager) -> None:
    task = harness.add_task(TaskStatus.COMPLETED, stage_id=ANNOTATION_STAGE_ID)
    with pytest.raises(InvalidStatusTransitionException):
        await harness.service.veto_task(task.id, manager)
    assert harness.events.events == []


async def test_veto_denied_for_annotator_role(harness: LifecycleHarness) -> None:
    task = harness.add_task(TaskStatus.COMPLETED, stage_id=REVISION_STAGE_ID)
    actor = ActorContext("a1", ProjectRole.ANNOTATOR)
    with pytest.raises(InvalidStatusTransitionException):
        await harness.service.veto_task(task.id, actor)


async def test_veto_missing_task_returns_none(harness: LifecycleHarness, manager) -> None:
    assert await harness.service.veto_task(404, manager) is None


async def test_list_events_oldest_first(harness: LifecycleHarness, annotator) -> None:
    task = harness.add_task(TaskStatus.READY_FOR_ANNOTATION)
    await harness.service.change_status(task.id, TaskStatus.IN_PROGRESS, annotator)
    await harness.service.change_status(task.id, TaskStatus.SUSPENDED, annotator)

    events = await harness.service.list_events(task.id)

    assert [e.details for e in events] == [
        "Task status changed from READY_FOR_ANNOTATION to IN_PROGRESS",
        "Task status changed from IN_PROGRESS to SUSPENDED",
    ]
    assert events[0].event_type == "status_changed"


async def test_list_events_for_missing_task_raises(harness: LifecycleHarness) -> None:
    with pytest.raises(ResourceNotFoundException):
        await harness.service.list_events(404)
