"""Repository tests against Postgres (requires DATABASE_URL and the Alembic schema)."""

from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from labelflow.domain.entities import TaskEntity, TaskEventEntity
from labelflow.domain.enums import TaskEventType, TaskStatus, WorkflowStageType
from labelflow.domain.exceptions import TaskVersionConflictException
from labelflow.domain.transitions import apply_transition
from labelflow.infrastructure.persistence.models import (
    Asset,
    DataSource,
    WorkflowStage,
)
from labelflow.infrastructure.persistence.repositories import (
    AssetRepository,
    DataSourceRepository,
    TaskEventRepository,
    TaskRepository,
    WorkflowStageRepository,
)
from labelflow.shared.utils.datetime import utc_now

pytestmark = pytest.mark.requires_db

PROJECT_ID = 9001
WORKFLOW_ID = 9001


@pytest.fixture
async def workflow(db_session: AsyncSession) -> dict[str, int]:
    """Two data sources, a two-stage workflow and one asset, flushed but not committed."""
    annotation_ds = DataSource(project_id=PROJECT_ID, name="it-annotation")
    review_ds = DataSource(project_id=PROJECT_ID, name="it-review")
    db_session.add_all([annotation_ds, review_ds])
    await db_session.flush()
    annotate = WorkflowStage(
        workflow_id=WORKFLOW_ID,
        name="Annotate",
        stage_order=1,
        stage_type=WorkflowStageType.ANNOTATION.value,
        is_initial_stage=True,
        input_data_source_id=annotation_ds.id,
    )
    review = WorkflowStage(
        workflow_id=WORKFLOW_ID,
        name="Review",
        stage_order=2,
        stage_type=WorkflowStageType.REVISION.value,
        is_final_stage=True,
        input_data_source_id=review_ds.id,
    )
    asset = Asset(
        project_id=PROJECT_ID,
        external_id="it/cat.jpg",
        filename="cat.jpg",
        data_source_id=annotation_ds.id,
    )
    db_session.add_all([annotate, review, asset])
    await db_session.flush()
    return {
        "annotation_ds": annotation_ds.id,
        "review_ds": review_ds.id,
        "annotate": annotate.id,
        "review": review.id,
        "asset": asset.id,
    }


async def _new_task(
    db_session: AsyncSession, workflow: dict[str, int], status: TaskStatus
) -> TaskEntity:
    task = TaskEntity(
        id=None,
        project_id=PROJECT_ID,
        workflow_id=WORKFLOW_ID,
        workflow_stage_id=workflow["annotate"],
        asset_id=workflow["asset"],
        status=status,
        assigned_to_user_id="annotator-1",
    )
    task.record_status(status, utc_now(), "manager-1")
    return await TaskRepository(db_session).add(task)


async def test_task_round_trip_keeps_history(
    db_session: AsyncSession, workflow: dict[str, int]
) -> None:
    repo = TaskRepository(db_session)
    created = await _new_task(db_session, workflow, TaskStatus.IN_PROGRESS)
    assert created.id is not None

    later = utc_now() + timedelta(seconds=1)
    apply_transition(created, TaskStatus.SUSPENDED, "annotator-1", later)
    assert await repo.save(created) == 1

    loaded = await repo.get_by_id(created.id)
    assert loaded.status is TaskStatus.SUSPENDED
    assert [c.status for c in loaded.history] == [TaskStatus.IN_PROGRESS, TaskStatus.SUSPENDED]
    assert loaded.suspended_at == later
    assert loaded.suspended_at.tzinfo is not None
    assert loaded.version == created.version


async def test_save_bumps_version_and_detects_stale_copy(
    db_session: AsyncSession, workflow: dict[str, int]
) -> None:
    repo = TaskRepository(db_session)
    created = await _new_task(db_session, workflow, TaskStatus.READY_FOR_ANNOTATION)
    first = await repo.get_by_id(created.id)
    stale = await repo.get_by_id(created.id)

    apply_transition(first, TaskStatus.IN_PROGRESS, "annotator-1", utc_now())
    await repo.save(first)
    assert first.version == created.version + 1

    apply_transition(stale, TaskStatus.DEFERRED, "annotator-1", utc_now())
    with pytest.raises(TaskVersionConflictException):
        await repo.save(stale)


async def test_save_missing_task_affects_zero_rows(db_session: AsyncSession) -> None:
    ghost = TaskEntity(
        id=987654321,
        project_id=PROJECT_ID,
        workflow_id=WORKFLOW_ID,
        workflow_stage_id=1,
        asset_id=1,
        status=TaskStatus.IN_PROGRESS,
    )
    assert await TaskRepository(db_session).save(ghost) == 0


async def test_find_by_asset_and_stage(
    db_session: AsyncSession, workflow: dict[str, int]
) -> None:
    repo = TaskRepository(db_session)
    created = await _new_task(db_session, workflow, TaskStatus.READY_FOR_ANNOTATION)

    found = await repo.find_by_asset_and_stage(workflow["asset"], workflow["annotate"])
    assert found.id == created.id
    assert await repo.find_by_asset_and_stage(workflow["asset"], workflow["review"]) is None


async def test_stage_navigation(db_session: AsyncSession, workflow: dict[str, int]) -> None:
    repo = WorkflowStageRepository(db_session)

    initial = await repo.get_initial_stage(WORKFLOW_ID)
    assert initial.id == workflow["annotate"]
    nxt = await repo.get_next_stage(workflow["annotate"])
    assert nxt.id == workflow["review"]
    assert nxt.input_data_source_id == workflow["review_ds"]
    assert await repo.get_next_stage(workflow["review"]) is None
    assert await repo.get_initial_stage(-1) is None


async def test_asset_pointer_update(db_session: AsyncSession, workflow: dict[str, int]) -> None:
    assets = AssetRepository(db_session)
    asset = await assets.get_by_id(workflow["asset"])

    asset.relocate_to(workflow["review_ds"])
    assert await assets.save(asset) == 1

    assert (await assets.get_by_id(workflow["asset"])).data_source_id == workflow["review_ds"]
    ds = await DataSourceRepository(db_session).get_by_id(workflow["review_ds"])
    assert ds.name == "it-review"


async def test_events_listed_oldest_first(
    db_session: AsyncSession, workflow: dict[str, int]
) -> None:
    task = await _new_task(db_session, workflow, TaskStatus.IN_PROGRESS)
    repo = TaskEventRepository(db_session)
    base = utc_now()
    for offset, details in [(2, "second"), (1, "first"), (3, "third")]:
        await repo.add(
            TaskEventEntity(
                id=None,
                event_type=TaskEventType.STATUS_CHANGED,
                details=details,
                task_id=task.id,
                user_id="annotator-1",
                created_at=base + timedelta(seconds=offset),
            )
        )

    events = await repo.list_by_task(task.id)
    assert [e.details for e in events] == ["first", "second", "third"]
    assert all(e.id is not None for e in events)
    assert [e.details for e in await repo.list_by_task(task.id, skip=1, limit=1)] == ["second"]
