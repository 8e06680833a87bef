"""Pytest configuration and fixtures for labelflow.

Unit tests run the lifecycle against in-memory stores and object storage.
HTTP tests use labelflow.main:app with the lifecycle dependency overridden.
Database tests use labelflow.infrastructure.persistence.database and skip
when DATABASE_URL is not set.
"""

import copy
from collections.abc import AsyncIterator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from labelflow.api.v1.dependencies import get_task_lifecycle_service
from labelflow.application.dtos.actor import ActorContext
from labelflow.application.services import (
    AssetMovementCoordinator,
    TaskEventRecorder,
    TaskStatusValidator,
)
from labelflow.application.use_cases.tasks import TaskLifecycleService
from labelflow.domain.entities import (
    AssetEntity,
    DataSourceEntity,
    TaskEntity,
    TaskEventEntity,
    WorkflowStageEntity,
)
from labelflow.domain.enums import ProjectRole, TaskStatus, WorkflowStageType
from labelflow.domain.stage_graph import StageGraph
from labelflow.infrastructure.external.storage import BucketNamer
from labelflow.infrastructure.persistence import database
from labelflow.main import app
from labelflow.shared.utils.datetime import utc_now

PROJECT_ID = 1
WORKFLOW_ID = 100
ANNOTATION_STAGE_ID = 10
REVISION_STAGE_ID = 11
COMPLETION_STAGE_ID = 12
ANNOTATION_DS_ID = 1
REVIEW_DS_ID = 2
COMPLETION_DS_ID = 3
ASSET_ID = 500
ASSET_KEY = "images/cat-001.jpg"
ASSET_BYTES = b"\x89PNG fake image bytes"


class InMemoryTaskRepository:
    """Task store keeping committed-looking copies so callers cannot mutate rows in place."""

    def __init__(self) -> None:
        self.rows: dict[int, TaskEntity] = {}
        self.save_calls = 0
        self.fail_saves = False
        self._next_id = 1

    async def get_by_id(self, task_id: int) -> TaskEntity | None:
        row = self.rows.get(task_id)
        return copy.deepcopy(row) if row is not None else None

    async def find_by_asset_and_stage(
        self, asset_id: int, workflow_stage_id: int
    ) -> TaskEntity | None:
        for row in self.rows.values():
            if row.asset_id == asset_id and row.workflow_stage_id == workflow_stage_id:
                return copy.deepcopy(row)
        return None

    async def add(self, task: TaskEntity) -> TaskEntity:
        task.id = self._next_id
        self._next_id += 1
        self.rows[task.id] = copy.deepcopy(task)
        return task

    async def save(self, task: TaskEntity) -> int:
        self.save_calls += 1
        if self.fail_saves or task.id not in self.rows:
            return 0
        task.version += 1
        self.rows[task.id] = copy.deepcopy(task)
        return 1

    def seed(self, task: TaskEntity) -> TaskEntity:
        if task.id is None:
            task.id = self._next_id
        self._next_id = max(self._next_id, task.id + 1)
        self.rows[task.id] = copy.deepcopy(task)
        return task


class InMemoryWorkflowStageRepository:
    def __init__(self, stages: list[WorkflowStageEntity]) -> None:
        self.stages = {s.id: s for s in stages}

    def _graph(self, workflow_id: int) -> StageGraph:
        return StageGraph.from_stages(
            workflow_id, [s for s in self.stages.values() if s.workflow_id == workflow_id]
        )

    async def get_by_id(self, stage_id: int) -> WorkflowStageEntity | None:
        return self.stages.get(stage_id)

    async def get_next_stage(
        self, current_stage_id: int, condition: str | None = None
    ) -> WorkflowStageEntity | None:
        current = self.stages.get(current_stage_id)
        if current is None:
            return None
        return self._graph(current.workflow_id).next_after(current_stage_id)

    async def get_initial_stage(self, workflow_id: int) -> WorkflowStageEntity | None:
        if not any(s.workflow_id == workflow_id for s in self.stages.values()):
            return None
        return self._graph(workflow_id).initial()


class InMemoryDataSourceRepository:
    def __init__(self, data_sources: list[DataSourceEntity]) -> None:
        self.rows = {d.id: d for d in data_sources}
        self.lookups: list[int] = []

    async def get_by_id(self, data_source_id: int) -> DataSourceEntity | None:
        self.lookups.append(data_source_id)
        return self.rows.get(data_source_id)


class InMemoryAssetRepository:
    def __init__(self, assets: list[AssetEntity]) -> None:
        self.rows = {a.id: copy.deepcopy(a) for a in assets}
        self.save_calls = 0

    async def get_by_id(self, asset_id: int) -> AssetEntity | None:
        row = self.rows.get(asset_id)
        return copy.deepcopy(row) if row is not None else None

    async def save(self, asset: AssetEntity) -> int:
        self.save_calls += 1
        if asset.id not in self.rows:
            return 0
        self.rows[asset.id] = copy.deepcopy(asset)
        return 1


class InMemoryTaskEventRepository:
    def __init__(self) -> None:
        self.events: list[TaskEventEntity] = []
        self.save_calls = 0

    async def add(self, event: TaskEventEntity) -> TaskEventEntity:
        stored = TaskEventEntity(
            id=len(self.events) + 1,
            event_type=event.event_type,
            details=event.details,
            task_id=event.task_id,
            user_id=event.user_id,
            created_at=event.created_at,
            from_workflow_stage_id=event.from_workflow_stage_id,
            to_workflow_stage_id=event.to_workflow_stage_id,
        )
        self.events.append(stored)
        return stored

    async def save(self) -> None:
        self.save_calls += 1

    async def list_by_task(
        self, task_id: int, skip: int = 0, limit: int = 100
    ) -> list[TaskEventEntity]:
        matching = [e for e in self.events if e.task_id == task_id]
        return matching[skip : skip + limit]

    def for_task(self, task_id: int) -> list[TaskEventEntity]:
        return [e for e in self.events if e.task_id == task_id]


class RecordingUnitOfWork:
    def __init__(self) -> None:
        self.commits = 0
        self.rollbacks = 0

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1


class InMemoryObjectStorage:
    """Bucket -> key -> bytes. Every call is appended to ``calls``; nothing is ever deleted."""

    def __init__(self) -> None:
        self.buckets: dict[str, dict[str, bytes]] = {}
        self.calls: list[tuple[str, ...]] = []

    def put(self, bucket: str, key: str, data: bytes) -> None:
        self.buckets.setdefault(bucket, {})[key] = data

    async def bucket_exists(self, bucket: str) -> bool:
        self.calls.append(("bucket_exists", bucket))
        return bucket in self.buckets

    async def create_bucket(self, bucket: str) -> None:
        self.calls.append(("create_bucket", bucket))
        self.buckets.setdefault(bucket, {})

    async def file_exists(self, bucket: str, key: str) -> bool:
        self.calls.append(("file_exists", bucket, key))
        return key in self.buckets.get(bucket, {})

    async def download(self, bucket: str, key: str) -> AsyncIterator[bytes]:
        self.calls.append(("download", bucket, key))
        data = self.buckets[bucket][key]
        for start in range(0, len(data), 8):
            yield data[start : start + 8]

    async def upload(self, stream: AsyncIterator[bytes], bucket: str, key: str) -> str:
        self.calls.append(("upload", bucket, key))
        chunks = [chunk async for chunk in stream]
        self.buckets[bucket][key] = b"".join(chunks)
        return key

    def operations(self, name: str) -> list[tuple[str, ...]]:
        return [c for c in self.calls if c[0] == name]


class LifecycleHarness:
    """A three-stage workflow (annotation -> revision -> completion) with one asset."""

    def __init__(self, stages: list[WorkflowStageEntity] | None = None) -> None:
        self.namer = BucketNamer("labelflow")
        self.data_sources = InMemoryDataSourceRepository(
            [
                DataSourceEntity(ANNOTATION_DS_ID, PROJECT_ID, "annotation"),
                DataSourceEntity(REVIEW_DS_ID, PROJECT_ID, "review"),
                DataSourceEntity(COMPLETION_DS_ID, PROJECT_ID, "completion"),
            ]
        )
        self.stages = InMemoryWorkflowStageRepository(
            stages if stages is not None else default_stages()
        )
        self.assets = InMemoryAssetRepository(
            [AssetEntity(ASSET_ID, PROJECT_ID, ASSET_KEY, ANNOTATION_DS_ID, "cat-001.jpg")]
        )
        self.tasks = InMemoryTaskRepository()
        self.events = InMemoryTaskEventRepository()
        self.uow = RecordingUnitOfWork()
        self.storage = InMemoryObjectStorage()
        self.storage.put(self.bucket("annotation"), ASSET_KEY, ASSET_BYTES)
        self.coordinator = AssetMovementCoordinator(
            asset_repo=self.assets,
            data_source_repo=self.data_sources,
            stage_repo=self.stages,
            storage=self.storage,
            bucket_namer=self.namer,
            operation_timeout_seconds=1.0,
        )
        self.recorder = TaskEventRecorder(self.events)
        self.service = TaskLifecycleService(
            task_repo=self.tasks,
            stage_repo=self.stages,
            event_repo=self.events,
            validator=TaskStatusValidator(),
            coordinator=self.coordinator,
            recorder=self.recorder,
            uow=self.uow,
        )

    def bucket(self, data_source_name: str) -> str:
        return self.namer(PROJECT_ID, data_source_name)

    def add_task(
        self,
        status: TaskStatus,
        stage_id: int = ANNOTATION_STAGE_ID,
        asset_id: int = ASSET_ID,
        task_id: int | None = None,
        assigned_to: str | None = "annotator-1",
    ) -> TaskEntity:
        now = utc_now()
        task = TaskEntity(
            id=task_id,
            project_id=PROJECT_ID,
            workflow_id=WORKFLOW_ID,
            workflow_stage_id=stage_id,
            asset_id=asset_id,
            status=status,
            assigned_to_user_id=assigned_to,
            priority=2,
        )
        task.record_status(status, now, None)
        return self.tasks.seed(task)


def default_stages() -> list[WorkflowStageEntity]:
    return [
        WorkflowStageEntity(
            ANNOTATION_STAGE_ID, WORKFLOW_ID, "Annotate", 1,
            WorkflowStageType.ANNOTATION, ANNOTATION_DS_ID, is_initial_stage=True,
        ),
        WorkflowStageEntity(
            REVISION_STAGE_ID, WORKFLOW_ID, "Review", 2,
            WorkflowStageType.REVISION, REVIEW_DS_ID,
        ),
        WorkflowStageEntity(
            COMPLETION_STAGE_ID, WORKFLOW_ID, "Complete", 3,
            WorkflowStageType.COMPLETION, COMPLETION_DS_ID, is_final_stage=True,
        ),
    ]


@pytest.fixture
def harness() -> LifecycleHarness:
    return LifecycleHarness()


@pytest.fixture
def annotator() -> ActorContext:
    return ActorContext(user_id="annotator-1", role=ProjectRole.ANNOTATOR)


@pytest.fixture
def manager() -> ActorContext:
    return ActorContext(user_id="manager-1", role=ProjectRole.MANAGER)


@pytest.fixture
def reviewer() -> ActorContext:
    return ActorContext(user_id="reviewer-1", role=ProjectRole.REVIEWER)


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    """Async HTTP client against the FastAPI app (ASGI)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def lifecycle_client(
    harness: LifecycleHarness,
) -> AsyncIterator[AsyncClient]:
    """HTTP client whose task routes run against the in-memory harness."""
    app.dependency_overrides[get_task_lifecycle_service] = lambda: harness.service
    try:
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.pop(get_task_lifecycle_service, None)


@pytest.fixture
async def db_session() -> AsyncIterator[AsyncSession]:
    """Database session for repository/integration tests. Rolls back after test.

    Requires DATABASE_URL with the Alembic schema applied. Skips when Postgres
    is not configured; run without DB via: pytest -m 'not requires_db'.
    """
    database.ensure_engine()
    if database.AsyncSessionLocal is None:
        pytest.skip(
            "Postgres not configured: set DATABASE_URL, then run: alembic upgrade head"
        )
    async with database.AsyncSessionLocal() as session:
        yield session
        await session.rollback()
