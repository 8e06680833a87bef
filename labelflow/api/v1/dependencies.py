"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for DB sessions, the acting user, and the task
lifecycle use cases. All repositories of one request share one session so
the task row, its events and the asset pointer commit together.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from labelflow.application.dtos.actor import ActorContext
from labelflow.application.interfaces.services import IObjectStorage
from labelflow.application.services import (
    AssetMovementCoordinator,
    TaskEventRecorder,
    TaskStatusValidator,
)
from labelflow.application.use_cases.tasks import TaskLifecycleService
from labelflow.core.config import get_settings
from labelflow.domain.enums import ProjectRole
from labelflow.domain.exceptions import ValidationException
from labelflow.infrastructure.external.storage import BucketNamer, StorageFactory
from labelflow.infrastructure.persistence.database import get_db_transactional
from labelflow.infrastructure.persistence.repositories import (
    AssetRepository,
    DataSourceRepository,
    SqlAlchemyUnitOfWork,
    TaskEventRepository,
    TaskRepository,
    WorkflowStageRepository,
)


@lru_cache
def get_object_storage() -> IObjectStorage:
    """Object storage backend, built once per process from settings."""
    return StorageFactory.create_storage_service(get_settings())


def get_actor(request: Request) -> ActorContext:
    """Acting user from the configured headers (authentication is upstream).

    An unknown role value is rejected with 400 rather than silently ignored.
    """
    settings = get_settings()
    user_id = request.headers.get(settings.actor_header_name) or None
    raw_role = request.headers.get(settings.role_header_name)
    role = None
    if raw_role:
        role = ProjectRole.parse(raw_role)
        if role is None:
            raise ValidationException(
                f"Unknown project role '{raw_role}'", field=settings.role_header_name
            )
    return ActorContext(user_id=user_id, role=role)


async def get_task_lifecycle_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    storage: Annotated[IObjectStorage, Depends(get_object_storage)],
) -> TaskLifecycleService:
    """Build TaskLifecycleService over one request-scoped session."""
    settings = get_settings()
    stage_repo = WorkflowStageRepository(db)
    event_repo = TaskEventRepository(db)
    coordinator = AssetMovementCoordinator(
        asset_repo=AssetRepository(db),
        data_source_repo=DataSourceRepository(db),
        stage_repo=stage_repo,
        storage=storage,
        bucket_namer=BucketNamer(settings.bucket_prefix),
        operation_timeout_seconds=settings.storage_operation_timeout_seconds,
    )
    return TaskLifecycleService(
        task_repo=TaskRepository(db),
        stage_repo=stage_repo,
        event_repo=event_repo,
        validator=TaskStatusValidator(),
        coordinator=coordinator,
        recorder=TaskEventRecorder(event_repo),
        uow=SqlAlchemyUnitOfWork(db),
    )
