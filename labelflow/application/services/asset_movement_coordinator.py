"""Relocates a task's asset between the data sources of its workflow stages.

The asset's ``data_source_id`` is the single source of truth for where the
asset lives. Bucket contents are only consulted to decide whether bytes
need copying. The source object is never deleted, so every step is safe to
repeat after a crash or a lost race.

Expected outcomes (nothing to move, task must be archived) are returned as
AssetMovementResult values. Each object-store operation runs under its own
deadline; the copy (download streamed into upload) is one operation. A
timeout raises AssetTransferException and nothing is committed.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from contextlib import aclosing
from typing import TYPE_CHECKING, TypeVar

from labelflow.domain.exceptions import AssetTransferException, PersistenceException
from labelflow.domain.value_objects import (
    ASSET_NOT_FOUND_MESSAGE,
    TRANSFER_FAILED_MESSAGE,
    AssetMovementResult,
)
from labelflow.shared.telemetry.logging import get_logger
from labelflow.shared.telemetry.tracing import add_span_attributes, traced

if TYPE_CHECKING:
    from labelflow.application.dtos.actor import ActorContext
    from labelflow.application.interfaces.repositories import (
        IAssetRepository,
        IDataSourceRepository,
        IWorkflowStageRepository,
    )
    from labelflow.application.interfaces.services import IBucketNamer, IObjectStorage
    from labelflow.domain.entities import AssetEntity, TaskEntity, WorkflowStageEntity
    from labelflow.domain.enums import TaskStatus

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_OPERATION_TIMEOUT_SECONDS = 30.0


class AssetMovementCoordinator:
    """Moves assets forward on completion and back to annotation on veto."""

    def __init__(
        self,
        asset_repo: IAssetRepository,
        data_source_repo: IDataSourceRepository,
        stage_repo: IWorkflowStageRepository,
        storage: IObjectStorage,
        bucket_namer: IBucketNamer,
        operation_timeout_seconds: float = DEFAULT_OPERATION_TIMEOUT_SECONDS,
    ) -> None:
        self._asset_repo = asset_repo
        self._data_source_repo = data_source_repo
        self._stage_repo = stage_repo
        self._storage = storage
        self._bucket_namer = bucket_namer
        self._timeout = operation_timeout_seconds

    @traced("asset_movement.move_forward")
    async def move_forward(
        self,
        task: TaskEntity,
        new_status: TaskStatus,
        actor: ActorContext,
    ) -> AssetMovementResult:
        """Move the task's asset into the next stage's input data source.

        Returns a no-op success on the COMPLETION stage or at the end of the
        workflow, and an archive decision when the asset or its source object
        is missing.
        """
        current_stage = await self._stage_repo.get_by_id(task.workflow_stage_id)
        if current_stage is not None and current_stage.is_completion_stage:
            logger.info(
                "Task %s is in the completion stage; no asset movement for %s",
                task.id,
                new_status,
            )
            return AssetMovementResult.no_op()

        asset = await self._asset_repo.get_by_id(task.asset_id)
        if asset is None:
            logger.warning("Asset %s not found for task %s", task.asset_id, task.id)
            return AssetMovementResult.archive(ASSET_NOT_FOUND_MESSAGE)

        next_stage = await self._stage_repo.get_next_stage(task.workflow_stage_id)
        if next_stage is None:
            logger.info("Task %s has no next stage; asset %s stays in place", task.id, asset.id)
            return AssetMovementResult.no_op()

        return await self._relocate(task, asset, next_stage, actor)

    @traced("asset_movement.move_back_on_veto")
    async def move_back_on_veto(
        self,
        task: TaskEntity,
        actor: ActorContext,
    ) -> AssetMovementResult:
        """Move the task's asset back into the workflow's initial (annotation) stage."""
        asset = await self._asset_repo.get_by_id(task.asset_id)
        if asset is None:
            logger.warning("Asset %s not found for vetoed task %s", task.asset_id, task.id)
            return AssetMovementResult.archive(ASSET_NOT_FOUND_MESSAGE)

        initial_stage = await self._stage_repo.get_initial_stage(task.workflow_id)
        if initial_stage is None:
            logger.error("Workflow %s has no initial stage (task %s)", task.workflow_id, task.id)
            return AssetMovementResult.archive(TRANSFER_FAILED_MESSAGE)

        return await self._relocate(task, asset, initial_stage, actor)

    async def _relocate(
        self,
        task: TaskEntity,
        asset: AssetEntity,
        target_stage: WorkflowStageEntity,
        actor: ActorContext,
    ) -> AssetMovementResult:
        target_data_source_id = target_stage.input_data_source_id
        if target_data_source_id is None:
            logger.error(
                "Stage %s has no input data source; cannot move asset %s",
                target_stage.id,
                asset.id,
            )
            return AssetMovementResult.archive(TRANSFER_FAILED_MESSAGE)

        if asset.resides_in(target_data_source_id):
            logger.info(
                "Asset %s already in data source %s; skipping transfer",
                asset.id,
                target_data_source_id,
            )
            return AssetMovementResult.moved(target_data_source_id, target_stage.id)

        source = await self._data_source_repo.get_by_id(asset.data_source_id)
        target = await self._data_source_repo.get_by_id(target_data_source_id)
        if source is None or target is None:
            logger.error(
                "Data source missing for asset %s (source=%s, target=%s)",
                asset.id,
                asset.data_source_id,
                target_data_source_id,
            )
            return AssetMovementResult.archive(TRANSFER_FAILED_MESSAGE)

        source_bucket = self._bucket_namer(task.project_id, source.name)
        target_bucket = self._bucket_namer(task.project_id, target.name)
        if source_bucket == target_bucket:
            logger.error(
                "Data sources %s and %s of project %s share bucket %s; refusing to move asset %s",
                source.id,
                target.id,
                task.project_id,
                source_bucket,
                asset.id,
            )
            return AssetMovementResult.archive(TRANSFER_FAILED_MESSAGE)
        key = asset.external_id
        add_span_attributes(
            asset_id=asset.id,
            source_bucket=source_bucket,
            target_bucket=target_bucket,
        )

        source_present = await self._deadline(
            self._storage.file_exists(source_bucket, key), asset, "file_exists"
        )
        if not source_present:
            logger.error(
                "Object %s missing from source bucket %s for task %s",
                key,
                source_bucket,
                task.id,
            )
            return AssetMovementResult.archive(TRANSFER_FAILED_MESSAGE)

        await self._copy_if_absent(asset, source_bucket, target_bucket)

        asset.relocate_to(target_data_source_id)
        if await self._asset_repo.save(asset) == 0:
            raise PersistenceException("asset", asset.id)

        logger.info(
            "Moved asset %s from %s to %s for task %s (user %s)",
            asset.id,
            source_bucket,
            target_bucket,
            task.id,
            actor.user_id,
        )
        return AssetMovementResult.moved(target_data_source_id, target_stage.id)

    async def _copy_if_absent(
        self, asset: AssetEntity, source_bucket: str, target_bucket: str
    ) -> None:
        key = asset.external_id
        bucket_present = await self._deadline(
            self._storage.bucket_exists(target_bucket), asset, "bucket_exists"
        )
        if not bucket_present:
            logger.info("Creating bucket %s", target_bucket)
            await self._deadline(
                self._storage.create_bucket(target_bucket), asset, "create_bucket"
            )
        elif await self._deadline(
            self._storage.file_exists(target_bucket, key), asset, "file_exists"
        ):
            logger.info(
                "Object %s already in bucket %s; updating pointer only", key, target_bucket
            )
            return

        await self._deadline(self._copy(source_bucket, target_bucket, key), asset, "copy")

    async def _copy(self, source_bucket: str, target_bucket: str, key: str) -> None:
        """Stream the object across buckets; the download is closed on every exit path."""
        async with aclosing(self._storage.download(source_bucket, key)) as stream:
            await self._storage.upload(stream, target_bucket, key)

    async def _deadline(self, call: Awaitable[T], asset: AssetEntity, operation: str) -> T:
        try:
            async with asyncio.timeout(self._timeout):
                return await call
        except TimeoutError as exc:
            logger.error(
                "Object store %s for asset %s exceeded %.1fs", operation, asset.id, self._timeout
            )
            raise AssetTransferException(asset.id, operation, "timeout") from exc
