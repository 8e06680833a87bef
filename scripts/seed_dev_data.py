"""Seed a demo annotation workflow into Postgres and object storage.

Creates (or reuses) three data sources (annotation, review, completion),
a linear three-stage workflow over them, one asset per file in the given
directory, and a READY_FOR_ANNOTATION task per asset. Asset files are
uploaded to the annotation data source's bucket.

Usage:
    uv run python -m scripts.seed_dev_data [path/to/images] [--project 1] [--workflow 1]

Default path: scripts/seed-assets (relative to project root); when it does
not exist a single placeholder asset is seeded.
Requires: DATABASE_URL (Postgres) with the Alembic schema applied.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import AsyncIterator
from pathlib import Path

import aiofiles
from dotenv import load_dotenv
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from labelflow.core.config import get_settings
from labelflow.domain.entities import TaskEntity
from labelflow.domain.enums import TaskStatus, WorkflowStageType
from labelflow.infrastructure.external.storage import BucketNamer, StorageFactory
from labelflow.infrastructure.persistence import database
from labelflow.infrastructure.persistence.models import Asset, DataSource, WorkflowStage
from labelflow.infrastructure.persistence.repositories import TaskRepository
from labelflow.shared.utils.datetime import utc_now

STAGES = (
    ("Annotate", WorkflowStageType.ANNOTATION, "annotation"),
    ("Review", WorkflowStageType.REVISION, "review"),
    ("Complete", WorkflowStageType.COMPLETION, "completion"),
)
PLACEHOLDER_KEY = "seed/placeholder.txt"


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent


def _load_env() -> None:
    """Load .env from project root so get_settings() sees DATABASE_* when run as script."""
    load_dotenv(_project_root() / ".env", override=True)


async def _bytes(data: bytes) -> AsyncIterator[bytes]:
    yield data


async def _file_chunks(path: Path) -> AsyncIterator[bytes]:
    async with aiofiles.open(path, "rb") as f:
        while chunk := await f.read(64 * 1024):
            yield chunk


async def _get_or_create_data_source(
    session: AsyncSession, project_id: int, name: str
) -> DataSource:
    result = await session.execute(
        select(DataSource).where(
            DataSource.project_id == project_id, DataSource.name == name
        )
    )
    existing = result.scalar_one_or_none()
    if existing:
        return existing
    ds = DataSource(project_id=project_id, name=name)
    session.add(ds)
    await session.flush()
    print(f"  Data source {name} -> {ds.id}")
    return ds


async def _ensure_stages(
    session: AsyncSession, workflow_id: int, sources: dict[str, DataSource]
) -> list[WorkflowStage]:
    result = await session.execute(
        select(WorkflowStage)
        .where(WorkflowStage.workflow_id == workflow_id)
        .order_by(WorkflowStage.stage_order)
    )
    existing = list(result.scalars().all())
    if existing:
        print(f"  Workflow {workflow_id} already has {len(existing)} stages")
        return existing
    stages = [
        WorkflowStage(
            workflow_id=workflow_id,
            name=name,
            stage_order=order,
            stage_type=stage_type.value,
            is_initial_stage=order == 1,
            is_final_stage=order == len(STAGES),
            input_data_source_id=sources[ds_name].id,
        )
        for order, (name, stage_type, ds_name) in enumerate(STAGES, start=1)
    ]
    session.add_all(stages)
    await session.flush()
    for stage in stages:
        print(f"  Stage {stage.name} ({stage.stage_type}) -> {stage.id}")
    return stages


async def run(asset_dir: Path, project_id: int, workflow_id: int) -> None:
    _load_env()
    get_settings.cache_clear()
    settings = get_settings()
    if not settings.sql_configured:
        print("DATABASE_URL is not set; nothing to seed.", file=sys.stderr)
        sys.exit(1)
    database.ensure_engine()
    storage = StorageFactory.create_storage_service(settings)
    namer = BucketNamer(settings.bucket_prefix)

    async with database.AsyncSessionLocal() as session:
        async with session.begin():
            sources = {
                name: await _get_or_create_data_source(session, project_id, name)
                for _, _, name in STAGES
            }
            stages = await _ensure_stages(session, workflow_id, sources)
            initial = next(s for s in stages if s.is_initial_stage)
            annotation_ds = sources["annotation"]
            bucket = namer(project_id, annotation_ds.name)
            if not await storage.bucket_exists(bucket):
                await storage.create_bucket(bucket)

            files = sorted(p for p in asset_dir.glob("**/*") if p.is_file()) if asset_dir.is_dir() else []
            if not files:
                print(f"  No files under {asset_dir}; seeding a placeholder asset")
            uploads = [
                (str(p.relative_to(asset_dir)), p.name, p) for p in files
            ] or [(PLACEHOLDER_KEY, "placeholder.txt", None)]

            task_repo = TaskRepository(session)
            for key, filename, path in uploads:
                result = await session.execute(
                    select(Asset).where(
                        Asset.project_id == project_id, Asset.external_id == key
                    )
                )
                asset = result.scalar_one_or_none()
                if asset is None:
                    stream = _file_chunks(path) if path else _bytes(b"labelflow seed asset\n")
                    await storage.upload(stream, bucket, key)
                    asset = Asset(
                        project_id=project_id,
                        external_id=key,
                        filename=filename,
                        data_source_id=annotation_ds.id,
                    )
                    session.add(asset)
                    await session.flush()
                if await task_repo.find_by_asset_and_stage(asset.id, initial.id):
                    print(f"  Skip {key}: task already exists")
                    continue
                task = TaskEntity(
                    id=None,
                    project_id=project_id,
                    workflow_id=workflow_id,
                    workflow_stage_id=initial.id,
                    asset_id=asset.id,
                    status=TaskStatus.READY_FOR_ANNOTATION,
                )
                task.record_status(TaskStatus.READY_FOR_ANNOTATION, utc_now(), None)
                created = await task_repo.add(task)
                print(f"  Task for {key} -> {created.id}")

    await database.engine.dispose()
    print("Seed completed.")


def main() -> None:
    root = _project_root()
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("path", nargs="?", default="scripts/seed-assets")
    parser.add_argument("--project", type=int, default=1)
    parser.add_argument("--workflow", type=int, default=1)
    args = parser.parse_args()
    path = Path(args.path)
    if not path.is_absolute():
        path = (root / path).resolve()
    asyncio.run(run(path, args.project, args.workflow))


if __name__ == "__main__":
    main()
