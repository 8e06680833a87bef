"""Asset and data source repositories."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from labelflow.domain.entities import AssetEntity, DataSourceEntity
from labelflow.infrastructure.persistence.models.asset import Asset
from labelflow.infrastructure.persistence.models.data_source import DataSource
from labelflow.infrastructure.persistence.repositories.base import BaseRepository


def _asset_to_entity(a: Asset) -> AssetEntity:
    return AssetEntity(
        id=a.id,
        project_id=a.project_id,
        external_id=a.external_id,
        data_source_id=a.data_source_id,
        filename=a.filename,
    )


class AssetRepository(BaseRepository[Asset]):
    """Asset repository. Implements IAssetRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Asset)

    async def get_by_id(self, asset_id: int) -> AssetEntity | None:
        row = await self._get_row(asset_id)
        return _asset_to_entity(row) if row else None

    async def save(self, asset: AssetEntity) -> int:
        """Stage the asset's data source pointer; return affected rows (0 if missing)."""
        row = await self._get_row(asset.id)
        if row is None:
            return 0
        if self._apply(row, {"data_source_id": asset.data_source_id}):
            await self.db.flush()
        return 1


class DataSourceRepository(BaseRepository[DataSource]):
    """Data source repository. Implements IDataSourceRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, DataSource)

    async def get_by_id(self, data_source_id: int) -> DataSourceEntity | None:
        row = await self._get_row(data_source_id)
        if row is None:
            return None
        return DataSourceEntity(id=row.id, project_id=row.project_id, name=row.name)
