"""Asset and data source domain entities.

An asset is the file being labeled. It is owned by exactly one data source
(storage location) at a time; ``data_source_id`` is the authoritative
pointer to that location.
"""

from dataclasses import dataclass


@dataclass
class AssetEntity:
    """Domain entity for an asset. ``external_id`` is the object key in storage."""

    id: int
    project_id: int
    external_id: str
    data_source_id: int
    filename: str | None = None

    def resides_in(self, data_source_id: int | None) -> bool:
        return data_source_id is not None and self.data_source_id == data_source_id

    def relocate_to(self, data_source_id: int) -> None:
        self.data_source_id = data_source_id


@dataclass(frozen=True)
class DataSourceEntity:
    """A named storage location for one stage; its bucket name derives from project id + name."""

    id: int
    project_id: int
    name: str
