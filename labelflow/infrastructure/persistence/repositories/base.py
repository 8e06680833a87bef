"""Base repository: primary-key lookup and insert shared by the lifecycle repositories."""

from typing import Any, Generic, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from labelflow.infrastructure.persistence.database import Base


ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository over one ORM model.

    Subclasses map rows to domain entities; rows stay attached to the
    session so later saves update them in place.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def _get_row(self, entity_id: int) -> ModelType | None:
        """Return a single row by primary key, or None (identity map first)."""
        return await self.db.get(self.model, entity_id)

    async def _insert(self, obj: ModelType) -> ModelType:
        """Stage a new row and flush so its generated id is available."""
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    @staticmethod
    def _apply(obj: Any, values: dict[str, Any]) -> bool:
        """Set changed attributes on a row; return whether anything changed."""
        changed = False
        for key, value in values.items():
            if getattr(obj, key) != value:
                setattr(obj, key, value)
                changed = True
        return changed
