"""Unit of work over one AsyncSession shared by the request's repositories."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from labelflow.domain.exceptions import TaskVersionConflictException
from labelflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class SqlAlchemyUnitOfWork:
    """Implements IUnitOfWork: one commit makes task, asset and events durable together."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def commit(self) -> None:
        try:
            await self.db.commit()
        except StaleDataError as exc:
            await self.db.rollback()
            logger.warning("Commit rejected by optimistic lock: %s", exc)
            raise TaskVersionConflictException() from exc

    async def rollback(self) -> None:
        await self.db.rollback()
