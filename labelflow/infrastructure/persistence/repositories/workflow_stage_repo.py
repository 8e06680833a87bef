"""Workflow stage repository: stage lookups resolved through the StageGraph."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from labelflow.domain.entities import WorkflowStageEntity
from labelflow.domain.enums import WorkflowStageType
from labelflow.domain.stage_graph import StageGraph
from labelflow.infrastructure.persistence.models.workflow_stage import WorkflowStage
from labelflow.infrastructure.persistence.repositories.base import BaseRepository


def _to_entity(s: WorkflowStage) -> WorkflowStageEntity:
    """Map WorkflowStage ORM to WorkflowStageEntity."""
    return WorkflowStageEntity(
        id=s.id,
        workflow_id=s.workflow_id,
        name=s.name,
        stage_order=s.stage_order,
        stage_type=WorkflowStageType(s.stage_type),
        input_data_source_id=s.input_data_source_id,
        target_data_source_id=s.target_data_source_id,
        is_initial_stage=s.is_initial_stage,
        is_final_stage=s.is_final_stage,
    )


class WorkflowStageRepository(BaseRepository[WorkflowStage]):
    """Workflow stage repository. Implements IWorkflowStageRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, WorkflowStage)

    async def get_by_id(self, stage_id: int) -> WorkflowStageEntity | None:
        row = await self._get_row(stage_id)
        return _to_entity(row) if row else None

    async def get_graph(self, workflow_id: int) -> StageGraph | None:
        """Return the workflow's validated stage graph, or None if it has no stages."""
        result = await self.db.execute(
            select(WorkflowStage)
            .where(WorkflowStage.workflow_id == workflow_id)
            .order_by(WorkflowStage.stage_order)
        )
        stages = [_to_entity(row) for row in result.scalars().all()]
        if not stages:
            return None
        return StageGraph.from_stages(workflow_id, stages)

    async def get_next_stage(
        self, current_stage_id: int, condition: str | None = None
    ) -> WorkflowStageEntity | None:
        """Return the stage after current_stage_id.

        Graphs are linear, so ``condition`` does not affect the result.
        """
        current = await self.get_by_id(current_stage_id)
        if current is None:
            return None
        graph = await self.get_graph(current.workflow_id)
        return graph.next_after(current_stage_id) if graph else None

    async def get_initial_stage(self, workflow_id: int) -> WorkflowStageEntity | None:
        graph = await self.get_graph(workflow_id)
        return graph.initial() if graph else None
