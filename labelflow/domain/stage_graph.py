"""Stage graph for a workflow.

A workflow's stages form a short linear chain ordered by ``stage_order``:
ANNOTATION first, optionally followed by REVISION and then COMPLETION.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from labelflow.domain.entities.workflow_stage import WorkflowStageEntity
from labelflow.domain.enums import WorkflowStageType
from labelflow.domain.exceptions import InvalidStageGraphException

MAX_STAGES = 3

# Stage types must appear in this relative order.
_TYPE_RANK = {
    WorkflowStageType.ANNOTATION: 0,
    WorkflowStageType.REVISION: 1,
    WorkflowStageType.COMPLETION: 2,
}


@dataclass(frozen=True)
class StageGraph:
    """Ordered, validated view over one workflow's stages."""

    workflow_id: int
    stages: tuple[WorkflowStageEntity, ...]

    @classmethod
    def from_stages(
        cls, workflow_id: int, stages: Iterable[WorkflowStageEntity]
    ) -> "StageGraph":
        """Build a graph from unordered stages.

        Raises:
            InvalidStageGraphException: If the stages are empty, more than three,
                share an order index, or are not ANNOTATION-first in type order.
        """
        ordered = tuple(sorted(stages, key=lambda s: s.stage_order))
        if not ordered:
            raise InvalidStageGraphException("Workflow has no stages", workflow_id)
        if len(ordered) > MAX_STAGES:
            raise InvalidStageGraphException(
                f"Workflow has {len(ordered)} stages; at most {MAX_STAGES} are supported",
                workflow_id,
            )
        orders = [s.stage_order for s in ordered]
        if len(set(orders)) != len(orders):
            raise InvalidStageGraphException("Duplicate stage order in workflow", workflow_id)
        if any(s.workflow_id != workflow_id for s in ordered):
            raise InvalidStageGraphException("Stage belongs to another workflow", workflow_id)
        if ordered[0].stage_type is not WorkflowStageType.ANNOTATION:
            raise InvalidStageGraphException(
                "First stage of a workflow must be an annotation stage", workflow_id
            )
        ranks = [_TYPE_RANK[s.stage_type] for s in ordered]
        if ranks != sorted(set(ranks)):
            raise InvalidStageGraphException(
                "Stage types must follow annotation, revision, completion order",
                workflow_id,
            )
        return cls(workflow_id=workflow_id, stages=ordered)

    def initial(self) -> WorkflowStageEntity:
        """Return the workflow's first (annotation) stage."""
        return self.stages[0]

    def get(self, stage_id: int) -> WorkflowStageEntity | None:
        for stage in self.stages:
            if stage.id == stage_id:
                return stage
        return None

    def next_after(self, stage_id: int) -> WorkflowStageEntity | None:
        """Return the stage following ``stage_id``, or None at the end or if unknown."""
        for index, stage in enumerate(self.stages):
            if stage.id == stage_id:
                if index + 1 < len(self.stages):
                    return self.stages[index + 1]
                return None
        return None

    def is_terminal(self, stage_id: int) -> bool:
        stage = self.get(stage_id)
        return stage is not None and (
            stage.is_completion_stage or stage is self.stages[-1]
        )
