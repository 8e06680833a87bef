"""Workflow stage domain entity.

A stage is one step of a workflow (annotation, revision, completion) with
an input data source that holds the assets waiting for that stage.
"""

from dataclasses import dataclass

from labelflow.domain.enums import WorkflowStageType


@dataclass(frozen=True)
class WorkflowStageEntity:
    """Domain entity for a workflow stage."""

    id: int
    workflow_id: int
    name: str
    stage_order: int
    stage_type: WorkflowStageType
    input_data_source_id: int | None
    target_data_source_id: int | None = None
    is_initial_stage: bool = False
    is_final_stage: bool = False

    @property
    def is_completion_stage(self) -> bool:
        """Return whether this is the terminal COMPLETION stage (no forward movement)."""
        return self.stage_type is WorkflowStageType.COMPLETION

    @property
    def is_annotation_stage(self) -> bool:
        return self.stage_type is WorkflowStageType.ANNOTATION
