"""Asset movement outcome value object.

Carries the coordinator's result back to the lifecycle engine. Expected
"nothing to do" and "task must be archived" outcomes are values, not
exceptions.
"""

from dataclasses import dataclass

ASSET_NOT_FOUND_MESSAGE = "Asset not found for task"
TRANSFER_FAILED_MESSAGE = "Failed to transfer asset to next workflow stage"


@dataclass(frozen=True)
class AssetMovementResult:
    """Outcome of moving a task's asset between stage data sources.

    Attributes:
        asset_moved: True when the asset now resides in the target data source.
        should_archive_task: True when relocation is impossible and the task
            must not remain actionable.
        target_data_source_id: Data source the asset now belongs to.
        target_workflow_stage_id: Stage whose input the asset now satisfies.
        error_message: Reason for an archive decision.
    """

    asset_moved: bool
    should_archive_task: bool = False
    target_data_source_id: int | None = None
    target_workflow_stage_id: int | None = None
    error_message: str | None = None

    @classmethod
    def no_op(cls) -> "AssetMovementResult":
        return cls(asset_moved=False)

    @classmethod
    def moved(cls, target_data_source_id: int, target_workflow_stage_id: int) -> "AssetMovementResult":
        return cls(
            asset_moved=True,
            target_data_source_id=target_data_source_id,
            target_workflow_stage_id=target_workflow_stage_id,
        )

    @classmethod
    def archive(cls, error_message: str) -> "AssetMovementResult":
        return cls(asset_moved=False, should_archive_task=True, error_message=error_message)
