"""Domain value objects and shared value types."""

from labelflow.domain.value_objects.asset_movement import (
    ASSET_NOT_FOUND_MESSAGE,
    TRANSFER_FAILED_MESSAGE,
    AssetMovementResult,
)

__all__ = [
    "ASSET_NOT_FOUND_MESSAGE",
    "TRANSFER_FAILED_MESSAGE",
    "AssetMovementResult",
]
