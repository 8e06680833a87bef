"""Infrastructure exceptions for object storage operations.

Storage errors extend LabelflowException so presentation can map them
to HTTP responses consistently.
"""

from labelflow.domain.exceptions import LabelflowException


class StorageException(LabelflowException):
    """Base exception for storage operations."""


class StorageNotFoundError(StorageException):
    """Object not found in storage."""

    def __init__(self, bucket: str, key: str) -> None:
        super().__init__(
            f"Object not found: {bucket}/{key}",
            "STORAGE_NOT_FOUND",
            {"bucket": bucket, "key": key},
        )


class StorageUploadError(StorageException):
    """Object upload failed."""

    def __init__(self, bucket: str, key: str, reason: str) -> None:
        super().__init__(
            f"Failed to upload object: {bucket}/{key}",
            "STORAGE_UPLOAD_ERROR",
            {"bucket": bucket, "key": key, "reason": reason},
        )


class StorageDownloadError(StorageException):
    """Object download failed."""

    def __init__(self, bucket: str, key: str, reason: str) -> None:
        super().__init__(
            f"Failed to download object: {bucket}/{key}",
            "STORAGE_DOWNLOAD_ERROR",
            {"bucket": bucket, "key": key, "reason": reason},
        )


class StorageBucketError(StorageException):
    """Bucket lookup or creation failed."""

    def __init__(self, bucket: str, operation: str, reason: str) -> None:
        super().__init__(
            f"Bucket {operation} failed: {bucket}",
            "STORAGE_BUCKET_ERROR",
            {"bucket": bucket, "operation": operation, "reason": reason},
        )


class StoragePermissionError(StorageException):
    """Insufficient permissions for storage operation."""

    def __init__(self, path: str, operation: str) -> None:
        super().__init__(
            f"Permission denied for {operation} on {path}",
            "STORAGE_PERMISSION_ERROR",
            {"path": path, "operation": operation},
        )


class InvalidBucketNameError(StorageException):
    """Project id and data source name do not produce a valid bucket name."""

    def __init__(self, project_id: int, data_source_name: str) -> None:
        super().__init__(
            f"Cannot derive a bucket name for data source '{data_source_name}'",
            "INVALID_BUCKET_NAME",
            {"project_id": project_id, "data_source_name": data_source_name},
        )
