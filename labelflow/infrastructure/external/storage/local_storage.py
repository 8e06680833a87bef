"""Local filesystem object storage with path validation and atomic writes.

Buckets are directories directly under storage_root; keys are relative
paths inside a bucket.
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import AsyncIterator
from pathlib import Path

import aiofiles
import aiofiles.os

from labelflow.infrastructure.exceptions import (
    StorageBucketError,
    StorageDownloadError,
    StorageNotFoundError,
    StoragePermissionError,
    StorageUploadError,
)


class LocalObjectStorage:
    """Local filesystem storage with atomic writes and path traversal protection.

    Paths are validated against storage_root. Writes stream into a temp file
    in the target directory and are renamed into place, so readers never see
    a partial object.
    """

    CHUNK_SIZE = 64 * 1024  # 64KB

    def __init__(self, storage_root: str) -> None:
        """Initialize local storage.

        Args:
            storage_root: Base directory holding one directory per bucket.
        """
        self.storage_root = Path(storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True, mode=0o750)

    def _resolve(self, *parts: str) -> Path:
        """Resolve and validate path under storage_root. Raises StoragePermissionError if traversal."""
        full_path = self.storage_root.joinpath(*parts).resolve()
        try:
            relative = full_path.relative_to(self.storage_root)
        except ValueError as e:
            raise StoragePermissionError("/".join(parts), "path_validation") from e
        if not relative.parts:
            raise StoragePermissionError("/".join(parts), "path_validation")
        return full_path

    def _bucket_path(self, bucket: str) -> Path:
        path = self._resolve(bucket)
        if path.parent != self.storage_root:
            raise StoragePermissionError(bucket, "bucket_name")
        return path

    def _object_path(self, bucket: str, key: str) -> Path:
        bucket_path = self._bucket_path(bucket)
        path = self._resolve(bucket, key)
        try:
            path.relative_to(bucket_path)
        except ValueError as e:
            raise StoragePermissionError(f"{bucket}/{key}", "path_validation") from e
        return path

    async def bucket_exists(self, bucket: str) -> bool:
        return await aiofiles.os.path.isdir(self._bucket_path(bucket))

    async def create_bucket(self, bucket: str) -> None:
        path = self._bucket_path(bucket)
        try:
            await aiofiles.os.makedirs(path, mode=0o750, exist_ok=True)
        except OSError as e:
            raise StorageBucketError(bucket, "create", str(e)) from e

    async def file_exists(self, bucket: str, key: str) -> bool:
        """Return True if the object exists; a missing bucket means a missing object."""
        return await aiofiles.os.path.isfile(self._object_path(bucket, key))

    async def download(self, bucket: str, key: str) -> AsyncIterator[bytes]:
        """Stream object content."""
        file_path = self._object_path(bucket, key)
        if not await aiofiles.os.path.isfile(file_path):
            raise StorageNotFoundError(bucket, key)
        try:
            async with aiofiles.open(file_path, "rb") as f:
                while True:
                    chunk = await f.read(self.CHUNK_SIZE)
                    if not chunk:
                        break
                    yield chunk
        except OSError as e:
            raise StorageDownloadError(bucket, key, str(e)) from e

    async def upload(self, stream: AsyncIterator[bytes], bucket: str, key: str) -> str:
        """Write streamed content atomically under bucket/key; return the key."""
        target_path = self._object_path(bucket, key)
        if not await aiofiles.os.path.isdir(self._bucket_path(bucket)):
            raise StorageBucketError(bucket, "lookup", "bucket does not exist")
        target_path.parent.mkdir(parents=True, exist_ok=True, mode=0o750)
        temp_fd, temp_path = tempfile.mkstemp(
            dir=target_path.parent,
            prefix=".tmp_",
            suffix=target_path.suffix,
        )
        os.close(temp_fd)
        try:
            async with aiofiles.open(temp_path, "wb") as f:
                async for chunk in stream:
                    await f.write(chunk)
            os.chmod(temp_path, 0o640)
            await aiofiles.os.replace(temp_path, target_path)
        except StorageNotFoundError:
            raise
        except (OSError, StorageDownloadError) as e:
            raise StorageUploadError(bucket, key, str(e)) from e
        finally:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
        return key
