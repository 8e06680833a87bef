"""S3-compatible object storage (AWS S3, MinIO, etc.) with one bucket per data source."""

from __future__ import annotations

import asyncio
import tempfile
from collections.abc import AsyncIterator
from typing import Any

import boto3
from botocore.exceptions import ClientError

from labelflow.infrastructure.exceptions import (
    StorageBucketError,
    StorageDownloadError,
    StorageNotFoundError,
    StorageUploadError,
)

_NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NoSuchBucket", "NotFound"})
# Uploads larger than this spill from memory to a temp file before sending.
_SPOOL_MAX_MEMORY = 8 * 1024 * 1024


def _error_code(e: ClientError) -> str:
    return str(e.response.get("Error", {}).get("Code", ""))


class S3ObjectStorage:
    """S3-compatible storage addressed by (bucket, key).

    Uses boto3 (sync) via asyncio.to_thread for async API. Compatible with
    AWS S3, MinIO, DigitalOcean Spaces.
    """

    CHUNK_SIZE = 64 * 1024  # 64KB

    def __init__(
        self,
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        client: Any = None,
    ) -> None:
        """Initialize S3 client.

        Args:
            region: AWS region.
            endpoint_url: Custom endpoint (MinIO/Spaces).
            access_key: Optional; uses env/IAM if not set.
            secret_key: Optional.
            client: Pre-built boto3 S3 client (tests).
        """
        self.region = region
        self.endpoint_url = endpoint_url
        if client is None:
            extra = {} if endpoint_url is None else {"endpoint_url": endpoint_url}
            client = boto3.client(
                "s3",
                region_name=region,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                **extra,
            )
        self._client = client

    async def bucket_exists(self, bucket: str) -> bool:
        def _head() -> bool:
            try:
                self._client.head_bucket(Bucket=bucket)
                return True
            except ClientError as e:
                if _error_code(e) in _NOT_FOUND_CODES:
                    return False
                raise StorageBucketError(bucket, "lookup", str(e)) from e

        return await asyncio.to_thread(_head)

    async def create_bucket(self, bucket: str) -> None:
        def _create() -> None:
            kwargs: dict[str, Any] = {"Bucket": bucket}
            if self.region and self.region != "us-east-1":
                kwargs["CreateBucketConfiguration"] = {"LocationConstraint": self.region}
            try:
                self._client.create_bucket(**kwargs)
            except ClientError as e:
                if _error_code(e) in ("BucketAlreadyOwnedByYou", "BucketAlreadyExists"):
                    return
                raise StorageBucketError(bucket, "create", str(e)) from e

        await asyncio.to_thread(_create)

    async def file_exists(self, bucket: str, key: str) -> bool:
        """Return True if object exists; a missing bucket means a missing object."""
        def _exists() -> bool:
            try:
                self._client.head_object(Bucket=bucket, Key=key)
                return True
            except ClientError as e:
                if _error_code(e) in _NOT_FOUND_CODES:
                    return False
                raise StorageDownloadError(bucket, key, str(e)) from e

        return await asyncio.to_thread(_exists)

    async def download(self, bucket: str, key: str) -> AsyncIterator[bytes]:
        """Stream object content chunk by chunk."""
        def _open() -> Any:
            try:
                return self._client.get_object(Bucket=bucket, Key=key)["Body"]
            except ClientError as e:
                if _error_code(e) in _NOT_FOUND_CODES:
                    raise StorageNotFoundError(bucket, key) from e
                raise StorageDownloadError(bucket, key, str(e)) from e

        body = await asyncio.to_thread(_open)
        try:
            while True:
                chunk = await asyncio.to_thread(body.read, self.CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk
        finally:
            body.close()

    async def upload(self, stream: AsyncIterator[bytes], bucket: str, key: str) -> str:
        """Spool streamed content and send it with a managed (multipart) upload."""
        with tempfile.SpooledTemporaryFile(max_size=_SPOOL_MAX_MEMORY) as spool:
            async for chunk in stream:
                spool.write(chunk)
            spool.seek(0)

            def _put() -> None:
                try:
                    self._client.upload_fileobj(spool, bucket, key)
                except ClientError as e:
                    raise StorageUploadError(bucket, key, str(e)) from e

            await asyncio.to_thread(_put)
        return key
