"""Object storage: local filesystem and S3-compatible backends.

Factory creates the backend from labelflow.core.config. Implementations are
loaded lazily inside StorageFactory.create_storage_service() so that:
- Default (local) only requires aiofiles (main dependency).
- S3 backend only loads boto3 when used; install with the ``storage`` extra.

Implementations satisfy IObjectStorage (bucket_exists, create_bucket,
file_exists, download, upload).
"""

from labelflow.infrastructure.external.storage.bucket_naming import BucketNamer
from labelflow.infrastructure.external.storage.factory import StorageFactory

__all__ = [
    "BucketNamer",
    "StorageFactory",
]
