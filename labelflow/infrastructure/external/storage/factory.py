"""Object storage factory: creates local or S3 backend from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from labelflow.application.interfaces.services import IObjectStorage
    from labelflow.core.config import Settings


class StorageFactory:
    """Factory for object storage instances based on configuration."""

    @staticmethod
    def create_storage_service(settings: "Settings | None" = None) -> "IObjectStorage":
        """Create object storage from settings.

        Args:
            settings: Application settings; if None, uses get_settings().

        Returns:
            LocalObjectStorage or S3ObjectStorage.

        Raises:
            ValueError: Unknown backend or missing required config.
        """
        from labelflow.core.config import get_settings

        s = settings or get_settings()
        backend = s.storage_backend.lower()

        if backend == "local":
            from labelflow.infrastructure.external.storage.local_storage import (
                LocalObjectStorage,
            )

            if not s.storage_root:
                raise ValueError("STORAGE_ROOT required for local backend")
            return LocalObjectStorage(storage_root=s.storage_root)
        if backend == "s3":
            try:
                from labelflow.infrastructure.external.storage.s3_storage import (
                    S3ObjectStorage,
                )
            except ImportError as e:
                raise ValueError(
                    "S3 backend requires boto3. Install with: pip install 'labelflow[storage]'"
                ) from e
            return S3ObjectStorage(
                region=s.s3_region,
                endpoint_url=s.s3_endpoint_url,
                access_key=s.s3_access_key,
                secret_key=s.s3_secret_key.get_secret_value() if s.s3_secret_key else None,
            )
        raise ValueError(
            f"Unknown storage backend: {backend}. Supported: 'local', 's3'"
        )
