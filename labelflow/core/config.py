"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Storage backend and timeouts are validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings are optional with defaults. An empty database_url leaves
    the SQL backend unconfigured; DB-backed endpoints then answer 503.
    """

    # App
    app_name: str = "labelflow"
    app_version: str = "1.0.0"
    debug: bool = False

    # Database (SQLAlchemy async + Alembic)
    database_url: str = ""
    database_echo: bool = False
    # Optional pool/driver overrides (None = use defaults in database.py)
    db_pool_size: int | None = None
    db_max_overflow: int | None = None
    db_command_timeout: int | None = None

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Object storage holding asset files, one bucket per project data source
    storage_backend: str = "local"
    storage_root: str = "/var/labelflow/storage"
    s3_region: str = "us-east-1"
    s3_endpoint_url: str | None = None
    s3_access_key: str | None = None
    s3_secret_key: SecretStr | None = None
    bucket_prefix: str = "labelflow"
    # Deadline per object-store operation while moving an asset (a streamed copy is one)
    storage_operation_timeout_seconds: float = 30.0

    # Acting user (authentication happens upstream)
    actor_header_name: str = "X-User-ID"
    role_header_name: str = "X-Project-Role"

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_storage(self) -> "Settings":
        """Validate storage backend and the object-store deadline."""
        if self.storage_backend not in ("local", "s3"):
            raise ValueError(
                f"Invalid storage_backend '{self.storage_backend}'. "
                "Must be one of: 'local', 's3'"
            )
        if self.storage_operation_timeout_seconds <= 0:
            raise ValueError("storage_operation_timeout_seconds must be positive")
        if not self.bucket_prefix.strip():
            raise ValueError("bucket_prefix must not be empty")
        return self

    @property
    def sql_configured(self) -> bool:
        return bool(self.database_url)


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
