"""Application lifespan: startup and shutdown.

Wiring of infrastructure only: logging, telemetry, DB engine dispose.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from labelflow.core.config import get_settings
from labelflow.infrastructure.persistence import database
from labelflow.shared.telemetry.logging import setup_logging
from labelflow.shared.telemetry.telemetry import (
    TelemetryConfig,
    get_telemetry,
    set_telemetry,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup: logging, telemetry (if enabled) with FastAPI and SQLAlchemy
    instrumentation. Shutdown: telemetry flush, SQL engine dispose.
    """
    settings = get_settings()
    setup_logging()

    if settings.telemetry_enabled:
        telemetry = TelemetryConfig(
            service_name=settings.app_name,
            service_version=settings.app_version,
            enabled=True,
            environment=settings.telemetry_environment,
        )
        telemetry.setup_telemetry(
            exporter_type=settings.telemetry_exporter,
            otlp_endpoint=settings.telemetry_otlp_endpoint,
            sample_rate=settings.telemetry_sample_rate,
        )
        set_telemetry(telemetry)
        telemetry.instrument_fastapi(app)
        if settings.sql_configured:
            database.ensure_engine()
            telemetry.instrument_sqlalchemy(database.engine)
        logger.info("Telemetry initialized")

    if not settings.sql_configured:
        logger.warning("DATABASE_URL not set; task endpoints will answer 503")

    yield

    telemetry_instance = get_telemetry()
    if telemetry_instance is not None:
        telemetry_instance.shutdown()
        set_telemetry(None)
        logger.info("Telemetry shutdown complete")

    if database.engine is not None:
        await database.engine.dispose()
        database.engine = None
        database.AsyncSessionLocal = None
        logger.info("Database engine disposed")
