"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. Routes get
their use cases from labelflow.api.v1.dependencies.
"""

from fastapi import APIRouter

from labelflow.api.v1.endpoints import health, tasks

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
