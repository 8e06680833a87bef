"""Core: configuration, exception handlers, and application lifespan."""

from labelflow.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
