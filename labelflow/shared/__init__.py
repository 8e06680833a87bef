"""Shared utilities: telemetry and datetime helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from labelflow.shared.utils import ensure_utc, parse_utc, utc_now

__all__ = ["utc_now", "ensure_utc", "parse_utc"]
