"""Shared utilities: UTC datetime helpers."""

from labelflow.shared.utils.datetime import ensure_utc, parse_utc, utc_now

__all__ = ["utc_now", "ensure_utc", "parse_utc"]
