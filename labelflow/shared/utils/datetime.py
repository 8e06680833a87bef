"""
UTC datetime helpers.

Every timestamp stored on tasks, history entries and events is
timezone-aware UTC. Use these instead of datetime.now() or datetime.utcnow().
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Normalize a datetime read back from storage to aware UTC.

    None passes through; naive values are taken to be UTC; aware values
    are converted.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def parse_utc(value: str | None) -> datetime | None:
    """Parse an ISO-8601 string (as written to status history) into aware UTC."""
    if not value:
        return None
    return ensure_utc(datetime.fromisoformat(value))
