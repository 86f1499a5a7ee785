"""UTC helpers. Every timestamp the workspace stores is timezone-aware UTC."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Current time as an aware UTC datetime (default service clock)."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Normalize to aware UTC: naive values are taken as UTC, aware ones converted.

    Used for client-supplied filing times and at the persistence boundary,
    where asyncpg may hand back naive values for timestamp columns.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)
