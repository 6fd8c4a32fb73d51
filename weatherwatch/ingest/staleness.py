"""Staleness checks for retained readings."""

from datetime import UTC, datetime


def is_reading_stale(
    fetched_at_iso: str, max_age_minutes: int, now: datetime | None = None
) -> bool:
    """Check if a reading is stale based on its fetch time."""
    age = reading_age_minutes(fetched_at_iso, now)
    return age > max_age_minutes


def reading_age_minutes(fetched_at_iso: str, now: datetime | None = None) -> float:
    """Get the age of a reading in minutes. Unparseable timestamps are infinitely old."""
    if now is None:
        now = datetime.now(UTC)
    fetched = _parse_timestamp(fetched_at_iso)
    if fetched is None:
        return float("inf")
    return (now - fetched).total_seconds() / 60


def _parse_timestamp(iso_str: str) -> datetime | None:
    """Parse an ISO timestamp, handling naive values as UTC."""
    try:
        dt = datetime.fromisoformat(iso_str)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        return dt
    except (ValueError, TypeError):
        return None
