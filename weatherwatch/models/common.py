"""Time and number helpers shared across models."""

from datetime import UTC, date, datetime


def utc_now() -> datetime:
    return datetime.now(UTC)


def utc_now_iso() -> str:
    return utc_now().isoformat()


def local_today() -> date:
    """Calendar day on the process-local clock."""
    return datetime.now().date()


def format_number(value: float) -> str:
    """Render a number the way it reads in alert text: 36.0 -> '36', 36.5 -> '36.5'."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)
