"""Datetime utilities for common operations."""

from datetime import datetime, timezone


def now() -> datetime:
    """Get current datetime in UTC."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """
    Attach UTC to naive datetimes.

    Some drivers (SQLite) hand back naive values for timezone-aware columns;
    everything stored by this service is UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def is_past(dt: datetime) -> bool:
    """Check if a datetime is in the past."""
    return ensure_utc(dt) < now()


def to_unix_millis(dt: datetime) -> int:
    """Convert datetime to milliseconds since epoch."""
    return int(ensure_utc(dt).timestamp() * 1000)


def to_base36(value: int) -> str:
    """Render a non-negative integer in base 36 (0-9a-z)."""
    if value < 0:
        raise ValueError("value must be non-negative")
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(digits[rem])
    return "".join(reversed(out))
