"""General utility functions."""
from datetime import datetime, timezone
from zoneinfo import ZoneInfo


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """Convert datetime to UTC timezone."""
    if dt.tzinfo is None:
        # Assume UTC if no timezone
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_timezone(dt: datetime, tz: ZoneInfo) -> datetime:
    """Convert datetime to specified timezone."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(tz)


def format_slot_range(start: datetime, end: datetime, tz: ZoneInfo) -> str:
    """Human readable slot text, e.g. 'Monday, January 8, 2024, 9:00 AM - 9:30 AM EST'."""
    local_start = to_timezone(start, tz)
    local_end = to_timezone(end, tz)
    date_part = f"{local_start:%A, %B} {local_start.day}, {local_start.year}"
    return f"{date_part}, {_clock(local_start)} - {_clock(local_end)} {local_end:%Z}".rstrip()


def _clock(dt: datetime) -> str:
    hour = dt.hour % 12 or 12
    return f"{hour}:{dt.minute:02d} {'AM' if dt.hour < 12 else 'PM'}"
