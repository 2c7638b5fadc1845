"""
Time utilities for calculation history timestamps.

History entries carry an integer millisecond timestamp; these helpers
convert between that representation and timezone-aware UTC datetimes.
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current wall-clock time as a UTC datetime."""
    return datetime.now(timezone.utc)


def to_epoch_ms(ts: Optional[datetime] = None) -> int:
    """
    Convert a datetime to milliseconds since the epoch.

    Args:
        ts: Datetime to convert, defaults to now. Naive datetimes are taken as UTC.

    Returns:
        Integer milliseconds since 1970-01-01T00:00:00Z
    """
    if ts is None:
        ts = utc_now()
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return int(ts.timestamp() * 1000)


def from_epoch_ms(timestamp_ms: int) -> datetime:
    """Convert epoch milliseconds back into a UTC datetime."""
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)


def format_timestamp(timestamp_ms: int) -> str:
    """
    Format an epoch-millisecond timestamp for display and logging.

    Returns:
        ISO8601 formatted string
    """
    return from_epoch_ms(timestamp_ms).isoformat()
