"""
Timezone-aware timestamp helpers.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def get_current_utc_time() -> datetime:
    """Return the current timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_iso_format(dt: datetime) -> str:
    """Convert a datetime into an ISO 8601 string with timezone information."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()


def format_generated_time(dt: Optional[datetime] = None) -> str:
    """Render a timestamp the way java.util.Date prints it, e.g. 'Sat Oct 18 09:15:02 UTC 2026'."""
    dt = dt or get_current_utc_time()
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    zone = dt.tzname() or "UTC"
    return dt.strftime(f"%a %b %d %H:%M:%S {zone} %Y")


def format_duration(start: datetime, end: Optional[datetime] = None) -> str:
    """Return human-readable duration between two datetimes."""
    end = end or get_current_utc_time()
    total_seconds = int((end - start).total_seconds())
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)

    if hours:
        return f"{hours}h {minutes}m {seconds}s"
    if minutes:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"
