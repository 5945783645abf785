"""
Timezone helpers.
- Audit timestamps (signed_at, deleted_at, log created_at) are stored in UTC.
- Leave start/end times are wall-clock times in the calendar zone (settings.CALENDAR_TZ).
"""
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from app.core.config import settings

UTC = timezone.utc


def calendar_zone() -> ZoneInfo:
    return ZoneInfo(settings.CALENDAR_TZ)


def now_utc() -> datetime:
    """Current time in UTC (timezone-aware)."""
    return datetime.now(UTC)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """If dt is naive, treat as UTC and return timezone-aware UTC. If already aware, convert to UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    else:
        dt = dt.astimezone(UTC)
    return dt


def to_calendar_time(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Naive wall-clock time in the calendar zone.

    Naive inputs are taken as already being calendar wall-clock (that is how
    SQLite hands them back); aware inputs are converted first.
    """
    if dt is None:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(calendar_zone()).replace(tzinfo=None)
    return dt


def iso_8601_utc(dt: Optional[datetime]) -> Optional[str]:
    """ISO-8601 with Z for UTC."""
    if dt is None:
        return None
    utc = ensure_utc(dt)
    s = utc.isoformat()
    if s.endswith("+00:00"):
        s = s[:-6] + "Z"
    return s
