"""
Timezone-aware datetime helpers.
- Store and compute in UTC in DB.
- SQLite drops tzinfo on read; ensure_utc restores it before comparisons.
- Occurrence dates are calendar dates in the organization's timezone.
"""
from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

UTC = timezone.utc


def now_utc() -> datetime:
    """Current time in UTC (timezone-aware). Use for modified_at, created_at, etc."""
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


def to_local(dt: Optional[datetime], tz_name: str) -> Optional[datetime]:
    """Convert to the named timezone. Naive datetimes are treated as UTC before converting."""
    if dt is None:
        return None
    return ensure_utc(dt).astimezone(ZoneInfo(tz_name))


def local_date(dt: datetime, tz_name: str) -> date:
    """Calendar date of an instant as seen in the named timezone."""
    return to_local(dt, tz_name).date()


def today_local(tz_name: str) -> date:
    """Current calendar date in the named timezone."""
    return local_date(now_utc(), tz_name)


def iso_8601_utc(dt: Optional[datetime]) -> Optional[str]:
    """ISO-8601 with Z for UTC."""
    if dt is None:
        return None
    s = ensure_utc(dt).isoformat()
    if s.endswith("+00:00"):
        s = s[:-6] + "Z"
    return s
