# backend/agenda/services/slots/zones.py
"""
Zoned time helpers.

Wall-clock times are turned into absolute instants per calendar day using
the store's IANA zone, so DST transitions shift the UTC window instead of
the local one.
"""

from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def get_zone(name: str) -> ZoneInfo:
    """Load an IANA zone, raising ValueError for unknown names."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown timezone {name!r}") from None


def ensure_utc(value: datetime) -> datetime:
    """Normalize an instant to aware UTC; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def local_to_instant(day: date, wall: time, zone: ZoneInfo) -> datetime:
    """
    Local wall-clock time on `day` as a UTC instant.

    Nonexistent times (spring-forward gap) land after the gap and
    ambiguous times (fall-back) resolve to the first occurrence, which
    is what fold=0 gives.
    """
    local = datetime.combine(day, wall.replace(tzinfo=None, fold=0), tzinfo=zone)
    return local.astimezone(timezone.utc)


def local_date(instant: datetime, zone: ZoneInfo) -> date:
    return instant.astimezone(zone).date()


def day_key(day: date) -> str:
    """Calendar day key, "YYYY-MM-DD"."""
    return day.isoformat()


def hhmm(instant: datetime, zone: ZoneInfo) -> str:
    """Local "HH:MM" of an instant."""
    return instant.astimezone(zone).strftime("%H:%M")


def sunday_weekday(day: date) -> int:
    """Weekday index with Sunday = 0 .. Saturday = 6."""
    return day.isoweekday() % 7
