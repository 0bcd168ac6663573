"""Date and time helpers shared by validation, statistics and charting.

Reading timestamps are wall-clock values interpreted as UTC. A reading
without a time sorts as 00:00 of its date, ahead of any later explicit time
on the same day. Exact ties keep their insertion order (stable sort).
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, List, Optional, Union

from dateutil.parser import isoparse

MIDNIGHT = "00:00"


def parse_date(value: Union[str, date, datetime]) -> date:
    """Parse a YYYY-MM-DD string (or pass through a date)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def parse_time(value: Optional[str]) -> time:
    """Parse HH:MM, treating a missing value as midnight."""
    if not value:
        return time(0, 0)
    hours, minutes = value.split(":")[:2]
    return time(int(hours), int(minutes))


def parse_instant(value: Union[str, datetime]) -> datetime:
    """
    Parse an ISO 8601 instant into an aware UTC datetime.

    Naive values are assumed to be UTC. Raises ValueError if unparseable.
    """
    if isinstance(value, datetime):
        dt = value
    else:
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"Not a timestamp: {value!r}")
        dt = isoparse(value.strip())
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utcnow() -> datetime:
    """Current instant. Only the CLI and web layers call this."""
    return datetime.now(timezone.utc)


def to_iso_z(dt: datetime) -> str:
    """Format as 2025-01-10T12:00:00.000Z."""
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def get_reading_datetime(reading_date: Union[str, date], reading_time: Optional[str] = None) -> datetime:
    """Point in time of a reading; missing time defaults to 00:00."""
    d = parse_date(reading_date)
    return datetime.combine(d, parse_time(reading_time), tzinfo=timezone.utc)


def reading_sort_key(reading) -> tuple:
    """Sort key over (date, time-or-midnight)."""
    return (reading.date, reading.time or MIDNIGHT)


def compare_readings(a, b) -> int:
    """Three-way comparison of two readings by date and time."""
    ka, kb = reading_sort_key(a), reading_sort_key(b)
    if ka < kb:
        return -1
    if ka > kb:
        return 1
    return 0


def sort_readings(readings: Iterable) -> List:
    """Return readings in chronological order (stable for exact ties)."""
    return sorted(readings, key=reading_sort_key)


def is_reading_in_future(
    reading_date: Union[str, date], reading_time: Optional[str], now: datetime
) -> bool:
    """True if the reading's timestamp is strictly after now."""
    return get_reading_datetime(reading_date, reading_time) > parse_instant(now)


def get_time_difference_in_days(
    date1: Union[str, date],
    time1: Optional[str],
    date2: Union[str, date],
    time2: Optional[str],
) -> float:
    """Signed fractional days from the first timestamp to the second."""
    delta = get_reading_datetime(date2, time2) - get_reading_datetime(date1, time1)
    return delta / timedelta(days=1)


def days_between(start: Union[str, date], end: Union[str, date]) -> int:
    """Whole calendar days from start to end (negative if end is earlier)."""
    return (parse_date(end) - parse_date(start)).days
