"""Helper functions for mileage lookups at a date."""

import math
from datetime import date, timedelta
from typing import List, Optional, Sequence, Tuple

from .reading import MileageReading
from .timeutil import days_between, parse_date


def round_half_up(value: float) -> int:
    """Round halves toward positive infinity, matching Math.round in the browser."""
    return int(math.floor(value + 0.5))


def reading_on_date(readings: Sequence[MileageReading], day: date) -> Optional[MileageReading]:
    """
    Reading for a calendar date, or None.

    With several readings on the same date the chronologically last one wins
    (the odometer at the end of that day). Expects sorted readings.
    """
    key = day.isoformat()
    found = None
    for reading in readings:
        if reading.date == key:
            found = reading
    return found


def split_around(
    readings: Sequence[MileageReading], day: date
) -> Tuple[List[MileageReading], List[MileageReading]]:
    """Readings dated strictly before and strictly after a date."""
    key = day.isoformat()
    before = [r for r in readings if r.date < key]
    after = [r for r in readings if r.date > key]
    return before, after


def interpolate(prev: MileageReading, nxt: MileageReading, day: date) -> float:
    """Linear interpolation by elapsed days between two readings."""
    span = days_between(prev.date, nxt.date)
    if span <= 0:
        return prev.mileage
    ratio = days_between(prev.date, day) / span
    return prev.mileage + (nxt.mileage - prev.mileage) * ratio


def mileage_at_date(readings: Sequence[MileageReading], day: date) -> float:
    """
    Odometer value at a date.

    - Reading on the date: its mileage
    - Readings on both sides: linear interpolation
    - Only earlier readings: the latest one (flat)
    - Only later readings, or none: 0 (lease starts at zero)
    """
    exact = reading_on_date(readings, day)
    if exact is not None:
        return exact.mileage
    before, after = split_around(readings, day)
    if before and after:
        return interpolate(before[-1], after[0], day)
    if before:
        return before[-1].mileage
    return 0


def rounded_mileage_at_date(readings: Sequence[MileageReading], day: date) -> float:
    """mileage_at_date with interpolated values rounded to whole kilometers."""
    exact = reading_on_date(readings, day)
    if exact is not None:
        return exact.mileage
    before, after = split_around(readings, day)
    if before and after:
        return round_half_up(interpolate(before[-1], after[0], day))
    return mileage_at_date(readings, day)


def find_mileage_at_date(readings: Sequence[MileageReading], day: date) -> Optional[float]:
    """Mileage on the date, else the latest earlier reading, else None. No interpolation."""
    exact = reading_on_date(readings, day)
    if exact is not None:
        return exact.mileage
    before, _ = split_around(readings, day)
    if not before:
        return None
    return before[-1].mileage


def get_mileage_at_date(
    readings: Sequence[MileageReading], day: date, lease_start: date
) -> float:
    """
    Like mileage_at_date, but when only later readings exist the value is
    estimated from the rate between lease start and the first reading.
    """
    exact = reading_on_date(readings, day)
    if exact is not None:
        return exact.mileage
    before, after = split_around(readings, day)
    if before and after:
        return interpolate(before[-1], after[0], day)
    if before:
        return before[-1].mileage
    if after:
        if day < lease_start:
            return 0
        first = after[0]
        days_from_start = days_between(lease_start, first.date)
        rate = first.mileage / days_from_start if days_from_start > 0 else 0
        return rate * max(0, days_between(lease_start, day))
    return 0


def average_rate(mileage: float, days: float) -> float:
    """Kilometers per day, 0 when no time has passed."""
    return mileage / days if days > 0 else 0


def add_days(start: date, days: int) -> date:
    return parse_date(start) + timedelta(days=days)
