"""Trip input and its conversion into odometer readings.

A trip is a distance with an optional time window. It is never stored;
it becomes a START reading (odometer before the trip) and an END reading
(odometer after), or just the END reading when the start date already has
a reading.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Any, List, Optional, Sequence

from .errors import (
    InvalidDistance,
    InvalidReading,
    InvalidTimeOrder,
    InvalidTimestamp,
    NoteTooLong,
    TimeConflict,
)
from .reading import MileageReading, add_trip_prefix
from .timeutil import parse_instant, sort_readings, to_iso_z
from .validation import MAX_NOTE_LENGTH, validate_reading

log = logging.getLogger(__name__)

MIN_DISTANCE_KM = 1
MAX_DISTANCE_KM = 2000
DEFAULT_TRIP_DURATION = timedelta(minutes=1)
CONFLICT_TOLERANCE = timedelta(milliseconds=1000)


class TripInput:
    """Distance-only entry submitted by the user."""

    def __init__(
        self,
        distance: Any,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
        note: Optional[str] = None,
    ):
        self.distance = distance
        self.start_time = start_time
        self.end_time = end_time
        self.note = note

    @classmethod
    def from_dict(cls, data: dict) -> "TripInput":
        return cls(
            data.get("distance"),
            data.get("startTime"),
            data.get("endTime"),
            data.get("note"),
        )


def validate_distance(distance: Any) -> float:
    """Distance must be a number in [1, 2000] km."""
    if isinstance(distance, bool) or not isinstance(distance, (int, float)) or math.isnan(distance):
        raise InvalidDistance("Distance is required", field="distance", value=distance)
    if distance < MIN_DISTANCE_KM or distance > MAX_DISTANCE_KM:
        raise InvalidDistance(
            "Trip distance must be between 1 and 2 000 km",
            field="distance",
            value=distance,
        )
    return distance


def _parse_optional(value: Optional[str], field: str, label: str) -> Optional[datetime]:
    if value is None or value == "":
        return None
    try:
        return parse_instant(value)
    except (ValueError, OverflowError):
        raise InvalidTimestamp(f"Invalid {label} time format", field=field, value=value)


def resolve_trip_times(
    start_time: Optional[str], end_time: Optional[str], now: datetime
) -> tuple:
    """
    Fill in missing trip timestamps.

    - Neither given: end = now, start = now - 1 minute
    - Only start: end = start + 1 minute
    - Only end: start = end - 1 minute
    - Both: used as-is, end must be after start
    """
    start = _parse_optional(start_time, "startTime", "start")
    end = _parse_optional(end_time, "endTime", "end")

    if start is None and end is None:
        end = parse_instant(now)
        start = end - DEFAULT_TRIP_DURATION
    elif end is None:
        end = start + DEFAULT_TRIP_DURATION
    elif start is None:
        start = end - DEFAULT_TRIP_DURATION

    if end <= start:
        raise InvalidTimeOrder("End time must be after start time", field="endTime")
    return start, end


def find_time_conflict(
    readings: Sequence[MileageReading], *instants: datetime
) -> Optional[MileageReading]:
    """First reading whose timestamp is within one second of any instant."""
    for reading in readings:
        stamp = reading.timestamp
        for instant in instants:
            if abs(stamp - instant) < CONFLICT_TOLERANCE:
                return reading
    return None


def convert_trip(
    trip: TripInput, existing: Sequence[MileageReading], now: datetime
) -> List[MileageReading]:
    """
    Turn a trip into the one or two readings to append.

    Every created reading passes the same ordering checks as a manual
    reading, so a failure never leaves half a trip behind.

    Raises:
        OutOfOrderMileage: a backdated trip would overtake a later reading

    Returns:
        [start, end] or [end] when the start date already has a reading
    """
    distance = validate_distance(trip.distance)
    start, end = resolve_trip_times(trip.start_time, trip.end_time, now)

    if trip.note is not None and not isinstance(trip.note, str):
        raise InvalidReading("Note must be text", field="note")
    if trip.note and len(trip.note) > MAX_NOTE_LENGTH:
        raise NoteTooLong(f"Note exceeds maximum length ({MAX_NOTE_LENGTH} characters)", field="note")

    conflict = find_time_conflict(existing, start, end)
    if conflict is not None:
        when = f"{conflict.date} {conflict.time or ''}".strip()
        raise TimeConflict(
            "Trip times conflict with existing readings",
            field="startTime",
            value=f"Conflict with reading at {when}",
        )

    if existing:
        start_odometer = sort_readings(existing)[-1].mileage
    else:
        start_odometer = 0

    now = parse_instant(now)
    stamp = int(now.timestamp() * 1000)
    created_at = to_iso_z(now)
    start_date = start.strftime("%Y-%m-%d")

    created: List[MileageReading] = []
    if any(r.date == start_date for r in existing):
        log.debug("Reading already on %s, skipping trip start reading", start_date)
    else:
        created.append(
            MileageReading(
                id=f"{stamp}-start",
                date=start_date,
                time=start.strftime("%H:%M"),
                mileage=start_odometer,
                note="",
                created_at=created_at,
            )
        )

    created.append(
        MileageReading(
            id=f"{stamp}-end",
            date=end.strftime("%Y-%m-%d"),
            time=end.strftime("%H:%M"),
            mileage=start_odometer + distance,
            note=add_trip_prefix(trip.note),
            created_at=created_at,
        )
    )

    # checked on the stored HH:MM values, not the full-precision instants
    for index, reading in enumerate(created):
        try:
            validate_reading(reading, list(existing) + created[:index])
        except TimeConflict as e:
            raise TimeConflict(
                "Trip times conflict with existing readings",
                field="startTime",
                value=e.value,
            ) from e
    return created
