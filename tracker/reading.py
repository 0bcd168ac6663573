"""MileageReading class for odometer readings."""

from datetime import datetime
from typing import Optional

from .timeutil import get_reading_datetime

TRIP_PREFIX = "TRIP: "


def is_trip_note(note: Optional[str]) -> bool:
    """Notes starting with the trip prefix mark machine-generated readings."""
    return bool(note) and note.startswith(TRIP_PREFIX)


def strip_trip_prefix(note: Optional[str]) -> Optional[str]:
    """Display text of a note, without the trip prefix."""
    if is_trip_note(note):
        return note[len(TRIP_PREFIX):]
    return note


def add_trip_prefix(note: Optional[str]) -> str:
    """Stored form of a trip note. Inverse of strip_trip_prefix."""
    return f"{TRIP_PREFIX}{note or ''}"


class MileageReading:
    """An absolute odometer value at a point in time."""

    def __init__(
        self,
        id: str,
        date: str,
        mileage: float,
        time: Optional[str] = None,
        note: Optional[str] = None,
        created_at: Optional[str] = None,
    ):
        self.id = id
        self.date = date
        self.time = time
        self.mileage = mileage
        self.note = note
        self.created_at = created_at

    @property
    def timestamp(self) -> datetime:
        return get_reading_datetime(self.date, self.time)

    @property
    def is_trip(self) -> bool:
        return is_trip_note(self.note)

    @property
    def display_note(self) -> Optional[str]:
        return strip_trip_prefix(self.note)

    def __repr__(self) -> str:
        when = f"{self.date} {self.time}" if self.time else self.date
        return f"MileageReading({self.id!r}, {when}, {self.mileage})"
