"""Odometer ordering rules and input checks for readings."""

import math
import re
from datetime import date as date_type
from typing import Any, Iterable, List, Optional

from .errors import InvalidReading, NoteTooLong, OutOfOrderMileage, TimeConflict
from .reading import MileageReading
from .timeutil import compare_readings, sort_readings

MAX_NOTE_LENGTH = 200

_TIME_RE = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


def _describe(reading: MileageReading) -> str:
    return f"{reading.date} {reading.time}" if reading.time else reading.date


def validate_reading(candidate: MileageReading, existing: Iterable[MileageReading]) -> None:
    """
    Check a candidate reading against every other reading.

    The candidate's mileage must be at least the highest mileage recorded
    earlier and at most the lowest mileage recorded later. A reading at the
    exact same timestamp is a conflict.

    Raises:
        TimeConflict: another reading has the identical timestamp
        OutOfOrderMileage: mileage breaks chronological monotonicity
    """
    earlier: List[MileageReading] = []
    later: List[MileageReading] = []
    for other in existing:
        order = compare_readings(other, candidate)
        if order < 0:
            earlier.append(other)
        elif order > 0:
            later.append(other)
        else:
            raise TimeConflict(
                f"A reading already exists at {_describe(other)}",
                field="date",
                value=_describe(candidate),
            )

    if earlier:
        max_before = max(earlier, key=lambda r: r.mileage)
        if candidate.mileage < max_before.mileage:
            raise OutOfOrderMileage(
                f"Kilometers must be at least {max_before.mileage:g} "
                f"(reading on {_describe(max_before)})",
                field="mileage",
                value=candidate.mileage,
            )
    if later:
        min_after = min(later, key=lambda r: r.mileage)
        if candidate.mileage > min_after.mileage:
            raise OutOfOrderMileage(
                f"Kilometers must be at most {min_after.mileage:g} "
                f"(reading on {_describe(min_after)})",
                field="mileage",
                value=candidate.mileage,
            )


def validate_reading_edit(candidate: MileageReading, readings: Iterable[MileageReading]) -> None:
    """Validate an edited reading against all readings except itself."""
    validate_reading(candidate, [r for r in readings if r.id != candidate.id])


def check_monotonic(readings: Iterable[MileageReading]) -> bool:
    """True if mileage never decreases in chronological order."""
    ordered = sort_readings(readings)
    return all(a.mileage <= b.mileage for a, b in zip(ordered, ordered[1:]))


def normalize_time(value: Optional[str]) -> Optional[str]:
    """Return HH:MM (zero padded) or None. Raises InvalidReading if malformed."""
    if value is None or value == "":
        return None
    match = _TIME_RE.match(str(value).strip())
    if not match:
        raise InvalidReading("Time must be HH:MM", field="time", value=value)
    return f"{int(match.group(1)):02d}:{match.group(2)}"


def parse_reading_input(
    date: Any, mileage: Any, time: Any = None, note: Any = None
) -> dict:
    """
    Check the user-supplied fields of a manual reading.

    Returns the cleaned values as a dict with keys date, time, mileage, note.
    """
    try:
        if not isinstance(date, str):
            raise ValueError(date)
        date_type.fromisoformat(date)
    except ValueError:
        raise InvalidReading("Date must be YYYY-MM-DD", field="date", value=date)

    if isinstance(mileage, bool) or not isinstance(mileage, (int, float)):
        raise InvalidReading("Mileage must be a number", field="mileage", value=mileage)
    if math.isnan(mileage) or math.isinf(mileage) or mileage < 0:
        raise InvalidReading("Mileage must be a non-negative number", field="mileage", value=mileage)

    if note is not None and not isinstance(note, str):
        raise InvalidReading("Note must be text", field="note")
    if note and len(note) > MAX_NOTE_LENGTH:
        raise NoteTooLong(f"Note exceeds maximum length ({MAX_NOTE_LENGTH} characters)", field="note")

    return {
        "date": date,
        "time": normalize_time(time),
        "mileage": mileage,
        "note": note or "",
    }
