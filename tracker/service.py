"""Operations over the persisted lease and readings.

Every function takes the store and the current instant explicitly. Each
write validates first and then replaces the whole document with one set()
call, so a rejected write changes nothing.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from .chart import ChartData, generate_chart_data
from .errors import InvalidLease, NotFound
from .lease_info import (
    DEFAULT_ANNUAL_LIMIT,
    DEFAULT_END_DATE,
    DEFAULT_START_DATE,
    DEFAULT_TOTAL_LIMIT,
    LeaseInfo,
)
from .loader import lease_to_dict, load_lease, load_readings, parse_lease, save_lease, save_readings
from .reading import MileageReading, add_trip_prefix
from .stats import CalculatedStats, WeeklyStats, calculate_lease_stats, calculate_weekly_stats
from .store import Store
from .timeutil import parse_instant, reading_sort_key, sort_readings, to_iso_z
from .trip import TripInput, convert_trip
from .validation import parse_reading_input, validate_reading, validate_reading_edit

log = logging.getLogger(__name__)


def default_lease(now: datetime) -> LeaseInfo:
    stamp = to_iso_z(now)
    return LeaseInfo(
        DEFAULT_START_DATE,
        DEFAULT_END_DATE,
        DEFAULT_TOTAL_LIMIT,
        DEFAULT_ANNUAL_LIMIT,
        created_at=stamp,
        updated_at=stamp,
    )


def default_readings(now: datetime) -> List[MileageReading]:
    stamp = to_iso_z(now)
    return [
        MileageReading("1", "2025-07-09", 0, note="Lease start", created_at=stamp),
        MileageReading("2", "2025-09-23", 4593, note="Current reading", created_at=stamp),
    ]


def _new_id(now: datetime) -> str:
    return str(int(parse_instant(now).timestamp() * 1000))


# =============================================================================
# Lease
# =============================================================================


def get_lease(store: Store, now: datetime) -> LeaseInfo:
    """Stored lease terms; defaults are saved on first access."""
    lease = load_lease(store)
    if lease is None:
        lease = default_lease(now)
        save_lease(store, lease)
        log.info("Created default lease %s..%s", lease.start_date, lease.end_date)
    return lease


def _lease_from_input(data: Dict[str, Any]) -> LeaseInfo:
    try:
        lease = parse_lease(data)
    except KeyError as e:
        raise InvalidLease(f"Missing lease field {e.args[0]}", field=e.args[0])
    lease.validate()
    return lease


def replace_lease(store: Store, data: Dict[str, Any], now: datetime) -> LeaseInfo:
    """Overwrite the lease terms with a complete new document."""
    data = dict(data, id="default", updatedAt=to_iso_z(now))
    data.setdefault("createdAt", to_iso_z(now))
    lease = _lease_from_input(data)
    save_lease(store, lease)
    return lease


def update_lease(store: Store, changes: Dict[str, Any], now: datetime) -> LeaseInfo:
    """Merge changes into the stored lease and replace it."""
    merged = lease_to_dict(get_lease(store, now))
    merged.update(changes)
    merged["id"] = "default"
    merged["updatedAt"] = to_iso_z(now)
    lease = _lease_from_input(merged)
    save_lease(store, lease)
    return lease


# =============================================================================
# Readings
# =============================================================================


def list_readings(store: Store, now: datetime) -> List[MileageReading]:
    """All readings in chronological order; defaults are saved on first access."""
    readings = load_readings(store)
    if readings is None:
        readings = default_readings(now)
        save_readings(store, readings)
        log.info("Seeded %d default readings", len(readings))
    return sort_readings(readings)


def _find(readings: List[MileageReading], reading_id: str) -> int:
    for index, reading in enumerate(readings):
        if reading.id == reading_id:
            return index
    raise NotFound("Reading not found", field="id", value=reading_id)


def add_reading(
    store: Store,
    date: Any,
    mileage: Any,
    now: datetime,
    time: Any = None,
    note: Any = None,
) -> MileageReading:
    """
    Record a manually entered odometer reading.

    A reading at the identical date and time is replaced rather than
    duplicated.
    """
    fields = parse_reading_input(date, mileage, time, note)
    readings = list_readings(store, now)
    reading = MileageReading(
        _new_id(now),
        fields["date"],
        fields["mileage"],
        fields["time"],
        fields["note"],
        to_iso_z(now),
    )
    others = [r for r in readings if reading_sort_key(r) != reading_sort_key(reading)]
    if len(others) != len(readings):
        log.info("Replacing reading at %s %s", reading.date, reading.time or "")
    validate_reading(reading, others)
    save_readings(store, sort_readings(others + [reading]))
    return reading


def update_reading(
    store: Store,
    reading_id: str,
    date: Any,
    mileage: Any,
    now: datetime,
    time: Any = None,
    note: Any = None,
) -> MileageReading:
    """
    Edit a reading in place, keeping its id and createdAt.

    Trip-generated readings keep their trip marker: the submitted note is
    display text and the prefix is added back. Without a note the current
    one is kept.
    """
    readings = list_readings(store, now)
    index = _find(readings, reading_id)
    existing = readings[index]

    if note is None:
        note = existing.display_note
    fields = parse_reading_input(date, mileage, time, note)
    stored_note = add_trip_prefix(fields["note"]) if existing.is_trip else fields["note"]

    updated = MileageReading(
        existing.id,
        fields["date"],
        fields["mileage"],
        fields["time"],
        stored_note,
        existing.created_at,
    )
    validate_reading_edit(updated, readings)
    readings[index] = updated
    save_readings(store, sort_readings(readings))
    return updated


def delete_reading(store: Store, reading_id: str, now: datetime) -> None:
    """Remove a reading by id. Mileage is absolute, so nothing else changes."""
    readings = list_readings(store, now)
    index = _find(readings, reading_id)
    del readings[index]
    save_readings(store, readings)
    log.info("Deleted reading %s", reading_id)


def add_trip(store: Store, trip: TripInput, now: datetime) -> List[MileageReading]:
    """Convert a trip to readings, append them and persist the whole list."""
    readings = list_readings(store, now)
    created = convert_trip(trip, readings, now)
    save_readings(store, sort_readings(readings + created))
    log.info(
        "Trip of %s km stored as %d reading(s) ending at %s",
        trip.distance, len(created), created[-1].mileage,
    )
    return created


# =============================================================================
# Derived data
# =============================================================================


def compute_stats(
    store: Store, now: datetime, reference_date: Optional[str] = None
) -> CalculatedStats:
    return calculate_lease_stats(
        list_readings(store, now), get_lease(store, now), reference_date, now=now
    )


def compute_chart_series(
    store: Store,
    now: datetime,
    selected_date: Optional[str] = None,
    include_preliminary: bool = True,
    view_mode: str = "total",
) -> ChartData:
    return generate_chart_data(
        list_readings(store, now),
        get_lease(store, now),
        selected_date,
        include_preliminary,
        view_mode,
        now=now,
    )


def compute_weekly_stats(store: Store, now: datetime, week_date=None) -> WeeklyStats:
    readings = list_readings(store, now)
    lease = get_lease(store, now)
    week_date = week_date or parse_instant(now).date()
    return calculate_weekly_stats(readings, lease, week_date, now=now)
