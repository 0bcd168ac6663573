"""Conversion between stored documents (camelCase) and tracker objects."""

import dataclasses
from typing import Any, Dict, List, Optional

from .lease_info import LeaseInfo
from .reading import MileageReading
from .store import LEASE_KEY, READINGS_KEY, Store


def to_camel(name: str) -> str:
    """snake_case -> camelCase"""
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def camel_dict(obj: Any) -> Dict[str, Any]:
    """Shallow dataclass -> dict with camelCase keys."""
    return {to_camel(f.name): getattr(obj, f.name) for f in dataclasses.fields(obj)}


def _date_str(value: Any) -> str:
    """Hand-edited YAML may hold real dates instead of strings."""
    return value.isoformat() if hasattr(value, "isoformat") else value


def parse_lease(dct: Dict[str, Any]) -> LeaseInfo:
    """Build a LeaseInfo from its stored document."""
    return LeaseInfo(
        _date_str(dct["startDate"]),
        _date_str(dct["endDate"]),
        dct["totalLimit"],
        dct.get("annualLimit"),
        dct.get("overageCostPerKm"),
        dct.get("createdAt"),
        dct.get("updatedAt"),
        dct.get("id") or "default",
    )


def lease_to_dict(lease: LeaseInfo) -> Dict[str, Any]:
    """Serialize a LeaseInfo, omitting unset optional fields."""
    d: Dict[str, Any] = {
        "id": lease.id,
        "startDate": lease.start_date,
        "endDate": lease.end_date,
        "totalLimit": lease.total_limit,
    }
    if lease.annual_limit is not None:
        d["annualLimit"] = lease.annual_limit
    if lease.overage_cost_per_km is not None:
        d["overageCostPerKm"] = lease.overage_cost_per_km
    if lease.created_at is not None:
        d["createdAt"] = lease.created_at
    if lease.updated_at is not None:
        d["updatedAt"] = lease.updated_at
    return d


def parse_reading(dct: Dict[str, Any]) -> MileageReading:
    """Build a MileageReading from its stored document."""
    return MileageReading(
        str(dct["id"]),
        _date_str(dct["date"]),
        dct["mileage"],
        dct.get("time") or None,
        dct.get("note"),
        dct.get("createdAt"),
    )


def reading_to_dict(reading: MileageReading) -> Dict[str, Any]:
    """Serialize a MileageReading, omitting unset optional fields."""
    d: Dict[str, Any] = {"id": reading.id, "date": reading.date}
    if reading.time is not None:
        d["time"] = reading.time
    d["mileage"] = reading.mileage
    if reading.note is not None:
        d["note"] = reading.note
    if reading.created_at is not None:
        d["createdAt"] = reading.created_at
    return d


def load_lease(store: Store) -> Optional[LeaseInfo]:
    """Stored lease terms, or None if never saved."""
    dct = store.get(LEASE_KEY)
    return parse_lease(dct) if dct else None


def save_lease(store: Store, lease: LeaseInfo) -> None:
    store.set(LEASE_KEY, lease_to_dict(lease))


def load_readings(store: Store) -> Optional[List[MileageReading]]:
    """Stored readings, or None if the key has never been written."""
    items = store.get(READINGS_KEY)
    if items is None:
        return None
    return [parse_reading(item) for item in items]


def save_readings(store: Store, readings: List[MileageReading]) -> None:
    """Replace the whole readings document."""
    store.set(READINGS_KEY, [reading_to_dict(r) for r in readings])
