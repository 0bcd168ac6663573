"""Error kinds raised by the tracker core."""

from typing import Any, Dict, Optional


class TrackerError(Exception):
    """Base class for validation failures. Carries a machine-readable reason and field."""

    reason = "invalid"

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        super().__init__(message)
        self.message = message
        self.field = field
        self.value = value

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for an API error response."""
        d: Dict[str, Any] = {"error": self.message, "reason": self.reason}
        if self.field is not None:
            d["field"] = self.field
        if self.value is not None:
            d["value"] = self.value
        return d


class InvalidDistance(TrackerError):
    reason = "invalid_distance"


class InvalidTimestamp(TrackerError):
    reason = "invalid_timestamp"


class InvalidTimeOrder(TrackerError):
    reason = "invalid_time_order"


class NoteTooLong(TrackerError):
    reason = "note_too_long"


class TimeConflict(TrackerError):
    reason = "time_conflict"


class OutOfOrderMileage(TrackerError):
    reason = "out_of_order_mileage"


class InvalidReading(TrackerError):
    reason = "invalid_reading"


class InvalidLease(TrackerError):
    reason = "invalid_lease"


class NotFound(TrackerError):
    reason = "not_found"


class StoreUnavailable(Exception):
    """The backing key-value store could not be read or written."""
