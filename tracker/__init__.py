"""
Lease mileage tracking.

This package turns odometer readings and lease terms into budget status:
- LeaseInfo: Lease period and kilometer allowance
- MileageReading: Absolute odometer value at a point in time
- TripInput / convert_trip: Distance-only entries turned into readings
- validate_reading: Chronological monotonicity gate for every write
- calculate_lease_stats: Budget, variance and projections at a date
- generate_chart_data: Aligned remaining-km series for charting
- service: Store-backed operations used by the CLI and web app
"""

from .errors import (
    TrackerError,
    InvalidDistance,
    InvalidTimestamp,
    InvalidTimeOrder,
    NoteTooLong,
    TimeConflict,
    OutOfOrderMileage,
    InvalidReading,
    InvalidLease,
    NotFound,
    StoreUnavailable,
)
from .lease_info import LeaseInfo
from .reading import MileageReading, TRIP_PREFIX, add_trip_prefix, strip_trip_prefix
from .timeutil import (
    compare_readings,
    get_reading_datetime,
    get_time_difference_in_days,
    is_reading_in_future,
    sort_readings,
)
from .validation import validate_reading, validate_reading_edit, check_monotonic
from .trip import TripInput, convert_trip
from .stats import (
    CalculatedStats,
    MonthlyStats,
    WeeklyStats,
    calculate_lease_stats,
    calculate_weekly_stats,
)
from .chart import ChartData, generate_chart_data
from .store import Store, MemoryStore, YamlStore, LEASE_KEY, READINGS_KEY

__all__ = [
    "TrackerError",
    "InvalidDistance",
    "InvalidTimestamp",
    "InvalidTimeOrder",
    "NoteTooLong",
    "TimeConflict",
    "OutOfOrderMileage",
    "InvalidReading",
    "InvalidLease",
    "NotFound",
    "StoreUnavailable",
    "LeaseInfo",
    "MileageReading",
    "TRIP_PREFIX",
    "add_trip_prefix",
    "strip_trip_prefix",
    "compare_readings",
    "get_reading_datetime",
    "get_time_difference_in_days",
    "is_reading_in_future",
    "sort_readings",
    "validate_reading",
    "validate_reading_edit",
    "check_monotonic",
    "TripInput",
    "convert_trip",
    "CalculatedStats",
    "MonthlyStats",
    "WeeklyStats",
    "calculate_lease_stats",
    "calculate_weekly_stats",
    "ChartData",
    "generate_chart_data",
    "Store",
    "MemoryStore",
    "YamlStore",
    "LEASE_KEY",
    "READINGS_KEY",
]
