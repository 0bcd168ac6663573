#!/usr/bin/env python3
"""Tests for trip conversion."""
import pytest
from datetime import datetime, timezone

from tracker import (
    InvalidDistance,
    InvalidTimeOrder,
    InvalidTimestamp,
    MileageReading,
    NoteTooLong,
    OutOfOrderMileage,
    TimeConflict,
    TripInput,
    convert_trip,
)
from tracker.trip import resolve_trip_times

NOW = datetime(2025, 1, 10, 12, 0, tzinfo=timezone.utc)


class TestConvertTrip:
    """Tests for convert_trip."""

    def test_defaults_with_no_readings(self):
        """No times: start one minute before now, odometer from zero."""
        start, end = convert_trip(TripInput(45), [], NOW)

        assert (start.date, start.time, start.mileage, start.note) == ("2025-01-10", "11:59", 0, "")
        assert (end.date, end.time, end.mileage, end.note) == ("2025-01-10", "12:00", 45, "TRIP: ")
        assert start.id == "1736510400000-start"
        assert end.id == "1736510400000-end"
        assert end.created_at == "2025-01-10T12:00:00.000Z"

    def test_continues_from_latest_reading(self):
        existing = [
            MileageReading("1", "2025-01-01", 100),
            MileageReading("2", "2025-01-05", 250),
        ]
        created = convert_trip(TripInput(30, note="Work"), existing, NOW)
        assert [r.mileage for r in created] == [250, 280]
        assert created[-1].note == "TRIP: Work"
        assert created[-1].is_trip
        assert not created[0].is_trip

    def test_skips_start_when_date_has_reading(self):
        existing = [MileageReading("1", "2025-01-10", 100, "08:00")]
        created = convert_trip(TripInput(20), existing, NOW)
        assert len(created) == 1
        assert created[0].id.endswith("-end")
        assert created[0].mileage == 120

    def test_explicit_times(self):
        trip = TripInput(100, "2025-01-08T09:00:00Z", "2025-01-08T11:30:00Z")
        start, end = convert_trip(trip, [], NOW)
        assert (start.date, start.time) == ("2025-01-08", "09:00")
        assert (end.date, end.time) == ("2025-01-08", "11:30")

    def test_times_converted_to_utc(self):
        trip = TripInput(10, "2025-01-08T09:00:00+01:00", "2025-01-08T10:00:00+01:00")
        start, end = convert_trip(trip, [], NOW)
        assert (start.time, end.time) == ("08:00", "09:00")

    @pytest.mark.parametrize("distance", [1, 2000, 45.5])
    def test_distance_in_range(self, distance):
        assert convert_trip(TripInput(distance), [], NOW)[-1].mileage == distance

    @pytest.mark.parametrize("distance", [0.9, 2000.1, 0, -5])
    def test_distance_out_of_range(self, distance):
        with pytest.raises(InvalidDistance) as exc:
            convert_trip(TripInput(distance), [], NOW)
        assert exc.value.field == "distance"

    @pytest.mark.parametrize("distance", [None, "45", float("nan"), True])
    def test_distance_required(self, distance):
        with pytest.raises(InvalidDistance) as exc:
            convert_trip(TripInput(distance), [], NOW)
        assert exc.value.message == "Distance is required"

    def test_end_before_start(self):
        trip = TripInput(10, "2025-01-08T10:00:00Z", "2025-01-08T09:00:00Z")
        with pytest.raises(InvalidTimeOrder) as exc:
            convert_trip(trip, [], NOW)
        assert exc.value.field == "endTime"

    def test_equal_times_rejected(self):
        trip = TripInput(10, "2025-01-08T10:00:00Z", "2025-01-08T10:00:00Z")
        with pytest.raises(InvalidTimeOrder):
            convert_trip(trip, [], NOW)

    def test_unparseable_time(self):
        with pytest.raises(InvalidTimestamp) as exc:
            convert_trip(TripInput(10, start_time="yesterday"), [], NOW)
        assert exc.value.field == "startTime"

    def test_note_too_long(self):
        with pytest.raises(NoteTooLong):
            convert_trip(TripInput(10, note="x" * 201), [], NOW)

    def test_conflict_with_existing_reading(self):
        existing = [MileageReading("1", "2025-01-10", 100, "11:59")]
        with pytest.raises(TimeConflict) as exc:
            convert_trip(TripInput(10), existing, NOW)
        assert exc.value.message == "Trip times conflict with existing readings"
        assert exc.value.field == "startTime"

    def test_distance_checked_before_times(self):
        trip = TripInput(0, "2025-01-08T10:00:00Z", "2025-01-08T09:00:00Z")
        with pytest.raises(InvalidDistance):
            convert_trip(trip, [], NOW)

    def test_backdated_trip_cannot_overtake_later_reading(self):
        """The END reading would exceed a reading recorded after the trip."""
        existing = [
            MileageReading("1", "2025-01-01", 0),
            MileageReading("2", "2025-01-09", 500, "10:00"),
        ]
        trip = TripInput(50, "2025-01-05T09:00:00Z", "2025-01-05T10:00:00Z")
        with pytest.raises(OutOfOrderMileage) as exc:
            convert_trip(trip, existing, NOW)
        assert exc.value.field == "mileage"

    def test_same_minute_as_existing_reading_conflicts(self):
        """Seconds are dropped when stored, so 12:00:30 collides with 12:00."""
        existing = [MileageReading("1", "2025-01-10", 100, "12:00")]
        trip = TripInput(10, "2025-01-10T11:58:00Z", "2025-01-10T12:00:30Z")
        with pytest.raises(TimeConflict) as exc:
            convert_trip(trip, existing, NOW)
        assert exc.value.message == "Trip times conflict with existing readings"

    def test_start_and_end_in_same_minute_conflict(self):
        trip = TripInput(10, "2025-01-08T09:00:10Z", "2025-01-08T09:00:50Z")
        with pytest.raises(TimeConflict):
            convert_trip(trip, [], NOW)


class TestResolveTripTimes:
    """Tests for resolve_trip_times."""

    def test_only_start(self):
        start, end = resolve_trip_times("2025-01-08T09:00:00Z", None, NOW)
        assert (end - start).total_seconds() == 60

    def test_only_end(self):
        start, end = resolve_trip_times(None, "2025-01-08T09:00:00Z", NOW)
        assert start == datetime(2025, 1, 8, 8, 59, tzinfo=timezone.utc)

    def test_empty_strings_treated_as_missing(self):
        start, end = resolve_trip_times("", "", NOW)
        assert end == NOW


class TestTripInput:
    """Tests for TripInput.from_dict."""

    def test_camel_case_keys(self):
        trip = TripInput.from_dict({"distance": 12, "startTime": "a", "endTime": "b", "note": "n"})
        assert (trip.distance, trip.start_time, trip.end_time, trip.note) == (12, "a", "b", "n")
