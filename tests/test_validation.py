#!/usr/bin/env python3
"""Tests for reading validation."""
import pytest

from tracker import (
    InvalidReading,
    MileageReading,
    NoteTooLong,
    OutOfOrderMileage,
    TimeConflict,
    check_monotonic,
    validate_reading,
    validate_reading_edit,
)
from tracker.validation import normalize_time, parse_reading_input

EXISTING = [
    MileageReading("1", "2025-01-01", 0),
    MileageReading("2", "2025-01-10", 500, "12:00"),
    MileageReading("3", "2025-01-20", 900),
]


class TestValidateReading:
    """Tests for validate_reading."""

    def test_between_neighbors_passes(self):
        validate_reading(MileageReading("n", "2025-01-15", 700), EXISTING)

    def test_equal_to_neighbors_passes(self):
        validate_reading(MileageReading("n", "2025-01-15", 500), EXISTING)
        validate_reading(MileageReading("n", "2025-01-15", 900), EXISTING)

    def test_below_earlier_reading(self):
        with pytest.raises(OutOfOrderMileage) as exc:
            validate_reading(MileageReading("n", "2025-01-15", 499), EXISTING)
        assert exc.value.field == "mileage"
        assert "at least 500" in exc.value.message
        assert "2025-01-10 12:00" in exc.value.message

    def test_above_later_reading(self):
        with pytest.raises(OutOfOrderMileage) as exc:
            validate_reading(MileageReading("n", "2025-01-15", 901), EXISTING)
        assert "at most 900" in exc.value.message

    def test_backdated_reading_checked_against_later(self):
        with pytest.raises(OutOfOrderMileage):
            validate_reading(MileageReading("n", "2025-01-05", 600), EXISTING)

    def test_same_day_uses_time(self):
        validate_reading(MileageReading("n", "2025-01-10", 400, "11:00"), EXISTING)
        with pytest.raises(OutOfOrderMileage):
            validate_reading(MileageReading("n", "2025-01-10", 400, "13:00"), EXISTING)

    def test_identical_timestamp_conflicts(self):
        with pytest.raises(TimeConflict):
            validate_reading(MileageReading("n", "2025-01-10", 500, "12:00"), EXISTING)

    def test_no_existing_readings(self):
        validate_reading(MileageReading("n", "2025-01-10", 0), [])

    def test_edit_excludes_itself(self):
        edited = MileageReading("2", "2025-01-10", 550, "12:00")
        validate_reading_edit(edited, EXISTING)

    def test_edit_still_checks_others(self):
        edited = MileageReading("2", "2025-01-10", 950, "12:00")
        with pytest.raises(OutOfOrderMileage):
            validate_reading_edit(edited, EXISTING)


class TestCheckMonotonic:
    """Tests for check_monotonic."""

    def test_monotonic(self):
        assert check_monotonic(EXISTING)

    def test_unsorted_input_is_sorted_first(self):
        assert check_monotonic(list(reversed(EXISTING)))

    def test_decrease_detected(self):
        assert not check_monotonic(EXISTING + [MileageReading("4", "2025-02-01", 800)])

    def test_empty(self):
        assert check_monotonic([])


class TestParseReadingInput:
    """Tests for parse_reading_input."""

    def test_cleans_values(self):
        fields = parse_reading_input("2025-01-10", 120.5, "8:05", None)
        assert fields == {"date": "2025-01-10", "time": "08:05", "mileage": 120.5, "note": ""}

    def test_bad_date(self):
        with pytest.raises(InvalidReading) as exc:
            parse_reading_input("10/01/2025", 100)
        assert exc.value.field == "date"

    @pytest.mark.parametrize("mileage", ["100", None, True, -1, float("nan"), float("inf")])
    def test_bad_mileage(self, mileage):
        with pytest.raises(InvalidReading) as exc:
            parse_reading_input("2025-01-10", mileage)
        assert exc.value.field == "mileage"

    def test_note_too_long(self):
        with pytest.raises(NoteTooLong):
            parse_reading_input("2025-01-10", 100, note="x" * 201)

    def test_note_at_limit(self):
        assert parse_reading_input("2025-01-10", 100, note="x" * 200)["note"] == "x" * 200


class TestNormalizeTime:
    """Tests for normalize_time."""

    def test_empty_is_none(self):
        assert normalize_time(None) is None
        assert normalize_time("") is None

    def test_pads_hour(self):
        assert normalize_time("7:30") == "07:30"

    def test_rejects_out_of_range(self):
        with pytest.raises(InvalidReading):
            normalize_time("24:00")
        with pytest.raises(InvalidReading):
            normalize_time("12:60")
