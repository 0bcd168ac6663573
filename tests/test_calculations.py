#!/usr/bin/env python3
"""Tests for mileage lookup helpers."""
from datetime import date

from tracker import MileageReading
from tracker.calculations import (
    find_mileage_at_date,
    get_mileage_at_date,
    mileage_at_date,
    reading_on_date,
    round_half_up,
    rounded_mileage_at_date,
)

READINGS = [
    MileageReading("1", "2025-01-01", 0),
    MileageReading("2", "2025-01-11", 101),
    MileageReading("3", "2025-01-21", 200),
]


class TestRoundHalfUp:
    """Tests for round_half_up."""

    def test_halves_round_up(self):
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3

    def test_negative_halves_round_toward_positive(self):
        assert round_half_up(-0.5) == 0
        assert round_half_up(-1.5) == -1

    def test_ordinary(self):
        assert round_half_up(1.49) == 1
        assert round_half_up(-1.51) == -2


class TestReadingOnDate:
    """Tests for reading_on_date."""

    def test_last_reading_of_day_wins(self):
        readings = [
            MileageReading("a", "2025-01-05", 40, "08:00"),
            MileageReading("b", "2025-01-05", 60, "18:00"),
        ]
        assert reading_on_date(readings, date(2025, 1, 5)).id == "b"

    def test_none(self):
        assert reading_on_date(READINGS, date(2025, 1, 5)) is None


class TestMileageAtDate:
    """Tests for mileage_at_date."""

    def test_exact(self):
        assert mileage_at_date(READINGS, date(2025, 1, 11)) == 101

    def test_interpolated(self):
        assert mileage_at_date(READINGS, date(2025, 1, 6)) == 50.5

    def test_after_last_reading_is_flat(self):
        assert mileage_at_date(READINGS, date(2025, 3, 1)) == 200

    def test_before_first_reading_is_zero(self):
        assert mileage_at_date(READINGS[1:], date(2025, 1, 1)) == 0

    def test_no_readings(self):
        assert mileage_at_date([], date(2025, 1, 1)) == 0

    def test_rounded_variant(self):
        assert rounded_mileage_at_date(READINGS, date(2025, 1, 6)) == 51


class TestFindMileageAtDate:
    """Tests for find_mileage_at_date."""

    def test_no_interpolation(self):
        assert find_mileage_at_date(READINGS, date(2025, 1, 6)) == 0

    def test_none_before_first(self):
        assert find_mileage_at_date(READINGS[1:], date(2025, 1, 6)) is None


class TestGetMileageAtDate:
    """Tests for get_mileage_at_date."""

    def test_estimates_from_lease_start(self):
        readings = [MileageReading("1", "2025-01-11", 100)]
        assert get_mileage_at_date(readings, date(2025, 1, 6), date(2025, 1, 1)) == 50

    def test_before_lease_start_is_zero(self):
        readings = [MileageReading("1", "2025-01-11", 100)]
        assert get_mileage_at_date(readings, date(2024, 12, 1), date(2025, 1, 1)) == 0

    def test_interpolates_like_mileage_at_date(self):
        assert get_mileage_at_date(READINGS, date(2025, 1, 16), date(2025, 1, 1)) == 150.5
