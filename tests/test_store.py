#!/usr/bin/env python3
"""Tests for stores and document conversion."""
import pytest
import yaml

from tracker import (
    LEASE_KEY,
    READINGS_KEY,
    LeaseInfo,
    MemoryStore,
    MileageReading,
    StoreUnavailable,
    YamlStore,
)
from tracker.loader import (
    lease_to_dict,
    load_lease,
    load_readings,
    parse_lease,
    parse_reading,
    reading_to_dict,
    save_lease,
    save_readings,
    to_camel,
)

# =============================================================================
# Stores
# =============================================================================


class TestMemoryStore:
    """Tests for MemoryStore."""

    def test_missing_key(self):
        assert MemoryStore().get("nope") is None

    def test_values_are_copied(self):
        store = MemoryStore()
        value = [{"id": "1"}]
        store.set("k", value)
        value.append({"id": "2"})
        assert store.get("k") == [{"id": "1"}]
        store.get("k").append({"id": "3"})
        assert store.get("k") == [{"id": "1"}]


class TestYamlStore:
    """Tests for YamlStore."""

    def test_missing_file_reads_empty(self, tmp_path):
        assert YamlStore(tmp_path / "none.yaml").get(LEASE_KEY) is None

    def test_write_creates_file_and_directory(self, tmp_path):
        path = tmp_path / "data" / "lease.yaml"
        store = YamlStore(path)
        store.set(READINGS_KEY, [{"id": "1", "date": "2025-01-01", "mileage": 0}])
        assert path.exists()
        assert store.get(READINGS_KEY) == [{"id": "1", "date": "2025-01-01", "mileage": 0}]

    def test_keys_kept_side_by_side(self, tmp_path):
        store = YamlStore(tmp_path / "lease.yaml")
        store.set(LEASE_KEY, {"id": "default"})
        store.set(READINGS_KEY, [])
        data = yaml.safe_load((tmp_path / "lease.yaml").read_text())
        assert set(data) == {LEASE_KEY, READINGS_KEY}

    def test_dates_stay_strings(self, tmp_path):
        store = YamlStore(tmp_path / "lease.yaml")
        store.set(LEASE_KEY, {"startDate": "2025-07-09"})
        assert store.get(LEASE_KEY)["startDate"] == "2025-07-09"

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("lease:default: [unclosed\n")
        with pytest.raises(StoreUnavailable):
            YamlStore(path).get(LEASE_KEY)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(StoreUnavailable):
            YamlStore(path).get(LEASE_KEY)


# =============================================================================
# Document conversion
# =============================================================================


class TestConversion:
    """Tests for the loader helpers."""

    def test_to_camel(self):
        assert to_camel("overage_cost_per_km") == "overageCostPerKm"
        assert to_camel("labels") == "labels"

    def test_lease_omits_unset_fields(self):
        d = lease_to_dict(LeaseInfo("2025-01-01", "2026-01-01", 36500))
        assert d == {"id": "default", "startDate": "2025-01-01", "endDate": "2026-01-01", "totalLimit": 36500}

    def test_lease_round_trip(self):
        lease = LeaseInfo("2025-01-01", "2026-01-01", 36500, 12000, 1.5, "c", "u")
        again = parse_lease(lease_to_dict(lease))
        assert lease_to_dict(again) == lease_to_dict(lease)

    def test_reading_omits_unset_fields(self):
        d = reading_to_dict(MileageReading("1", "2025-01-01", 0))
        assert d == {"id": "1", "date": "2025-01-01", "mileage": 0}

    def test_reading_from_hand_edited_yaml(self):
        """Unquoted dates and numeric ids load as strings."""
        dct = yaml.safe_load("id: 7\ndate: 2025-01-01\nmileage: 10\ntime: ''\n")
        r = parse_reading(dct)
        assert (r.id, r.date, r.time) == ("7", "2025-01-01", None)


class TestLoadSave:
    """Tests for load/save against a store."""

    def test_lease_missing(self):
        assert load_lease(MemoryStore()) is None

    def test_readings_missing_vs_empty(self):
        assert load_readings(MemoryStore()) is None
        assert load_readings(MemoryStore({READINGS_KEY: []})) == []

    def test_save_and_load(self, tmp_path):
        store = YamlStore(tmp_path / "lease.yaml")
        save_lease(store, LeaseInfo("2025-01-01", "2026-01-01", 36500))
        save_readings(store, [MileageReading("1", "2025-01-01", 0, "08:00", "start")])
        assert load_lease(store).total_limit == 36500
        (r,) = load_readings(store)
        assert (r.id, r.time, r.note) == ("1", "08:00", "start")
