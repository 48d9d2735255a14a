#!/usr/bin/env python3
"""Tests for YAML loading and saving utilities."""

from datetime import datetime, timezone

import pytest
import yaml

from fueling import (
    Classification,
    FuelingRecord,
    Vehicle,
    load_vehicle,
    save_record,
    save_vehicle,
)
from fueling.loader import (
    create_vehicle,
    delete_record,
    delete_vehicle,
    update_record,
)

MINIMAL = """
vehicle:
  id: v-1
  name: Daily
  make: Subaru
  model: WRX
  year: 2012
  createdAt: '2024-01-01T00:00:00+00:00'

records:
  - id: r-2
    date: '2024-01-22T00:00:00+00:00'
    odometer: 12800
    pricePerGallon: 3.399
    gallons: 11.2
    totalCost: 38.07
    fillType: full
    createdAt: '2024-01-22T00:00:00+00:00'
  - id: r-1
    date: '2024-01-15T00:00:00+00:00'
    odometer: 12500
    pricePerGallon: 3.459
    gallons: 10.5
    totalCost: 36.32
    fillType: full
    notes: First fill-up
    createdAt: '2024-01-15T00:00:00+00:00'
"""


@pytest.fixture
def vehicle_file(tmp_path):
    path = tmp_path / "daily.yaml"
    path.write_text(MINIMAL)
    return path


def make_record(day, odometer, fill=Classification.FULL):
    return FuelingRecord(
        date=datetime(2024, 1, day, tzinfo=timezone.utc),
        odometer=odometer,
        price_per_gallon=3.5,
        gallons=10.0,
        total_cost=35.0,
        classification=fill,
    )


# =============================================================================
# load_vehicle tests
# =============================================================================


class TestLoadVehicle:
    """Tests for load_vehicle function."""

    def test_loads_vehicle(self, vehicle_file):
        vehicle = load_vehicle(vehicle_file)

        assert isinstance(vehicle, Vehicle)
        assert vehicle.id == "v-1"
        assert vehicle.name == "Daily"
        assert vehicle.year == 2012
        assert vehicle.display_name == "2012 Subaru WRX"
        assert vehicle.created_at == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_records_are_chronological_with_stats(self, vehicle_file):
        vehicle = load_vehicle(vehicle_file)

        assert [r.id for r in vehicle.records] == ["r-1", "r-2"]
        first, second = vehicle.records
        assert first.notes == "First fill-up"
        assert first.previous_odometer is None
        assert second.previous_odometer == 12500
        assert second.miles_driven == 300
        assert second.mpg == pytest.approx(300 / 11.2)
        assert all(r.vehicle_id == "v-1" for r in vehicle.records)

    def test_vehicle_without_records(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("vehicle:\n  name: Spare\nrecords: []\n")

        vehicle = load_vehicle(path)

        assert vehicle.name == "Spare"
        assert vehicle.records == []
        assert vehicle.id

    def test_unquoted_dates(self, tmp_path):
        """YAML timestamps and plain dates load as UTC instants."""
        path = tmp_path / "dates.yaml"
        path.write_text(
            """
vehicle:
  name: Daily
records:
  - date: 2024-01-15
    odometer: 12500
    pricePerGallon: 3.459
    gallons: 10.5
    totalCost: 36.32
  - date: 2024-01-22 08:30:00
    odometer: 12800
    pricePerGallon: 3.399
    gallons: 11.2
    totalCost: 38.07
    fillType: partial
"""
        )

        vehicle = load_vehicle(path)

        first, second = vehicle.records
        assert first.date == datetime(2024, 1, 15, tzinfo=timezone.utc)
        assert second.date == datetime(2024, 1, 22, 8, 30, tzinfo=timezone.utc)
        assert first.classification == Classification.FULL
        assert second.classification == Classification.PARTIAL
        assert second.mpg == 0


# =============================================================================
# save tests
# =============================================================================


class TestSaveVehicle:
    """Tests for save_vehicle / create_vehicle."""

    def test_round_trip(self, tmp_path):
        vehicle = Vehicle("Van", records=[make_record(1, 100), make_record(8, 400)])
        vehicle.records[1].notes = "Diesel"
        path = tmp_path / "van.yaml"

        save_vehicle(path, vehicle)
        loaded = load_vehicle(path)

        assert loaded.id == vehicle.id
        assert loaded.make is None
        assert [r.id for r in loaded.records] == [r.id for r in vehicle.records]
        assert [r.raw_fields() for r in loaded.records] == [
            r.raw_fields() for r in vehicle.records
        ]
        assert loaded.records[1].miles_driven == 300

    def test_writes_camel_case_keys(self, tmp_path):
        vehicle = Vehicle("Van", records=[make_record(1, 100, Classification.MISSED)])
        path = tmp_path / "van.yaml"

        save_vehicle(path, vehicle)
        data = yaml.safe_load(path.read_text())

        assert data["vehicle"]["name"] == "Van"
        assert "make" not in data["vehicle"]
        record = data["records"][0]
        assert record["pricePerGallon"] == 3.5
        assert record["totalCost"] == 35.0
        assert record["fillType"] == "missed"
        assert "notes" not in record
        assert "miles_driven" not in record

    def test_create_refuses_to_overwrite(self, vehicle_file):
        with pytest.raises(FileExistsError):
            create_vehicle(vehicle_file, Vehicle("Other"))
        assert load_vehicle(vehicle_file).name == "Daily"

    def test_create_new(self, tmp_path):
        path = tmp_path / "new.yaml"
        create_vehicle(path, Vehicle("New"))
        assert load_vehicle(path).name == "New"


class TestRecordPersistence:
    """Tests for save_record, update_record and delete_record."""

    def test_save_record_appends(self, vehicle_file):
        record = make_record(18, 12650, Classification.PARTIAL)

        save_record(vehicle_file, record)
        vehicle = load_vehicle(vehicle_file)

        assert [r.odometer for r in vehicle.records] == [12500, 12650, 12800]
        assert vehicle.get_record(record.id).classification == Classification.PARTIAL
        assert vehicle.records[2].miles_driven == 150

    def test_update_record(self, vehicle_file):
        vehicle = load_vehicle(vehicle_file)
        record = vehicle.update_record("r-2", odometer=12900)

        update_record(vehicle_file, record)
        reloaded = load_vehicle(vehicle_file)

        assert reloaded.get_record("r-2").odometer == 12900
        assert reloaded.get_record("r-2").miles_driven == 400

    def test_update_unknown_record(self, vehicle_file):
        with pytest.raises(KeyError):
            update_record(vehicle_file, make_record(1, 1))

    def test_delete_record(self, vehicle_file):
        delete_record(vehicle_file, "r-1")
        vehicle = load_vehicle(vehicle_file)

        assert [r.id for r in vehicle.records] == ["r-2"]
        assert vehicle.records[0].previous_odometer is None
        assert vehicle.records[0].miles_driven == 0

    def test_delete_unknown_record(self, vehicle_file):
        with pytest.raises(KeyError):
            delete_record(vehicle_file, "nope")


class TestDeleteVehicle:
    """Tests for delete_vehicle."""

    def test_removes_file(self, vehicle_file):
        delete_vehicle(vehicle_file)
        assert not vehicle_file.exists()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            delete_vehicle(tmp_path / "missing.yaml")
