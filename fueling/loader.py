"""YAML loading and saving utilities for vehicle fueling logs."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Union

import yaml
from dateutil.parser import isoparse

from .classification import Classification
from .record import FuelingRecord
from .vehicle import Vehicle

logger = logging.getLogger(__name__)


def _parse_timestamp(value: Any) -> datetime:
    """Parse a stored timestamp; values without a timezone are UTC."""
    parsed = value if isinstance(value, datetime) else isoparse(str(value))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_object(dct: Dict[str, Any]) -> Union[FuelingRecord, Vehicle, dict]:
    """Parse dictionary into appropriate object type."""
    # Fueling record
    if "odometer" in dct:
        return FuelingRecord(
            date=_parse_timestamp(dct["date"]),
            odometer=dct["odometer"],
            price_per_gallon=dct["pricePerGallon"],
            gallons=dct["gallons"],
            total_cost=dct["totalCost"],
            classification=Classification.from_token(dct.get("fillType")),
            notes=dct.get("notes"),
            id=dct.get("id"),
            created_at=(
                _parse_timestamp(dct["createdAt"]) if dct.get("createdAt") else None
            ),
        )
    # Vehicle identification (inside 'vehicle' key)
    elif "name" in dct:
        return Vehicle(
            dct["name"],
            dct.get("make"),
            dct.get("model"),
            dct.get("year"),
            dct.get("id"),
            _parse_timestamp(dct["createdAt"]) if dct.get("createdAt") else None,
        )
    # Top-level file: attach records with a single recompute
    elif "vehicle" in dct:
        vehicle = dct["vehicle"]
        vehicle.add_records(dct.get("records") or [])
        return vehicle
    else:
        return dct


def _read(filename: Union[str, Path]) -> Dict[str, Any]:
    with open(filename, "r") as fp:
        return yaml.load(fp, Loader=yaml.SafeLoader)


def _write(filename: Union[str, Path], data: Dict[str, Any]) -> None:
    with open(filename, "w") as fp:
        yaml.dump(
            data,
            fp,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
            width=120,
        )
    logger.info("Wrote %s", filename)


def _record_to_dict(record: FuelingRecord) -> Dict[str, Any]:
    """Serialize a record's raw fields to the YAML dict format (camelCase keys)."""
    d: Dict[str, Any] = {
        "id": record.id,
        "date": record.date.isoformat(),
        "odometer": record.odometer,
        "pricePerGallon": record.price_per_gallon,
        "gallons": record.gallons,
        "totalCost": record.total_cost,
        "fillType": record.classification.value,
    }
    if record.notes is not None:
        d["notes"] = record.notes
    d["createdAt"] = record.created_at.isoformat()
    return d


def _vehicle_to_dict(vehicle: Vehicle) -> Dict[str, Any]:
    """Serialize a Vehicle's identification to the YAML dict format."""
    d: Dict[str, Any] = {"id": vehicle.id, "name": vehicle.name}
    if vehicle.make is not None:
        d["make"] = vehicle.make
    if vehicle.model is not None:
        d["model"] = vehicle.model
    if vehicle.year is not None:
        d["year"] = vehicle.year
    d["createdAt"] = vehicle.created_at.isoformat()
    return d


def _index_of(records: list, record_id: str) -> int:
    for index, entry in enumerate(records):
        if entry.get("id") == record_id:
            return index
    raise KeyError(record_id)


def load_vehicle(filename: Union[str, Path]) -> Vehicle:
    """Load a vehicle and its records from a YAML file."""
    with open(filename, "rb") as fp:
        json_data = json.dumps(
            yaml.load(fp, Loader=yaml.SafeLoader), indent=4, default=str
        )
    vehicle = json.loads(json_data, object_hook=_parse_object)
    logger.debug("Loaded %s with %d records", filename, len(vehicle.records))
    return vehicle


def save_vehicle(filename: Union[str, Path], vehicle: Vehicle) -> None:
    """Write a vehicle and all of its records, replacing the file."""
    _write(
        filename,
        {
            "vehicle": _vehicle_to_dict(vehicle),
            "records": [_record_to_dict(r) for r in vehicle.records],
        },
    )


def create_vehicle(filename: Union[str, Path], vehicle: Vehicle) -> None:
    """Create a new vehicle YAML file; refuses to overwrite an existing one."""
    if Path(filename).exists():
        raise FileExistsError(filename)
    save_vehicle(filename, vehicle)


def save_record(filename: Union[str, Path], record: FuelingRecord) -> None:
    """
    Append a record to a vehicle YAML file.

    Records are stored in entry order; load_vehicle() puts them in
    chronological order and recomputes their statistics.
    """
    data = _read(filename)
    if data.get("records") is None:
        data["records"] = []
    data["records"].append(_record_to_dict(record))
    _write(filename, data)


def update_record(filename: Union[str, Path], record: FuelingRecord) -> None:
    """Replace the stored record with the same id; KeyError if absent."""
    data = _read(filename)
    records = data.get("records") or []
    records[_index_of(records, record.id)] = _record_to_dict(record)
    _write(filename, data)


def delete_record(filename: Union[str, Path], record_id: str) -> None:
    """Remove the stored record with the given id; KeyError if absent."""
    data = _read(filename)
    records = data.get("records") or []
    del records[_index_of(records, record_id)]
    _write(filename, data)


def delete_vehicle(filename: Union[str, Path]) -> None:
    """Remove a vehicle YAML file from disk, records included."""
    Path(filename).unlink()
