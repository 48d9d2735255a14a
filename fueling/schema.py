"""
Checks for vehicle fuel log YAML files.

Two passes:
1. Structure, against schema.yaml (required fields, positive amounts,
   fillType one of full/partial/missed)
2. Consistency the schema can't express: timestamps parse, and record ids
   are unique within the file
"""

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from dateutil.parser import isoparse
from jsonschema import Draft7Validator

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).parent / "schema.yaml"


def load_schema(path: Union[str, Path] = SCHEMA_PATH) -> dict:
    """Load the JSON schema from schema.yaml."""
    with open(path) as f:
        return yaml.safe_load(f)


def _where(path) -> str:
    return ".".join(str(p) for p in path) or "(file)"


def _is_timestamp(value: Any) -> bool:
    # Unquoted YAML timestamps arrive already parsed
    if isinstance(value, (date, datetime)):
        return True
    try:
        isoparse(str(value))
    except (ValueError, OverflowError):
        return False
    return True


def _check_consistency(data: Dict[str, Any]) -> List[str]:
    errors = []
    created = data["vehicle"].get("createdAt")
    if created is not None and not _is_timestamp(created):
        errors.append(f"vehicle.createdAt: not an ISO-8601 timestamp: {created!r}")

    seen: Dict[str, int] = {}
    for index, record in enumerate(data.get("records") or []):
        for key in ("date", "createdAt"):
            value = record.get(key)
            if value is not None and not _is_timestamp(value):
                errors.append(
                    f"records.{index}.{key}: not an ISO-8601 timestamp: {value!r}"
                )
        record_id = record.get("id")
        if record_id is None:
            continue
        if record_id in seen:
            errors.append(
                f"records.{index}.id: duplicate of records.{seen[record_id]}.id "
                f"({record_id})"
            )
        else:
            seen[record_id] = index
    return errors


def check_vehicle_data(data: Any, schema: Optional[dict] = None) -> List[str]:
    """
    Check parsed vehicle file contents. Returns a list of errors.

    Every schema violation is reported, each prefixed with its location
    (e.g. records.2.fillType). Consistency checks only run once the
    structure is valid.
    """
    validator = Draft7Validator(schema or load_schema())
    violations = sorted(
        validator.iter_errors(data), key=lambda e: [str(p) for p in e.path]
    )
    if violations:
        return [f"{_where(e.path)}: {e.message}" for e in violations]
    return _check_consistency(data)


def check_vehicle_file(
    filepath: Union[str, Path], schema: Optional[dict] = None
) -> List[str]:
    """Check a single vehicle YAML file. Returns a list of errors."""
    try:
        with open(filepath) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        return [f"YAML parse error: {e}"]
    except OSError as e:
        return [f"Error: {e}"]

    errors = check_vehicle_data(data, schema)
    logger.debug("Checked %s: %d errors", filepath, len(errors))
    return errors
