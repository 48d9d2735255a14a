"""
CSV import and export of fueling records.

Export always writes the current layout:

    date,currentMiles,pricePerGallon,gallons,totalCost,isPartialFillUp,notes

Import also reads the older layouts the app has written over time:

- current: 5-7 columns; the fill column is an enum token
  (full/partial/missed) or a legacy true/false isPartialFillUp flag
- with-previous: 8 columns, with a previousMiles column after currentMiles
  (the old import template); previousMiles is ignored since baselines are
  recomputed
- multi-vehicle: 11 columns, vehicleName,vehicleMake,vehicleModel,vehicleYear
  followed by the current layout
"""

import csv
import io
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from dateutil.parser import isoparse

from .classification import Classification
from .record import FuelingRecord, utcnow
from .vehicle import Vehicle

logger = logging.getLogger(__name__)

CSV_HEADER = "date,currentMiles,pricePerGallon,gallons,totalCost,isPartialFillUp,notes"
VEHICLE_COLUMNS = "vehicleName,vehicleMake,vehicleModel,vehicleYear"

# Tried in order after the ISO-8601 instant format
DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y")

CURRENT_COLUMNS = (5, 6, 7)
WITH_PREVIOUS_COLUMNS = 8
MULTI_VEHICLE_COLUMNS = 11

HEADER_KEYWORDS = ("date", "miles", "gallon")

TEMPLATE = """\
date,currentMiles,previousMiles,pricePerGallon,gallons,totalCost,isPartialFillUp,notes
2024-01-15,12500,12200,3.459,10.5,36.32,false,"First fill-up of the year"
2024-01-22,12800,12500,3.399,11.2,38.07,false,""
"""


class MalformedRow(ValueError):
    """A CSV row that can't be turned into a record."""


class ValidationReason(Enum):
    EMPTY_INPUT = "empty_input"
    HEADER_ONLY = "header_only"
    UNRECOGNIZED_SCHEMA = "unrecognized_schema"


@dataclass
class ValidationResult:
    """Outcome of the pre-import sanity check."""

    is_valid: bool
    reason: Optional[ValidationReason] = None
    message: Optional[str] = None

    def __bool__(self) -> bool:
        return self.is_valid


# =============================================================================
# Field formatting and parsing
# =============================================================================


def format_date(value: datetime) -> str:
    """
    UTC instant, e.g. 2024-01-15T00:00:00Z.

    Sub-second values keep their microseconds
    (2024-01-15T08:30:05.123456Z) so they read back unchanged.
    """
    value = value.astimezone(timezone.utc)
    timespec = "microseconds" if value.microsecond else "seconds"
    return value.replace(tzinfo=None).isoformat(timespec=timespec) + "Z"


def format_number(value: float) -> str:
    """Plain decimal without exponent or trailing zeros: 12500, 3.459, 10.5."""
    text = format(Decimal(str(value)).normalize(), "f")
    return "0" if text == "-0" else text


def format_classification(classification: Classification) -> str:
    """true/false for the isPartialFillUp column; missed has its own token."""
    if classification is Classification.MISSED:
        return classification.value
    return "true" if classification is Classification.PARTIAL else "false"


def format_notes(notes: Optional[str]) -> str:
    escaped = (notes or "").replace('"', '""')
    return f'"{escaped}"'


def parse_date(token: str) -> datetime:
    """
    Parse a date column.

    Formats, in order: an ISO-8601 instant with a timezone, YYYY-MM-DD,
    MM/DD/YYYY. Date-only values are midnight UTC.
    """
    token = token.strip()
    try:
        parsed = isoparse(token)
    except (ValueError, OverflowError):
        parsed = None
    if parsed is not None and parsed.tzinfo is not None:
        return parsed.astimezone(timezone.utc)

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(token, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    raise MalformedRow(f"Unrecognized date: {token!r}")


def parse_number(token: str, name: str) -> float:
    """Parse a non-negative plain decimal column."""
    try:
        value = float(token)
    except ValueError:
        raise MalformedRow(f"{name} is not a number: {token!r}") from None
    if not math.isfinite(value) or value < 0:
        raise MalformedRow(f"{name} out of range: {token!r}")
    return value


def parse_classification(token: Optional[str]) -> Classification:
    # Old exports treated anything other than "true" as a full fill-up
    try:
        return Classification.from_token(token)
    except ValueError:
        logger.debug("Unknown fill token %r, treating as full", token)
        return Classification.FULL


# =============================================================================
# Rows
# =============================================================================


def tokenize(text: str) -> Iterable[List[str]]:
    """
    Yield the columns of each non-blank CSV row, as the csv module reads them.

    Columns are not stripped here: notes keep their surrounding whitespace.
    """
    for row in csv.reader(io.StringIO(text), skipinitialspace=True):
        if any(t.strip() for t in row):
            yield row


def _current_layout(tokens: List[str]) -> List[str]:
    """Reduce a row to the current 7-column layout, or raise MalformedRow."""
    count = len(tokens)
    if count in CURRENT_COLUMNS:
        return tokens + [""] * (7 - count)
    if count == WITH_PREVIOUS_COLUMNS:
        # Prefer the newest reading: a current row with a trailing empty column
        if Classification.is_token(tokens[5]) and not tokens[7].strip():
            return tokens[:7]
        if Classification.is_token(tokens[6]) or not tokens[6].strip():
            return tokens[:2] + tokens[3:]
    if count == MULTI_VEHICLE_COLUMNS:
        return tokens[4:]
    raise MalformedRow(f"Unexpected column count: {count}")


def parse_row(
    tokens: List[str], created_at: Optional[datetime] = None
) -> FuelingRecord:
    """
    Build a record from one row's columns; raises MalformedRow.

    Every column but notes is stripped; notes are kept verbatim.
    """
    *fields, notes = _current_layout(tokens)
    date, miles, price, gallons, cost, fill = (t.strip() for t in fields)
    return FuelingRecord(
        date=parse_date(date),
        odometer=parse_number(miles, "currentMiles"),
        price_per_gallon=parse_number(price, "pricePerGallon"),
        gallons=parse_number(gallons, "gallons"),
        total_cost=parse_number(cost, "totalCost"),
        classification=parse_classification(fill),
        notes=notes or None,
        created_at=created_at,
    )


def encode_row(record: FuelingRecord) -> str:
    return ",".join(
        [
            format_date(record.date),
            format_number(record.odometer),
            format_number(record.price_per_gallon),
            format_number(record.gallons),
            format_number(record.total_cost),
            format_classification(record.classification),
            format_notes(record.notes),
        ]
    )


# =============================================================================
# Public API
# =============================================================================


def encode(records: Iterable[FuelingRecord]) -> str:
    """Export records as CSV, oldest first."""
    ordered = sorted(records, key=lambda r: r.sort_key)
    lines = [CSV_HEADER] + [encode_row(r) for r in ordered]
    logger.info("Encoded %d records", len(ordered))
    return "\n".join(lines) + "\n"


def _decode_rows(text: str) -> List[Tuple[List[str], FuelingRecord]]:
    # created_at increases with file order so equal dates keep their order
    base = utcnow()
    decoded = []
    skipped = 0
    for index, tokens in enumerate(tokenize(text)):
        if index == 0:
            continue  # header
        try:
            record = parse_row(tokens, created_at=base + timedelta(microseconds=index))
        except MalformedRow as e:
            skipped += 1
            logger.warning("Skipping row %d: %s", index + 1, e)
            continue
        decoded.append((tokens, record))
    logger.info("Decoded %d records, skipped %d rows", len(decoded), skipped)
    return decoded


def decode(text: str) -> List[FuelingRecord]:
    """
    Import records from CSV text, oldest first.

    Malformed rows are logged and skipped. Cached statistics are not
    filled in; add the records to a Vehicle to recompute them.
    """
    records = [record for _, record in _decode_rows(text)]
    return sorted(records, key=lambda r: r.sort_key)


def validate(text: str) -> ValidationResult:
    """Check that text looks importable before decoding it."""
    rows = list(tokenize(text))
    if not rows:
        return ValidationResult(
            False, ValidationReason.EMPTY_INPUT, "The file is empty"
        )
    if len(rows) == 1:
        return ValidationResult(
            False,
            ValidationReason.HEADER_ONLY,
            "The file only contains a header row with no data",
        )

    header = ",".join(t.strip() for t in rows[0]).lower()
    if not any(keyword in header for keyword in HEADER_KEYWORDS):
        return ValidationResult(
            False,
            ValidationReason.UNRECOGNIZED_SCHEMA,
            "The file doesn't appear to have a valid header row",
        )

    known = CURRENT_COLUMNS + (WITH_PREVIOUS_COLUMNS, MULTI_VEHICLE_COLUMNS)
    if len(rows[1]) not in known:
        return ValidationResult(
            False,
            ValidationReason.UNRECOGNIZED_SCHEMA,
            f"Unexpected column count in first row: {len(rows[1])}",
        )
    return ValidationResult(True)


# =============================================================================
# Multi-vehicle export
# =============================================================================


def encode_vehicles(vehicles: Iterable[Vehicle]) -> str:
    """Export several vehicles' records, each row prefixed with its vehicle."""
    lines = [f"{VEHICLE_COLUMNS},{CSV_HEADER}"]
    for vehicle in vehicles:
        prefix = ",".join(
            [
                format_notes(vehicle.name),
                format_notes(vehicle.make),
                format_notes(vehicle.model),
                str(vehicle.year or 0),
            ]
        )
        for record in vehicle.records:
            lines.append(f"{prefix},{encode_row(record)}")
    return "\n".join(lines) + "\n"


def decode_vehicles(text: str) -> List[Vehicle]:
    """Import a multi-vehicle export, grouping rows into Vehicles."""
    grouped: Dict[tuple, List[FuelingRecord]] = {}
    for tokens, record in _decode_rows(text):
        if len(tokens) != MULTI_VEHICLE_COLUMNS:
            logger.warning("Skipping row without vehicle columns")
            continue
        name, make, model, year = (t.strip() for t in tokens[:4])
        key = (name, make or None, model or None, _parse_year(year))
        grouped.setdefault(key, []).append(record)

    vehicles = []
    for (name, make, model, year), records in grouped.items():
        vehicles.append(
            Vehicle(name=name, make=make, model=model, year=year, records=records)
        )
    return vehicles


def _parse_year(token: str) -> Optional[int]:
    try:
        year = int(token)
    except ValueError:
        return None
    return year or None
