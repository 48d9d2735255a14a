"""
Vehicle fueling log models.

This package provides the data models and calculations for a fuel log:
- Classification: Fill-up kinds (FULL, PARTIAL, MISSED)
- FuelingRecord: A single fill-up with cached statistics
- Vehicle: Owner of a chronological record history
- recompute: Refreshes cached per-record statistics
- solve / EntryForm: Fills in price, gallons or total cost from the other two
- summarize: Vehicle-level totals, averages and extremes
- encode / decode / validate: CSV import and export
- load_vehicle / save_vehicle: YAML vehicle files (checked by fueling.schema)
"""

from .classification import Classification
from .record import FuelingRecord
from .calculations import calc_miles_driven, calc_mpg, calc_cost_per_mile, recompute
from .summary import (
    Summary,
    summarize,
    summarize_month,
    records_between,
    records_for_month,
    month_bounds,
    end_of_day,
)
from .vehicle import Vehicle
from .solver import DivisionByZero, EditHistory, Field, Solution, solve
from .entry import EntryForm
from .codec import (
    MalformedRow,
    ValidationReason,
    ValidationResult,
    encode,
    decode,
    validate,
    encode_vehicles,
    decode_vehicles,
)
from .loader import load_vehicle, save_vehicle, save_record

__all__ = [
    "Classification",
    "FuelingRecord",
    "Vehicle",
    "Summary",
    "Field",
    "EditHistory",
    "Solution",
    "EntryForm",
    "DivisionByZero",
    "MalformedRow",
    "ValidationReason",
    "ValidationResult",
    "calc_miles_driven",
    "calc_mpg",
    "calc_cost_per_mile",
    "recompute",
    "summarize",
    "summarize_month",
    "records_between",
    "records_for_month",
    "month_bounds",
    "end_of_day",
    "solve",
    "encode",
    "decode",
    "validate",
    "encode_vehicles",
    "decode_vehicles",
    "load_vehicle",
    "save_vehicle",
    "save_record",
]
