"""Helper functions for derived fueling statistics."""

import logging
from typing import List, Optional

from .classification import Classification
from .record import FuelingRecord

logger = logging.getLogger(__name__)


def calc_miles_driven(odometer: float, previous_odometer: Optional[float]) -> float:
    """
    Miles since the previous fill-up.

    - No baseline: 0
    - Odometer didn't advance (typo, rollover, reorder): 0
    """
    if previous_odometer is None or odometer <= previous_odometer:
        return 0
    return odometer - previous_odometer


def calc_mpg(
    miles_driven: float, gallons: float, classification: Classification
) -> float:
    """Miles per gallon; only full fill-ups measure a whole tank."""
    if miles_driven <= 0 or gallons <= 0:
        return 0
    if classification is not Classification.FULL:
        return 0
    return miles_driven / gallons


def calc_cost_per_mile(total_cost: float, miles_driven: float) -> float:
    """Cost per mile driven, 0 when no distance is known."""
    if miles_driven <= 0:
        return 0
    return total_cost / miles_driven


def recompute(records: List[FuelingRecord], start: int = 0) -> List[FuelingRecord]:
    """
    Refresh cached statistics for records[start:].

    records must already be in chronological order (see
    FuelingRecord.sort_key). The baseline for records[start] is the
    odometer of records[start - 1]; everything before start is assumed
    up to date. Passing start=0 re-walks the whole history.

    A MISSED record gets no baseline (an unlogged fill-up sits between it
    and its predecessor) but still becomes the baseline for the next one.

    Returns the same list, for chaining.
    """
    if not records:
        return records
    start = max(start, 0)
    if start >= len(records):
        return records

    running = records[start - 1].odometer if start > 0 else None
    for record in records[start:]:
        if record.classification is Classification.MISSED:
            previous = None
        else:
            previous = running
        record.previous_odometer = previous
        record.miles_driven = calc_miles_driven(record.odometer, previous)
        record.mpg = calc_mpg(record.miles_driven, record.gallons, record.classification)
        record.cost_per_mile = calc_cost_per_mile(record.total_cost, record.miles_driven)
        running = record.odometer

    logger.debug("Recomputed %d of %d records", len(records) - start, len(records))
    return records
