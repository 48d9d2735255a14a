"""Summary statistics over a vehicle's fueling records."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional, Sequence, Tuple

from dateutil.relativedelta import relativedelta

from .classification import Classification
from .record import FuelingRecord


@dataclass
class Summary:
    """
    Vehicle-level statistics for a set of records.

    Extremes and most_recent are None when no record qualifies; that is
    different from a real value of 0 and should be displayed as such.
    """

    count: int = 0
    total_cost: float = 0
    total_miles: float = 0
    total_gallons: float = 0
    average_mpg: float = 0
    average_cost_per_mile: float = 0
    average_price_per_gallon: float = 0
    best_mpg: Optional[float] = None
    worst_mpg: Optional[float] = None
    highest_price: Optional[float] = None
    lowest_price: Optional[float] = None
    most_recent: Optional[FuelingRecord] = None

    @property
    def is_empty(self) -> bool:
        return self.count == 0


def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0


def records_between(
    records: Sequence[FuelingRecord],
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> List[FuelingRecord]:
    """Records dated within [start, end]; either bound may be None."""
    return [
        r
        for r in records
        if (start is None or r.date >= start) and (end is None or r.date <= end)
    ]


def month_bounds(when: datetime) -> Tuple[datetime, datetime]:
    """First instant of the month containing `when`, and the last instant before the next."""
    start = when.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    end = start + relativedelta(months=1) - timedelta(microseconds=1)
    return start, end


def end_of_day(when: datetime) -> datetime:
    """Last instant of the day containing `when`."""
    start = when.replace(hour=0, minute=0, second=0, microsecond=0)
    return start + timedelta(days=1) - timedelta(microseconds=1)


def records_for_month(
    records: Sequence[FuelingRecord], when: datetime
) -> List[FuelingRecord]:
    """Records in the calendar month containing `when`."""
    return records_between(records, *month_bounds(when))


def summarize(
    records: Sequence[FuelingRecord],
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> Summary:
    """
    Fold records into a Summary.

    Uses each record's cached statistics, so records should come from a
    recomputed vehicle history; filtering by date afterwards keeps the
    distances measured against the full history.
    """
    selected = records_between(records, start, end)
    if not selected:
        return Summary()

    total_cost = sum(r.total_cost for r in selected)
    total_miles = sum(r.miles_driven for r in selected)
    mpgs = [
        r.mpg
        for r in selected
        if r.classification is Classification.FULL and r.mpg > 0
    ]
    prices = [r.price_per_gallon for r in selected if r.price_per_gallon > 0]

    return Summary(
        count=len(selected),
        total_cost=total_cost,
        total_miles=total_miles,
        total_gallons=sum(r.gallons for r in selected),
        average_mpg=_mean(mpgs),
        average_cost_per_mile=total_cost / total_miles if total_miles > 0 else 0,
        average_price_per_gallon=_mean(prices),
        best_mpg=max(mpgs) if mpgs else None,
        worst_mpg=min(mpgs) if mpgs else None,
        highest_price=max(prices) if prices else None,
        lowest_price=min(prices) if prices else None,
        most_recent=max(selected, key=lambda r: r.sort_key),
    )


def summarize_month(records: Sequence[FuelingRecord], when: datetime) -> Summary:
    """Summary for the calendar month containing `when`."""
    return summarize(records, *month_bounds(when))
