"""FuelingRecord class for a single fill-up."""

import uuid
from datetime import datetime, timezone
from typing import Optional, Tuple

from .classification import Classification


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FuelingRecord:
    """
    One fueling event plus its cached derived statistics.

    The cached fields (previous_odometer, miles_driven, mpg, cost_per_mile)
    are owned by calculations.recompute() and are rebuilt from the raw
    fields and the record's position in its vehicle's history.
    """

    RAW_FIELDS = (
        "date",
        "odometer",
        "price_per_gallon",
        "gallons",
        "total_cost",
        "classification",
        "notes",
    )

    def __init__(
            self,
            date: datetime,
            odometer: float,
            price_per_gallon: float,
            gallons: float,
            total_cost: float,
            classification: Classification = Classification.FULL,
            notes: Optional[str] = None,
            id: Optional[str] = None,
            vehicle_id: Optional[str] = None,
            created_at: Optional[datetime] = None,
    ):
        self.id = id or str(uuid.uuid4())
        self.vehicle_id = vehicle_id
        self.date = date
        self.odometer = odometer
        self.price_per_gallon = price_per_gallon
        self.gallons = gallons
        self.total_cost = total_cost
        self.classification = classification
        self.notes = notes
        self.created_at = created_at or utcnow()

        # Cached values, filled in by recompute()
        self.previous_odometer: Optional[float] = None
        self.miles_driven: float = 0
        self.mpg: float = 0
        self.cost_per_mile: float = 0

    @property
    def sort_key(self) -> Tuple[datetime, datetime]:
        """Chronological ordering key; creation time breaks date ties."""
        return (self.date, self.created_at)

    @property
    def is_partial(self) -> bool:
        return self.classification.is_partial

    def raw_fields(self) -> tuple:
        """Raw (user-entered) values, for comparing records across stores."""
        return tuple(getattr(self, name) for name in self.RAW_FIELDS)

    def __repr__(self) -> str:
        return (
            f"FuelingRecord({self.date.isoformat()}, odometer={self.odometer}, "
            f"gallons={self.gallons}, total_cost={self.total_cost}, "
            f"{self.classification.value})"
        )
