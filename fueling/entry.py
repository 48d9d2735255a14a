"""EntryForm - the editable state behind adding or editing a fill-up."""

import logging
from datetime import datetime
from typing import Callable, Dict, Optional

from .classification import Classification
from .record import FuelingRecord
from .solver import DivisionByZero, EditHistory, Field, Solution, solve

logger = logging.getLogger(__name__)

OnChange = Callable[[Field, float], None]


class EntryForm:
    """
    Holds the three money/quantity fields while a user types.

    Every user edit is recorded in an EditHistory and the solver fills in
    the remaining field. The solved value is announced through `on_change`
    (a bound input widget, say). A listener that echoes it back into
    set_field() is ignored while `solving` is set, so the write-back never
    counts as a user edit.
    """

    def __init__(
        self,
        price_per_gallon: Optional[float] = None,
        gallons: Optional[float] = None,
        total_cost: Optional[float] = None,
        on_change: Optional[OnChange] = None,
    ):
        self.values: Dict[Field, Optional[float]] = {
            Field.PRICE_PER_GALLON: price_per_gallon,
            Field.GALLONS: gallons,
            Field.TOTAL_COST: total_cost,
        }
        self.on_change = on_change
        self.history = EditHistory()
        self.solving = False
        self.last_solution: Optional[Solution] = None

    @property
    def price_per_gallon(self) -> Optional[float]:
        return self.values[Field.PRICE_PER_GALLON]

    @property
    def gallons(self) -> Optional[float]:
        return self.values[Field.GALLONS]

    @property
    def total_cost(self) -> Optional[float]:
        return self.values[Field.TOTAL_COST]

    @property
    def is_complete(self) -> bool:
        return all(v is not None and v > 0 for v in self.values.values())

    def set_field(self, field: Field, value: Optional[float]) -> Optional[Solution]:
        """Apply a user edit and solve for the dependent field."""
        if self.solving:
            return None
        self.values[field] = value
        self.history.touch(field)
        return self._auto_solve()

    def _auto_solve(self) -> Optional[Solution]:
        try:
            solution = solve(
                self.price_per_gallon, self.gallons, self.total_cost, self.history
            )
        except DivisionByZero as e:
            logger.debug("Not solving: %s", e)
            return None
        if solution is None:
            return None

        self.solving = True
        try:
            self.values[solution.field] = solution.value
            if self.on_change is not None:
                self.on_change(solution.field, solution.value)
        finally:
            self.solving = False
        self.last_solution = solution
        logger.debug("Solved %s = %s", solution.field.value, solution.value)
        return solution

    def to_record(
        self,
        date: datetime,
        odometer: float,
        classification: Classification = Classification.FULL,
        notes: Optional[str] = None,
    ) -> FuelingRecord:
        """Build a record; all three fields must be resolved and positive."""
        if not self.is_complete:
            missing = [f.value for f, v in self.values.items() if v is None or v <= 0]
            raise ValueError(f"Unresolved fields: {', '.join(missing)}")
        return FuelingRecord(
            date=date,
            odometer=odometer,
            price_per_gallon=self.price_per_gallon,
            gallons=self.gallons,
            total_cost=self.total_cost,
            classification=classification,
            notes=notes,
        )
