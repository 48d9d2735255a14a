"""
Tri-field solver for price per gallon, gallons and total cost.

Given two of the three values, the third follows from
total_cost = price_per_gallon * gallons. Which one to solve for depends on
which fields the user typed into most recently, so callers keep an
EditHistory and pass it in.
"""

from collections import deque
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Deque, Iterable, Iterator, List, Optional, Sequence, Union


class Field(Enum):
    """The three mutually dependent money/quantity fields."""

    PRICE_PER_GALLON = "price_per_gallon"
    GALLONS = "gallons"
    TOTAL_COST = "total_cost"


# Order of preference when only one field has been touched.
PRIORITY = (Field.TOTAL_COST, Field.GALLONS, Field.PRICE_PER_GALLON)

DECIMAL_PLACES = {
    Field.TOTAL_COST: 2,
    Field.GALLONS: 2,
    Field.PRICE_PER_GALLON: 3,
}


class DivisionByZero(ZeroDivisionError):
    """The divisor needed to solve a field was zero or negative."""


class EditHistory:
    """The two most recent distinct fields the user edited, oldest first."""

    CAPACITY = 2

    def __init__(self, fields: Iterable[Field] = ()):
        self._fields: Deque[Field] = deque(maxlen=self.CAPACITY)
        for field in fields:
            self.touch(field)

    def touch(self, field: Field) -> None:
        if not self._fields or self._fields[-1] != field:
            self._fields.append(field)

    def clear(self) -> None:
        self._fields.clear()

    def __iter__(self) -> Iterator[Field]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"EditHistory({[f.value for f in self._fields]})"


@dataclass(frozen=True)
class Solution:
    """The field to fill in and its value."""

    field: Field
    value: float


def round_half_up(value: Decimal, places: int) -> float:
    """Round half away from zero to a fixed number of decimal places."""
    exponent = Decimal(1).scaleb(-places)
    return float(value.quantize(exponent, rounding=ROUND_HALF_UP))


def _dec(value: float) -> Decimal:
    # str() keeps the shortest repr: 3.459, not its binary expansion
    return Decimal(str(value))


def calc_total_cost(price_per_gallon: float, gallons: float) -> float:
    """Total cost to the cent."""
    return round_half_up(
        _dec(price_per_gallon) * _dec(gallons), DECIMAL_PLACES[Field.TOTAL_COST]
    )


def calc_gallons(total_cost: float, price_per_gallon: float) -> float:
    """Gallons to the hundredth; raises DivisionByZero for price <= 0."""
    if price_per_gallon <= 0:
        raise DivisionByZero("price per gallon must be positive to solve gallons")
    return round_half_up(
        _dec(total_cost) / _dec(price_per_gallon), DECIMAL_PLACES[Field.GALLONS]
    )


def calc_price_per_gallon(total_cost: float, gallons: float) -> float:
    """Price per gallon to a tenth of a cent; raises DivisionByZero for gallons <= 0."""
    if gallons <= 0:
        raise DivisionByZero("gallons must be positive to solve price per gallon")
    return round_half_up(
        _dec(total_cost) / _dec(gallons), DECIMAL_PLACES[Field.PRICE_PER_GALLON]
    )


def _positive(value: Optional[float]) -> bool:
    return value is not None and value > 0


def _blank(value: Optional[float]) -> bool:
    return value is None or value == 0


def _pick_target(values: dict, edited: Sequence[Field]) -> Optional[Field]:
    recent: List[Field] = []
    for field in reversed(edited):
        if field not in recent:
            recent.append(field)
    if len(recent) >= 2:
        return next(f for f in PRIORITY if f not in recent[:2])

    # One field touched: solve whichever blank field has two positive sources.
    for target in PRIORITY:
        sources = [f for f in Field if f is not target]
        if _blank(values[target]) and all(_positive(values[f]) for f in sources):
            return target
    return None


def solve(
    price_per_gallon: Optional[float],
    gallons: Optional[float],
    total_cost: Optional[float],
    edited: Union[EditHistory, Sequence[Field]],
) -> Optional[Solution]:
    """
    Work out the missing one of price per gallon, gallons and total cost.

    - Nothing edited yet: None
    - Two distinct fields edited: the third field is the target
    - One field edited: the blank field with two positive sources, preferring
      total cost, then gallons, then price per gallon

    Returns None when there is no target or a source value is missing.
    Raises DivisionByZero when the divisor for the target is not positive;
    the caller should leave the fields as they are.
    """
    edited = list(edited)
    if not edited:
        return None

    values = {
        Field.PRICE_PER_GALLON: price_per_gallon,
        Field.GALLONS: gallons,
        Field.TOTAL_COST: total_cost,
    }
    target = _pick_target(values, edited)
    if target is None:
        return None

    if target is Field.TOTAL_COST:
        if not (_positive(price_per_gallon) and _positive(gallons)):
            return None
        return Solution(target, calc_total_cost(price_per_gallon, gallons))

    if target is Field.GALLONS:
        if price_per_gallon is None or not _positive(total_cost):
            return None
        return Solution(target, calc_gallons(total_cost, price_per_gallon))

    if gallons is None or not _positive(total_cost):
        return None
    return Solution(target, calc_price_per_gallon(total_cost, gallons))
