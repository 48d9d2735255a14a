"""Classification enum for fill-up kinds."""

from enum import Enum
from typing import Optional


class Classification(Enum):
    """How much of the tank a fill-up replaced."""

    FULL = "full"
    PARTIAL = "partial"  # Topped up; miles count, MPG doesn't
    MISSED = "missed"  # A fill-up went unlogged before this one; resets the baseline

    @property
    def is_partial(self) -> bool:
        return self is Classification.PARTIAL

    @classmethod
    def from_token(cls, token: Optional[str]) -> "Classification":
        """
        Parse a classification token.

        Accepts enum names (full/partial/missed) and the legacy
        isPartialFillUp booleans (true/false), case-insensitive.
        An empty or missing token means a full fill-up.
        """
        if token is None:
            return cls.FULL
        value = token.strip().lower()
        if not value:
            return cls.FULL
        if value == "true":
            return cls.PARTIAL
        if value == "false":
            return cls.FULL
        return cls(value)

    @classmethod
    def is_token(cls, token: str) -> bool:
        """True if token is a recognized classification or boolean."""
        value = token.strip().lower()
        return value in ("true", "false") or value in {c.value for c in cls}
