"""Vehicle class - the aggregate owning a chronological fueling history."""

import logging
import uuid
from bisect import bisect_right
from datetime import datetime
from typing import Iterable, List, Optional

from .calculations import recompute
from .record import FuelingRecord, utcnow
from .summary import Summary, summarize, summarize_month

logger = logging.getLogger(__name__)


class Vehicle:
    """A vehicle and its fueling records, kept in chronological order."""

    def __init__(
        self,
        name: str,
        make: Optional[str] = None,
        model: Optional[str] = None,
        year: Optional[int] = None,
        id: Optional[str] = None,
        created_at: Optional[datetime] = None,
        records: Optional[Iterable[FuelingRecord]] = None,
    ):
        self.id = id or str(uuid.uuid4())
        self.name = name
        self.make = make
        self.model = model
        self.year = year
        self.created_at = created_at or utcnow()
        self.records: List[FuelingRecord] = []
        if records:
            self.add_records(records)

    @property
    def display_name(self) -> str:
        """Human-readable vehicle name."""
        if self.make and self.model:
            base = f"{self.make} {self.model}"
            return f"{self.year} {base}" if self.year else base
        return self.name

    @property
    def last_record(self) -> Optional[FuelingRecord]:
        """The chronologically latest record."""
        return self.records[-1] if self.records else None

    def get_record(self, record_id: str) -> FuelingRecord:
        """Find a record by id; raises KeyError if unknown."""
        return self.records[self._index_of(record_id)]

    def get_records_sorted(self, reverse: bool = True) -> List[FuelingRecord]:
        """Records newest first (or oldest first with reverse=False)."""
        return list(reversed(self.records)) if reverse else list(self.records)

    # -------------------------------------------------------------------------
    # Mutations. Each one leaves the cached statistics consistent.
    # -------------------------------------------------------------------------

    def add_record(self, record: FuelingRecord) -> FuelingRecord:
        """Insert a record at its chronological position."""
        record.vehicle_id = self.id
        index = self._insertion_index(record)
        self.records.insert(index, record)
        recompute(self.records, start=index)
        return record

    def add_records(self, records: Iterable[FuelingRecord]) -> None:
        """
        Insert many records with a single recompute.

        Used for imports, where insertion positions aren't known ahead
        of time.
        """
        added = 0
        for record in records:
            record.vehicle_id = self.id
            self.records.append(record)
            added += 1
        self.records.sort(key=lambda r: r.sort_key)
        recompute(self.records)
        logger.info("Added %d records to %s", added, self.display_name)

    def update_record(self, record_id: str, **changes) -> FuelingRecord:
        """
        Edit raw fields of a record.

        Only FuelingRecord.RAW_FIELDS may be changed. The record moves if
        its date changed, and the statistics from the earliest affected
        position onward are recomputed (its successor's baseline may
        change too). If the new values can't be placed (say, a naive date
        next to aware ones), the record is restored and the error re-raised.
        """
        unknown = set(changes) - set(FuelingRecord.RAW_FIELDS)
        if unknown:
            raise ValueError(f"Cannot edit fields: {', '.join(sorted(unknown))}")

        old_index = self._index_of(record_id)
        record = self.records.pop(old_index)
        original = {name: getattr(record, name) for name in changes}
        try:
            for name, value in changes.items():
                setattr(record, name, value)
            new_index = self._insertion_index(record)
        except Exception:
            for name, value in original.items():
                setattr(record, name, value)
            self.records.insert(old_index, record)
            raise
        self.records.insert(new_index, record)
        recompute(self.records, start=min(old_index, new_index))
        return record

    def delete_record(self, record_id: str) -> FuelingRecord:
        """Remove a record; its successor picks up a new baseline."""
        index = self._index_of(record_id)
        record = self.records.pop(index)
        recompute(self.records, start=index)
        return record

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------

    def summary(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> Summary:
        """Summary statistics, optionally limited to [start, end]."""
        return summarize(self.records, start, end)

    def summary_for_month(self, when: datetime) -> Summary:
        """Summary statistics for the calendar month containing `when`."""
        return summarize_month(self.records, when)

    def _index_of(self, record_id: str) -> int:
        for index, record in enumerate(self.records):
            if record.id == record_id:
                return index
        raise KeyError(record_id)

    def _insertion_index(self, record: FuelingRecord) -> int:
        # Equal keys go after existing records, keeping insertion order stable.
        keys = [r.sort_key for r in self.records]
        return bisect_right(keys, record.sort_key)
