#!/usr/bin/env python3
"""Tests for derived statistics calculations."""

from datetime import datetime, timedelta, timezone

import pytest
from fueling import (
    Classification,
    FuelingRecord,
    calc_cost_per_mile,
    calc_miles_driven,
    calc_mpg,
    recompute,
)

BASE = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_record(day, odometer, gallons=10.0, total_cost=35.0, fill=Classification.FULL):
    return FuelingRecord(
        BASE + timedelta(days=day), odometer, 3.5, gallons, total_cost, fill
    )


def cached(records):
    return [
        (r.previous_odometer, r.miles_driven, r.mpg, r.cost_per_mile) for r in records
    ]


class TestCalcMilesDriven:
    """Tests for calc_miles_driven helper function."""

    def test_with_baseline(self):
        assert calc_miles_driven(12500, 12200) == 300

    def test_without_baseline(self):
        assert calc_miles_driven(12500, None) == 0

    def test_odometer_not_advanced(self):
        """Equal or lower readings count as no distance."""
        assert calc_miles_driven(12500, 12500) == 0
        assert calc_miles_driven(12000, 12500) == 0


class TestCalcMpg:
    """Tests for calc_mpg helper function."""

    def test_full_fill_up(self):
        assert calc_mpg(300, 10, Classification.FULL) == 30

    def test_partial_fill_up(self):
        """Partial fills don't measure a whole tank."""
        assert calc_mpg(300, 10, Classification.PARTIAL) == 0

    def test_no_distance_or_gallons(self):
        assert calc_mpg(0, 10, Classification.FULL) == 0
        assert calc_mpg(300, 0, Classification.FULL) == 0


class TestCalcCostPerMile:
    """Tests for calc_cost_per_mile helper function."""

    def test_with_distance(self):
        assert calc_cost_per_mile(30, 300) == pytest.approx(0.1)

    def test_without_distance(self):
        assert calc_cost_per_mile(30, 0) == 0


class TestRecompute:
    """Tests for recompute() over a chronological history."""

    def test_two_full_fill_ups(self):
        """12200 then 12500 on 10 gallons for $34.59."""
        records = [
            make_record(0, 12200),
            make_record(7, 12500, gallons=10, total_cost=34.59),
        ]
        recompute(records)
        second = records[1]
        assert second.previous_odometer == 12200
        assert second.miles_driven == 300
        assert second.mpg == pytest.approx(30.0)
        assert second.cost_per_mile == pytest.approx(0.1153, abs=1e-4)

    def test_first_record_has_no_baseline(self):
        records = recompute([make_record(0, 12200)])
        assert records[0].previous_odometer is None
        assert records[0].miles_driven == 0
        assert records[0].mpg == 0
        assert records[0].cost_per_mile == 0

    def test_empty_history(self):
        assert recompute([]) == []

    def test_partial_counts_miles_but_not_mpg(self):
        records = recompute(
            [
                make_record(0, 1000),
                make_record(7, 1200, fill=Classification.PARTIAL),
            ]
        )
        assert records[1].miles_driven == 200
        assert records[1].mpg == 0
        assert records[1].cost_per_mile == pytest.approx(35.0 / 200)

    def test_partial_advances_baseline(self):
        """The record after a partial fill measures from the partial's odometer."""
        records = recompute(
            [
                make_record(0, 1000),
                make_record(7, 1200, fill=Classification.PARTIAL),
                make_record(14, 1500),
            ]
        )
        assert records[2].previous_odometer == 1200
        assert records[2].miles_driven == 300

    def test_missed_resets_baseline(self):
        """A missed fill-up has no baseline but is the next record's baseline."""
        records = recompute(
            [
                make_record(0, 1000),
                make_record(14, 1800, fill=Classification.MISSED),
                make_record(21, 2100),
            ]
        )
        assert records[1].previous_odometer is None
        assert records[1].miles_driven == 0
        assert records[1].mpg == 0
        assert records[2].previous_odometer == 1800
        assert records[2].miles_driven == 300

    def test_odometer_going_backwards(self):
        records = recompute([make_record(0, 5000), make_record(7, 4000)])
        assert records[1].previous_odometer == 5000
        assert records[1].miles_driven == 0
        assert records[1].mpg == 0
        assert records[1].cost_per_mile == 0

    def test_idempotent(self):
        records = [
            make_record(0, 1000),
            make_record(7, 1300),
            make_record(14, 1450, fill=Classification.PARTIAL),
            make_record(21, 1800, fill=Classification.MISSED),
            make_record(28, 2100, gallons=9.5),
        ]
        once = cached(recompute(records))
        twice = cached(recompute(records))
        assert once == twice

    def test_suffix_matches_full_walk(self):
        """Recomputing from an index gives the same result as a full re-walk."""
        records = recompute(
            [make_record(0, 1000), make_record(7, 1300), make_record(14, 1600)]
        )
        records[1].odometer = 1250
        recompute(records, start=1)
        suffix = cached(records)
        assert suffix == cached(recompute(records))
        assert records[2].previous_odometer == 1250
        assert records[2].miles_driven == 350

    def test_start_past_end_is_noop(self):
        records = recompute([make_record(0, 1000)])
        assert recompute(records, start=5) is records

    def test_miles_sum_to_odometer_span(self):
        """Per-record miles telescope to last minus first odometer."""
        odometers = [10000, 10310, 10450, 10800, 11215]
        records = recompute(
            [
                make_record(i * 7, odo, fill=fill)
                for i, (odo, fill) in enumerate(
                    zip(
                        odometers,
                        [
                            Classification.FULL,
                            Classification.FULL,
                            Classification.PARTIAL,
                            Classification.FULL,
                            Classification.PARTIAL,
                        ],
                    )
                )
            ]
        )
        assert sum(r.miles_driven for r in records) == odometers[-1] - odometers[0]
