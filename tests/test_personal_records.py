"""Tests for personal best tracking."""

import math
import pytest
from datetime import datetime, timedelta
from trackpro_analytics.analysis.event_policy import Unit
from trackpro_analytics.analysis.personal_records import (
    PerformanceRecord,
    RecordContext,
    improvement,
    insert,
    personal_best,
    personal_bests,
    progression,
)
from trackpro_analytics.errors import InvalidRecordError, UnknownEventError

DAY1 = datetime(2024, 5, 1, 18, 0)


def day(n: int) -> datetime:
    return DAY1 + timedelta(days=n - 1)


def rec(event: str, value: float, n: int) -> PerformanceRecord:
    return PerformanceRecord.create(event, value, day(n))


class TestPerformanceRecord:
    """Test record creation and validation."""

    def test_create_derives_unit_and_canonical_name(self):
        """Test that aliases resolve and the unit comes from the policy."""
        record = PerformanceRecord.create("lj", 7.25, day(1), context=RecordContext(location="Oslo"))
        assert record.event == "Long Jump"
        assert record.unit is Unit.METERS
        assert record.context.location == "Oslo"

    def test_non_positive_value_rejected(self):
        """Test that zero and negative values are rejected at ingestion."""
        with pytest.raises(InvalidRecordError):
            PerformanceRecord.create("100m", 0, day(1))
        with pytest.raises(InvalidRecordError):
            PerformanceRecord.create("100m", -11.2, day(1))
        with pytest.raises(InvalidRecordError):
            PerformanceRecord.create("100m", math.nan, day(1))

    def test_unknown_event_rejected(self):
        with pytest.raises(UnknownEventError):
            PerformanceRecord.create("Marathon", 7200, day(1))

    def test_unit_mismatch_rejected(self):
        """Test that a hand-built record with the wrong unit fails validation."""
        bad = PerformanceRecord(event="100m", value=11.2, unit=Unit.METERS, recorded_at=day(1))
        with pytest.raises(InvalidRecordError):
            insert([], bad)


class TestPersonalBest:
    """Test personal best selection."""

    def test_lower_is_better_tie_goes_to_earliest(self):
        """Test the 100m scenario: 11.24 on day 3 beats the same mark on day 5."""
        records = [rec("100m", 11.31, 1), rec("100m", 11.24, 5), rec("100m", 11.24, 3)]

        best = personal_best(records, "100m")

        assert best.value == 11.24
        assert best.recorded_at == day(3)

    def test_higher_is_better(self):
        """Test that jumps take the maximum."""
        records = [rec("Long Jump", 7.10, 1), rec("Long Jump", 7.35, 2), rec("Long Jump", 7.20, 3)]
        assert personal_best(records, "lj").value == 7.35

    def test_filters_by_event(self):
        """Test that other events never leak into the result."""
        records = [rec("100m", 11.2, 1), rec("200m", 22.5, 2), rec("Long Jump", 7.0, 3)]
        assert personal_best(records, "200m").value == 22.5

    def test_no_records_returns_none(self):
        """Test that "no record yet" is a valid state, not an error."""
        assert personal_best([], "100m") is None
        assert personal_best([rec("200m", 22.5, 1)], "100m") is None

    def test_unknown_event_raises(self):
        with pytest.raises(UnknownEventError):
            personal_best([rec("100m", 11.2, 1)], "Marathon")

    def test_lower_is_better_never_exceeds_other_records(self):
        """Test the minimum property over a spread of values."""
        values = [12.1, 11.9, 11.95, 12.4, 11.88, 11.88, 12.0]
        records = [rec("100m", v, i + 1) for i, v in enumerate(values)]
        best = personal_best(records, "100m")
        assert all(best.value <= r.value for r in records)

    def test_higher_is_better_never_exceeded(self):
        """Test the maximum property over a spread of values."""
        values = [55.2, 58.9, 57.1, 58.9, 40.0]
        records = [rec("Javelin", v, i + 1) for i, v in enumerate(values)]
        best = personal_best(records, "Javelin")
        assert all(best.value >= r.value for r in records)
        assert best.recorded_at == day(2)


class TestInsert:
    """Test pure insertion and re-derivation of bests."""

    def test_insert_does_not_mutate_input(self):
        records = [rec("100m", 11.3, 1)]
        result = insert(records, rec("100m", 11.2, 2))
        assert len(records) == 1
        assert len(result) == 2

    def test_better_record_becomes_best(self):
        """Test that a record beating the prior best is reflected."""
        records = [rec("100m", 11.3, 1)]
        new = rec("100m", 11.2, 2)
        assert personal_best(insert(records, new), "100m") == new

    def test_worse_or_equal_record_does_not_change_best(self):
        """Test that a non-improving record leaves the best as it was."""
        prior = rec("100m", 11.3, 1)
        assert personal_best(insert([prior], rec("100m", 11.5, 2)), "100m") == prior
        assert personal_best(insert([prior], rec("100m", 11.3, 2)), "100m") == prior


class TestHistory:
    """Test best-of-all-events, progression and improvement."""

    def test_personal_bests_per_event(self):
        records = [
            rec("100m", 11.3, 1), rec("100m", 11.1, 2),
            rec("Long Jump", 7.0, 1), rec("lj", 7.2, 3),
        ]
        bests = personal_bests(records)
        assert set(bests) == {"100m", "Long Jump"}
        assert bests["100m"].value == 11.1
        assert bests["Long Jump"].value == 7.2

    def test_progression(self):
        """Test that only records setting a new best at the time are listed."""
        records = [rec("100m", 11.4, 1), rec("100m", 11.5, 2), rec("100m", 11.2, 3), rec("100m", 11.2, 4)]
        history = progression(records, "100m")
        assert [r.value for r in history] == [11.4, 11.2]
        assert history[-1].recorded_at == day(3)

    def test_improvement(self):
        """Test signed improvement in the favourable direction."""
        records = [rec("100m", 11.30, 1)]
        assert improvement(records, rec("100m", 11.20, 2)) == pytest.approx(0.10)
        assert improvement(records, rec("100m", 11.50, 2)) == pytest.approx(-0.20)
        assert improvement([rec("Shot Put", 15.0, 1)], rec("Shot Put", 15.5, 2)) == pytest.approx(0.5)
        assert improvement([], rec("100m", 11.2, 1)) is None
