"""Tests for daily aggregation."""

import random
import statistics
from datetime import date

import pytest

from conftest import make_reading
from weatherwatch.aggregate.aggregator import EmptyBatch, dominant_condition, summarize

DAY = date(2026, 10, 19)


class TestSummarize:
    def test_basic_stats(self):
        batch = [
            make_reading("Delhi", 36.0),
            make_reading("Mumbai", 28.0),
            make_reading("Chennai", 31.0),
        ]
        s = summarize(batch, DAY)
        assert s.date == "2026-10-19"
        assert s.max_temp_c == 36.0
        assert s.min_temp_c == 28.0
        assert s.average_temp_c == pytest.approx(95.0 / 3)
        assert s.reading_count == 3

    def test_single_reading(self):
        s = summarize([make_reading("Delhi", -2.5)], DAY)
        assert s.average_temp_c == s.max_temp_c == s.min_temp_c == -2.5

    def test_empty_batch_raises(self):
        with pytest.raises(EmptyBatch):
            summarize([], DAY)

    def test_min_avg_max_ordering_holds(self):
        rng = random.Random(42)
        for _ in range(200):
            temps = [rng.uniform(-40, 50) for _ in range(rng.randint(1, 12))]
            batch = [make_reading(f"L{i}", t) for i, t in enumerate(temps)]
            s = summarize(batch, DAY)
            assert s.min_temp_c <= s.average_temp_c <= s.max_temp_c
            assert s.average_temp_c == pytest.approx(statistics.fmean(temps))

    def test_identical_temperatures(self):
        batch = [make_reading(f"L{i}", 0.1) for i in range(7)]
        s = summarize(batch, DAY)
        assert s.average_temp_c == 0.1

    def test_dominant_condition_from_batch(self):
        batch = [
            make_reading("A", 20, "rain"),
            make_reading("B", 21, "rain"),
            make_reading("C", 22, "clear"),
        ]
        assert summarize(batch, DAY).dominant_condition == "rain"


class TestDominantCondition:
    def test_majority(self):
        assert dominant_condition(["rain", "rain", "clear"]) == "rain"

    def test_tie_first_seen_wins(self):
        assert dominant_condition(["rain", "clear"]) == "rain"

    def test_tie_goes_to_first_to_reach_count(self):
        # rain reaches 2 at index 2, clear only at index 3
        assert dominant_condition(["clear", "rain", "rain", "clear"]) == "rain"

    def test_later_majority_overtakes(self):
        assert dominant_condition(["haze", "mist", "mist"]) == "mist"

    def test_empty_raises(self):
        with pytest.raises(EmptyBatch):
            dominant_condition([])
