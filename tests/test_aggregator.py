"""
Unit tests for the mood aggregator.

Verifies that stored records roll up into one aggregate per calendar day
and that malformed stored values are sanitized instead of raised.
"""
import sys
from datetime import datetime
from pathlib import Path

import pytest

# Add src directory to path
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from mood_analytics.aggregator import (
    MoodAggregator,
    daily_average_points,
    parse_rating,
    parse_timestamp,
    segment_points,
)

from conftest import TODAY, days_ago, make_day, seed_moods


class TestParsing:
    """Test stored value coercion."""

    def test_valid_rating(self):
        assert parse_rating(7.5) == 7.5
        assert parse_rating("6") == 6.0

    def test_out_of_range_is_clamped(self):
        assert parse_rating(12) == 10.0
        assert parse_rating(0.2) == 1.0

    def test_malformed_rating_is_absent(self):
        assert parse_rating(None) is None
        assert parse_rating("great") is None
        assert parse_rating(float("nan")) is None
        assert parse_rating(True) is None

    def test_timestamps(self):
        stamp = datetime(2026, 3, 15, 9, 30)
        assert parse_timestamp(stamp) == stamp
        assert parse_timestamp("2026-03-15T09:30:00") == stamp
        assert parse_timestamp("yesterday") is None
        assert parse_timestamp(None) is None


class TestMoodAggregator:
    """Test aggregation over a mood store."""

    @pytest.mark.asyncio
    async def test_one_aggregate_per_day(self, mood_store):
        """Every day of the range is present, with or without data."""
        await seed_moods(mood_store, {days_ago(2): [6.0, 8.0], TODAY: [5.0]})
        aggregator = MoodAggregator(mood_store)

        aggregates = await aggregator.aggregate(days_ago(3), TODAY)

        assert [a.date for a in aggregates] == [days_ago(i) for i in range(3, -1, -1)]
        assert [a.has_any_mood for a in aggregates] == [False, True, False, True]
        assert aggregates[1].day_average == 7.0
        assert aggregates[0].day_average is None

    @pytest.mark.asyncio
    async def test_entries_ordered_by_segment(self, mood_store):
        await mood_store.save_mood(TODAY, 2, 4.0)
        await mood_store.save_mood(TODAY, 0, 8.0)
        aggregator = MoodAggregator(mood_store)

        day = await aggregator.aggregate_day(TODAY)

        assert [e.segment for e in day.entries] == [0, 2]
        assert day.rating_for(2) == 4.0
        assert day.rating_for(1) is None

    @pytest.mark.asyncio
    async def test_reversed_range_is_empty(self, mood_store):
        aggregator = MoodAggregator(mood_store)

        assert await aggregator.aggregate(TODAY, days_ago(1)) == []

    @pytest.mark.asyncio
    async def test_malformed_records_are_sanitized(self, mood_store, caplog):
        """Bad ratings are dropped, out-of-range ones clamped, both logged."""
        mood_store.put_raw(TODAY, 0, {"rating": "n/a", "logged_at": None})
        mood_store.put_raw(TODAY, 1, {"rating": 14, "logged_at": "not-a-date"})
        mood_store.put_raw(TODAY, 2, {"rating": 6.0, "note": None})
        aggregator = MoodAggregator(mood_store)

        day = await aggregator.aggregate_day(TODAY)

        assert [e.segment for e in day.entries] == [1, 2]
        assert day.entries[0].rating == 10.0
        assert day.entries[0].logged_at is None
        assert day.entries[1].note == ""
        assert not day.was_logged_live()
        assert "[AGGREGATOR]" in caplog.text

    @pytest.mark.asyncio
    async def test_load_mood_by_date(self, mood_store):
        await seed_moods(mood_store, {days_ago(1): [4.0, 6.0], TODAY: [9.0]})
        aggregator = MoodAggregator(mood_store)

        by_date = await aggregator.load_mood_by_date(days_ago(5), TODAY)

        assert by_date == {days_ago(1): 5.0, TODAY: 9.0}


class TestChartSeries:
    """Test chart point helpers."""

    def test_daily_and_segment_points(self):
        aggregates = [make_day(days_ago(1), [4.0, 8.0]), make_day(TODAY, [])]

        assert daily_average_points(aggregates) == [(days_ago(1), 6.0)]
        assert segment_points(aggregates) == [
            (days_ago(1), 0, 4.0),
            (days_ago(1), 1, 8.0),
        ]
