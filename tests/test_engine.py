"""
Unit tests for the MoodAnalyticsEngine facade.

Covers the write boundary (validation, rounding, logged_at stamping),
history trimming, streak history beyond the queried range and
correlation analysis over the stores.
"""
import sys
from pathlib import Path

import pytest

# Add src directory to path
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from mood_analytics import AnalyticsSettings, ContextRecord, MoodAnalyticsEngine
from mood_analytics.models import Trend

from conftest import FIXED_NOW, TODAY, days_ago, seed_moods


class TestWriteBoundary:
    """Test mood and context validation on write."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("segment", [-1, 3, True])
    async def test_invalid_segment(self, engine, segment):
        with pytest.raises(ValueError):
            await engine.save_mood(TODAY, segment, 5.0)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("rating", [0.5, 10.5, float("nan"), "great", None])
    async def test_invalid_rating(self, engine, rating):
        with pytest.raises(ValueError):
            await engine.save_mood(TODAY, 0, rating)

    @pytest.mark.asyncio
    async def test_save_rounds_and_stamps(self, engine):
        assert await engine.save_mood(TODAY, 2, 7.26, "after dinner")

        record = await engine.load_mood(TODAY, 2)

        assert record.rating == 7.3
        assert record.note == "after dinner"
        assert record.logged_at == FIXED_NOW
        assert record.segment == 2

    @pytest.mark.asyncio
    async def test_load_missing_and_delete(self, engine):
        assert await engine.load_mood(TODAY, 0) is None

        await engine.save_mood(TODAY, 0, 4.0)

        assert await engine.delete_mood(TODAY, 0) is True
        assert await engine.load_mood(TODAY, 0) is None

    @pytest.mark.asyncio
    async def test_invalid_context(self, engine):
        with pytest.raises(ValueError):
            await engine.save_context(ContextRecord(date=TODAY, sleep_quality=11))
        with pytest.raises(ValueError):
            await engine.save_context(ContextRecord(date=TODAY, work_stress=0))

    @pytest.mark.asyncio
    async def test_context_round_trip(self, engine):
        record = ContextRecord(date=TODAY, sleep_quality=7, custom_tags=["yoga"])

        assert await engine.save_context(record)
        assert await engine.load_context(TODAY) == record
        assert await engine.delete_context(TODAY) is True
        assert await engine.load_context(TODAY) is None


class TestStatistics:
    """Test statistics through the engine."""

    @pytest.mark.asyncio
    async def test_streak_extends_beyond_queried_range(self, engine, mood_store):
        """A 7-day query still reports the full 20-day streak."""
        await seed_moods(mood_store, {days_ago(i): [6.0] for i in range(20)})

        aggregates = await engine.get_mood_trends(days_ago(6), TODAY)
        stats = await engine.calculate_statistics(aggregates)

        assert stats.days_logged == 7
        assert stats.total_days == 7
        assert stats.total_streak == 20
        assert stats.live_streak == 20

    @pytest.mark.asyncio
    async def test_statistics_for_date_range(self, engine, mood_store):
        moods = {days_ago(i): [4.0] for i in range(7, 14)}
        moods.update({days_ago(i): [8.0] for i in range(7)})
        await seed_moods(mood_store, moods)
        aggregates = await engine.get_mood_trends(days_ago(13), TODAY)

        overall = await engine.calculate_statistics(aggregates)
        last_week = await engine.calculate_statistics_for_date_range(
            aggregates, days_ago(6), TODAY
        )

        assert overall.average_mood == 6.0
        assert overall.trend == Trend.IMPROVING
        assert last_week.average_mood == 8.0
        assert last_week.total_days == 7
        assert last_week.trend == Trend.STABLE
        assert last_week.total_streak == 14

    @pytest.mark.asyncio
    async def test_long_range_is_trimmed(self, mood_store, context_store, caplog):
        settings = AnalyticsSettings(
            max_history_days=30, weather_api_key=None, latitude=None, longitude=None
        )
        engine = MoodAnalyticsEngine(
            mood_store, context_store, settings=settings, clock=lambda: FIXED_NOW
        )

        aggregates = await engine.get_mood_trends(days_ago(99), TODAY)

        assert len(aggregates) == 30
        assert aggregates[0].date == days_ago(29)
        assert "trimmed" in caplog.text

    @pytest.mark.asyncio
    async def test_earliest_mood_date(self, engine, mood_store):
        assert await engine.get_earliest_mood_date() is None

        await seed_moods(mood_store, {days_ago(45): [5.0], days_ago(2): [6.0]})

        assert await engine.get_earliest_mood_date() == days_ago(45)


class TestCorrelationInsights:
    """Test correlation analysis over the stores."""

    @pytest.mark.asyncio
    async def test_sleep_quality_correlation(self, engine, mood_store, context_store):
        for i in range(10):
            good = i % 2 == 0
            await seed_moods(mood_store, {days_ago(i): [8.5 if good else 4.5]})
            await context_store.save_context(
                ContextRecord(date=days_ago(i), sleep_quality=9 if good else 3)
            )

        insights = await engine.generate_correlation_insights()

        assert insights[0].factor == "sleep_quality"
        assert insights[0].value == "good"
        assert insights[0].effect > 0

    @pytest.mark.asyncio
    async def test_no_context_yields_nothing(self, engine, mood_store):
        await seed_moods(mood_store, {days_ago(i): [float(i % 10 + 1)] for i in range(10)})

        assert await engine.generate_correlation_insights() == []


class TestEngineStats:
    @pytest.mark.asyncio
    async def test_get_stats(self, engine):
        await engine.generate_insights()

        stats = engine.get_stats()

        assert stats["today"] == "2026-03-15"
        assert stats["cache_status"] == "valid"
        assert "streak" in stats["detectors"]
        assert stats["cache"]["misses"] == 1
