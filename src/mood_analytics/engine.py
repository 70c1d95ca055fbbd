"""
Mood Analytics Engine.

Public entry points for statistics, correlations, insights and weekly
summaries, plus the write boundary for mood and context records. "Now"
is an injected clock so every result is reproducible for a given day.

Writes advance the insight cache's data version and, when an event loop
is running, start a background regeneration of the current window.
"""

import asyncio
import logging
import math
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Optional, Set

from .aggregator import MoodAggregator, mood_by_date, parse_rating, parse_timestamp
from .config import AnalyticsSettings, get_settings
from .correlation import analyze_correlations
from .detectors import AnalysisSnapshot, Detector
from .insight_cache import CacheStatus, InsightCache
from .insights import InsightSynthesizer, default_detectors
from .models import (
    MAX_RATING,
    MIN_RATING,
    SEGMENT_COUNT,
    ContextRecord,
    CorrelationInsight,
    DateWindow,
    DayAggregate,
    MoodRecord,
    SmartInsight,
    Statistics,
    WeeklySummary,
)
from .mood_stats import compute_statistics, compute_statistics_for_range, compute_streaks
from .stores import ContextStore, MoodStore
from .weather import WeatherProvider, WeatherReading
from .weekly_summary import WeeklySummaryBuilder, week_start_for

logger = logging.getLogger(__name__)


class MoodAnalyticsEngine:
    """
    Mood analytics over a mood store and a context store.

    Configuration:
        settings: AnalyticsSettings (windows, thresholds, weather)
        clock: Callable returning the current local datetime
        background_refresh: Regenerate insights in the background after writes
    """

    def __init__(
        self,
        mood_store: MoodStore,
        context_store: ContextStore,
        weather_provider: Optional[WeatherProvider] = None,
        settings: Optional[AnalyticsSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
        detectors: Optional[List[Detector]] = None,
        background_refresh: bool = True,
    ):
        """
        Initialize the engine.

        Args:
            mood_store: Source of per-segment mood records
            context_store: Source of per-day context records
            weather_provider: Optional current-weather source
            settings: Analytics settings (defaults to environment)
            clock: Current-time source (defaults to datetime.now)
            detectors: Detector set (defaults to the standard set)
            background_refresh: Start a regeneration after each write
        """
        self.mood_store = mood_store
        self.context_store = context_store
        self.weather_provider = weather_provider
        self.settings = settings or get_settings()
        self.clock = clock or datetime.now
        self.background_refresh = background_refresh

        self.aggregator = MoodAggregator(mood_store)
        self.synthesizer = InsightSynthesizer(
            detectors if detectors is not None else default_detectors(self.settings),
            max_insights=self.settings.max_insights,
        )
        self.cache = InsightCache()
        self.weekly_builder = WeeklySummaryBuilder(
            self._build_snapshot, self.synthesizer, self.settings
        )
        self._background: Set[asyncio.Task] = set()

        logger.info(
            f"[ENGINE] Initialized: window={self.settings.insight_window_days}d, "
            f"max_insights={self.settings.max_insights}, "
            f"weather={'on' if weather_provider else 'off'}"
        )

    def today(self) -> date:
        return self.clock().date()

    # ========================================================================
    # Statistics
    # ========================================================================

    async def get_mood_trends(self, start: date, end: date) -> List[DayAggregate]:
        """
        Day aggregates for the inclusive range.

        Ranges longer than max_history_days are trimmed to their most recent
        max_history_days days.
        """
        max_days = self.settings.max_history_days
        if end >= start and (end - start).days + 1 > max_days:
            trimmed = end - timedelta(days=max_days - 1)
            logger.warning(
                f"[ENGINE] Range {start}..{end} exceeds {max_days} days, "
                f"trimmed to start at {trimmed}"
            )
            start = trimmed
        return await self.aggregator.aggregate(start, end)

    async def calculate_statistics(self, aggregates: List[DayAggregate]) -> Statistics:
        """Statistics for aggregates; streaks use the full history."""
        today = self.today()
        history = await self._streak_history(today, aggregates)
        return compute_statistics(
            aggregates,
            today,
            history=history,
            trend_threshold=self.settings.trend_threshold,
            live_grace_hours=self.settings.live_grace_hours,
        )

    async def calculate_statistics_for_date_range(
        self, aggregates: List[DayAggregate], start: date, end: date
    ) -> Statistics:
        """Statistics for the aggregates falling inside [start, end]."""
        today = self.today()
        history = await self._streak_history(today, aggregates)
        return compute_statistics_for_range(
            aggregates,
            start,
            end,
            today,
            history=history,
            trend_threshold=self.settings.trend_threshold,
            live_grace_hours=self.settings.live_grace_hours,
        )

    async def get_earliest_mood_date(self) -> Optional[date]:
        return await self.mood_store.earliest_date()

    # ========================================================================
    # Correlations, insights and summaries
    # ========================================================================

    async def generate_correlation_insights(
        self, window: Optional[DateWindow] = None
    ) -> List[CorrelationInsight]:
        """
        Correlate context factors with mood over a window.

        Args:
            window: Days to analyze (defaults to the correlation window ending today)
        """
        window = window or DateWindow.ending(
            self.today(), self.settings.correlation_window_days
        )
        aggregates = await self.aggregator.aggregate(window.start, window.end)
        context = await self.context_store.load_context_range(window.start, window.end)
        return self._correlate(context, aggregates, window)

    async def generate_insights(self, force_refresh: bool = False) -> List[SmartInsight]:
        """
        Ranked insights for the rolling window ending today.

        Results are cached per window until the next write; concurrent calls
        share one computation.

        Args:
            force_refresh: Recompute even when a valid entry is cached

        Returns:
            At most max_insights insights (empty when nothing can be said)
        """
        today = self.today()
        window = DateWindow.ending(today, self.settings.insight_window_days)
        key = (window.start, window.end)

        async def compute() -> List[SmartInsight]:
            snapshot = await self._build_snapshot(window, today)
            return self.synthesizer.synthesize(snapshot)

        try:
            return await self.cache.get_or_compute(key, compute, force_refresh)
        except Exception as e:
            logger.error(f"[ENGINE] Insight generation failed: {e}", exc_info=True)
            return []

    async def generate_weekly_summary(
        self, week_start: Optional[date] = None
    ) -> WeeklySummary:
        """
        Summary for the 7 days starting at week_start.

        Args:
            week_start: First day of the week (defaults to this week's Monday)
        """
        today = self.today()
        week_start = week_start or week_start_for(today)
        try:
            return await self.weekly_builder.build_summary(week_start, today)
        except Exception as e:
            logger.error(
                f"[ENGINE] Weekly summary for {week_start} failed: {e}", exc_info=True
            )
            return WeeklySummary(
                week_start=week_start, week_end=week_start + timedelta(days=6)
            )

    def cache_status(self) -> CacheStatus:
        window = DateWindow.ending(self.today(), self.settings.insight_window_days)
        return self.cache.status((window.start, window.end))

    # ========================================================================
    # Write boundary
    # ========================================================================

    async def save_mood(
        self, day: date, segment: int, rating: float, note: str = ""
    ) -> bool:
        """
        Save a mood rating for (day, segment).

        Raises:
            ValueError: If segment is not 0-2 or rating is outside [1, 10]
        """
        if isinstance(segment, bool) or segment not in range(SEGMENT_COUNT):
            raise ValueError(f"Segment must be 0-{SEGMENT_COUNT - 1}, got {segment!r}")
        try:
            value = float(rating)
        except (TypeError, ValueError):
            raise ValueError(f"Rating must be a number, got {rating!r}")
        if math.isnan(value) or not MIN_RATING <= value <= MAX_RATING:
            raise ValueError(f"Rating must be between {MIN_RATING} and {MAX_RATING}, got {rating!r}")

        saved = await self.mood_store.save_mood(
            day, segment, round(value, 1), note or "", logged_at=self.clock()
        )
        if saved:
            logger.info(f"[ENGINE] Mood saved for {day} segment {segment}: {value:.1f}")
            self._on_write()
        return saved

    async def load_mood(self, day: date, segment: int) -> Optional[MoodRecord]:
        """Load one mood record, sanitized like aggregated entries."""
        raw = await self.mood_store.load_mood(day, segment)
        if raw is None:
            return None
        rating = parse_rating(raw.get("rating"))
        if rating is None:
            logger.warning(f"[ENGINE] Malformed rating for {day} segment {segment}")
            return None
        return MoodRecord(
            date=day,
            segment=segment,
            rating=rating,
            note=raw.get("note") or "",
            logged_at=parse_timestamp(raw.get("logged_at")),
            last_modified=parse_timestamp(raw.get("last_modified")),
        )

    async def delete_mood(self, day: date, segment: int) -> bool:
        deleted = await self.mood_store.delete_mood(day, segment)
        if deleted:
            self._on_write()
        return deleted

    async def save_context(self, record: ContextRecord) -> bool:
        """
        Save (upsert) the context record for its date.

        Raises:
            ValueError: If sleep quality or work stress is outside [1, 10]
        """
        for name in ("sleep_quality", "work_stress"):
            value = getattr(record, name)
            if value is not None and not MIN_RATING <= value <= MAX_RATING:
                raise ValueError(f"{name} must be between 1 and 10, got {value!r}")

        saved = await self.context_store.save_context(record)
        if saved:
            self._on_write()
        return saved

    async def delete_context(self, day: date) -> bool:
        deleted = await self.context_store.delete_context(day)
        if deleted:
            self._on_write()
        return deleted

    async def load_context(self, day: date) -> Optional[ContextRecord]:
        return await self.context_store.load_context(day)

    async def wait_for_background(self) -> None:
        """Wait until all background regenerations have finished."""
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    def get_stats(self) -> dict:
        """Get engine and cache statistics."""
        return {
            "today": self.today().isoformat(),
            "cache_status": self.cache_status().value,
            "cache": self.cache.get_stats(),
            "background_tasks": len(self._background),
            "detectors": [
                getattr(d, "name", type(d).__name__) for d in self.synthesizer.detectors
            ],
        }

    # ========================================================================
    # Internals
    # ========================================================================

    def _on_write(self) -> None:
        self.cache.invalidate()
        if not self.background_refresh:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        task = loop.create_task(self.generate_insights())
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        logger.debug("[ENGINE] Scheduled background insight refresh")

    async def _streak_history(
        self, today: date, known: List[DayAggregate]
    ) -> List[DayAggregate]:
        """Walk back from today until the first gap, reusing known days."""
        by_date = {a.date: a for a in known}
        history = []
        day = today
        oldest = today - timedelta(days=self.settings.max_history_days)
        while day > oldest:
            aggregate = by_date.get(day)
            if aggregate is None:
                aggregate = await self.aggregator.aggregate_day(day)
            history.append(aggregate)
            if not aggregate.has_any_mood and day != today:
                break
            day -= timedelta(days=1)
        return history

    async def _build_snapshot(self, window: DateWindow, today: date) -> AnalysisSnapshot:
        aggregates = await self.aggregator.aggregate(window.start, window.end)
        history = await self._streak_history(today, aggregates)
        live_streak, total_streak = compute_streaks(
            history, today, self.settings.live_grace_hours
        )

        context = await self.context_store.load_context_range(window.start, window.end)
        correlations = self._correlate(
            context, [a for a in aggregates if a.date <= today], window
        )

        weather = None
        if today == self.today():
            weather = await self._current_weather()

        return AnalysisSnapshot(
            today=today,
            now=self.clock(),
            window=window,
            aggregates=aggregates,
            live_streak=live_streak,
            total_streak=total_streak,
            correlations=correlations,
            context_by_date=context,
            weather=weather,
        )

    def _correlate(
        self,
        context: Dict[date, ContextRecord],
        aggregates: List[DayAggregate],
        window: DateWindow,
    ) -> List[CorrelationInsight]:
        """Run correlation analysis; a failure yields no correlations."""
        try:
            return analyze_correlations(
                context.values(),
                mood_by_date(aggregates),
                window,
                min_samples=self.settings.correlation_min_samples,
                min_strength=self.settings.correlation_min_strength,
            )
        except Exception as e:
            logger.error(f"[ENGINE] Correlation analysis failed: {e}", exc_info=True)
            return []

    async def _current_weather(self) -> Optional[WeatherReading]:
        if self.weather_provider is None:
            return None
        try:
            return await self.weather_provider.fetch_weather()
        except Exception as e:
            logger.error(f"[ENGINE] Weather provider failed: {e}")
            return None
