"""
Mood Statistics Engine.

Pure functions over day aggregates: averages, best and worst day, trend
direction, per-segment averages and the two streak variants.

Streaks are always computed over the full history, not the queried range,
walking backward from an explicit `today`:

- total streak: consecutive days with any entry, backfilled ones included
- live streak: consecutive days with an entry written on the day itself

If today has no qualifying entry yet, the walk starts at yesterday since
today is still open. There is no grace day for gaps.
"""

import logging
import statistics
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from .models import SEGMENT_COUNT, DayAggregate, Statistics, Trend

logger = logging.getLogger(__name__)

DEFAULT_TREND_THRESHOLD = 0.8


def compute_trend(
    aggregates: List[DayAggregate],
    threshold: float = DEFAULT_TREND_THRESHOLD,
) -> Trend:
    """
    Compare the later half of a range against the earlier half.

    The earlier half is the first n // 2 days by date, the later half is the
    rest. Only days with data contribute to each half's average.

    Args:
        aggregates: Day aggregates for the range
        threshold: Minimum change in average to count as a direction

    Returns:
        Trend.IMPROVING, Trend.DECLINING or Trend.STABLE
    """
    ordered = sorted(aggregates, key=lambda a: a.date)
    split = len(ordered) // 2
    earlier = [a.day_average for a in ordered[:split] if a.day_average is not None]
    later = [a.day_average for a in ordered[split:] if a.day_average is not None]

    if not earlier or not later:
        return Trend.STABLE

    change = statistics.mean(later) - statistics.mean(earlier)
    if change > threshold:
        return Trend.IMPROVING
    if change < -threshold:
        return Trend.DECLINING
    return Trend.STABLE


def compute_streaks(
    history: Iterable[DayAggregate],
    today: date,
    live_grace_hours: int = 0,
) -> Tuple[int, int]:
    """
    Compute (live_streak, total_streak) walking backward from today.

    Args:
        history: Day aggregates covering at least the streak span
        today: The current calendar day
        live_grace_hours: Hours after midnight that still count as live

    Returns:
        Tuple of (live_streak, total_streak); live never exceeds total
    """
    by_date: Dict[date, DayAggregate] = {a.date: a for a in history}

    def has_data(day: date) -> bool:
        aggregate = by_date.get(day)
        return aggregate is not None and aggregate.has_any_mood

    def is_live(day: date) -> bool:
        # A live day must also count toward the total streak
        return has_data(day) and by_date[day].was_logged_live(live_grace_hours)

    total = _walk_back(today, has_data)
    live = _walk_back(today, is_live)
    return min(live, total), total


def _walk_back(today: date, qualifies) -> int:
    day = today if qualifies(today) else today - timedelta(days=1)
    count = 0
    while qualifies(day):
        count += 1
        day -= timedelta(days=1)
    return count


def segment_averages(aggregates: List[DayAggregate]) -> Dict[int, float]:
    """Average rating per segment across all present entries."""
    ratings: Dict[int, List[float]] = {}
    for aggregate in aggregates:
        for entry in aggregate.entries:
            ratings.setdefault(entry.segment, []).append(entry.rating)
    return {
        segment: statistics.mean(values)
        for segment, values in sorted(ratings.items())
        if 0 <= segment < SEGMENT_COUNT
    }


def compute_statistics(
    aggregates: List[DayAggregate],
    today: date,
    history: Optional[List[DayAggregate]] = None,
    trend_threshold: float = DEFAULT_TREND_THRESHOLD,
    live_grace_hours: int = 0,
) -> Statistics:
    """
    Compute statistics for an aggregated range.

    Args:
        aggregates: Day aggregates for the range (one per calendar day)
        today: Reference day for streaks
        history: Full history for streaks (defaults to `aggregates`)
        trend_threshold: Minimum half-over-half change for a trend
        live_grace_hours: Grace window for live logging

    Returns:
        Statistics; averages are 0.0 sentinels when no day has data
    """
    logged = [a for a in aggregates if a.day_average is not None]
    live_streak, total_streak = compute_streaks(
        history if history is not None else aggregates, today, live_grace_hours
    )

    stats = Statistics(
        days_logged=len(logged),
        total_days=len(aggregates),
        trend=compute_trend(aggregates, trend_threshold),
        live_streak=live_streak,
        total_streak=total_streak,
    )

    if logged:
        best = max(logged, key=lambda a: (a.day_average, a.date))
        worst = min(logged, key=lambda a: (a.day_average, a.date))
        stats.average_mood = statistics.mean(a.day_average for a in logged)
        stats.best_day = best.day_average
        stats.best_day_date = best.date
        stats.worst_day = worst.day_average
        stats.worst_day_date = worst.date
        stats.segment_averages = segment_averages(logged)
        if stats.segment_averages:
            stats.best_segment = max(
                stats.segment_averages, key=lambda s: stats.segment_averages[s]
            )

    logger.debug(
        f"[STATS] {stats.days_logged}/{stats.total_days} days, "
        f"avg={stats.average_mood:.2f}, trend={stats.trend.value}, "
        f"streaks live={live_streak} total={total_streak}"
    )
    return stats


def compute_statistics_for_range(
    aggregates: List[DayAggregate],
    start: date,
    end: date,
    today: date,
    history: Optional[List[DayAggregate]] = None,
    trend_threshold: float = DEFAULT_TREND_THRESHOLD,
    live_grace_hours: int = 0,
) -> Statistics:
    """Filter aggregates to [start, end] and compute statistics over the rest."""
    in_range = [a for a in aggregates if start <= a.date <= end]
    return compute_statistics(
        in_range,
        today,
        history=history if history is not None else aggregates,
        trend_threshold=trend_threshold,
        live_grace_hours=live_grace_hours,
    )
