"""
Weekly Summary Builder.

Summarizes a fixed Monday-to-Sunday style 7-day window: week-scoped
statistics (streaks still come from full history), a few rule-based
lines, and the insights of a detector run scoped to the week, sorted
into highlights, concerns and recommendations.
"""

import logging
from datetime import date, timedelta
from typing import Awaitable, Callable, Iterable, List, Optional, Tuple

from .config import AnalyticsSettings
from .detectors import AnalysisSnapshot
from .insights import InsightSynthesizer
from .models import DateWindow, InsightType, SmartInsight, Statistics, Trend, WeeklySummary
from .mood_stats import compute_statistics

logger = logging.getLogger(__name__)

HIGHLIGHT_TYPES = {InsightType.ACHIEVEMENT, InsightType.CELEBRATION, InsightType.PATTERN}
CONCERN_TYPES = {InsightType.CONCERN}
RECOMMENDATION_TYPES = {
    InsightType.SUGGESTION,
    InsightType.ACTIONABLE,
    InsightType.PREDICTION,
}

EMPTY_WEEK_HIGHLIGHT = "Start logging to see insights"
EMPTY_WEEK_RECOMMENDATION = "Begin tracking your moods daily"

SnapshotFactory = Callable[[DateWindow, date], Awaitable[AnalysisSnapshot]]


def week_start_for(day: date) -> date:
    """Monday of the week containing `day`."""
    return day - timedelta(days=day.weekday())


def rule_based_lines(stats: Statistics) -> Tuple[List[str], List[str], List[str]]:
    """Fixed highlight/concern/recommendation rules over week statistics."""
    highlights, concerns, recommendations = [], [], []

    if stats.average_mood >= 7.5:
        highlights.append(f"Great week! Your average mood was {stats.average_mood:.1f}")
    if stats.days_logged >= 6:
        highlights.append(
            f"Excellent consistency - logged {stats.days_logged}/{stats.total_days} days"
        )
    if stats.best_day >= 9.0:
        highlights.append(
            f"You had an amazing day with {stats.best_day:.1f} average mood!"
        )

    if stats.trend == Trend.IMPROVING:
        highlights.append("Your mood improved throughout the week")
    elif stats.trend == Trend.DECLINING:
        concerns.append("Your mood declined this week - consider self-care")
        recommendations.append("Try activities that usually boost your mood")

    if stats.days_logged < 5:
        recommendations.append("Try to log moods more consistently")

    return highlights, concerns, recommendations


def classify_insights(
    insights: Iterable[SmartInsight],
) -> Tuple[List[str], List[str], List[str]]:
    """Sort insight titles into (highlights, concerns, recommendations)."""
    highlights, concerns, recommendations = [], [], []
    for insight in insights:
        if insight.type in HIGHLIGHT_TYPES:
            highlights.append(insight.title)
        elif insight.type in CONCERN_TYPES:
            concerns.append(insight.title)
        elif insight.type in RECOMMENDATION_TYPES:
            recommendations.append(insight.title)
    return highlights, concerns, recommendations


def _extend_unique(target: List[str], lines: Iterable[str]) -> None:
    for line in lines:
        if line not in target:
            target.append(line)


class WeeklySummaryBuilder:
    """Builds WeeklySummary objects from week-scoped snapshots."""

    def __init__(
        self,
        snapshot_factory: SnapshotFactory,
        synthesizer: InsightSynthesizer,
        settings: Optional[AnalyticsSettings] = None,
    ):
        """
        Initialize the builder.

        Args:
            snapshot_factory: Coroutine building a snapshot for (window, today)
            synthesizer: Detector runner used for the week's insights
            settings: Analytics settings
        """
        self.snapshot_factory = snapshot_factory
        self.synthesizer = synthesizer
        self.settings = settings or AnalyticsSettings()

    async def build_summary(self, week_start: date, today: date) -> WeeklySummary:
        """
        Summarize the 7 days starting at week_start.

        Args:
            week_start: First day of the week
            today: The real current day (the snapshot never looks past it)

        Returns:
            WeeklySummary for [week_start, week_start + 6]
        """
        week = DateWindow.ending(week_start + timedelta(days=6), 7)
        snapshot_today = min(week.end, today)
        snapshot = await self.snapshot_factory(week, snapshot_today)

        week_aggregates = [a for a in snapshot.aggregates if a.date in week]
        stats = compute_statistics(
            week_aggregates,
            snapshot_today,
            trend_threshold=self.settings.trend_threshold,
            live_grace_hours=self.settings.live_grace_hours,
        )
        stats.live_streak = snapshot.live_streak
        stats.total_streak = snapshot.total_streak

        summary = WeeklySummary(
            week_start=week.start,
            week_end=week.end,
            average_mood=stats.average_mood,
            days_logged=stats.days_logged,
            total_days=week.days,
            best_day=stats.best_day,
            worst_day=stats.worst_day,
            trend=stats.trend,
            live_streak=stats.live_streak,
            total_streak=stats.total_streak,
        )

        if stats.days_logged == 0:
            summary.highlights = [EMPTY_WEEK_HIGHLIGHT]
            summary.recommendations = [EMPTY_WEEK_RECOMMENDATION]
            logger.info(f"[WEEKLY] No data for week of {week.start}")
            return summary

        rule_highlights, rule_concerns, rule_recommendations = rule_based_lines(stats)
        insight_highlights, insight_concerns, insight_recommendations = classify_insights(
            self.synthesizer.synthesize(snapshot)
        )

        _extend_unique(summary.highlights, rule_highlights + insight_highlights)
        _extend_unique(summary.concerns, rule_concerns + insight_concerns)
        _extend_unique(
            summary.recommendations, rule_recommendations + insight_recommendations
        )

        logger.info(
            f"[WEEKLY] Week of {week.start}: {stats.days_logged} days, "
            f"{len(summary.highlights)} highlights, {len(summary.concerns)} concerns, "
            f"{len(summary.recommendations)} recommendations"
        )
        return summary
