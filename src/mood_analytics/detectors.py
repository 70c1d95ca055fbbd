"""
Insight Detectors.

Each detector is an independent rule set that reads one AnalysisSnapshot
and proposes SmartInsight candidates. The synthesizer composes detectors
by iteration; detectors never load data themselves, so every detector in
a generation run sees exactly the same data.
"""

import logging
import statistics
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Protocol

from . import action_steps
from .models import (
    SEGMENT_NAMES,
    ContextRecord,
    CorrelationInsight,
    DateWindow,
    DayAggregate,
    InsightPriority,
    InsightType,
    SmartInsight,
)
from .weather import WeatherReading

logger = logging.getLogger(__name__)

WEEKDAY_NAMES = [
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
]


@dataclass
class AnalysisSnapshot:
    """All inputs of one generation run, loaded once before detectors run."""

    today: date
    now: datetime
    window: DateWindow
    aggregates: List[DayAggregate]
    live_streak: int = 0
    total_streak: int = 0
    correlations: List[CorrelationInsight] = field(default_factory=list)
    context_by_date: Dict[date, ContextRecord] = field(default_factory=dict)
    weather: Optional[WeatherReading] = None

    def __post_init__(self):
        self._by_date = {a.date: a for a in self.aggregates}

    def day(self, day: date) -> Optional[DayAggregate]:
        return self._by_date.get(day)

    @property
    def logged_days(self) -> List[DayAggregate]:
        """Days with data up to and including today, oldest first."""
        return sorted(
            (a for a in self.aggregates if a.has_any_mood and a.date <= self.today),
            key=lambda a: a.date,
        )

    def logged_between(self, start: date, end: date) -> List[DayAggregate]:
        return [a for a in self.logged_days if start <= a.date <= end]

    def make_insight(
        self,
        insight_type: InsightType,
        subject: str,
        title: str,
        description: str,
        priority: InsightPriority,
        confidence: Optional[float] = None,
        action_steps: Optional[List[str]] = None,
        action_route: Optional[str] = None,
        action_text: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> SmartInsight:
        """Build an insight with a deterministic id for this run's day."""
        return SmartInsight(
            id=f"{insight_type.value}:{subject}:{self.today.isoformat()}",
            title=title,
            description=description,
            type=insight_type,
            priority=priority,
            created_at=self.now,
            subject=subject,
            confidence=confidence,
            action_steps=action_steps,
            action_route=action_route,
            action_text=action_text,
            data=data or {},
        )


class Detector(Protocol):
    """A rule set that turns a snapshot into insight candidates."""

    name: str

    def detect(self, snapshot: AnalysisSnapshot) -> List[SmartInsight]:
        ...


def linear_slope(points: List[tuple]) -> float:
    """Least-squares slope of (x, y) points, 0.0 when undefined."""
    if len(points) < 2:
        return 0.0
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    mean_x = statistics.mean(xs)
    mean_y = statistics.mean(ys)
    denominator = sum((x - mean_x) ** 2 for x in xs)
    if denominator == 0:
        return 0.0
    return sum((x - mean_x) * (y - mean_y) for x, y in zip(xs, ys)) / denominator


def _clamp_rating(value: float) -> float:
    return min(max(value, 1.0), 10.0)


# ============================================================================
# Streaks
# ============================================================================


class StreakDetector:
    """Celebrates streak milestones and flags recently broken streaks."""

    name = "streak"

    MILESTONES = [7, 14, 30, 50, 100, 365]

    def __init__(self, min_broken_streak: int = 3, max_gap_days: int = 7):
        self.min_broken_streak = min_broken_streak
        self.max_gap_days = max_gap_days

    def detect(self, snapshot: AnalysisSnapshot) -> List[SmartInsight]:
        streak = snapshot.total_streak
        if streak in self.MILESTONES:
            return [
                snapshot.make_insight(
                    InsightType.CELEBRATION,
                    "streak",
                    f"{streak}-Day Streak!",
                    f"You've logged your mood {streak} days in a row. "
                    f"That consistency is worth celebrating!",
                    InsightPriority.HIGH,
                    confidence=1.0,
                    action_steps=list(action_steps.CELEBRATION_STEPS),
                    action_text="Celebrate!",
                    data={"streak": streak, "milestone": streak},
                )
            ]

        if streak > 0:
            next_milestone = self.next_milestone(streak)
            if next_milestone is None:
                return []
            days_to_go = next_milestone - streak
            return [
                snapshot.make_insight(
                    InsightType.ACHIEVEMENT,
                    "streak",
                    f"{streak}-Day Streak",
                    f"Just {days_to_go} more days to reach your "
                    f"{next_milestone}-day milestone!",
                    InsightPriority.MEDIUM,
                    confidence=0.9,
                    action_steps=list(action_steps.STREAK_STEPS),
                    action_text="Keep Going!",
                    data={
                        "streak": streak,
                        "next_milestone": next_milestone,
                        "days_to_go": days_to_go,
                    },
                )
            ]

        broken = self._broken_streak(snapshot)
        return [broken] if broken else []

    def next_milestone(self, streak: int) -> Optional[int]:
        for milestone in self.MILESTONES:
            if milestone > streak:
                return milestone
        return None

    def _broken_streak(self, snapshot: AnalysisSnapshot) -> Optional[SmartInsight]:
        # Only reached when neither today nor yesterday has data
        last_logged = None
        for offset in range(2, self.max_gap_days + 2):
            day = snapshot.today - timedelta(days=offset)
            aggregate = snapshot.day(day)
            if aggregate is not None and aggregate.has_any_mood:
                last_logged = day
                break
        if last_logged is None:
            return None

        length = 0
        day = last_logged
        while True:
            aggregate = snapshot.day(day)
            if aggregate is None or not aggregate.has_any_mood:
                break
            length += 1
            day -= timedelta(days=1)

        if length < self.min_broken_streak:
            return None

        gap = (snapshot.today - last_logged).days - 1
        return snapshot.make_insight(
            InsightType.CONCERN,
            "streak",
            "Your streak was interrupted",
            f"You had a {length}-day logging streak that ended {gap} days ago. "
            f"Logging today starts a new one.",
            InsightPriority.MEDIUM,
            confidence=0.8,
            action_steps=list(action_steps.STREAK_STEPS),
            action_text="Log Mood",
            action_route="/log",
            data={"previous_streak": length, "gap_days": gap},
        )


# ============================================================================
# Trends
# ============================================================================


class TrendDetector:
    """
    Week-over-week change, sustained low mood and consistency.

    Configuration:
        min_days_per_week: Logged days needed in each compared week
        min_change: Minimum week-over-week change in average
    """

    name = "trend"

    DEFAULT_THRESHOLDS = {
        "min_days_per_week": 5,
        "min_change": 1.0,
        "low_mood_rating": 4.0,
        "low_mood_days": 5,
        "low_mood_min_logged": 10,
        "consistency_rating": 7.0,
        "consistency_ratio": 0.7,
        "consistency_min_logged": 20,
    }

    def __init__(self, **overrides):
        self.thresholds = {**self.DEFAULT_THRESHOLDS, **overrides}

    def detect(self, snapshot: AnalysisSnapshot) -> List[SmartInsight]:
        insights = []
        insights.extend(self._week_over_week(snapshot))
        low_mood = self._low_mood(snapshot)
        if low_mood:
            insights.append(low_mood)
        consistency = self._consistency(snapshot)
        if consistency:
            insights.append(consistency)
        return insights

    def _week_over_week(self, snapshot: AnalysisSnapshot) -> List[SmartInsight]:
        t = self.thresholds
        today = snapshot.today
        this_week = snapshot.logged_between(today - timedelta(days=6), today)
        last_week = snapshot.logged_between(
            today - timedelta(days=13), today - timedelta(days=7)
        )
        if (
            len(this_week) < t["min_days_per_week"]
            or len(last_week) < t["min_days_per_week"]
        ):
            return []

        this_avg = statistics.mean(a.day_average for a in this_week)
        last_avg = statistics.mean(a.day_average for a in last_week)
        change = this_avg - last_avg
        data = {
            "this_week_average": this_avg,
            "last_week_average": last_avg,
            "change": change,
        }

        if change >= t["min_change"]:
            return [
                snapshot.make_insight(
                    InsightType.ACHIEVEMENT,
                    "trend",
                    "Your mood is improving",
                    f"Your average mood rose {change:.1f} points this week "
                    f"({last_avg:.1f} to {this_avg:.1f}).",
                    InsightPriority.MEDIUM,
                    confidence=min(change / 3.0, 1.0),
                    action_steps=[
                        "Reflect on what changes have helped the most",
                        "Keep doing what's working for you",
                    ],
                    action_route="/trends",
                    action_text="See trends",
                    data=data,
                )
            ]

        if change <= -t["min_change"]:
            decline = -change
            insights = [
                snapshot.make_insight(
                    InsightType.CONCERN,
                    "trend",
                    "Your mood has been lower lately",
                    f"Your mood has declined by {decline:.1f} points compared to "
                    f"last week. This might be a good time to focus on self-care.",
                    InsightPriority.HIGH,
                    confidence=min(decline / 3.0, 1.0),
                    action_steps=list(action_steps.DECLINE_STEPS),
                    action_route="/trends",
                    action_text="View suggestions",
                    data=data,
                )
            ]
            projection = self._projection(snapshot, this_week + last_week, this_avg)
            if projection:
                insights.append(projection)
            return insights

        return []

    def _projection(
        self,
        snapshot: AnalysisSnapshot,
        days: List[DayAggregate],
        this_avg: float,
    ) -> Optional[SmartInsight]:
        points = [((a.date - snapshot.today).days, a.day_average) for a in days]
        slope = linear_slope(points)
        if slope >= 0:
            return None

        projected = _clamp_rating(this_avg + slope * 7)
        return snapshot.make_insight(
            InsightType.PREDICTION,
            "trend_projection",
            "Next week could be tougher",
            f"If the current decline continues, next week's average may be "
            f"around {projected:.1f}.",
            InsightPriority.MEDIUM,
            confidence=min(len(points) / 14, 1.0),
            action_steps=list(action_steps.HARD_DAY_STEPS),
            data={"projected_average": projected, "daily_slope": slope},
        )

    def _low_mood(self, snapshot: AnalysisSnapshot) -> Optional[SmartInsight]:
        t = self.thresholds
        today = snapshot.today
        recent = snapshot.logged_between(today - timedelta(days=13), today)
        if len(recent) < t["low_mood_min_logged"]:
            return None

        low_days = [
            a for a in recent
            if all(e.rating <= t["low_mood_rating"] for e in a.entries)
        ]
        if len(low_days) < t["low_mood_days"]:
            return None

        logger.info(f"[INSIGHTS] Sustained low mood: {len(low_days)} of last 14 days")
        return snapshot.make_insight(
            InsightType.CONCERN,
            "low_mood",
            "Extra Support Reminder",
            f"You've had {len(low_days)} days recently with low mood ratings. "
            f"Remember that reaching out for support is a sign of strength.",
            InsightPriority.CRITICAL,
            confidence=0.9,
            action_steps=list(action_steps.LOW_MOOD_STEPS),
            action_text="Find resources",
            data={"low_mood_days": len(low_days)},
        )

    def _consistency(self, snapshot: AnalysisSnapshot) -> Optional[SmartInsight]:
        t = self.thresholds
        today = snapshot.today
        recent = snapshot.logged_between(today - timedelta(days=29), today)
        if len(recent) < t["consistency_min_logged"]:
            return None

        good_days = [
            a for a in recent
            if any(e.rating >= t["consistency_rating"] for e in a.entries)
        ]
        ratio = len(good_days) / len(recent)
        if ratio < t["consistency_ratio"]:
            return None

        return snapshot.make_insight(
            InsightType.ACHIEVEMENT,
            "consistency",
            "Consistently good days",
            f"{round(ratio * 100)}% of your logged days this month included "
            f"a rating of 7 or higher.",
            InsightPriority.LOW,
            confidence=ratio,
            action_text="Share achievement",
            data={"good_days": len(good_days), "logged_days": len(recent)},
        )


# ============================================================================
# Correlations
# ============================================================================


class CorrelationDetector:
    """Turns the strongest factor correlations into patterns and suggestions."""

    name = "correlation"

    def __init__(self, top_n: int = 3, min_strength: float = 0.5):
        self.top_n = top_n
        self.min_strength = min_strength

    def detect(self, snapshot: AnalysisSnapshot) -> List[SmartInsight]:
        strong = [c for c in snapshot.correlations if c.strength >= self.min_strength]
        return [self._to_insight(snapshot, c) for c in strong[: self.top_n]]

    @staticmethod
    def _to_insight(snapshot: AnalysisSnapshot, corr: CorrelationInsight) -> SmartInsight:
        subject = f"{corr.factor}:{corr.value}"
        data = {
            "factor": corr.factor,
            "value": corr.value,
            "category": corr.category,
            "strength": corr.strength,
            "effect": corr.effect,
            "sample_size": corr.sample_size,
        }
        if corr.effect > 0:
            return snapshot.make_insight(
                InsightType.PATTERN,
                subject,
                corr.title,
                corr.description,
                InsightPriority.MEDIUM,
                confidence=corr.strength,
                action_steps=action_steps.reinforce_steps(corr.factor, corr.value),
                action_route="/correlations",
                action_text="See correlations",
                data=data,
            )
        return snapshot.make_insight(
            InsightType.SUGGESTION,
            subject,
            corr.title,
            corr.description,
            InsightPriority.HIGH if corr.strength >= 0.8 else InsightPriority.MEDIUM,
            confidence=corr.strength,
            action_steps=action_steps.suggestion_steps(corr.factor, corr.value),
            action_route="/correlations",
            action_text="Try This Week",
            data=data,
        )


# ============================================================================
# Forecast
# ============================================================================


class ForecastDetector:
    """Predicts tomorrow's mood from its weekday history and recent momentum."""

    name = "forecast"

    def __init__(self, weekday_weight: float = 0.6, min_weekday_samples: int = 2):
        self.weekday_weight = weekday_weight
        self.min_weekday_samples = min_weekday_samples

    def detect(self, snapshot: AnalysisSnapshot) -> List[SmartInsight]:
        tomorrow = snapshot.today + timedelta(days=1)
        logged = snapshot.logged_days
        same_weekday = [a.day_average for a in logged if a.date.weekday() == tomorrow.weekday()]
        if len(same_weekday) < self.min_weekday_samples:
            return []

        weekday_avg = statistics.mean(same_weekday)
        recent = logged[-7:]
        if recent:
            slope = linear_slope(
                [((a.date - snapshot.today).days, a.day_average) for a in recent]
            )
            recent_avg = statistics.mean(a.day_average for a in recent) + slope * 7 / 2
        else:
            recent_avg = weekday_avg

        w = self.weekday_weight
        predicted = _clamp_rating(w * weekday_avg + (1 - w) * recent_avg)
        samples = len(same_weekday)
        day_name = WEEKDAY_NAMES[tomorrow.weekday()]

        if predicted >= 7.0:
            title = f"{day_name} looks great!"
            description = f"Tomorrow's mood is expected around {predicted:.1f}/10."
            steps = list(action_steps.GOOD_DAY_STEPS)
            priority = InsightPriority.LOW
        elif predicted <= 5.0:
            title = f"{day_name} may be challenging"
            description = (
                f"Tomorrow's mood is expected around {predicted:.1f}/10. "
                f"Let's prepare!"
            )
            steps = list(action_steps.HARD_DAY_STEPS)
            priority = InsightPriority.MEDIUM
        else:
            title = f"{day_name} forecast"
            description = f"{day_name}s typically rate {weekday_avg:.1f}/10 for you."
            steps = list(action_steps.NEUTRAL_DAY_STEPS)
            priority = InsightPriority.LOW

        return [
            snapshot.make_insight(
                InsightType.PREDICTION,
                "tomorrow",
                title,
                description,
                priority,
                confidence=min(samples / 5, 1.0),
                action_steps=steps,
                action_text="Optimize Today",
                data={
                    "predicted_mood": predicted,
                    "weekday": day_name,
                    "weekday_average": weekday_avg,
                    "recent_average": recent_avg,
                    "samples": samples,
                },
            )
        ]


# ============================================================================
# Day-of-week patterns
# ============================================================================


class WeekdayPatternDetector:
    """Compares average mood across days of the week."""

    name = "weekday_pattern"

    def __init__(
        self,
        min_difference: float = 1.2,
        min_samples: int = 2,
        min_weekdays: int = 5,
    ):
        self.min_difference = min_difference
        self.min_samples = min_samples
        self.min_weekdays = min_weekdays

    def detect(self, snapshot: AnalysisSnapshot) -> List[SmartInsight]:
        by_weekday: Dict[int, List[float]] = {}
        for aggregate in snapshot.logged_days:
            by_weekday.setdefault(aggregate.date.weekday(), []).append(
                aggregate.day_average
            )

        averages = {
            weekday: statistics.mean(values)
            for weekday, values in by_weekday.items()
            if len(values) >= self.min_samples
        }
        if len(averages) < self.min_weekdays:
            return []

        best = max(averages, key=lambda d: averages[d])
        worst = min(averages, key=lambda d: averages[d])
        difference = averages[best] - averages[worst]
        if difference < self.min_difference:
            return []

        best_name = WEEKDAY_NAMES[best]
        worst_name = WEEKDAY_NAMES[worst]
        return [
            snapshot.make_insight(
                InsightType.ACTIONABLE,
                "weekday_pattern",
                f"{best_name}s Are Your Power Days",
                f"Your mood averages {averages[best]:.1f} on {best_name}s vs "
                f"{averages[worst]:.1f} on {worst_name}s. Let's optimize your week!",
                InsightPriority.MEDIUM,
                confidence=min(difference / 2.0, 1.0),
                action_steps=action_steps.weekday_steps(best_name, worst_name),
                action_text="Optimize Week",
                data={
                    "best_day": best_name,
                    "worst_day": worst_name,
                    "difference": difference,
                    "best_average": averages[best],
                    "worst_average": averages[worst],
                },
            )
        ]


# ============================================================================
# Celebrations
# ============================================================================


class CelebrationDetector:
    """Perfect days and personal bests."""

    name = "celebration"

    def __init__(self, perfect_rating: float = 8.0, personal_best_min_days: int = 30):
        self.perfect_rating = perfect_rating
        self.personal_best_min_days = personal_best_min_days

    def detect(self, snapshot: AnalysisSnapshot) -> List[SmartInsight]:
        today = snapshot.day(snapshot.today)
        if today is None or not today.has_any_mood:
            return []

        insights = []
        ratings = [e.rating for e in today.entries]
        if len(ratings) == len(SEGMENT_NAMES) and all(
            r >= self.perfect_rating for r in ratings
        ):
            insights.append(
                snapshot.make_insight(
                    InsightType.CELEBRATION,
                    "perfect_day",
                    "Perfect Day Achievement!",
                    f"All your mood ratings today are 8+ "
                    f"({', '.join(f'{r:.1f}' for r in ratings)})! "
                    f"This is worth celebrating!",
                    InsightPriority.HIGH,
                    confidence=1.0,
                    action_steps=list(action_steps.CELEBRATION_STEPS),
                    action_text="Celebrate!",
                    data={"ratings": ratings},
                )
            )

        logged = snapshot.logged_days
        if len(logged) >= self.personal_best_min_days:
            previous_best = max(
                (a.day_average for a in logged if a.date != snapshot.today),
                default=None,
            )
            if previous_best is not None and today.day_average >= previous_best:
                insights.append(
                    snapshot.make_insight(
                        InsightType.CELEBRATION,
                        "personal_best",
                        "New Personal Best!",
                        f"Today's average of {today.day_average:.1f} is your best "
                        f"day in the last {snapshot.window.days} days.",
                        InsightPriority.HIGH,
                        confidence=1.0,
                        action_steps=list(action_steps.CELEBRATION_STEPS),
                        action_text="Celebrate!",
                        data={
                            "day_average": today.day_average,
                            "previous_best": previous_best,
                        },
                    )
                )
        return insights


# ============================================================================
# Time of day
# ============================================================================


class TimeOfDayDetector:
    """Finds the segment of the day where mood is consistently best."""

    name = "time_of_day"

    def __init__(self, min_difference: float = 1.5, min_samples: int = 3):
        self.min_difference = min_difference
        self.min_samples = min_samples

    def detect(self, snapshot: AnalysisSnapshot) -> List[SmartInsight]:
        ratings: Dict[int, List[float]] = {}
        for aggregate in snapshot.logged_days:
            for entry in aggregate.entries:
                ratings.setdefault(entry.segment, []).append(entry.rating)

        averages = {
            segment: statistics.mean(values)
            for segment, values in ratings.items()
            if len(values) >= self.min_samples
        }
        if len(averages) < 2:
            return []

        best = max(averages, key=lambda s: averages[s])
        worst = min(averages, key=lambda s: averages[s])
        difference = averages[best] - averages[worst]
        if difference < self.min_difference:
            return []

        best_name = SEGMENT_NAMES[best].lower()
        worst_name = SEGMENT_NAMES[worst].lower()
        return [
            snapshot.make_insight(
                InsightType.ACTIONABLE,
                "time_of_day",
                f"Optimize Your {SEGMENT_NAMES[best]} Power",
                f"You consistently feel {difference:.1f} points better in the "
                f"{best_name} ({averages[best]:.1f}/10) vs {worst_name} "
                f"({averages[worst]:.1f}/10).",
                InsightPriority.HIGH,
                confidence=min(difference / 3.0, 1.0),
                action_steps=list(action_steps.TIME_OF_DAY_STEPS[best]),
                action_route="/correlations",
                action_text="Optimize Schedule",
                data={
                    "best_segment": best,
                    "worst_segment": worst,
                    "difference": difference,
                    "best_average": averages[best],
                    "worst_average": averages[worst],
                },
            )
        ]


# ============================================================================
# Weather
# ============================================================================


class WeatherDetector:
    """Suggests preparation when today's weather historically lowers mood."""

    name = "weather"

    def __init__(self, min_impact: float = 1.0, min_samples: int = 3):
        self.min_impact = min_impact
        self.min_samples = min_samples

    def detect(self, snapshot: AnalysisSnapshot) -> List[SmartInsight]:
        if snapshot.weather is None:
            return []

        condition = snapshot.weather.condition
        logged = snapshot.logged_days
        if not logged:
            return []

        condition_moods = []
        for aggregate in logged:
            context = snapshot.context_by_date.get(aggregate.date)
            if context is not None and context.weather == condition:
                condition_moods.append(aggregate.day_average)
        if len(condition_moods) < self.min_samples:
            return []

        overall = statistics.mean(a.day_average for a in logged)
        condition_avg = statistics.mean(condition_moods)
        impact = overall - condition_avg
        if impact < self.min_impact:
            return []

        return [
            snapshot.make_insight(
                InsightType.SUGGESTION,
                f"weather:{condition.value}",
                f"{condition.value.capitalize()} day ahead",
                f"Your mood averages {condition_avg:.1f} on {condition.value} days, "
                f"{impact:.1f} points below your usual {overall:.1f}. "
                f"A little preparation can help.",
                InsightPriority.HIGH,
                confidence=min(len(condition_moods) / 10, 1.0),
                action_steps=action_steps.weather_steps(condition),
                action_text="Weather Prep Kit",
                data={
                    "condition": condition.value,
                    "condition_average": condition_avg,
                    "overall_average": overall,
                    "impact": impact,
                    "samples": len(condition_moods),
                },
            )
        ]
