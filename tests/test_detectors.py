"""
Unit tests for the insight detectors.

Each detector is exercised against hand-built analysis snapshots, so
these tests need no stores or event loop.
"""
import sys
from pathlib import Path

# Add src directory to path
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from mood_analytics.detectors import (
    AnalysisSnapshot,
    CelebrationDetector,
    CorrelationDetector,
    ForecastDetector,
    StreakDetector,
    TimeOfDayDetector,
    TrendDetector,
    WeatherDetector,
    WeekdayPatternDetector,
    linear_slope,
)
from mood_analytics.models import (
    ContextRecord,
    CorrelationInsight,
    DateWindow,
    InsightPriority,
    InsightType,
    WeatherCondition,
)
from mood_analytics.mood_stats import compute_streaks
from mood_analytics.weather import WeatherReading

from conftest import FIXED_NOW, TODAY, days_ago, make_day


def snapshot_for(aggregates, **kwargs) -> AnalysisSnapshot:
    """Snapshot over a 90-day window with streaks computed from aggregates."""
    live, total = compute_streaks(aggregates, TODAY)
    return AnalysisSnapshot(
        today=TODAY,
        now=FIXED_NOW,
        window=DateWindow.ending(TODAY, 90),
        aggregates=aggregates,
        live_streak=live,
        total_streak=total,
        **kwargs,
    )


def daily(ratings_by_offset):
    """Aggregates from {days_ago offset: [ratings]}."""
    return [make_day(days_ago(i), r) for i, r in sorted(ratings_by_offset.items(), reverse=True)]


# ============================================================================
# Snapshot helpers
# ============================================================================


class TestSnapshot:
    """Test snapshot helpers."""

    def test_deterministic_insight_ids(self):
        snapshot = snapshot_for([])
        insight = snapshot.make_insight(
            InsightType.PATTERN, "sleep_quality:good", "t", "d", InsightPriority.LOW
        )

        assert insight.id == f"pattern:sleep_quality:good:{TODAY.isoformat()}"
        assert insight.created_at == FIXED_NOW

    def test_linear_slope(self):
        assert linear_slope([(0, 1.0), (1, 2.0), (2, 3.0)]) == 1.0
        assert linear_slope([(0, 5.0)]) == 0.0


# ============================================================================
# Streak
# ============================================================================


class TestStreakDetector:
    """Test streak milestones, progress and breaks."""

    def test_milestone_celebration(self):
        snapshot = snapshot_for(daily({i: [7.0] for i in range(7)}))

        insights = StreakDetector().detect(snapshot)

        assert len(insights) == 1
        assert insights[0].type == InsightType.CELEBRATION
        assert insights[0].priority == InsightPriority.HIGH
        assert insights[0].data["streak"] == 7

    def test_progress_toward_next_milestone(self):
        snapshot = snapshot_for(daily({i: [7.0] for i in range(9)}))

        insights = StreakDetector().detect(snapshot)

        assert insights[0].type == InsightType.ACHIEVEMENT
        assert insights[0].priority == InsightPriority.MEDIUM
        assert insights[0].data["next_milestone"] == 14
        assert insights[0].data["days_to_go"] == 5

    def test_recently_broken_streak(self):
        """A 4-day streak that ended 3 days ago is a concern."""
        snapshot = snapshot_for(daily({i: [7.0] for i in range(3, 7)}))

        insights = StreakDetector().detect(snapshot)

        assert insights[0].type == InsightType.CONCERN
        assert insights[0].data["previous_streak"] == 4
        assert insights[0].data["gap_days"] == 2

    def test_today_not_logged_yet_is_not_broken(self):
        """Streak through yesterday is still alive."""
        snapshot = snapshot_for(daily({i: [7.0] for i in range(1, 5)}))

        insights = StreakDetector().detect(snapshot)

        assert all(i.type != InsightType.CONCERN for i in insights)

    def test_short_or_old_streaks_are_ignored(self):
        short = snapshot_for(daily({i: [7.0] for i in range(3, 5)}))
        old = snapshot_for(daily({i: [7.0] for i in range(10, 15)}))

        assert StreakDetector().detect(short) == []
        assert StreakDetector().detect(old) == []


# ============================================================================
# Trend
# ============================================================================


class TestTrendDetector:
    """Test week-over-week, low mood and consistency rules."""

    def test_improvement_is_achievement(self):
        ratings = {i: [8.0] for i in range(7)}
        ratings.update({i: [6.0] for i in range(7, 14)})

        insights = TrendDetector().detect(snapshot_for(daily(ratings)))

        trend = [i for i in insights if i.subject == "trend"]
        assert trend[0].type == InsightType.ACHIEVEMENT
        assert trend[0].data["change"] == 2.0

    def test_decline_is_concern_with_projection(self):
        ratings = {i: [5.0] for i in range(7)}
        ratings.update({i: [7.5] for i in range(7, 14)})

        insights = TrendDetector().detect(snapshot_for(daily(ratings)))

        by_subject = {i.subject: i for i in insights}
        assert by_subject["trend"].type == InsightType.CONCERN
        assert by_subject["trend"].priority == InsightPriority.HIGH
        projection = by_subject["trend_projection"]
        assert projection.type == InsightType.PREDICTION
        assert 1.0 <= projection.data["projected_average"] < 5.0

    def test_small_change_or_sparse_weeks_produce_nothing(self):
        small = {i: [6.5] for i in range(7)}
        small.update({i: [6.0] for i in range(7, 14)})
        sparse = {i: [9.0] for i in range(4)}
        sparse.update({i: [3.0] for i in range(7, 14)})

        assert TrendDetector().detect(snapshot_for(daily(small))) == []
        assert [
            i for i in TrendDetector().detect(snapshot_for(daily(sparse)))
            if i.subject == "trend"
        ] == []

    def test_sustained_low_mood_is_critical(self):
        ratings = {i: [3.0, 4.0] for i in range(6)}
        ratings.update({i: [6.0] for i in range(6, 12)})

        insights = TrendDetector().detect(snapshot_for(daily(ratings)))

        low = [i for i in insights if i.subject == "low_mood"]
        assert low[0].priority == InsightPriority.CRITICAL
        assert low[0].data["low_mood_days"] == 6

    def test_consistency_achievement(self):
        ratings = {i: [7.5] for i in range(22)}
        ratings.update({i: [5.0] for i in range(22, 26)})

        insights = TrendDetector().detect(snapshot_for(daily(ratings)))

        consistency = [i for i in insights if i.subject == "consistency"]
        assert consistency[0].type == InsightType.ACHIEVEMENT
        assert consistency[0].data["logged_days"] == 26


# ============================================================================
# Correlation
# ============================================================================


def correlation(value, effect, strength, factor="sleep_quality", category="sleep"):
    return CorrelationInsight(
        title=f"{value} {factor}",
        description="desc",
        category=category,
        strength=strength,
        factor=factor,
        value=value,
        sample_size=5,
        group_mean=6.0 + effect,
        overall_mean=6.0,
    )


class TestCorrelationDetector:
    """Test correlation-based patterns and suggestions."""

    def test_positive_pattern_negative_suggestion(self):
        snapshot = snapshot_for(
            [],
            correlations=[
                correlation("good", 2.0, 0.9),
                correlation("high", -1.5, 0.7, factor="work_stress", category="stress"),
            ],
        )

        insights = CorrelationDetector().detect(snapshot)

        assert insights[0].type == InsightType.PATTERN
        assert insights[0].subject == "sleep_quality:good"
        assert insights[1].type == InsightType.SUGGESTION
        assert "Identify your top 3 work stressors this week" in insights[1].action_steps

    def test_top_n_and_minimum_strength(self):
        correlations = [correlation(str(i), 1.0, 0.9 - i * 0.1) for i in range(6)]
        snapshot = snapshot_for([], correlations=correlations)

        insights = CorrelationDetector(top_n=3, min_strength=0.5).detect(snapshot)

        assert [i.data["value"] for i in insights] == ["0", "1", "2"]
        assert all(i.confidence >= 0.5 for i in insights)


# ============================================================================
# Forecast and weekday patterns
# ============================================================================


class TestForecastDetector:
    """Test tomorrow's mood prediction."""

    def test_prediction_blends_weekday_and_recent(self):
        # Tomorrow is a Monday; Mondays were 9.0, every other day 5.0
        ratings = {}
        for i in range(1, 22):
            ratings[i] = [9.0] if days_ago(i).weekday() == 0 else [5.0]

        insights = ForecastDetector().detect(snapshot_for(daily(ratings)))

        prediction = insights[0]
        assert prediction.type == InsightType.PREDICTION
        assert prediction.subject == "tomorrow"
        assert prediction.data["weekday"] == "Monday"
        assert prediction.data["samples"] == 3
        assert prediction.confidence == 0.6
        assert prediction.data["weekday_average"] == 9.0
        expected = 0.6 * 9.0 + 0.4 * prediction.data["recent_average"]
        assert abs(prediction.data["predicted_mood"] - expected) < 1e-9

    def test_needs_two_weekday_samples(self):
        ratings = {i: [6.0] for i in range(1, 7)}

        assert ForecastDetector().detect(snapshot_for(daily(ratings))) == []


class TestWeekdayPatternDetector:
    """Test best and worst day-of-week detection."""

    def test_power_day(self):
        ratings = {}
        for i in range(14):
            weekday = days_ago(i).weekday()
            ratings[i] = [9.0] if weekday == 0 else [4.0] if weekday == 3 else [6.0]

        insights = WeekdayPatternDetector().detect(snapshot_for(daily(ratings)))

        assert len(insights) == 1
        pattern = insights[0]
        assert pattern.type == InsightType.ACTIONABLE
        assert pattern.priority == InsightPriority.MEDIUM
        assert pattern.title == "Mondays Are Your Power Days"
        assert pattern.data["best_day"] == "Monday"
        assert pattern.data["worst_day"] == "Thursday"
        assert pattern.data["difference"] == 5.0
        assert pattern.confidence == 1.0
        assert pattern.action_steps[1] == "Plan something to look forward to every Thursday"

    def test_needs_five_weekdays_with_two_samples(self):
        ratings = {
            i: [9.0] if days_ago(i).weekday() == 0 else [4.0]
            for i in range(14)
            if days_ago(i).weekday() < 4
        }

        assert WeekdayPatternDetector().detect(snapshot_for(daily(ratings))) == []

    def test_small_difference_is_ignored(self):
        ratings = {i: [7.0] if days_ago(i).weekday() == 0 else [6.0] for i in range(14)}

        assert WeekdayPatternDetector().detect(snapshot_for(daily(ratings))) == []


# ============================================================================
# Celebration, time of day and weather
# ============================================================================


class TestCelebrationDetector:
    """Test perfect day and personal best celebrations."""

    def test_perfect_day(self):
        snapshot = snapshot_for([make_day(TODAY, [8.0, 9.0, 8.5])])

        insights = CelebrationDetector().detect(snapshot)

        assert [i.subject for i in insights] == ["perfect_day"]
        assert insights[0].type == InsightType.CELEBRATION

    def test_two_segments_is_not_perfect(self):
        snapshot = snapshot_for([make_day(TODAY, [9.0, 9.0])])

        assert CelebrationDetector().detect(snapshot) == []

    def test_personal_best_needs_thirty_days(self):
        ratings = {i: [6.0] for i in range(1, 31)}
        ratings[0] = [9.0]

        insights = CelebrationDetector().detect(snapshot_for(daily(ratings)))
        short = CelebrationDetector().detect(
            snapshot_for(daily({0: [9.0], 1: [6.0], 2: [6.0]}))
        )

        assert [i.subject for i in insights] == ["personal_best"]
        assert short == []


class TestTimeOfDayDetector:
    """Test best time-of-day detection."""

    def test_morning_person(self):
        ratings = {i: [8.5, 6.0, 6.5] for i in range(6)}

        insights = TimeOfDayDetector().detect(snapshot_for(daily(ratings)))

        assert insights[0].type == InsightType.ACTIONABLE
        assert insights[0].data["best_segment"] == 0
        assert insights[0].data["worst_segment"] == 1
        assert insights[0].data["difference"] == 2.5

    def test_small_difference_is_ignored(self):
        ratings = {i: [7.0, 6.5, 6.0] for i in range(6)}

        assert TimeOfDayDetector().detect(snapshot_for(daily(ratings))) == []


class TestWeatherDetector:
    """Test weather preparation suggestions."""

    def _rainy_history(self):
        aggregates, context = [], {}
        for i in range(1, 13):
            day = days_ago(i)
            rainy = i % 3 == 0
            aggregates.append(make_day(day, [4.0] if rainy else [7.0]))
            context[day] = ContextRecord(
                date=day,
                weather=WeatherCondition.RAINY if rainy else WeatherCondition.SUNNY,
            )
        return aggregates, context

    def test_rainy_day_suggestion(self):
        aggregates, context = self._rainy_history()
        snapshot = snapshot_for(
            aggregates,
            context_by_date=context,
            weather=WeatherReading(condition=WeatherCondition.RAINY, temperature=12.0),
        )

        insights = WeatherDetector().detect(snapshot)

        assert insights[0].type == InsightType.SUGGESTION
        assert insights[0].subject == "weather:rainy"
        assert insights[0].data["samples"] == 4
        assert "Use a light therapy lamp for 20-30 minutes" in insights[0].action_steps

    def test_no_weather_no_candidates(self):
        aggregates, context = self._rainy_history()
        snapshot = snapshot_for(aggregates, context_by_date=context)

        assert WeatherDetector().detect(snapshot) == []

    def test_good_weather_is_not_flagged(self):
        aggregates, context = self._rainy_history()
        snapshot = snapshot_for(
            aggregates,
            context_by_date=context,
            weather=WeatherReading(condition=WeatherCondition.SUNNY),
        )

        assert WeatherDetector().detect(snapshot) == []
