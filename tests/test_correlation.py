"""
Unit tests for the correlation analyzer.

Verifies factor grouping, effect-size strength in [0, 1], thresholds
and ranking.
"""
import sys
from datetime import datetime, time
from pathlib import Path

# Add src directory to path
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from mood_analytics.correlation import (
    analyze_correlations,
    pearson,
    sleep_duration_bucket,
    sleep_quality_bucket,
    stress_bucket,
    temperature_band,
)
from mood_analytics.models import (
    ContextRecord,
    DateWindow,
    SocialActivity,
    TemperatureUnit,
    WeatherCondition,
)

from conftest import TODAY, days_ago

WINDOW = DateWindow.ending(TODAY, 30)


def sleep_scenario():
    """5 good-sleep days at 8.5 and 5 poor-sleep days at 4.5."""
    records, moods = [], {}
    for i in range(10):
        day = days_ago(i)
        good = i % 2 == 0
        records.append(ContextRecord(date=day, sleep_quality=9 if good else 3))
        moods[day] = 8.5 if good else 4.5
    return records, moods


class TestBuckets:
    """Test factor bucketing boundaries."""

    def test_sleep_quality(self):
        assert sleep_quality_bucket(4) == "poor"
        assert sleep_quality_bucket(5) == "fair"
        assert sleep_quality_bucket(7) == "fair"
        assert sleep_quality_bucket(8) == "good"

    def test_work_stress(self):
        assert stress_bucket(3) == "low"
        assert stress_bucket(4) == "moderate"
        assert stress_bucket(6) == "moderate"
        assert stress_bucket(7) == "high"

    def test_temperature_and_duration(self):
        assert temperature_band(9.9) == "cold"
        assert temperature_band(10) == "mild"
        assert temperature_band(20) == "mild"
        assert temperature_band(20.5) == "warm"
        assert sleep_duration_bucket(5.5) == "short"
        assert sleep_duration_bucket(7) == "adequate"
        assert sleep_duration_bucket(9) == "long"


class TestAnalyzeCorrelations:
    """Test the correlation analysis."""

    def test_scenario_c_sleep_correlation(self):
        """Good vs poor sleep splits mood: strong positive sleep insight."""
        records, moods = sleep_scenario()

        insights = analyze_correlations(records, moods, WINDOW)

        top = insights[0]
        assert top.category == "sleep"
        assert top.factor == "sleep_quality"
        assert top.value == "good"
        assert top.strength >= 0.9
        assert top.effect > 0
        assert "good sleep quality" in top.description
        assert "higher" in top.description
        assert top.data["pearson_r"] > 0.9

        poor = [i for i in insights if i.value == "poor"][0]
        assert poor.effect < 0
        assert "lower" in poor.description

    def test_strength_bounds_and_ranking(self):
        """Strength stays in [0, 1] and results are sorted by it."""
        records, moods = [], {}
        conditions = [WeatherCondition.SUNNY, WeatherCondition.RAINY, WeatherCondition.CLOUDY]
        for i in range(18):
            day = days_ago(i)
            condition = conditions[i % 3]
            records.append(
                ContextRecord(date=day, weather=condition, work_stress=2 + (i % 7))
            )
            moods[day] = {"sunny": 9.0, "rainy": 3.0, "cloudy": 6.0}[condition.value] + (i % 2) * 0.5

        insights = analyze_correlations(records, moods, WINDOW, min_strength=0.0)

        assert insights
        for insight in insights:
            assert 0.0 <= insight.strength <= 1.0
        strengths = [i.strength for i in insights]
        assert strengths == sorted(strengths, reverse=True)

    def test_ties_break_by_sample_size(self):
        """Equal strength: larger groups rank first."""
        records, moods = [], {}
        for i in range(12):
            day = days_ago(i)
            tags = ["walk"] if i < 6 else []
            hobbies = ["reading"] if i < 4 else []
            records.append(ContextRecord(date=day, custom_tags=tags, hobbies=hobbies))
            moods[day] = 10.0 if i < 6 else 1.0

        insights = analyze_correlations(records, moods, WINDOW)

        assert insights[0].strength == insights[1].strength == 1.0
        assert insights[0].value == "walk"
        assert insights[0].sample_size == 6
        assert insights[1].value == "reading"

    def test_zero_variance_yields_nothing(self):
        records = [ContextRecord(date=days_ago(i), sleep_quality=9) for i in range(6)]
        moods = {days_ago(i): 7.0 for i in range(6)}

        assert analyze_correlations(records, moods, WINDOW) == []

    def test_small_groups_are_skipped(self):
        """Groups below the minimum sample size produce no insight."""
        records, moods = sleep_scenario()

        assert analyze_correlations(records, moods, WINDOW, min_samples=6) == []

    def test_weak_effects_are_dropped(self):
        records, moods = sleep_scenario()

        assert analyze_correlations(records, moods, WINDOW, min_strength=1.01) == []

    def test_days_need_context_and_mood_inside_window(self):
        """Days without mood, or outside the window, are ignored."""
        records, moods = sleep_scenario()
        records.append(ContextRecord(date=days_ago(40), sleep_quality=9))
        moods[days_ago(40)] = 1.0
        records.append(ContextRecord(date=days_ago(11), sleep_quality=9))

        insights = analyze_correlations(records, moods, WINDOW)

        good = [i for i in insights if i.value == "good"][0]
        assert good.sample_size == 5

    def test_presence_factor_reports_only_presence_group(self):
        """Social tags are compared against days without them."""
        records, moods = [], {}
        for i in range(8):
            day = days_ago(i)
            social = [SocialActivity.FRIENDS] if i < 4 else [SocialActivity.NONE]
            records.append(ContextRecord(date=day, social_activities=social))
            moods[day] = 8.0 if i < 4 else 5.0

        insights = analyze_correlations(records, moods, WINDOW)

        assert [(i.factor, i.value) for i in insights] == [("social", "friends")]
        assert insights[0].category == "social"
        assert "time with friends" in insights[0].description

    def test_fahrenheit_is_converted(self):
        """86F counts as warm, 41F as cold."""
        records, moods = [], {}
        for i in range(6):
            day = days_ago(i)
            warm = i < 3
            records.append(
                ContextRecord(
                    date=day,
                    temperature=86 if warm else 41,
                    temperature_unit=TemperatureUnit.FAHRENHEIT,
                )
            )
            moods[day] = 8.0 if warm else 4.0

        insights = analyze_correlations(records, moods, WINDOW)

        values = {i.value for i in insights if i.factor == "temperature"}
        assert values == {"warm", "cold"}

    def test_sleep_duration_from_bedtime(self):
        """Bedtime before midnight and wake time after it wraps correctly."""
        record = ContextRecord(
            date=TODAY,
            bedtime=datetime.combine(days_ago(1), time(23, 0)),
            wake_time=datetime.combine(TODAY, time(6, 30)),
        )
        assert record.sleep_hours == 7.5

        record = ContextRecord(
            date=TODAY,
            bedtime=datetime.combine(TODAY, time(23, 0)),
            wake_time=datetime.combine(TODAY, time(6, 30)),
        )
        assert record.sleep_hours == 7.5


class TestPearson:
    """Test the correlation coefficient helper."""

    def test_perfect_correlation(self):
        assert pearson([1, 2, 3], [2, 4, 6]) == 1.0
        assert pearson([1, 2, 3], [6, 4, 2]) == -1.0

    def test_undefined(self):
        assert pearson([1], [1]) is None
        assert pearson([2, 2, 2], [1, 2, 3]) is None
