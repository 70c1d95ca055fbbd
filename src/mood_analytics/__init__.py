"""
Mood Analytics Module.

Turns per-segment mood records and per-day context records into
statistics, streaks, factor correlations, ranked insights and weekly
summaries.
"""

from .config import AnalyticsSettings, get_settings
from .engine import MoodAnalyticsEngine
from .models import (
    ContextRecord,
    CorrelationInsight,
    DateWindow,
    DayAggregate,
    ExerciseLevel,
    InsightPriority,
    InsightType,
    MoodRecord,
    SegmentEntry,
    SmartInsight,
    SocialActivity,
    Statistics,
    TemperatureUnit,
    Trend,
    WeatherCondition,
    WeeklySummary,
)
from .mood_stats import compute_statistics, compute_statistics_for_range
from .stores import (
    ContextStore,
    InMemoryContextStore,
    InMemoryMoodStore,
    MoodStore,
    SQLiteContextStore,
    SQLiteMoodStore,
)
from .weather import OpenWeatherProvider, WeatherProvider, WeatherReading

__all__ = [
    "AnalyticsSettings",
    "get_settings",
    "MoodAnalyticsEngine",
    "ContextRecord",
    "CorrelationInsight",
    "DateWindow",
    "DayAggregate",
    "ExerciseLevel",
    "InsightPriority",
    "InsightType",
    "MoodRecord",
    "SegmentEntry",
    "SmartInsight",
    "SocialActivity",
    "Statistics",
    "TemperatureUnit",
    "Trend",
    "WeatherCondition",
    "WeeklySummary",
    "compute_statistics",
    "compute_statistics_for_range",
    "ContextStore",
    "InMemoryContextStore",
    "InMemoryMoodStore",
    "MoodStore",
    "SQLiteContextStore",
    "SQLiteMoodStore",
    "OpenWeatherProvider",
    "WeatherProvider",
    "WeatherReading",
]
