"""Pydantic models for mood API requests and responses."""
from .mood import DayAggregate, EarliestDate, MoodEntry, MoodEntryRequest, MoodStatistics, SegmentEntry
from .context import DayContext, DayContextRequest
from .insights import CorrelationInsight, SmartInsight
from .summary import WeeklySummary

__all__ = [
    "DayAggregate",
    "EarliestDate",
    "MoodEntry",
    "MoodEntryRequest",
    "MoodStatistics",
    "SegmentEntry",
    "DayContext",
    "DayContextRequest",
    "CorrelationInsight",
    "SmartInsight",
    "WeeklySummary",
]
