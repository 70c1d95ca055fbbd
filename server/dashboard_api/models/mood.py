"""Mood entry, day aggregate and statistics models."""
from pydantic import Field
from typing import Optional, Literal

from .base import CamelModel

TrendDirection = Literal["improving", "declining", "stable"]


class SegmentEntry(CamelModel):
    """One segment rating inside a day."""

    segment: int = Field(ge=0, le=2)
    segment_name: str
    rating: float
    note: str = ""
    logged_at: Optional[str] = None


class DayAggregate(CamelModel):
    """All segment ratings of one calendar day."""

    date: str
    entries: list[SegmentEntry]
    has_any_mood: bool
    day_average: Optional[float] = None
    was_logged_live: bool = False


class MoodEntryRequest(CamelModel):
    """Body for saving a mood rating."""

    rating: float
    note: str = ""


class MoodEntry(CamelModel):
    """A stored mood rating."""

    date: str
    segment: int
    rating: float
    note: str = ""
    logged_at: Optional[str] = None
    last_modified: Optional[str] = None


class MoodStatistics(CamelModel):
    """Statistics over a date range."""

    average_mood: float
    days_logged: int
    total_days: int
    best_day: float
    best_day_date: Optional[str] = None
    worst_day: float
    worst_day_date: Optional[str] = None
    trend: TrendDirection
    live_streak: int
    total_streak: int
    segment_averages: dict[int, float] = {}
    best_segment: Optional[int] = None


class EarliestDate(CamelModel):
    """Date of the first logged mood."""

    earliest_date: Optional[str] = None
