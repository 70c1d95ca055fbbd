"""
Mood Analytics Data Models.

Records loaded from the mood and context stores, plus the derived
views (day aggregates, statistics, correlations, insights, weekly
summaries) that the analytics engine computes on demand.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

SEGMENT_NAMES = ["Morning", "Midday", "Evening"]
SEGMENT_COUNT = len(SEGMENT_NAMES)

MIN_RATING = 1.0
MAX_RATING = 10.0


class WeatherCondition(str, Enum):
    """Closed set of weather conditions a day can be tagged with."""

    SUNNY = "sunny"
    CLOUDY = "cloudy"
    RAINY = "rainy"
    STORMY = "stormy"
    SNOWY = "snowy"
    FOGGY = "foggy"


class TemperatureUnit(str, Enum):
    CELSIUS = "celsius"
    FAHRENHEIT = "fahrenheit"


class ExerciseLevel(str, Enum):
    NONE = "none"
    LIGHT = "light"
    MODERATE = "moderate"
    INTENSE = "intense"


class SocialActivity(str, Enum):
    NONE = "none"
    FRIENDS = "friends"
    FAMILY = "family"
    WORK = "work"
    PARTY = "party"
    DATE = "date"


# Hobby tags offered by default; users may add their own free-form ones.
DEFAULT_HOBBIES = [
    "reading",
    "gaming",
    "music",
    "art",
    "cooking",
    "gardening",
    "sports",
    "crafts",
    "writing",
    "photography",
]


class Trend(str, Enum):
    """Direction of mood across a date range."""

    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


class InsightType(str, Enum):
    PATTERN = "pattern"
    PREDICTION = "prediction"
    ACHIEVEMENT = "achievement"
    CELEBRATION = "celebration"
    CONCERN = "concern"
    SUGGESTION = "suggestion"
    ACTIONABLE = "actionable"


class InsightPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """Numeric rank used for ordering (critical is highest)."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    InsightPriority.LOW: 0,
    InsightPriority.MEDIUM: 1,
    InsightPriority.HIGH: 2,
    InsightPriority.CRITICAL: 3,
}


@dataclass
class MoodRecord:
    """A single mood rating for one (date, segment) slot."""

    date: date
    segment: int
    rating: float
    note: str = ""
    logged_at: Optional[datetime] = None
    last_modified: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "date": self.date.isoformat(),
            "segment": self.segment,
            "rating": self.rating,
            "note": self.note,
            "logged_at": self.logged_at.isoformat() if self.logged_at else None,
            "last_modified": (
                self.last_modified.isoformat() if self.last_modified else None
            ),
        }


@dataclass
class SegmentEntry:
    """A present segment rating inside a day aggregate."""

    segment: int
    rating: float
    note: str = ""
    logged_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "segment": self.segment,
            "segment_name": SEGMENT_NAMES[self.segment],
            "rating": self.rating,
            "note": self.note,
            "logged_at": self.logged_at.isoformat() if self.logged_at else None,
        }


@dataclass
class DayAggregate:
    """Roll-up of one calendar day's segment entries."""

    date: date
    entries: List[SegmentEntry] = field(default_factory=list)

    @property
    def has_any_mood(self) -> bool:
        return len(self.entries) > 0

    @property
    def day_average(self) -> Optional[float]:
        """Mean of present ratings, or None when the day is empty."""
        if not self.entries:
            return None
        return sum(e.rating for e in self.entries) / len(self.entries)

    def rating_for(self, segment: int) -> Optional[float]:
        """Rating logged for a segment, or None when it was skipped."""
        for entry in self.entries:
            if entry.segment == segment:
                return entry.rating
        return None

    def was_logged_live(self, grace_hours: int = 0) -> bool:
        """
        True when at least one entry was written on the day it describes.

        Args:
            grace_hours: Hours after midnight still counted as the same day
        """
        day_start = datetime(self.date.year, self.date.month, self.date.day)
        day_end = day_start + timedelta(days=1, hours=grace_hours)
        for entry in self.entries:
            if entry.logged_at is None:
                continue
            logged_at = entry.logged_at
            if logged_at.tzinfo is not None:
                logged_at = logged_at.replace(tzinfo=None)
            if day_start <= logged_at < day_end:
                return True
        return False

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "entries": [e.to_dict() for e in self.entries],
            "has_any_mood": self.has_any_mood,
            "day_average": self.day_average,
        }


def _context_number(data: Dict[str, Any], name: str) -> Optional[float]:
    """Read a numeric context field, dropping values that are not finite numbers."""
    raw = data.get(name)
    if raw is None:
        return None
    if not isinstance(raw, bool):
        try:
            value = float(raw)
        except (TypeError, ValueError):
            value = None
        if value is not None and not (math.isnan(value) or math.isinf(value)):
            return value
    logger.warning(f"[CONTEXT] Ignoring malformed {name} {raw!r} for {data.get('date')}")
    return None


@dataclass
class ContextRecord:
    """Contextual factors for a single day (one record per date)."""

    date: date
    weather: Optional[WeatherCondition] = None
    temperature: Optional[float] = None
    temperature_unit: TemperatureUnit = TemperatureUnit.CELSIUS
    weather_description: Optional[str] = None
    auto_weather: bool = False
    sleep_quality: Optional[float] = None
    bedtime: Optional[datetime] = None
    wake_time: Optional[datetime] = None
    exercise_level: Optional[ExerciseLevel] = None
    social_activities: List[SocialActivity] = field(default_factory=list)
    hobbies: List[str] = field(default_factory=list)
    work_stress: Optional[int] = None
    custom_tags: List[str] = field(default_factory=list)
    notes: Optional[str] = None

    @property
    def sleep_hours(self) -> Optional[float]:
        """Hours between bedtime and wake time, wrapping past midnight."""
        if self.bedtime is None or self.wake_time is None:
            return None
        bedtime = self.bedtime.replace(tzinfo=None)
        wake_time = self.wake_time.replace(tzinfo=None)
        delta = wake_time - bedtime
        if delta.total_seconds() < 0:
            delta += timedelta(days=1)
        hours = delta.total_seconds() / 3600
        if hours < 0 or hours >= 24:
            return None
        return hours

    @property
    def temperature_celsius(self) -> Optional[float]:
        if self.temperature is None:
            return None
        if self.temperature_unit == TemperatureUnit.FAHRENHEIT:
            return (self.temperature - 32) * 5 / 9
        return self.temperature

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "date": self.date.isoformat(),
            "weather": self.weather.value if self.weather else None,
            "temperature": self.temperature,
            "temperature_unit": self.temperature_unit.value,
            "weather_description": self.weather_description,
            "auto_weather": self.auto_weather,
            "sleep_quality": self.sleep_quality,
            "bedtime": self.bedtime.isoformat() if self.bedtime else None,
            "wake_time": self.wake_time.isoformat() if self.wake_time else None,
            "exercise_level": (
                self.exercise_level.value if self.exercise_level else None
            ),
            "social_activities": [s.value for s in self.social_activities],
            "hobbies": list(self.hobbies),
            "work_stress": self.work_stress,
            "custom_tags": list(self.custom_tags),
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContextRecord":
        """Build a record from its serialized form."""
        work_stress = _context_number(data, "work_stress")
        if work_stress is not None:
            work_stress = int(round(work_stress))
        return cls(
            date=date.fromisoformat(data["date"][:10]),
            weather=WeatherCondition(data["weather"]) if data.get("weather") else None,
            temperature=_context_number(data, "temperature"),
            temperature_unit=TemperatureUnit(
                data.get("temperature_unit") or TemperatureUnit.CELSIUS.value
            ),
            weather_description=data.get("weather_description"),
            auto_weather=bool(data.get("auto_weather", False)),
            sleep_quality=_context_number(data, "sleep_quality"),
            bedtime=(
                datetime.fromisoformat(data["bedtime"]) if data.get("bedtime") else None
            ),
            wake_time=(
                datetime.fromisoformat(data["wake_time"])
                if data.get("wake_time")
                else None
            ),
            exercise_level=(
                ExerciseLevel(data["exercise_level"])
                if data.get("exercise_level")
                else None
            ),
            social_activities=[
                SocialActivity(s) for s in data.get("social_activities") or []
            ],
            hobbies=[h for h in data.get("hobbies") or [] if isinstance(h, str)],
            work_stress=work_stress,
            custom_tags=[t for t in data.get("custom_tags") or [] if isinstance(t, str)],
            notes=data.get("notes"),
        )


@dataclass
class Statistics:
    """Statistics computed over an aggregated date range."""

    average_mood: float = 0.0
    days_logged: int = 0
    total_days: int = 0
    best_day: float = 0.0
    trend: Trend = Trend.STABLE
    live_streak: int = 0
    total_streak: int = 0
    best_day_date: Optional[date] = None
    worst_day: float = 0.0
    worst_day_date: Optional[date] = None
    segment_averages: Dict[int, float] = field(default_factory=dict)
    best_segment: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "average_mood": self.average_mood,
            "days_logged": self.days_logged,
            "total_days": self.total_days,
            "best_day": self.best_day,
            "best_day_date": (
                self.best_day_date.isoformat() if self.best_day_date else None
            ),
            "worst_day": self.worst_day,
            "worst_day_date": (
                self.worst_day_date.isoformat() if self.worst_day_date else None
            ),
            "trend": self.trend.value,
            "live_streak": self.live_streak,
            "total_streak": self.total_streak,
            "segment_averages": dict(self.segment_averages),
            "best_segment": self.best_segment,
        }


@dataclass
class CorrelationInsight:
    """Association between one contextual factor group and mood."""

    title: str
    description: str
    category: str  # weather, sleep, exercise, social, stress, custom
    strength: float  # 0-1 effect size
    factor: str = ""
    value: str = ""
    sample_size: int = 0
    group_mean: float = 0.0
    overall_mean: float = 0.0
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def effect(self) -> float:
        """Signed difference between the group mean and the overall mean."""
        return self.group_mean - self.overall_mean

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "strength": self.strength,
            "factor": self.factor,
            "value": self.value,
            "sample_size": self.sample_size,
            "group_mean": self.group_mean,
            "overall_mean": self.overall_mean,
            "effect": self.effect,
            "data": dict(self.data),
        }


@dataclass
class SmartInsight:
    """A generated, typed and prioritized statement about the user's data."""

    id: str
    title: str
    description: str
    type: InsightType
    priority: InsightPriority
    created_at: datetime
    subject: str = ""
    confidence: Optional[float] = None
    action_steps: Optional[List[str]] = None
    action_route: Optional[str] = None
    action_text: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)
    is_read: bool = False

    @property
    def dedup_key(self) -> tuple:
        return (self.type, self.subject)

    def mark_as_read(self) -> "SmartInsight":
        """Return a copy flagged as read."""
        return SmartInsight(
            id=self.id,
            title=self.title,
            description=self.description,
            type=self.type,
            priority=self.priority,
            created_at=self.created_at,
            subject=self.subject,
            confidence=self.confidence,
            action_steps=list(self.action_steps) if self.action_steps else None,
            action_route=self.action_route,
            action_text=self.action_text,
            data=dict(self.data),
            is_read=True,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "type": self.type.value,
            "priority": self.priority.value,
            "created_at": self.created_at.isoformat(),
            "subject": self.subject,
            "confidence": self.confidence,
            "action_steps": self.action_steps,
            "action_route": self.action_route,
            "action_text": self.action_text,
            "data": self.data,
            "is_read": self.is_read,
        }


@dataclass
class WeeklySummary:
    """Statistics and classified insights for a fixed 7-day window."""

    week_start: date
    week_end: date
    average_mood: float = 0.0
    days_logged: int = 0
    total_days: int = 7
    best_day: float = 0.0
    worst_day: float = 0.0
    trend: Trend = Trend.STABLE
    live_streak: int = 0
    total_streak: int = 0
    highlights: List[str] = field(default_factory=list)
    concerns: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "week_start": self.week_start.isoformat(),
            "week_end": self.week_end.isoformat(),
            "average_mood": self.average_mood,
            "days_logged": self.days_logged,
            "total_days": self.total_days,
            "best_day": self.best_day,
            "worst_day": self.worst_day,
            "trend": self.trend.value,
            "live_streak": self.live_streak,
            "total_streak": self.total_streak,
            "highlights": list(self.highlights),
            "concerns": list(self.concerns),
            "recommendations": list(self.recommendations),
        }


@dataclass(frozen=True)
class DateWindow:
    """Inclusive calendar-day window."""

    start: date
    end: date

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError(f"Window end {self.end} is before start {self.start}")

    @classmethod
    def ending(cls, end: date, days: int) -> "DateWindow":
        """Window of `days` calendar days ending on `end`."""
        return cls(start=end - timedelta(days=days - 1), end=end)

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end

    def dates(self) -> List[date]:
        return [self.start + timedelta(days=i) for i in range(self.days)]
