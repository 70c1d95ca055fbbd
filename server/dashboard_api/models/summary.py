"""Weekly mood summary model."""
from .base import CamelModel
from .mood import TrendDirection


class WeeklySummary(CamelModel):
    """Statistics and classified insights for one week."""

    week_start: str
    week_end: str
    average_mood: float
    days_logged: int
    total_days: int
    best_day: float
    worst_day: float
    trend: TrendDirection
    live_streak: int
    total_streak: int
    highlights: list[str]
    concerns: list[str]
    recommendations: list[str]
