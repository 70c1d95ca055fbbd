"""Generated insight and correlation models."""
from typing import Optional, Literal

from .base import CamelModel

InsightKind = Literal[
    "pattern",
    "prediction",
    "achievement",
    "celebration",
    "concern",
    "suggestion",
    "actionable",
]
InsightPriority = Literal["low", "medium", "high", "critical"]
CorrelationCategory = Literal["weather", "sleep", "exercise", "social", "stress", "custom"]


class SmartInsight(CamelModel):
    """A ranked insight about the user's mood data."""

    id: str
    title: str
    description: str
    type: InsightKind
    priority: InsightPriority
    created_at: str
    subject: str = ""
    confidence: Optional[float] = None
    action_steps: Optional[list[str]] = None
    action_route: Optional[str] = None
    action_text: Optional[str] = None
    data: Optional[dict] = None
    is_read: bool = False


class CorrelationInsight(CamelModel):
    """Association between a context factor and mood."""

    title: str
    description: str
    category: CorrelationCategory
    strength: float
    factor: str
    value: str
    sample_size: int
    group_mean: float
    overall_mean: float
    effect: float
    data: Optional[dict] = None
