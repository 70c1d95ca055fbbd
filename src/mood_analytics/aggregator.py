"""
Mood Aggregator.

Rolls per-segment mood records up into one DayAggregate per calendar
day. Stored values are sanitized on the way in: malformed ratings are
treated as absent, out-of-range ratings are clamped, and unparsable
write timestamps leave the entry in place but not "live".
"""

import logging
import math
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from .models import (
    MAX_RATING,
    MIN_RATING,
    SEGMENT_COUNT,
    DateWindow,
    DayAggregate,
    SegmentEntry,
)
from .stores import MoodStore

logger = logging.getLogger(__name__)


def parse_rating(raw: Any) -> Optional[float]:
    """
    Coerce a stored rating into [1, 10].

    Returns:
        The clamped rating, or None when the value is not a usable number
    """
    if isinstance(raw, bool):
        return None
    try:
        rating = float(raw)
    except (TypeError, ValueError):
        return None
    if math.isnan(rating) or math.isinf(rating):
        return None
    if rating < MIN_RATING or rating > MAX_RATING:
        clamped = min(max(rating, MIN_RATING), MAX_RATING)
        logger.warning(f"[AGGREGATOR] Rating {rating} out of range, clamped to {clamped}")
        return clamped
    return rating


def parse_timestamp(raw: Any) -> Optional[datetime]:
    """Parse a stored write timestamp (datetime or ISO-8601 text)."""
    if raw is None:
        return None
    if isinstance(raw, datetime):
        return raw
    if isinstance(raw, str):
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            return None
    return None


class MoodAggregator:
    """Builds day aggregates from a MoodStore."""

    def __init__(self, mood_store: MoodStore):
        self.mood_store = mood_store

    async def aggregate(self, start: date, end: date) -> List[DayAggregate]:
        """
        Aggregate every calendar day of the inclusive range.

        Args:
            start: First day
            end: Last day (inclusive)

        Returns:
            One DayAggregate per day, in date order (empty list if end < start)
        """
        if end < start:
            return []

        window = DateWindow(start, end)
        aggregates = []
        for day in window.dates():
            aggregates.append(await self.aggregate_day(day))

        logged = sum(1 for a in aggregates if a.has_any_mood)
        logger.debug(
            f"[AGGREGATOR] Aggregated {start}..{end}: {logged}/{window.days} days with data"
        )
        return aggregates

    async def aggregate_day(self, day: date) -> DayAggregate:
        """Load up to three segment records for a single day."""
        entries = []
        for segment in range(SEGMENT_COUNT):
            raw = await self.mood_store.load_mood(day, segment)
            if raw is None:
                continue
            entry = self._to_entry(day, segment, raw)
            if entry is not None:
                entries.append(entry)
        return DayAggregate(date=day, entries=entries)

    async def load_mood_by_date(self, start: date, end: date) -> Dict[date, float]:
        """Map each day with data in the range to its day average."""
        aggregates = await self.aggregate(start, end)
        return mood_by_date(aggregates)

    @staticmethod
    def _to_entry(day: date, segment: int, raw: Dict[str, Any]) -> Optional[SegmentEntry]:
        rating = parse_rating(raw.get("rating"))
        if rating is None:
            logger.warning(
                f"[AGGREGATOR] Malformed rating for {day} segment {segment}: "
                f"{raw.get('rating')!r}, treating as absent"
            )
            return None

        logged_at = parse_timestamp(raw.get("logged_at"))
        if logged_at is None and raw.get("logged_at") is not None:
            logger.warning(
                f"[AGGREGATOR] Unparsable logged_at for {day} segment {segment}: "
                f"{raw.get('logged_at')!r}"
            )

        return SegmentEntry(
            segment=segment,
            rating=rating,
            note=raw.get("note") or "",
            logged_at=logged_at,
        )


def mood_by_date(aggregates: List[DayAggregate]) -> Dict[date, float]:
    """Day averages keyed by date, for days with data."""
    return {
        a.date: a.day_average for a in aggregates if a.day_average is not None
    }


def daily_average_points(aggregates: List[DayAggregate]) -> List[Tuple[date, float]]:
    """Chart series of (date, day average) for days with data."""
    return [
        (a.date, a.day_average) for a in aggregates if a.day_average is not None
    ]


def segment_points(aggregates: List[DayAggregate]) -> List[Tuple[date, int, float]]:
    """Chart series of (date, segment, rating) for every present entry."""
    points = []
    for aggregate in aggregates:
        for entry in aggregate.entries:
            points.append((aggregate.date, entry.segment, entry.rating))
    return points
