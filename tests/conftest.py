"""
Pytest fixtures for Mood Analytics tests.
"""
import sys
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import Dict, List, Optional

import pytest
from dotenv import load_dotenv

# Ensure src/ and the repo root are on sys.path so tests can import
# mood_analytics and server.dashboard_api.
ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
for path in (SRC, ROOT):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

# Load environment variables
load_dotenv()

from mood_analytics import (  # noqa: E402
    AnalyticsSettings,
    DayAggregate,
    InMemoryContextStore,
    InMemoryMoodStore,
    MoodAnalyticsEngine,
    SegmentEntry,
)


# ============================================================================
# Clock
# ============================================================================

# Sunday 15 March 2026, 20:00 local time
FIXED_NOW = datetime(2026, 3, 15, 20, 0)
TODAY = FIXED_NOW.date()


def days_ago(n: int) -> date:
    return TODAY - timedelta(days=n)


# ============================================================================
# Builders
# ============================================================================


def make_day(
    day: date,
    ratings: List[float],
    live: bool = True,
    logged_at: Optional[datetime] = None,
) -> DayAggregate:
    """
    Build a DayAggregate with one entry per rating (segments 0, 1, 2).

    Live entries are stamped at noon of the day itself; backfilled ones
    at FIXED_NOW.
    """
    if logged_at is None:
        logged_at = datetime.combine(day, time(12, 0)) if live else FIXED_NOW
    return DayAggregate(
        date=day,
        entries=[
            SegmentEntry(segment=i, rating=r, logged_at=logged_at)
            for i, r in enumerate(ratings)
        ],
    )


def empty_day(day: date) -> DayAggregate:
    return DayAggregate(date=day, entries=[])


async def seed_moods(
    store: InMemoryMoodStore,
    moods: Dict[date, List[float]],
    live: bool = True,
) -> None:
    """Write ratings straight into a mood store."""
    for day, ratings in moods.items():
        logged_at = datetime.combine(day, time(12, 0)) if live else FIXED_NOW
        for segment, rating in enumerate(ratings):
            await store.save_mood(day, segment, rating, logged_at=logged_at)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def settings():
    """Analytics settings with defaults and no weather lookup."""
    return AnalyticsSettings(weather_api_key=None, latitude=None, longitude=None)


@pytest.fixture
def mood_store():
    return InMemoryMoodStore()


@pytest.fixture
def context_store():
    return InMemoryContextStore()


@pytest.fixture
def engine(mood_store, context_store, settings):
    """Engine on in-memory stores with a fixed clock and no background refresh."""
    return MoodAnalyticsEngine(
        mood_store,
        context_store,
        settings=settings,
        clock=lambda: FIXED_NOW,
        background_refresh=False,
    )
