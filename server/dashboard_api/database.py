"""SQLite-backed stores and the shared analytics engine for the API."""
from functools import lru_cache
import logging

from mood_analytics import (
    MoodAnalyticsEngine,
    OpenWeatherProvider,
    SQLiteContextStore,
    SQLiteMoodStore,
)
from mood_analytics.config import get_settings as get_analytics_settings

from .config import get_settings

log = logging.getLogger(__name__)


class DatabaseManager:
    """
    Owns the mood and context SQLite stores.
    Both stores open a short-lived connection per operation.
    """

    def __init__(self, settings=None):
        self.settings = settings or get_settings()
        self.mood_store = SQLiteMoodStore(self.settings.mood_db_path)
        self.context_store = SQLiteContextStore(self.settings.context_db_path)
        log.info(
            f"[DATABASE] Using {self.settings.mood_db_path} and "
            f"{self.settings.context_db_path}"
        )


@lru_cache
def get_engine() -> MoodAnalyticsEngine:
    """Build the engine once per process (FastAPI dependency)."""
    db_manager = DatabaseManager()
    analytics_settings = get_analytics_settings()
    weather = (
        OpenWeatherProvider(analytics_settings)
        if analytics_settings.has_weather_api_key
        else None
    )
    return MoodAnalyticsEngine(
        db_manager.mood_store,
        db_manager.context_store,
        weather_provider=weather,
        settings=analytics_settings,
        background_refresh=db_manager.settings.background_refresh,
    )
