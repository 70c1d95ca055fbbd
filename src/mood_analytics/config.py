"""Analytics engine configuration loaded from environment variables."""
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings

from .models import TemperatureUnit


class AnalyticsSettings(BaseSettings):
    """Engine tunables, weather lookup and history bounds."""

    # Windows
    insight_window_days: int = 90
    max_history_days: int = 1095
    correlation_window_days: int = 90

    # Statistics
    trend_threshold: float = 0.8
    live_grace_hours: int = 0

    # Correlation analysis
    correlation_min_samples: int = 3
    correlation_min_strength: float = 0.2
    correlation_top_n: int = 3
    correlation_insight_min_strength: float = 0.5

    # Insight synthesis
    max_insights: int = 10
    forecast_weekday_weight: float = 0.6

    # Weather
    temperature_unit: TemperatureUnit = TemperatureUnit.CELSIUS
    weather_api_key: Optional[str] = None
    weather_base_url: str = "https://api.openweathermap.org/data/2.5/weather"
    weather_timeout: float = 10.0
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    log_level: str = "INFO"

    class Config:
        env_prefix = "MOODFLOW_"
        env_file = ".env"
        extra = "ignore"

    @property
    def has_weather_api_key(self) -> bool:
        return bool(self.weather_api_key and self.weather_api_key.strip())

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@lru_cache
def get_settings() -> AnalyticsSettings:
    return AnalyticsSettings()
