"""
Weather Provider.

Fetches current conditions for the user's location so the insight
synthesizer can suggest ways to prepare for weather that has historically
lowered their mood. Any failure (no API key, network error, unexpected
payload) yields None; callers treat that as "weather unknown".
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import httpx

from .config import AnalyticsSettings, get_settings
from .models import TemperatureUnit, WeatherCondition

logger = logging.getLogger(__name__)


# OpenWeather "main" group -> our condition set
CONDITION_MAP = {
    "clear": WeatherCondition.SUNNY,
    "clouds": WeatherCondition.CLOUDY,
    "rain": WeatherCondition.RAINY,
    "drizzle": WeatherCondition.RAINY,
    "thunderstorm": WeatherCondition.STORMY,
    "snow": WeatherCondition.SNOWY,
    "mist": WeatherCondition.FOGGY,
    "fog": WeatherCondition.FOGGY,
    "haze": WeatherCondition.FOGGY,
}


def map_condition(main: str) -> WeatherCondition:
    """Map a provider condition group to a WeatherCondition (cloudy if unknown)."""
    return CONDITION_MAP.get((main or "").strip().lower(), WeatherCondition.CLOUDY)


@dataclass
class WeatherReading:
    """Current weather at the user's location."""

    condition: WeatherCondition
    temperature: Optional[float] = None
    unit: TemperatureUnit = TemperatureUnit.CELSIUS
    description: Optional[str] = None
    fetched_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            "condition": self.condition.value,
            "temperature": self.temperature,
            "unit": self.unit.value,
            "description": self.description,
            "fetched_at": self.fetched_at.isoformat(),
        }


class WeatherProvider(ABC):
    """Source of the current weather reading."""

    @abstractmethod
    async def fetch_weather(
        self, lat: Optional[float] = None, lon: Optional[float] = None
    ) -> Optional[WeatherReading]:
        pass


class OpenWeatherProvider(WeatherProvider):
    """
    OpenWeather current-conditions client.

    Configuration:
        weather_api_key: API key; without it no request is made
        latitude/longitude: Default location when none is passed
        temperature_unit: Celsius requests metric units, Fahrenheit imperial
    """

    def __init__(
        self,
        settings: Optional[AnalyticsSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the provider.

        Args:
            settings: Analytics settings (defaults to environment)
            client: Optional shared AsyncClient (a new one is made per call otherwise)
        """
        self.settings = settings or get_settings()
        self._client = client

    async def fetch_weather(
        self, lat: Optional[float] = None, lon: Optional[float] = None
    ) -> Optional[WeatherReading]:
        """
        Fetch the current weather.

        Args:
            lat: Latitude (defaults to configured location)
            lon: Longitude (defaults to configured location)

        Returns:
            WeatherReading, or None when unavailable
        """
        if not self.settings.has_weather_api_key:
            logger.debug("[WEATHER] No API key configured, skipping lookup")
            return None

        lat = lat if lat is not None else self.settings.latitude
        lon = lon if lon is not None else self.settings.longitude
        if lat is None or lon is None:
            logger.debug("[WEATHER] No location available, skipping lookup")
            return None

        unit = self.settings.temperature_unit
        params = {
            "lat": lat,
            "lon": lon,
            "appid": self.settings.weather_api_key,
            "units": "imperial" if unit == TemperatureUnit.FAHRENHEIT else "metric",
        }

        try:
            if self._client is not None:
                response = await self._client.get(
                    self.settings.weather_base_url, params=params
                )
            else:
                async with httpx.AsyncClient(
                    timeout=httpx.Timeout(self.settings.weather_timeout)
                ) as client:
                    response = await client.get(
                        self.settings.weather_base_url, params=params
                    )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            logger.error(f"[WEATHER] Request failed: {e}")
            return None
        except ValueError as e:
            logger.error(f"[WEATHER] Invalid response body: {e}")
            return None

        return self._parse(payload, unit)

    @staticmethod
    def _parse(payload: dict, unit: TemperatureUnit) -> Optional[WeatherReading]:
        try:
            weather = payload["weather"][0]
            temperature = payload.get("main", {}).get("temp")
            reading = WeatherReading(
                condition=map_condition(weather.get("main", "")),
                temperature=float(temperature) if temperature is not None else None,
                unit=unit,
                description=weather.get("description"),
            )
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
            logger.error(f"[WEATHER] Unexpected payload shape: {e}")
            return None

        logger.info(
            f"[WEATHER] Current conditions: {reading.condition.value}, "
            f"{reading.temperature}"
        )
        return reading
