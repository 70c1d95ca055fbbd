"""Daily context models."""
from datetime import datetime
from pydantic import Field
from typing import Optional, Literal

from .base import CamelModel

Weather = Literal["sunny", "cloudy", "rainy", "stormy", "snowy", "foggy"]
TemperatureUnit = Literal["celsius", "fahrenheit"]
ExerciseLevel = Literal["none", "light", "moderate", "intense"]
SocialActivity = Literal["none", "friends", "family", "work", "party", "date"]


class DayContextRequest(CamelModel):
    """Body for saving a day's context factors."""

    weather: Optional[Weather] = None
    temperature: Optional[float] = None
    temperature_unit: TemperatureUnit = "celsius"
    weather_description: Optional[str] = None
    auto_weather: bool = False
    sleep_quality: Optional[float] = None
    bedtime: Optional[datetime] = None
    wake_time: Optional[datetime] = None
    exercise_level: Optional[ExerciseLevel] = None
    social_activities: list[SocialActivity] = []
    hobbies: list[str] = []
    work_stress: Optional[int] = None
    custom_tags: list[str] = []
    notes: Optional[str] = None


class DayContext(DayContextRequest):
    """A stored day context record."""

    date: str
    sleep_hours: Optional[float] = Field(default=None)
