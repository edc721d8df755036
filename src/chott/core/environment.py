"""
Per-location environment: season and weather.

Season follows the calendar month; weather rotates through four states
once a minute. The first lookup for a location is cached for the rest of
the process, so a location's weather is fixed once someone has looked.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)


class Season(str, Enum):
    WINTER = "Winter"
    SPRING = "Spring"
    SUMMER = "Summer"
    AUTUMN = "Autumn"


class Weather(str, Enum):
    CLEAR = "Clear"
    RAINY = "Rainy"
    CLOUDY = "Cloudy"
    WINDY = "Windy"


_WEATHER_CYCLE = [Weather.CLEAR, Weather.RAINY, Weather.CLOUDY, Weather.WINDY]


def season_for_month(month: int) -> Season:
    if month in (12, 1, 2):
        return Season.WINTER
    if month in (3, 4, 5):
        return Season.SPRING
    if month in (6, 7, 8):
        return Season.SUMMER
    if month in (9, 10, 11):
        return Season.AUTUMN
    raise ValueError(f"month out of range: {month}")


def weather_at(epoch_seconds: float) -> Weather:
    """Weather for a moment in time; changes every 60 seconds."""
    return _WEATHER_CYCLE[int(epoch_seconds // 60) % len(_WEATHER_CYCLE)]


@dataclass(frozen=True)
class Environment:
    season: Season
    weather: Weather
    timestamp: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "season": self.season.value,
            "weather": self.weather.value,
            "timestamp": self.timestamp,
        }


class EnvironmentManager:
    """Thread-safe cache of Environment per location id."""

    def __init__(self, clock: Callable[[], float] | None = None):
        self._clock = clock or time.time
        self._cache: dict[str, Environment] = {}
        self._lock = threading.Lock()

    def generate(self) -> Environment:
        now = self._clock()
        month = datetime.fromtimestamp(now, tz=timezone.utc).month
        return Environment(
            season=season_for_month(month),
            weather=weather_at(now),
            timestamp=now,
        )

    def get_environment_for(self, location_id: str) -> Environment:
        with self._lock:
            env = self._cache.get(location_id)
            if env is not None:
                return env
            logger.debug("Environment cache miss for %s", location_id)
            env = self.generate()
            self._cache[location_id] = env
            return env

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)
