"""
Time-of-day model.

A WorldTime is rebuilt from wall-clock time at the start of every tick and
only answers day/night questions; nothing about it is persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class WorldTime:
    """Current hour and minute of the world, with configurable daylight bounds."""
    hour: int
    minute: int = 0
    day_start: int = 6
    day_end: int = 18

    def __post_init__(self) -> None:
        if not 0 <= self.hour <= 23:
            raise ValueError(f"hour out of range: {self.hour}")
        if not 0 <= self.minute <= 59:
            raise ValueError(f"minute out of range: {self.minute}")

    @classmethod
    def from_datetime(cls, dt: datetime, day_start: int = 6, day_end: int = 18) -> WorldTime:
        return cls(hour=dt.hour, minute=dt.minute, day_start=day_start, day_end=day_end)

    @classmethod
    def now(cls, day_start: int = 6, day_end: int = 18) -> WorldTime:
        """Local wall-clock time."""
        return cls.from_datetime(datetime.now(), day_start=day_start, day_end=day_end)

    def is_daytime(self) -> bool:
        """True for day_start <= hour < day_end (06:00-17:59 by default)."""
        return self.day_start <= self.hour < self.day_end

    def is_night(self) -> bool:
        return not self.is_daytime()

    def is_twilight(self) -> bool:
        """Within an hour either side of dawn or dusk."""
        return (
            self.day_start - 1 <= self.hour < self.day_start + 1
            or self.day_end - 1 <= self.hour < self.day_end + 1
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "hour": self.hour,
            "minute": self.minute,
            "is_daytime": self.is_daytime(),
            "is_twilight": self.is_twilight(),
        }
