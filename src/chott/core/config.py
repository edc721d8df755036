"""
World configuration for Chott.

Every tunable of the tick loop and the actor state machine lives here.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any

from chott.errors import ConfigError

# Environment variable -> (field name, parser)
_ENV_OVERRIDES: dict[str, tuple[str, Any]] = {
    "CHOTT_TICK_INTERVAL": ("tick_interval_seconds", float),
    "CHOTT_RANDOM_SEED": ("random_seed", int),
    "CHOTT_LOCK_TIMEOUT": ("lock_timeout_seconds", float),
    "CHOTT_LOG_LEVEL": ("log_level", str),
}


@dataclass
class WorldConfig:
    """
    Master configuration for one running world.

    Use ``to_dict()`` / ``from_dict()`` for serialization and ``from_env()``
    to layer ``CHOTT_*`` environment overrides on top of the defaults.
    """

    # === Identity ===
    world_name: str = "chott"
    random_seed: int | None = None

    # === Tick scheduling ===
    tick_interval_seconds: float = 2.0
    tick_fraction_divisor: int = 10  # k = max(1, N // divisor) actors per tick
    lock_timeout_seconds: float = 0.5  # bounded wait before a tick is skipped

    # === Actor state machine ===
    fatigue_threshold: int = 20
    fatigue_max: int = 255
    move_chance: float = 0.01
    fatigue_costs: dict[str, int] = field(default_factory=lambda: {
        "idle": -1,
        "move": 4,
        "attack": 6,
        "sleep": -1,
        "wake": -2,
    })

    # === Time of day ===
    day_start_hour: int = 6
    day_end_hour: int = 18

    # === Serving ===
    start_location: str = "small-town"
    log_level: str = "DEBUG"

    def validate(self) -> None:
        """Raise ConfigError if any value is out of range."""
        if self.tick_interval_seconds <= 0:
            raise ConfigError("tick_interval_seconds must be positive")
        if self.tick_fraction_divisor < 1:
            raise ConfigError("tick_fraction_divisor must be >= 1")
        if self.lock_timeout_seconds < 0:
            raise ConfigError("lock_timeout_seconds must be >= 0")
        if not 0.0 <= self.move_chance <= 1.0:
            raise ConfigError("move_chance must be in [0, 1]")
        if not 0 <= self.fatigue_threshold <= self.fatigue_max <= 255:
            raise ConfigError("fatigue_threshold must be in [0, fatigue_max <= 255]")
        if not 0 <= self.day_start_hour < self.day_end_hour <= 24:
            raise ConfigError("day hours must satisfy 0 <= start < end <= 24")
        missing = {"idle", "move", "attack", "sleep", "wake"} - set(self.fatigue_costs)
        if missing:
            raise ConfigError(f"fatigue_costs missing keys: {sorted(missing)}")

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {}
        for k, v in self.__dict__.items():
            if k.startswith("_"):
                continue
            d[k] = dict(v) if isinstance(v, dict) else v
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> WorldConfig:
        return cls(**{k: v for k, v in d.items() if not k.startswith("_")})

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, default=str)

    @classmethod
    def from_json(cls, s: str) -> WorldConfig:
        return cls.from_dict(json.loads(s))

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None, **overrides: Any) -> WorldConfig:
        """Build a config from defaults, ``CHOTT_*`` variables, then kwargs."""
        environ = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for var, (name, parse) in _ENV_OVERRIDES.items():
            raw = environ.get(var)
            if raw is None or raw == "":
                continue
            try:
                values[name] = parse(raw)
            except ValueError as exc:
                raise ConfigError(f"{var}={raw!r} is not a valid {parse.__name__}") from exc
        values.update(overrides)
        config = cls(**values)
        config.validate()
        return config

    def diff(self, other: WorldConfig) -> dict[str, tuple[Any, Any]]:
        """Return parameters that differ between two configs."""
        diffs: dict[str, tuple[Any, Any]] = {}
        for k in self.to_dict():
            v1 = getattr(self, k)
            v2 = getattr(other, k)
            if v1 != v2:
                diffs[k] = (v1, v2)
        return diffs
