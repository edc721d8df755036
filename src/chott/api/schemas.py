"""
Pydantic models for API responses.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class ActorResponse(BaseModel):
    id: str
    name: str
    location: str
    awake: bool
    fatigue: int
    health: int
    target: str | None = None
    flags: list[str]


class ConnectionResponse(BaseModel):
    name: str
    target: str


class LocationSummary(BaseModel):
    id: str
    title: str
    description: str
    connections: list[ConnectionResponse]


class EnvironmentResponse(BaseModel):
    season: str
    weather: str
    timestamp: float


class LocationDetail(LocationSummary):
    environment: EnvironmentResponse
    actors: list[ActorResponse]


class MoveResponse(BaseModel):
    from_location: str
    connection: str
    to_location: str


class ClockResponse(BaseModel):
    hour: int
    minute: int
    is_daytime: bool
    is_twilight: bool


class TickStatsResponse(BaseModel):
    running: bool
    interval_seconds: float
    completed: int
    skipped: int
    failed: int
    last_error: str | None = None
    last_report: dict[str, Any] | None = None
