"""World clock and tick scheduler endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request

from chott.api.schemas import ClockResponse, TickStatsResponse
from chott.core.scheduler import TickOutcome

router = APIRouter()


@router.get("/clock", response_model=ClockResponse)
def get_clock(request: Request):
    return request.app.state.world.scheduler.clock().to_dict()


@router.get("/ticks", response_model=TickStatsResponse)
def get_tick_stats(request: Request):
    return request.app.state.world.scheduler.stats()


@router.post("/tick")
def run_tick(request: Request) -> dict[str, Any]:
    """Run one supervised tick now, outside the regular interval.

    503 when the world lock was busy and the tick was skipped; 500 when
    the tick itself raised.
    """
    scheduler = request.app.state.world.scheduler
    outcome, report, error = scheduler.run_tick()
    if outcome is TickOutcome.SKIPPED:
        raise HTTPException(status_code=503, detail=f"Tick skipped: {error}")
    if outcome is TickOutcome.FAILED:
        raise HTTPException(status_code=500, detail=f"Tick failed: {error}")
    return report.to_dict()
