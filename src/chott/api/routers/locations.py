"""Location list, detail (with environment and actors present) and navigation."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request

from chott.api.schemas import LocationDetail, LocationSummary, MoveResponse
from chott.core.locations import LocationNode
from chott.errors import InvalidMoveError, LocationNotFoundError, LockTimeoutError

router = APIRouter()


def _location_summary(node: LocationNode) -> dict[str, Any]:
    return {
        "id": node.id,
        "title": node.title,
        "description": node.description,
        "connections": [{"name": c.name, "target": c.target} for c in node.connections],
    }


def _get_node(request: Request, location_id: str) -> LocationNode:
    node = request.app.state.world.graph.get(location_id)
    if node is None:
        raise HTTPException(status_code=404, detail=str(LocationNotFoundError(location_id)))
    return node


@router.get("", response_model=list[LocationSummary])
def list_locations(request: Request):
    return [_location_summary(n) for n in request.app.state.world.graph]


@router.get("/{location_id}", response_model=LocationDetail)
def get_location(location_id: str, request: Request):
    world = request.app.state.world
    node = _get_node(request, location_id)
    environment = world.environment.get_environment_for(node.id)
    try:
        actors = world.manager.actors_at(node.id, awake_only=True)
    except LockTimeoutError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    return {
        **_location_summary(node),
        "environment": environment.to_dict(),
        "actors": [a.to_dict() for a in actors],
    }


@router.get("/{location_id}/move", response_model=MoveResponse)
def move(location_id: str, request: Request, go_to: str = Query(...)):
    """Resolve a named connection; 400 if the location has no such exit."""
    world = request.app.state.world
    _get_node(request, location_id)
    conn = world.graph.valid_move(location_id, go_to)
    if conn is None:
        raise HTTPException(status_code=400, detail=str(InvalidMoveError(location_id, go_to)))
    return {"from_location": location_id, "connection": conn.name, "to_location": conn.target}
