"""Read-only actor endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, Request

from chott.api.schemas import ActorResponse
from chott.errors import LockTimeoutError

router = APIRouter()


@router.get("", response_model=list[ActorResponse])
def list_actors(
    request: Request,
    location: str | None = Query(None),
    awake_only: bool = Query(False),
):
    mgr = request.app.state.world.manager
    try:
        actors = list(mgr.snapshot().values())
    except LockTimeoutError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    if location is not None:
        actors = [a for a in actors if a.location == location]
    if awake_only:
        actors = [a for a in actors if a.state.awake]
    return [a.to_dict() for a in sorted(actors, key=lambda a: a.id)]


@router.get("/{actor_id}", response_model=ActorResponse)
def get_actor(actor_id: str, request: Request):
    mgr = request.app.state.world.manager
    try:
        actor = mgr.get_actor(actor_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Actor '{actor_id}' not found")
    except LockTimeoutError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    return actor.to_dict()
