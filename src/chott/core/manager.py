"""
ActorManager — owner of the actor population and the partial-tick loop body.

Each tick updates only a random subset of actors (``max(1, N // 10)`` by
default). The tick runs in two strictly separated phases under the
exclusive side of the world lock:

  decide  every selected actor picks an action against the same pre-tick
          snapshot; nothing is mutated
  apply   the collected actions are applied to the live actors

Readers (the API layer) take the shared side of the same lock, so they
never see a tick half-applied.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

import numpy as np

from chott.core.actor import Actor, ActorAction, apply_action, check_action, decide
from chott.core.clock import WorldTime
from chott.core.config import WorldConfig
from chott.core.locations import LocationGraph
from chott.core.rwlock import ReadWriteLock

logger = logging.getLogger(__name__)


@dataclass
class TickReport:
    """What one tick did."""
    tick: int
    population: int
    world_time: WorldTime
    actions: dict[str, ActorAction] = field(default_factory=dict)

    @property
    def selected(self) -> list[str]:
        return list(self.actions)

    @property
    def updated(self) -> int:
        return len(self.actions)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tick": self.tick,
            "population": self.population,
            "updated": self.updated,
            "world_time": self.world_time.to_dict(),
            "actions": {aid: a.to_dict() for aid, a in self.actions.items()},
        }


def batch_size(population: int, divisor: int = 10) -> int:
    """Number of actors to update this tick: max(1, N // divisor), 0 if empty."""
    if population <= 0:
        return 0
    return max(1, population // divisor)


def build_location_index(actors: Iterable[Actor]) -> dict[str, list[str]]:
    """location id -> actor ids there, each bucket in ascending id order."""
    index: dict[str, list[str]] = {}
    for actor in actors:
        index.setdefault(actor.location, []).append(actor.id)
    for ids in index.values():
        ids.sort()
    return index


class ActorManager:
    """
    Owns every actor and is the only code path that mutates them.

    Parameters
    ----------
    actors : Iterable[Actor]
        Initial roster. Ids must be unique and locations must exist in
        ``graph``.
    graph : LocationGraph
        Read-only map used for movement. Every connection must lead to a
        location in the graph.
    config : WorldConfig, optional
    rng : Generator, optional
        Defaults to ``np.random.default_rng(config.random_seed)``.
    """

    def __init__(
        self,
        actors: Iterable[Actor],
        graph: LocationGraph,
        config: WorldConfig | None = None,
        rng: np.random.Generator | None = None,
    ):
        self.config = config or WorldConfig()
        self.config.validate()
        dangling = graph.dangling_targets()
        if dangling:
            raise ValueError(f"Location graph has connections to unknown locations: {dangling}")
        self.graph = graph
        self.rng = rng if rng is not None else np.random.default_rng(self.config.random_seed)
        self.lock = ReadWriteLock()
        self.tick_count = 0

        self._actors: dict[str, Actor] = {}
        for actor in actors:
            if actor.id in self._actors:
                raise ValueError(f"Duplicate actor id: {actor.id}")
            if actor.location not in graph:
                raise ValueError(
                    f"Actor {actor.id} starts at unknown location {actor.location!r}"
                )
            self._actors[actor.id] = actor

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def select_actors(self) -> list[str]:
        """Pick this tick's batch: distinct ids, uniformly without replacement."""
        ids = sorted(self._actors)
        k = batch_size(len(ids), self.config.tick_fraction_divisor)
        if k == 0:
            return []
        picked = self.rng.choice(len(ids), size=k, replace=False)
        return [ids[int(i)] for i in picked]

    def tick_some(self, world_time: WorldTime, timeout: float | None = None) -> TickReport:
        """
        Advance the world by one partial tick.

        Waits at most ``timeout`` (default ``config.lock_timeout_seconds``)
        for the exclusive lock and raises LockTimeoutError if it cannot get
        it; in that case no actor is touched.
        """
        if timeout is None:
            timeout = self.config.lock_timeout_seconds
        with self.lock.write_locked_section(timeout):
            chosen = self.select_actors()
            index = build_location_index(self._actors.values())

            # Decide phase: read-only.
            planned: list[tuple[str, ActorAction]] = []
            for actor_id in chosen:
                actor = self._actors.get(actor_id)
                if actor is None:
                    continue
                locals_ = [
                    self._actors[oid]
                    for oid in index.get(actor.location, [])
                    if oid != actor_id
                ]
                action = decide(
                    actor, world_time, locals_, self.graph,
                    rng=self.rng, config=self.config,
                )
                planned.append((actor_id, action))

            # Reject the whole tick before any actor is touched.
            for _, action in planned:
                check_action(action, self.graph)

            # Apply phase.
            report = TickReport(
                tick=self.tick_count + 1,
                population=len(self._actors),
                world_time=world_time,
            )
            for actor_id, action in planned:
                actor = self._actors.get(actor_id)
                if actor is None:
                    logger.warning("Actor %s vanished between phases; skipping", actor_id)
                    continue
                apply_action(actor, action, self.config)
                report.actions[actor_id] = action

            self.tick_count += 1

        logger.debug(
            "World tick: updated %d of %d actors.", report.updated, report.population,
        )
        return report

    # ------------------------------------------------------------------
    # Readers
    # ------------------------------------------------------------------

    def _read_timeout(self, timeout: float | None) -> float:
        return self.config.lock_timeout_seconds if timeout is None else timeout

    @property
    def population_size(self) -> int:
        return len(self._actors)

    def snapshot(self, timeout: float | None = None) -> dict[str, Actor]:
        """Independent copies of every actor, taken under the shared lock."""
        with self.lock.read_locked(self._read_timeout(timeout)):
            return {aid: a.copy() for aid, a in self._actors.items()}

    def get_actor(self, actor_id: str, timeout: float | None = None) -> Actor:
        """Copy of one actor. Raises KeyError if unknown."""
        with self.lock.read_locked(self._read_timeout(timeout)):
            actor = self._actors.get(actor_id)
            if actor is None:
                raise KeyError(f"Actor '{actor_id}' not found")
            return actor.copy()

    def actors_at(
        self, location_id: str, awake_only: bool = True,
        timeout: float | None = None,
    ) -> list[Actor]:
        """Copies of the actors at ``location_id``, sorted by id."""
        with self.lock.read_locked(self._read_timeout(timeout)):
            found = [
                a.copy() for a in self._actors.values()
                if a.location == location_id and (a.state.awake or not awake_only)
            ]
        return sorted(found, key=lambda a: a.id)

    def location_index(self, timeout: float | None = None) -> dict[str, list[str]]:
        with self.lock.read_locked(self._read_timeout(timeout)):
            return build_location_index(self._actors.values())
