"""
World runtime: everything the serving layer needs, built once per process.

Bundles the location graph, actor manager, environment cache and tick
scheduler so the app factory and routers share a single handle.
"""

from __future__ import annotations

from dataclasses import dataclass

from chott.core.actor import Actor, seed_roster
from chott.core.config import WorldConfig
from chott.core.environment import EnvironmentManager
from chott.core.locations import LocationGraph, load_location_graph
from chott.core.manager import ActorManager
from chott.core.scheduler import TickScheduler


@dataclass
class WorldRuntime:
    config: WorldConfig
    graph: LocationGraph
    manager: ActorManager
    environment: EnvironmentManager
    scheduler: TickScheduler

    @classmethod
    def build(
        cls,
        config: WorldConfig | None = None,
        graph: LocationGraph | None = None,
        actors: list[Actor] | None = None,
    ) -> WorldRuntime:
        config = config or WorldConfig()
        config.validate()
        graph = graph or load_location_graph()
        manager = ActorManager(
            actors if actors is not None else seed_roster(), graph, config,
        )
        return cls(
            config=config,
            graph=graph,
            manager=manager,
            environment=EnvironmentManager(),
            scheduler=TickScheduler(manager),
        )
