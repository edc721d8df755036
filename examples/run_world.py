#!/usr/bin/env python3
"""Run the Chott world headless for a simulated day and print what happened."""

from collections import Counter

from chott.core.actor import Actor, ActorFlag, ActorState, seed_roster
from chott.core.clock import WorldTime
from chott.core.config import WorldConfig
from chott.core.locations import load_location_graph
from chott.core.manager import ActorManager


def main():
    config = WorldConfig(world_name="headless-day", random_seed=42, move_chance=0.05)
    graph = load_location_graph()

    roster = seed_roster() + [
        Actor(
            id="owl", name="Night Owl", location="route-1",
            state=ActorState(health=5, awake=False),
            flags=ActorFlag.ORGANIC | ActorFlag.NOCTURNAL | ActorFlag.PREDATORY,
        ),
    ]
    manager = ActorManager(roster, graph, config)

    print(f"=== Chott: {config.world_name} ===")
    print(f"Locations: {len(graph)}  Actors: {manager.population_size}")
    print()

    ticks_per_hour = 30
    print(f"{'Hour':>4} {'Idle':>5} {'Move':>5} {'Atk':>4} {'Sleep':>5} {'Wake':>5}")
    print("-" * 34)
    for hour in range(24):
        clock = WorldTime(hour=hour)
        counts = Counter()
        for _ in range(ticks_per_hour):
            report = manager.tick_some(clock)
            counts.update(a.kind.value for a in report.actions.values())
        print(
            f"{hour:4d} {counts['idle']:5d} {counts['move_to']:5d} "
            f"{counts['attack']:4d} {counts['sleep']:5d} {counts['wake_up']:5d}"
        )

    print()
    print("=== Final State ===")
    for actor in sorted(manager.snapshot().values(), key=lambda a: a.id):
        status = "awake" if actor.state.awake else "asleep"
        print(f"  {actor.name:20s} {actor.location:12s} {status:7s} fatigue={actor.state.fatigue}")


if __name__ == "__main__":
    main()
