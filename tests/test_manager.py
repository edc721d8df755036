"""
Tests for ActorManager: batch sizing, selection, the two-phase tick,
location indexing, readers and lock behavior.
"""

from __future__ import annotations

import threading

import numpy as np
import pytest

from chott.core.actor import ActionKind, Actor, ActorAction, ActorFlag, ActorState, seed_roster
from chott.core.clock import WorldTime
from chott.core.config import WorldConfig
from chott.core.locations import LocationConnection, LocationGraph, LocationNode
from chott.core.manager import ActorManager, batch_size, build_location_index
from chott.errors import ConfigError, LockTimeoutError

DAY = WorldTime(hour=12)


def _make_actor(actor_id, location="route-1", flags=ActorFlag.ORGANIC, awake=True, fatigue=0):
    return Actor(
        id=actor_id, name=actor_id, location=location,
        state=ActorState(awake=awake, fatigue=fatigue), flags=flags,
    )


def _make_manager(graph, actors=None, **config_overrides) -> ActorManager:
    defaults = {"random_seed": 42, "move_chance": 0.0}
    defaults.update(config_overrides)
    return ActorManager(
        actors if actors is not None else seed_roster(), graph, WorldConfig(**defaults),
    )


class TestBatchSize:
    @pytest.mark.parametrize("n,k", [
        (0, 0), (1, 1), (4, 1), (9, 1), (10, 1), (19, 1), (20, 2), (99, 9), (100, 10),
    ])
    def test_values(self, n, k):
        assert batch_size(n) == k

    def test_custom_divisor(self):
        assert batch_size(10, divisor=2) == 5


class TestConstruction:
    def test_duplicate_ids(self, graph):
        with pytest.raises(ValueError):
            ActorManager([_make_actor("a"), _make_actor("a")], graph)

    def test_unknown_location(self, graph):
        with pytest.raises(ValueError):
            ActorManager([_make_actor("a", location="nowhere")], graph)

    def test_seed_population(self, graph):
        assert _make_manager(graph).population_size == 4

    def test_rejects_graph_with_dangling_connection(self):
        g = LocationGraph([
            LocationNode("a", "A", connections=(LocationConnection("North", "b"),)),
        ])
        with pytest.raises(ValueError, match="unknown locations"):
            ActorManager([_make_actor("x", location="a")], g, WorldConfig(move_chance=1.0))

    @pytest.mark.parametrize("overrides", [
        {"tick_fraction_divisor": 0},
        {"move_chance": 2.0},
        {"tick_interval_seconds": -1},
    ])
    def test_rejects_invalid_config(self, graph, overrides):
        with pytest.raises(ConfigError):
            ActorManager(seed_roster(), graph, WorldConfig(**overrides))


class TestSelection:
    def test_never_more_than_batch(self, graph):
        actors = [_make_actor(f"a{i:03d}") for i in range(57)]
        mgr = _make_manager(graph, actors)
        for _ in range(50):
            chosen = mgr.select_actors()
            assert len(chosen) == 5
            assert len(set(chosen)) == 5

    def test_at_least_one(self, graph):
        mgr = _make_manager(graph, [_make_actor("solo")])
        assert mgr.select_actors() == ["solo"]

    def test_empty_population(self, graph):
        mgr = _make_manager(graph, [])
        report = mgr.tick_some(DAY)
        assert report.updated == 0
        assert report.population == 0

    def test_every_actor_eventually_chosen(self, graph):
        mgr = _make_manager(graph)
        seen = set()
        for _ in range(200):
            seen.update(mgr.select_actors())
        assert seen == {"prof", "joey", "sneezer", "susan"}

    def test_seeded_selection_is_deterministic(self, graph):
        a = _make_manager(graph, random_seed=5)
        b = _make_manager(graph, random_seed=5)
        assert [a.select_actors() for _ in range(10)] == [b.select_actors() for _ in range(10)]


class TestLocationIndex:
    def test_buckets_sorted(self):
        actors = [_make_actor("c"), _make_actor("a"), _make_actor("b", location="green-city")]
        assert build_location_index(actors) == {"route-1": ["a", "c"], "green-city": ["b"]}

    def test_manager_index_covers_everyone(self, graph):
        idx = _make_manager(graph).location_index()
        assert idx == {
            "small-town": ["prof"],
            "route-1": ["joey", "sneezer"],
            "green-city": ["susan"],
        }


class TestTick:
    def test_updates_batch(self, graph):
        actors = [_make_actor(f"a{i:02d}") for i in range(30)]
        mgr = _make_manager(graph, actors)
        report = mgr.tick_some(DAY)
        assert report.updated == 3
        assert report.population == 30
        assert mgr.tick_count == 1

    def test_idle_tick_reduces_fatigue(self, graph):
        mgr = _make_manager(graph, [_make_actor("a", fatigue=5)])
        mgr.tick_some(DAY)
        assert mgr.get_actor("a").state.fatigue == 4

    def test_predator_sees_unselected_peers(self, graph):
        # Only one actor is chosen per tick; the index still covers all.
        wolf = _make_actor("wolf", flags=ActorFlag.PREDATORY)
        sheep = _make_actor("sheep")
        mgr = _make_manager(graph, [wolf, sheep])
        mgr.rng = np.random.default_rng(0)
        for _ in range(20):
            report = mgr.tick_some(DAY)
            if "wolf" in report.actions:
                assert report.actions["wolf"].kind is ActionKind.ATTACK
                assert report.actions["wolf"].target == "sheep"
                break
        else:
            pytest.fail("wolf never selected")

    def test_attack_lowest_id_first(self, graph):
        wolf = _make_actor("wolf", flags=ActorFlag.PREDATORY)
        actors = [wolf, _make_actor("zed"), _make_actor("amy"), _make_actor("bob")]
        mgr = _make_manager(graph, actors, tick_fraction_divisor=1)
        report = mgr.tick_some(DAY)
        assert report.actions["wolf"].target == "amy"

    def test_decisions_use_pre_tick_snapshot(self, graph):
        # Every actor acts; the wolf decides before the sheep's move is applied.
        wolf = _make_actor("wolf", flags=ActorFlag.PREDATORY)
        sheep = _make_actor("sheep", location="route-1")
        mgr = _make_manager(graph, [wolf, sheep], tick_fraction_divisor=1, move_chance=1.0)
        report = mgr.tick_some(DAY)
        assert report.actions["wolf"].kind is ActionKind.ATTACK
        assert report.actions["sheep"].kind is ActionKind.MOVE_TO
        assert mgr.get_actor("sheep").location != "route-1"

    def test_scenario_roster_with_predator(self, graph):
        wolf = _make_actor("wolf", location="small-town", flags=ActorFlag.PREDATORY)
        mgr = _make_manager(graph, seed_roster() + [wolf], tick_fraction_divisor=1)
        report = mgr.tick_some(DAY)
        assert report.actions["wolf"].kind is ActionKind.ATTACK
        assert report.actions["wolf"].target == "prof"
        assert mgr.get_actor("wolf").state.fatigue == 6
        assert mgr.get_actor("prof").state.health == 10

    def test_tired_actor_sleeps_next_tick(self, graph):
        mgr = _make_manager(graph, [_make_actor("a", fatigue=23)])
        report = mgr.tick_some(DAY)
        assert report.actions["a"].kind is ActionKind.SLEEP
        assert mgr.get_actor("a").state.awake is False

    def test_report_to_dict(self, graph):
        report = _make_manager(graph).tick_some(DAY).to_dict()
        assert report["tick"] == 1
        assert report["updated"] == 1
        assert report["world_time"]["hour"] == 12


class TestReaders:
    def test_snapshot_is_a_copy(self, graph):
        mgr = _make_manager(graph)
        snap = mgr.snapshot()
        snap["prof"].state.fatigue = 99
        assert mgr.get_actor("prof").state.fatigue == 0

    def test_get_actor_missing(self, graph):
        with pytest.raises(KeyError):
            _make_manager(graph).get_actor("ghost")

    def test_actors_at_awake_only(self, graph):
        actors = [_make_actor("b"), _make_actor("a", awake=False)]
        mgr = _make_manager(graph, actors)
        assert [a.id for a in mgr.actors_at("route-1")] == ["b"]
        assert [a.id for a in mgr.actors_at("route-1", awake_only=False)] == ["a", "b"]


class TestLocking:
    def test_tick_times_out_while_reader_holds_lock(self, graph):
        mgr = _make_manager(graph, [_make_actor("a", fatigue=5)])
        assert mgr.lock.acquire_read()
        try:
            with pytest.raises(LockTimeoutError):
                mgr.tick_some(DAY, timeout=0.05)
        finally:
            mgr.lock.release_read()
        assert mgr.get_actor("a").state.fatigue == 5
        assert mgr.tick_count == 0

    def test_failure_inside_tick_releases_lock(self, graph, monkeypatch):
        mgr = _make_manager(graph)

        def boom():
            raise RuntimeError("boom")

        monkeypatch.setattr(mgr, "select_actors", boom)
        with pytest.raises(RuntimeError):
            mgr.tick_some(DAY)
        assert not mgr.lock.write_locked
        monkeypatch.undo()
        assert mgr.tick_some(DAY).updated == 1

    def test_readers_never_see_partial_tick(self, graph):
        # Every tick moves every actor with +4 fatigue; a consistent read
        # always sees all fatigues equal.
        actors = [_make_actor(f"a{i}", location="small-town") for i in range(10)]
        mgr = _make_manager(
            graph, actors, tick_fraction_divisor=1, move_chance=1.0,
            fatigue_threshold=255, lock_timeout_seconds=5.0,
        )
        stop = threading.Event()
        torn = []

        def reader():
            while not stop.is_set():
                snap = mgr.snapshot()
                if len({a.state.fatigue for a in snap.values()}) != 1:
                    torn.append(snap)

        threads = [threading.Thread(target=reader) for _ in range(3)]
        for t in threads:
            t.start()
        try:
            for _ in range(60):
                mgr.tick_some(DAY)
        finally:
            stop.set()
            for t in threads:
                t.join()
        assert torn == []
        assert all(a.state.fatigue == 240 for a in mgr.snapshot().values())

    def test_unappliable_plan_leaves_world_untouched(self, graph, monkeypatch):
        actors = [_make_actor("a", fatigue=5), _make_actor("b", fatigue=5)]
        mgr = _make_manager(graph, actors, tick_fraction_divisor=1)

        def plan(actor, *args, **kwargs):
            if actor.id == "b":
                return ActorAction.move_to("nowhere")
            return ActorAction.idle()

        monkeypatch.setattr("chott.core.manager.decide", plan)
        with pytest.raises(ValueError):
            mgr.tick_some(DAY)
        assert all(a.state.fatigue == 5 for a in mgr.snapshot().values())
        assert all(a.location == "route-1" for a in mgr.snapshot().values())
        assert mgr.tick_count == 0
        assert not mgr.lock.write_locked
