"""
Actors and their decision/action state machine.

An Actor is an NPC with a location, a small mutable state (health, awake,
fatigue, target) and a fixed bit-set of behavior flags. Each tick the
manager asks ``decide`` for one intended action against a frozen snapshot
of the world, then hands that action to ``apply_action``.

Decision priority (first match wins):
  1. fatigue >= threshold        -> SLEEP
  2. asleep, chronotype says wake -> WAKE_UP
  3. predatory, awake, organic peer present -> ATTACK first peer
  4. awake                        -> rare random MOVE_TO, else IDLE
  5. anything else                -> IDLE
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum, Flag, auto
from typing import TYPE_CHECKING, Any, Sequence

import numpy as np

from chott.core.config import WorldConfig

if TYPE_CHECKING:
    from chott.core.clock import WorldTime
    from chott.core.locations import LocationGraph

logger = logging.getLogger(__name__)

FATIGUE_MIN = 0
FATIGUE_MAX = 255


# ---------------------------------------------------------------------------
# Flags
# ---------------------------------------------------------------------------

class ActorFlag(Flag):
    """Closed set of behavior tags, stored as a bit-set."""
    ORGANIC = auto()
    CAN_ATTACK = auto()
    CAN_SPEAK = auto()
    NOCTURNAL = auto()
    PREDATORY = auto()

    @property
    def label(self) -> str:
        return _FLAG_LABELS[self]

    @classmethod
    def from_labels(cls, labels: Sequence[str]) -> ActorFlag:
        flags = cls(0)
        for label in labels:
            try:
                flags |= _FLAG_BY_LABEL[label]
            except KeyError:
                raise ValueError(f"Unknown actor flag: {label!r}") from None
        return flags

    def labels(self) -> list[str]:
        return [_FLAG_LABELS[f] for f in ActorFlag if f in self]


_FLAG_LABELS: dict[ActorFlag, str] = {
    ActorFlag.ORGANIC: "Organic",
    ActorFlag.CAN_ATTACK: "CanAttack",
    ActorFlag.CAN_SPEAK: "CanSpeak",
    ActorFlag.NOCTURNAL: "Nocturnal",
    ActorFlag.PREDATORY: "Predatory",
}
_FLAG_BY_LABEL = {label: flag for flag, label in _FLAG_LABELS.items()}


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

class ActionKind(str, Enum):
    IDLE = "idle"
    MOVE_TO = "move_to"
    ATTACK = "attack"
    SLEEP = "sleep"
    WAKE_UP = "wake_up"


@dataclass(frozen=True)
class ActorAction:
    """One intended action. ``target`` is a location id for MOVE_TO, an actor id for ATTACK."""
    kind: ActionKind
    target: str | None = None

    @classmethod
    def idle(cls) -> ActorAction:
        return cls(ActionKind.IDLE)

    @classmethod
    def move_to(cls, location_id: str) -> ActorAction:
        return cls(ActionKind.MOVE_TO, location_id)

    @classmethod
    def attack(cls, actor_id: str) -> ActorAction:
        return cls(ActionKind.ATTACK, actor_id)

    @classmethod
    def sleep(cls) -> ActorAction:
        return cls(ActionKind.SLEEP)

    @classmethod
    def wake_up(cls) -> ActorAction:
        return cls(ActionKind.WAKE_UP)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "target": self.target}

    def __str__(self) -> str:
        if self.target is None:
            return self.kind.value
        return f"{self.kind.value}({self.target})"


# ---------------------------------------------------------------------------
# Actor
# ---------------------------------------------------------------------------

@dataclass
class ActorState:
    """Mutable per-actor state. Health is informational only."""
    health: int = 10
    awake: bool = True
    fatigue: int = 0  # saturating 0..255
    target: str | None = None  # last attacked actor id

    def __post_init__(self) -> None:
        if not FATIGUE_MIN <= self.fatigue <= FATIGUE_MAX:
            raise ValueError(f"fatigue out of range: {self.fatigue}")


@dataclass
class Actor:
    """A simulated NPC. ``id`` and ``flags`` are fixed once constructed."""
    id: str
    name: str
    location: str
    state: ActorState
    flags: ActorFlag = ActorFlag(0)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in ("id", "flags") and name in self.__dict__:
            raise AttributeError(f"Actor.{name} cannot be changed")
        super().__setattr__(name, value)

    def has_flag(self, flag: ActorFlag) -> bool:
        return flag in self.flags

    def copy(self) -> Actor:
        return Actor(
            id=self.id, name=self.name, location=self.location,
            state=replace(self.state), flags=self.flags,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "location": self.location,
            "awake": self.state.awake,
            "fatigue": self.state.fatigue,
            "health": self.state.health,
            "target": self.state.target,
            "flags": self.flags.labels(),
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Actor:
        return cls(
            id=d["id"],
            name=d.get("name", d["id"]),
            location=d["location"],
            state=ActorState(
                health=d.get("health", 10),
                awake=d.get("awake", True),
                fatigue=d.get("fatigue", 0),
                target=d.get("target"),
            ),
            flags=ActorFlag.from_labels(d.get("flags", [])),
        )


# ---------------------------------------------------------------------------
# Decision engine
# ---------------------------------------------------------------------------

def wants_to_wake(actor: Actor, world_time: WorldTime) -> bool:
    """Nocturnal actors wake at night, everyone else during the day."""
    if actor.state.awake:
        return False
    if actor.has_flag(ActorFlag.NOCTURNAL):
        return world_time.is_night()
    return world_time.is_daytime()


def find_prey(actor: Actor, local_actors: Sequence[Actor]) -> Actor | None:
    """First organic, co-located actor other than ``actor``, in the given order."""
    for other in local_actors:
        if (
            other.id != actor.id
            and other.location == actor.location
            and other.has_flag(ActorFlag.ORGANIC)
        ):
            return other
    return None


def default_behavior(
    actor: Actor,
    graph: LocationGraph,
    rng: np.random.Generator,
    move_chance: float,
) -> ActorAction:
    """Rarely wander along a random outgoing connection; otherwise idle."""
    if rng.random() < move_chance:
        connections = graph.connections_from(actor.location)
        if connections:
            idx = int(rng.integers(len(connections)))
            return ActorAction.move_to(connections[idx].target)
    return ActorAction.idle()


def decide(
    actor: Actor,
    world_time: WorldTime,
    local_actors: Sequence[Actor],
    graph: LocationGraph,
    rng: np.random.Generator | None = None,
    config: WorldConfig | None = None,
) -> ActorAction:
    """
    Choose the single action ``actor`` will take this tick.

    Pure: neither ``actor`` nor any of ``local_actors`` is modified. The
    only source of nondeterminism is ``rng`` in the default-movement rule.

    Parameters
    ----------
    actor : Actor
        The deciding actor.
    world_time : WorldTime
        Time of day for the sleep/wake rule.
    local_actors : Sequence[Actor]
        Other actors at the same location; predation targets the first
        eligible one in this order.
    graph : LocationGraph
        Source of outgoing connections for movement.
    """
    config = config or WorldConfig()

    if actor.state.fatigue >= config.fatigue_threshold:
        if actor.state.awake:
            logger.debug(
                "%s too tired (fatigue=%d), going to sleep",
                actor.id, actor.state.fatigue,
            )
        return ActorAction.sleep()

    if wants_to_wake(actor, world_time):
        return ActorAction.wake_up()

    if not actor.state.awake:
        return ActorAction.idle()

    if actor.has_flag(ActorFlag.PREDATORY):
        prey = find_prey(actor, local_actors)
        if prey is not None:
            logger.info("Predator %s will attack %s", actor.id, prey.id)
            return ActorAction.attack(prey.id)

    rng = rng or np.random.default_rng()
    return default_behavior(actor, graph, rng, config.move_chance)


# ---------------------------------------------------------------------------
# Action applier
# ---------------------------------------------------------------------------

def check_action(action: ActorAction, graph: LocationGraph) -> None:
    """Raise ValueError if ``action`` cannot be applied on ``graph``."""
    if action.kind is ActionKind.MOVE_TO:
        if action.target is None or action.target not in graph:
            raise ValueError(f"MOVE_TO target is not a known location: {action.target!r}")
    elif action.kind is ActionKind.ATTACK and action.target is None:
        raise ValueError("ATTACK requires a target actor id")



def _saturate(value: int, upper: int) -> int:
    return max(FATIGUE_MIN, min(upper, value))


def apply_action(
    actor: Actor,
    action: ActorAction,
    config: WorldConfig | None = None,
) -> None:
    """Mutate ``actor`` according to ``action``. Never touches other actors."""
    config = config or WorldConfig()
    costs = config.fatigue_costs
    state = actor.state
    cap = config.fatigue_max

    if action.kind is ActionKind.IDLE:
        state.fatigue = _saturate(state.fatigue + costs["idle"], cap)
    elif action.kind is ActionKind.MOVE_TO:
        if action.target is None:
            raise ValueError("MOVE_TO requires a target location")
        actor.location = action.target
        state.fatigue = _saturate(state.fatigue + costs["move"], cap)
        logger.debug(
            "%s moved to %s (fatigue=%d)", actor.id, actor.location, state.fatigue,
        )
    elif action.kind is ActionKind.ATTACK:
        state.target = action.target
        state.fatigue = _saturate(state.fatigue + costs["attack"], cap)
        logger.info(
            "%s attacks %s (fatigue=%d)", actor.id, action.target, state.fatigue,
        )
    elif action.kind is ActionKind.SLEEP:
        state.awake = False
        state.fatigue = _saturate(state.fatigue + costs["sleep"], cap)
        logger.debug("%s goes to sleep (fatigue=%d)", actor.id, state.fatigue)
    elif action.kind is ActionKind.WAKE_UP:
        state.awake = True
        # Only recovers when there is room to; never drops below zero.
        if state.fatigue > -costs["wake"]:
            state.fatigue = _saturate(state.fatigue + costs["wake"], cap)
        logger.debug("%s wakes up (fatigue=%d)", actor.id, state.fatigue)
    else:
        raise ValueError(f"Unknown action kind: {action.kind}")


# ---------------------------------------------------------------------------
# Seed roster
# ---------------------------------------------------------------------------

def seed_roster() -> list[Actor]:
    """The fixed starting population."""
    return [
        Actor(
            id="prof", name="Professor Tree", location="small-town",
            state=ActorState(health=10, awake=True, fatigue=0),
            flags=ActorFlag.ORGANIC | ActorFlag.CAN_SPEAK,
        ),
        Actor(
            id="joey", name="Young Joey", location="route-1",
            state=ActorState(health=8, awake=True, fatigue=0),
            flags=ActorFlag.ORGANIC | ActorFlag.CAN_SPEAK,
        ),
        Actor(
            id="sneezer", name="Sneezer", location="route-1",
            state=ActorState(health=2, awake=True, fatigue=0),
            flags=ActorFlag.ORGANIC,
        ),
        Actor(
            id="susan", name="Susan B. Anthony", location="green-city",
            state=ActorState(health=99, awake=True, fatigue=1),
            flags=ActorFlag.ORGANIC | ActorFlag.CAN_SPEAK,
        ),
    ]
