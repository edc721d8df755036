"""
Location graph — the static, read-only map actors live on.

Locations are nodes keyed by a slug id; each carries an ordered tuple of
named connections to other locations. The graph is built once at startup
and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterator, Mapping


@dataclass(frozen=True)
class LocationConnection:
    """A named, one-way edge ("North", "to city gate", ...)."""
    name: str
    target: str


@dataclass(frozen=True)
class LocationNode:
    """One location in the world."""
    id: str
    title: str
    description: str = ""
    template: str = ""
    connections: tuple[LocationConnection, ...] = ()
    metadata: Mapping[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "template": self.template,
            "connections": [
                {"name": c.name, "target": c.target} for c in self.connections
            ],
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> LocationNode:
        return cls(
            id=d["id"],
            title=d.get("title", d["id"]),
            description=d.get("description", ""),
            template=d.get("template", ""),
            connections=tuple(
                LocationConnection(name=c["name"], target=c["target"])
                for c in d.get("connections", [])
            ),
            metadata=dict(d.get("metadata", {})),
        )


class LocationGraph:
    """Immutable directed graph of locations keyed by id."""

    def __init__(self, nodes: list[LocationNode] | None = None):
        by_id: dict[str, LocationNode] = {}
        for node in nodes or []:
            if node.id in by_id:
                raise ValueError(f"Duplicate location id: {node.id}")
            by_id[node.id] = node
        self._nodes = MappingProxyType(by_id)

    def get(self, location_id: str) -> LocationNode | None:
        return self._nodes.get(location_id)

    def __contains__(self, location_id: object) -> bool:
        return location_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[LocationNode]:
        return iter(self._nodes.values())

    def ids(self) -> list[str]:
        return list(self._nodes)

    def connections_from(self, location_id: str) -> tuple[LocationConnection, ...]:
        """Outgoing connections, or an empty tuple for an unknown location."""
        node = self._nodes.get(location_id)
        return node.connections if node is not None else ()

    def valid_move(self, location_id: str, connection_name: str) -> LocationConnection | None:
        """Find the connection named ``connection_name`` leaving ``location_id``."""
        for conn in self.connections_from(location_id):
            if conn.name == connection_name:
                return conn
        return None

    def dangling_targets(self) -> list[tuple[str, str]]:
        """(source, target) pairs whose target is not a known location."""
        return [
            (node.id, conn.target)
            for node in self._nodes.values()
            for conn in node.connections
            if conn.target not in self._nodes
        ]

    def to_dict(self) -> dict[str, Any]:
        return {"locations": [node.to_dict() for node in self._nodes.values()]}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> LocationGraph:
        return cls([LocationNode.from_dict(n) for n in d.get("locations", [])])


def load_location_graph() -> LocationGraph:
    """The reference world: a town, a route, and a city in a line."""
    return LocationGraph([
        LocationNode(
            id="small-town",
            title="Small Town",
            description="A quiet, peaceful town.",
            template="small-town.html",
            connections=(LocationConnection("North", "route-1"),),
        ),
        LocationNode(
            id="route-1",
            title="Route 1",
            description="A winding route with tall grass and wild things.",
            template="route-1.html",
            connections=(
                LocationConnection("North", "green-city"),
                LocationConnection("South", "small-town"),
            ),
        ),
        LocationNode(
            id="green-city",
            title="Green City",
            description="A bustling city under the old trees.",
            template="green-city.html",
            connections=(LocationConnection("South", "route-1"),),
        ),
    ])
