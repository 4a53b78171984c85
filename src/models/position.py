"""
Where a car currently is.

A car is either standing at a vertex (possibly about to take the first edge
of its path) or driving along an edge. Code that needs to know which one
dispatches on the two classes below.
"""
from dataclasses import dataclass
from typing import Union

from models.edge import Edge
from models.vertex import Vertex


@dataclass(frozen=True)
class AtVertex:
    vertex: Vertex

    def describe(self) -> str:
        return f"at {self.vertex.name}"


@dataclass(frozen=True)
class OnEdge:
    edge: Edge

    def describe(self) -> str:
        return f"on {self.edge.start.name}->{self.edge.end.name}"


Position = Union[AtVertex, OnEdge]
