"""
Read-only views of a town, for renderers and other observers.
"""
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Tuple

from models.position import OnEdge


@dataclass(frozen=True)
class VertexView:
    name: str
    position: Optional[Tuple[float, float]]


@dataclass(frozen=True)
class EdgeView:
    start: str
    end: str
    weight: float
    car_ids: Tuple[int, ...]


@dataclass(frozen=True)
class CarView:
    car_id: int
    start: str
    destination: str
    vertex: Optional[str]  # Set while the car stands at a vertex.
    edge: Optional[Tuple[str, str]]  # Set while the car drives on an edge.
    path: Tuple[Tuple[str, str], ...]
    arrived: bool
    stranded: bool


@dataclass(frozen=True)
class TownSnapshot:
    tick: int
    vertices: Tuple[VertexView, ...]
    edges: Tuple[EdgeView, ...]
    cars: Tuple[CarView, ...]

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def build_snapshot(town, tick: int = 0) -> TownSnapshot:
    vertices: List[VertexView] = [
        VertexView(name=v.name, position=v.position)
        for v in town.vertices()
    ]
    edges = [
        EdgeView(start=e.start.name, end=e.end.name, weight=e.weight, car_ids=tuple(e.car_ids()))
        for e in town.edges()
    ]
    cars = [
        CarView(
            car_id=c.id,
            start=c.start.name,
            destination=c.destination.name,
            vertex=c.vertex.name if c.vertex is not None else None,
            edge=c.position.edge.id if isinstance(c.position, OnEdge) else None,
            path=tuple(e.id for e in c.path),
            arrived=c.arrived,
            stranded=c.stranded,
        )
        for c in town.cars()
    ]
    return TownSnapshot(tick=tick, vertices=tuple(vertices), edges=tuple(edges), cars=tuple(cars))
