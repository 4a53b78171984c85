from typing import List, Optional

from cli import debug_log
from core.errors import NotTravelingError
from core.pathfinder import find_path
from models.edge import Edge
from models.position import AtVertex, OnEdge
from models.vertex import Vertex


class Car:
    """
    A car driving through the town towards a fixed destination.

    The car holds the path it intends to follow and where it currently is.
    It is assigned to the first edge of its path only: either the road it is
    driving on, or the road it is about to take. When the weight of that edge
    changes the town calls `reroute`.
    """

    def __init__(self, start: Vertex, destination: Vertex):
        """
        Initializes a new car standing at its start vertex.

        The car has no path until it is added to a town.

        Args:
            start (Vertex): Where the car starts.
            destination (Vertex): Where the car wants to go.
        """
        self.id = None  # Assigned by the town.
        self.town = None
        self.start = start
        self.destination = destination
        self.position = AtVertex(start)
        self.path: List[Edge] = []

    @property
    def current_edge(self) -> Optional[Edge]:
        """The edge the car is driving on or about to take, if any."""
        if self.path:
            return self.path[0]
        return None

    @property
    def traveling(self) -> bool:
        """True while the car is driving along an edge."""
        return isinstance(self.position, OnEdge)

    @property
    def vertex(self) -> Optional[Vertex]:
        """The vertex the car stands at, or None while on an edge."""
        if isinstance(self.position, AtVertex):
            return self.position.vertex
        return None

    @property
    def arrived(self) -> bool:
        return not self.path and self.vertex is self.destination

    @property
    def stranded(self) -> bool:
        """
        True when the destination cannot be reached from where the car is.

        A car on an edge whose destination became unreachable keeps that edge
        as its only hop: it is stranded as well.
        """
        if self.arrived:
            return False
        if not self.path:
            return True
        return self.path[-1].end is not self.destination

    def plan(self):
        """Computes the initial path and registers on its first edge."""
        self._install_path(find_path(self.position, self.destination), keep=None)
        if self.stranded:
            debug_log(f"Car {self.id} cannot reach {self.destination.name} from {self.start.name}", "warning")

    def reroute(self, requested_by: Optional[Edge] = None) -> List[Edge]:
        """
        Recomputes the path from the car's current position.

        A car standing at a vertex simply takes the new best path. A car on an
        edge finishes that edge first: the edge stays the first hop and the
        car stays assigned to it.

        Args:
            requested_by: The edge whose weight change triggered the call.

        Returns:
            The new path.
        """
        if isinstance(self.position, AtVertex):
            keep = None
        elif isinstance(self.position, OnEdge):
            keep = self.position.edge
        else:
            raise TypeError(f"Unknown position type: {type(self.position).__name__}")

        new_path = find_path(self.position, self.destination)
        self._install_path(new_path, keep=keep)

        trigger = f" after {requested_by.start.name}->{requested_by.end.name} changed" if requested_by else ""
        debug_log(f"Car {self.id} rerouted {self.position.describe()}{trigger}: {self.describe_path()}")
        if self.stranded:
            debug_log(f"Car {self.id} stranded {self.position.describe()}, "
                      f"{self.destination.name} is unreachable", "warning")
        return new_path

    def depart(self) -> Edge:
        """
        Starts driving along the first edge of the path.

        Returns:
            The edge the car is now on.

        Raises:
            NotTravelingError: If the path is empty.
        """
        if isinstance(self.position, OnEdge):
            return self.position.edge
        if not self.path:
            raise NotTravelingError(f"Car {self.id} has no edge to take")
        self.position = OnEdge(self.path[0])
        return self.path[0]

    def cross_edge(self) -> Vertex:
        """
        Finishes the first edge of the path and moves to its end vertex.

        Works whether the car already departed on the edge or still stands at
        its start. The car then registers on the next edge, if any.

        Returns:
            The vertex the car reached.

        Raises:
            NotTravelingError: If the path is empty (arrived or stranded).
        """
        if not self.path:
            raise NotTravelingError(f"Car {self.id} has no edge to cross")

        edge = self.path.pop(0)
        edge.remove_car(self)
        self.position = AtVertex(edge.end)
        if self.path:
            self.path[0].insert_car(self)
        return edge.end

    def detach(self):
        """Leaves every edge of the path and forgets it."""
        for edge in self.path:
            edge.remove_car(self)
        self.path = []

    def describe_path(self) -> str:
        if not self.path:
            return "[]"
        names = [self.path[0].start.name] + [edge.end.name for edge in self.path]
        return "[" + " -> ".join(names) + "]"

    def _install_path(self, new_path: List[Edge], keep: Optional[Edge]):
        for edge in self.path:
            if edge is not keep:
                edge.remove_car(self)
        self.path = new_path
        if new_path:
            new_path[0].insert_car(self)

    def __repr__(self):
        return (f"Car(id={self.id}, {self.start.name}->{self.destination.name}, "
                f"{self.position.describe()})")
