from itertools import count
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import networkx as nx

import config
from cli import debug_log
from core.errors import (
    ConsistencyError,
    DuplicateEdgeError,
    DuplicateNameError,
    RoutingError,
    UnknownCarError,
    UnknownEdgeError,
    UnknownVertexError,
    UnreachableError,
)
from core.pathfinder import shortest_path as dijkstra
from entities.car import Car
from models.edge import Edge, validate_weight
from models.position import AtVertex, OnEdge
from models.vertex import Vertex


class Town:
    """
    Represents the road network as a directed graph, and the cars driving on it.

    This class wraps a NetworkX DiGraph: each node carries its Vertex object and
    each edge its Edge object. The town owns every vertex, edge and car, and
    every mutation goes through it so that car paths and edge car sets stay in
    sync. It is also the directory through which weight changes reach the cars.
    """

    def __init__(self):
        self.graph = nx.DiGraph()
        self._cars: Dict[int, Car] = {}
        self._vertex_order = count()
        self._car_ids = count(1)

    # ------------------------------------------------------------------
    # Vertices
    # ------------------------------------------------------------------

    def add_vertex(self, vertex: Vertex) -> Vertex:
        """
        Adds a vertex to the town.

        Raises:
            DuplicateNameError: If a vertex with that name already exists.
        """
        if self.graph.has_node(vertex.name):
            raise DuplicateNameError(f"Vertex '{vertex.name}' already exists")
        vertex.order = next(self._vertex_order)
        self.graph.add_node(vertex.name, object=vertex)
        return vertex

    def add_node(self, name: str, x: float = None, y: float = None) -> Vertex:
        """Creates and adds a vertex from a name and optional coordinates."""
        position = (x, y) if x is not None and y is not None else None
        return self.add_vertex(Vertex(name, position))

    def has_vertex(self, name: str) -> bool:
        return self.graph.has_node(name)

    def get_vertex(self, name: str) -> Vertex:
        """
        Retrieves a vertex by name.

        Raises:
            UnknownVertexError: If no vertex has that name.
        """
        if not self.graph.has_node(name):
            raise UnknownVertexError(f"No vertex named '{name}'")
        return self.graph.nodes[name]["object"]

    def vertices(self) -> List[Vertex]:
        """Returns the vertices in insertion order."""
        return [data["object"] for _, data in self.graph.nodes(data=True)]

    def remove_vertex(self, name: str) -> List[Car]:
        """
        Removes a vertex and every road leading to or from it.

        Cars standing at the vertex, driving on one of its roads, or heading
        to it are evicted from the town. Cars that only planned to use one of
        its roads are rerouted once the roads are gone, and become stranded if
        no other route exists.

        Returns:
            The evicted cars.
        """
        vertex = self.get_vertex(name)
        incident = list(vertex.edges)
        # Self-loops are both outgoing and incoming.
        incident += [data["object"] for _, _, data in self.graph.in_edges(name, data=True)
                     if data["object"] not in incident]

        def must_leave(car: Car) -> bool:
            return car.destination is vertex or car.vertex is vertex

        evicted = self._remove_edges(incident, must_leave)
        self.graph.remove_node(name)
        debug_log(f"Vertex {name} removed, {len(evicted)} car(s) evicted")
        self._check()
        return evicted

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def connect_vertices(self, from_name: str, to_name: str, weight: float) -> Edge:
        """
        Creates a one-way road between two vertices.

        Raises:
            UnknownVertexError: If either vertex does not exist.
            InvalidWeightError: If the weight is negative or not a number.
            DuplicateEdgeError: If the road already exists.
        """
        start = self.get_vertex(from_name)
        end = self.get_vertex(to_name)
        if self.graph.has_edge(from_name, to_name):
            raise DuplicateEdgeError(f"Road {from_name} -> {to_name} already exists")
        edge = Edge(start, end, weight)
        start.edges.append(edge)
        self.graph.add_edge(from_name, to_name, object=edge)
        return edge

    def connect_both_ways(self, a: str, b: str, weight: float) -> Tuple[Edge, Edge]:
        """Creates two independent roads, a -> b and b -> a, with the same weight."""
        validate_weight(weight)
        if self.graph.has_edge(b, a):
            raise DuplicateEdgeError(f"Road {b} -> {a} already exists")
        forward = self.connect_vertices(a, b, weight)
        backward = self.connect_vertices(b, a, weight)
        return forward, backward

    def has_edge(self, from_name: str, to_name: str) -> bool:
        return self.graph.has_edge(from_name, to_name)

    def get_edge(self, from_name: str, to_name: str) -> Edge:
        """
        Retrieves the road going from one vertex to another.

        Raises:
            UnknownEdgeError: If no road is found between the specified vertices.
        """
        edge_data = self.graph.get_edge_data(from_name, to_name)
        if edge_data is None:
            raise UnknownEdgeError(f"No road found from {from_name} to {to_name}")
        return edge_data["object"]

    def edges(self) -> List[Edge]:
        """Returns all roads, grouped by start vertex in declaration order."""
        return [edge for vertex in self.vertices() for edge in vertex.edges]

    def disconnect_vertices(self, from_name: str, to_name: str) -> List[Car]:
        """
        Removes a single road.

        Cars driving on it are evicted, cars about to take it are rerouted.

        Returns:
            The evicted cars.
        """
        edge = self.get_edge(from_name, to_name)
        evicted = self._remove_edges([edge], lambda car: False)
        debug_log(f"Road {from_name} -> {to_name} removed, {len(evicted)} car(s) evicted")
        self._check()
        return evicted

    def update_weight(self, edge: Edge, weight: float) -> List[Car]:
        """
        Changes the weight of a road and reroutes the cars assigned to it.

        Setting the weight it already has changes nothing and notifies nobody.

        Raises:
            InvalidWeightError: If the weight is negative or not a number.

        Returns:
            The cars that were rerouted.
        """
        weight = validate_weight(weight)
        if weight == edge.weight:
            return []

        debug_log(f"Road {edge.start.name} -> {edge.end.name}: weight {edge.weight:g} -> {weight:g}")
        edge.weight = weight
        notified = list(edge.cars)
        for car in notified:
            car.reroute(requested_by=edge)
        self._check()
        return notified

    def set_edge_weight(self, edge_id: Tuple[str, str], weight: float) -> List[Car]:
        """Same as `update_weight`, with the road given as a (start, end) pair of names."""
        from_name, to_name = edge_id
        return self.update_weight(self.get_edge(from_name, to_name), weight)

    def _remove_edges(self, edges: Sequence[Edge], must_leave) -> List[Car]:
        doomed = set(edges)
        evicted = []
        for car in list(self._cars.values()):
            if must_leave(car) or (isinstance(car.position, OnEdge) and car.position.edge in doomed):
                self.remove_car(car)
                evicted.append(car)

        affected = [car for car in self._cars.values()
                    if any(path_edge in doomed for path_edge in car.path)]

        for edge in edges:
            edge.start.edges.remove(edge)
            self.graph.remove_edge(edge.start.name, edge.end.name)

        for car in affected:
            car.reroute()
        for edge in edges:
            edge.cars.clear()
        return evicted

    # ------------------------------------------------------------------
    # Cars
    # ------------------------------------------------------------------

    def add_car(self, car: Car, require_path: bool = False) -> Car:
        """
        Registers a car, computes its initial path and assigns it to the first
        edge of that path.

        An unreachable destination gives a stranded car with an empty path,
        unless `require_path` is set.

        Raises:
            UnknownVertexError: If the car's vertices do not belong to this town.
            UnreachableError: If `require_path` is set and no path exists.
        """
        if car.town is not None:
            raise RoutingError(f"Car {car.id} is already registered in a town")
        for vertex in (car.start, car.destination):
            if not self.graph.has_node(vertex.name) or self.get_vertex(vertex.name) is not vertex:
                raise UnknownVertexError(f"Vertex '{vertex.name}' does not belong to this town")
        if require_path and car.start is not car.destination and not dijkstra(car.start, car.destination):
            raise UnreachableError(f"No path from {car.start.name} to {car.destination.name}")

        car.id = next(self._car_ids)
        car.town = self
        self._cars[car.id] = car
        car.plan()
        debug_log(f"Car {car.id} added with path: {car.describe_path()}")
        self._check()
        return car

    def create_car(self, start_name: str, end_name: str, require_path: bool = False) -> Car:
        """Creates a car between two named vertices and adds it to the town."""
        car = Car(self.get_vertex(start_name), self.get_vertex(end_name))
        return self.add_car(car, require_path=require_path)

    def get_car(self, car_id: int) -> Car:
        """
        Raises:
            UnknownCarError: If no car has that id.
        """
        try:
            return self._cars[car_id]
        except KeyError:
            raise UnknownCarError(f"No car with id {car_id}") from None

    def cars(self) -> List[Car]:
        return list(self._cars.values())

    def stranded_cars(self) -> List[Car]:
        return [car for car in self._cars.values() if car.stranded]

    def remove_car(self, car: Car):
        """
        Detaches a car from every road and forgets it.

        Raises:
            UnknownCarError: If the car is not registered here.
        """
        if self._cars.get(car.id) is not car:
            raise UnknownCarError(f"Car {car.id} is not registered in this town")
        car.detach()
        del self._cars[car.id]
        car.town = None
        debug_log(f"Car {car.id} removed")
        self._check()

    def advance_car(self, car: Car) -> Vertex:
        """Moves a car to the end of its current edge. See `Car.cross_edge`."""
        if self._cars.get(car.id) is not car:
            raise UnknownCarError(f"Car {car.id} is not registered in this town")
        reached = car.cross_edge()
        self._check()
        return reached

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def shortest_path(self, from_name: str, to_name: str) -> List[Edge]:
        """Returns the cheapest list of roads between two named vertices, empty if none."""
        return dijkstra(self.get_vertex(from_name), self.get_vertex(to_name))

    def check_consistency(self):
        """
        Verifies that car paths and edge car sets agree.

        Raises:
            ConsistencyError: On the first violation found.
        """
        owners = {}
        for vertex in self.vertices():
            for edge in vertex.edges:
                if edge.start is not vertex:
                    raise ConsistencyError(f"{edge} is listed under {vertex.name}")
                if edge in owners:
                    raise ConsistencyError(f"{edge} is listed twice")
                if self.graph.get_edge_data(edge.start.name, edge.end.name, {}).get("object") is not edge:
                    raise ConsistencyError(f"{edge} is missing from the graph")
                owners[edge] = vertex
        if len(owners) != self.graph.number_of_edges():
            raise ConsistencyError("Graph and vertex road lists disagree")

        for car in self._cars.values():
            for edge in car.path:
                if edge not in owners:
                    raise ConsistencyError(f"Car {car.id} uses {edge}, which is not in the town")
            for previous, following in zip(car.path, car.path[1:]):
                if previous.end is not following.start:
                    raise ConsistencyError(f"Car {car.id} has a broken path: {car.describe_path()}")
            if isinstance(car.position, OnEdge):
                if not car.path or car.path[0] is not car.position.edge:
                    raise ConsistencyError(f"Car {car.id} drives on {car.position.edge} outside its path")
            elif isinstance(car.position, AtVertex):
                if car.path and car.path[0].start is not car.position.vertex:
                    raise ConsistencyError(f"Car {car.id} path does not start at {car.position.vertex.name}")
            if car.path and not car.path[0].has_car(car):
                raise ConsistencyError(f"Car {car.id} is not assigned to its current edge")
            for edge in car.path[1:]:
                if edge.has_car(car) and edge is not car.path[0]:
                    raise ConsistencyError(f"Car {car.id} is assigned to {edge} ahead of time")

        for edge in owners:
            for car in edge.cars:
                if self._cars.get(car.id) is not car:
                    raise ConsistencyError(f"{edge} holds unregistered car {car.id}")
                if not car.path or car.path[0] is not edge:
                    raise ConsistencyError(f"{edge} holds car {car.id}, which is not about to use it")

    def _check(self):
        if config.CHECK_CONSISTENCY:
            self.check_consistency()


def build_graph(adjacency: Mapping[str, Iterable[Tuple[str, float]]],
                coordinates: Optional[Mapping[str, Tuple[float, float]]] = None) -> Town:
    """
    Builds a town from an adjacency description and a coordinate map.

    Vertices are created first, in coordinate map order followed by any
    adjacency key without coordinates, then roads in the order given.

    Args:
        adjacency: Mapping of vertex name to a list of (neighbor name, weight).
        coordinates: Mapping of vertex name to an (x, y) pair.

    Raises:
        UnknownVertexError: If a neighbor name is not a vertex.
        InvalidWeightError: If a weight is invalid.
    """
    coordinates = coordinates or {}
    town = Town()
    for name, (x, y) in coordinates.items():
        town.add_node(name, x, y)
    for name in adjacency:
        if not town.has_vertex(name):
            town.add_vertex(Vertex(name))

    for name, neighbors in adjacency.items():
        for neighbor, weight in neighbors:
            town.connect_vertices(name, neighbor, weight)
    return town
