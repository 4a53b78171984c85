import heapq
import math
from typing import Dict, List, Tuple

from models.edge import Edge
from models.position import AtVertex, OnEdge, Position
from models.vertex import Vertex


def _reconstruct_path(predecessor: Dict[Vertex, Edge], source: Vertex, target: Vertex) -> List[Edge]:
    """
    Rebuilds the edge list of a path from the {vertex: edge used to reach it}
    dictionary filled by the search.
    """
    path_edges: List[Edge] = []
    cursor = target
    while cursor is not source:
        edge_used = predecessor[cursor]
        path_edges.append(edge_used)
        cursor = edge_used.start
    path_edges.reverse()
    return path_edges


def shortest_path(source: Vertex, destination: Vertex) -> List[Edge]:
    """
    Runs Dijkstra from `source` to `destination` over the current weights.

    The queue is keyed by (cumulative cost, vertex insertion index), so equal
    costs are resolved in the order vertices were added to the town. The
    search stops when the destination is popped, at which point its cost is
    final. Closed roads (infinite weight) are never taken.

    Args:
        source (Vertex): Where the search starts.
        destination (Vertex): Where it should end.

    Returns:
        The list of edges from source to destination, empty if the destination
        is the source or cannot be reached.
    """
    if source is destination:
        return []

    distance_from_source: Dict[Vertex, float] = {source: 0.0}
    predecessor: Dict[Vertex, Edge] = {}
    settled = set()
    # Vertex order is unique within a town, so entries never compare vertices.
    priority_queue: List[Tuple[float, int, Vertex]] = [(0.0, source.order, source)]

    while priority_queue:
        current_distance, _, current = heapq.heappop(priority_queue)
        if current in settled:
            continue
        settled.add(current)

        if current is destination:
            return _reconstruct_path(predecessor, source, destination)

        for edge in current.edges:
            if math.isinf(edge.weight):
                continue
            neighbor = edge.end
            if neighbor in settled:
                continue
            new_distance = current_distance + edge.weight
            if new_distance < distance_from_source.get(neighbor, math.inf):
                distance_from_source[neighbor] = new_distance
                predecessor[neighbor] = edge
                heapq.heappush(priority_queue, (new_distance, neighbor.order, neighbor))

    return []


def find_path(position: Position, destination: Vertex) -> List[Edge]:
    """
    Computes the route a car should follow from where it stands.

    A car driving along an edge cannot turn back: the search then starts at
    the far end of that edge and the edge itself is kept as the first hop,
    even when the continuation is unreachable.

    Args:
        position: AtVertex or OnEdge describing the car's location.
        destination (Vertex): The car's destination.

    Returns:
        The list of edges to follow. For an OnEdge position it always starts
        with the current edge.
    """
    if isinstance(position, AtVertex):
        return shortest_path(position.vertex, destination)
    if isinstance(position, OnEdge):
        return [position.edge] + shortest_path(position.edge.end, destination)
    raise TypeError(f"Unknown position type: {type(position).__name__}")


def path_weight(path: List[Edge]) -> float:
    """Sums the weights of the edges of a path."""
    return sum(edge.weight for edge in path)
