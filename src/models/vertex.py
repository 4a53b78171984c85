from typing import Optional, Tuple


class Vertex:
    """
    A named location of the town.

    A vertex owns the list of roads leaving it, in the order they were
    declared. That order, together with the insertion index the town assigns,
    keeps the pathfinder deterministic when several routes cost the same.
    """

    def __init__(self, name: str, position: Optional[Tuple[float, float]] = None):
        """
        Args:
            name (str): The unique name of the vertex.
            position: Optional (x, y) pair, only read by renderers.
        """
        self.name = name
        self.position = position
        self.edges = []  # Outgoing Edge objects, in declaration order.
        self.order = -1  # Set by the town on insertion.

    def __repr__(self):
        return f"Vertex({self.name!r})"
