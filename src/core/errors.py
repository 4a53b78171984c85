"""
Error kinds raised by the routing core.

All of them are local, recoverable conditions: the simulation loop catches
RoutingError per command and keeps running.
"""


class RoutingError(Exception):
    """Base class for every error reported by the town and its cars."""


class DuplicateNameError(RoutingError):
    """A vertex with the same name already exists."""


class DuplicateEdgeError(DuplicateNameError):
    """The two vertices are already connected in that direction."""


class UnknownVertexError(RoutingError):
    """A name does not refer to any vertex of the town."""


class UnknownEdgeError(RoutingError):
    """No road goes from the first vertex to the second."""


class UnknownCarError(RoutingError):
    """A car id, or car object, is not registered in the town."""


class InvalidWeightError(RoutingError):
    """A weight is negative, NaN or not a number at all."""


class UnreachableError(RoutingError):
    """No path exists between the requested vertices."""


class NotTravelingError(RoutingError):
    """The car has no edge left to take."""


class ConsistencyError(RoutingError):
    """Car paths and edge car sets disagree."""
