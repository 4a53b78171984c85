import math
from numbers import Real
from typing import List, Tuple

from core.errors import InvalidWeightError
from models.vertex import Vertex


def validate_weight(weight) -> float:
    """
    Checks that a value can be used as a road weight.

    Any non-negative real number is accepted, positive infinity included
    (a closed road).

    Raises:
        InvalidWeightError: If the weight is not a number, is NaN or is negative.
    """
    if isinstance(weight, bool) or not isinstance(weight, Real):
        raise InvalidWeightError(f"Weight must be a number, got {weight!r}")
    weight = float(weight)
    if math.isnan(weight):
        raise InvalidWeightError("Weight must not be NaN")
    if weight < 0:
        raise InvalidWeightError(f"Weight must not be negative, got {weight}")
    return weight


class Edge:
    """
    A directed road from one vertex to another.

    Besides its weight, an edge keeps the cars assigned to it: those about to
    take it as their next hop and those driving on it. The list only holds
    references, the town is responsible for keeping it in sync with the cars.
    """

    def __init__(self, start: Vertex, end: Vertex, weight: float):
        self.start = start
        self.end = end
        self.weight = validate_weight(weight)
        self.cars = []

    @property
    def id(self) -> Tuple[str, str]:
        """The (start name, end name) pair identifying the edge."""
        return self.start.name, self.end.name

    @property
    def closed(self) -> bool:
        return math.isinf(self.weight)

    def insert_car(self, car) -> bool:
        """
        Assigns a car to the edge.

        Returns:
            True if the car was added, False if it was already there.
        """
        if car in self.cars:
            return False
        self.cars.append(car)
        return True

    def remove_car(self, car) -> bool:
        """
        Unassigns a car from the edge.

        Returns:
            True if the car was removed, False if it was not on the edge.
        """
        try:
            self.cars.remove(car)
        except ValueError:
            return False
        return True

    def has_car(self, car) -> bool:
        return car in self.cars

    def car_ids(self) -> List[int]:
        return [car.id for car in self.cars]

    def __repr__(self):
        return f"Edge({self.start.name!r} -> {self.end.name!r}, weight={self.weight:g})"
