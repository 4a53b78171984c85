"""
Mutations a driving loop can request from the town.

Commands are queued and executed one at a time at the start of a simulation
tick. Each one keeps the value it produced, or the RoutingError it raised.
"""
from abc import ABC, abstractmethod
from collections import deque
from typing import Any, Deque, Optional

from core.errors import RoutingError


class Command(ABC):
    def __init__(self):
        self.result: Any = None
        self.error: Optional[RoutingError] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def run(self, town) -> Any:
        """Executes the command, recording its result or its routing error."""
        try:
            self.result = self.execute(town)
        except RoutingError as exc:
            self.error = exc
        return self.result

    @abstractmethod
    def execute(self, town) -> Any:
        pass


class SetEdgeWeight(Command):
    def __init__(self, start: str, end: str, weight: float):
        super().__init__()
        self.start = start
        self.end = end
        self.weight = weight

    def execute(self, town):
        rerouted = town.set_edge_weight((self.start, self.end), self.weight)
        return [car.id for car in rerouted]

    def __repr__(self):
        return f"SetEdgeWeight({self.start}->{self.end}, {self.weight})"


class AddCar(Command):
    def __init__(self, start: str, end: str, require_path: bool = False):
        super().__init__()
        self.start = start
        self.end = end
        self.require_path = require_path

    def execute(self, town) -> int:
        return town.create_car(self.start, self.end, require_path=self.require_path).id

    def __repr__(self):
        return f"AddCar({self.start}->{self.end})"


class RemoveCar(Command):
    def __init__(self, car_id: int):
        super().__init__()
        self.car_id = car_id

    def execute(self, town):
        town.remove_car(town.get_car(self.car_id))
        return self.car_id

    def __repr__(self):
        return f"RemoveCar({self.car_id})"


class AdvanceCar(Command):
    def __init__(self, car_id: int):
        super().__init__()
        self.car_id = car_id

    def execute(self, town) -> str:
        return town.advance_car(town.get_car(self.car_id)).name

    def __repr__(self):
        return f"AdvanceCar({self.car_id})"


class RemoveVertex(Command):
    def __init__(self, name: str):
        super().__init__()
        self.name = name

    def execute(self, town):
        return [car.id for car in town.remove_vertex(self.name)]

    def __repr__(self):
        return f"RemoveVertex({self.name})"


class ConnectVertices(Command):
    def __init__(self, start: str, end: str, weight: float):
        super().__init__()
        self.start = start
        self.end = end
        self.weight = weight

    def execute(self, town):
        return town.connect_vertices(self.start, self.end, self.weight).id

    def __repr__(self):
        return f"ConnectVertices({self.start}->{self.end}, {self.weight})"


class CommandQueue:
    def __init__(self):
        self.queue: Deque[Command] = deque()

    def add(self, command: Command):
        self.queue.append(command)

    def pop_all(self) -> Deque[Command]:
        commands = self.queue
        self.queue = deque()
        return commands

    def clear(self):
        self.queue.clear()

    def __len__(self):
        return len(self.queue)
