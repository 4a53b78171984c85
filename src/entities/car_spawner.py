import random
from typing import Optional

from cli import debug_log
from core.errors import UnreachableError
from entities.car import Car


class CarSpawner:
    """
    Manages the creation of new cars at a specific vertex of the town.

    A spawner attempts to create a new car at each time step, based on a given
    probability (spawn_ratio), heading to a randomly chosen vertex.
    """

    def __init__(self, spawn_ratio: float, node: str, rng: Optional[random.Random] = None):
        """
        Initializes the car spawner.

        Args:
            spawn_ratio (float): The probability (0.0 to 1.0) of spawning a
                                 car at each simulation tick.
            node (str): The name of the vertex where cars will be spawned.
            rng: The random generator to draw from, for reproducible runs.
        """
        if not 0.0 <= spawn_ratio <= 1.0:
            raise ValueError(f"spawn_ratio must be between 0 and 1, got {spawn_ratio}")
        self.spawn_ratio = spawn_ratio
        self.node = node
        self.rng = rng or random.Random()

    def update(self, town) -> Optional[Car]:
        """
        Attempts to spawn a new car.

        If the random check passes, it chooses a random destination and adds a
        car heading there, provided a path exists.

        Args:
            town (Town): The town to add the car to.

        Returns:
            The new Car, or None if nothing was spawned (including when the
            spawner's vertex was removed from the town).
        """
        if self.rng.random() >= self.spawn_ratio:
            return None
        if not town.has_vertex(self.node):
            debug_log(f"Spawner at {self.node} is idle, the vertex is gone", "warning")
            return None

        # Select a random destination from all other vertices of the town.
        possible_destinations = [v.name for v in town.vertices() if v.name != self.node]
        if not possible_destinations:
            return None
        destination = self.rng.choice(possible_destinations)

        try:
            return town.create_car(self.node, destination, require_path=True)
        except UnreachableError:
            return None
