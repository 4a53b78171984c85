from collections import defaultdict
from time import sleep, time
from typing import Dict, Iterable, List

import config
from cli import debug_log
from core.commands import Command, CommandQueue, RemoveVertex
from core.graph import Town
from core.snapshot import TownSnapshot, build_snapshot
from entities.car_spawner import CarSpawner


class Simulation:
    """
    Drives a town tick by tick.

    All mutations requested from outside go through the command queue and are
    applied at the start of the next tick, before any car moves, so a tick
    always sees one settled set of weights.

    Car movement per tick: a car waiting at a vertex departs on its next edge,
    a car on an edge reaches its end. Stranded cars at a vertex look for a
    route again, and cars that arrived leave the town.
    """

    def __init__(self, town: Town, spawners: Iterable[CarSpawner] = (), remove_arrived: bool = True):
        self.town = town
        self.spawners = list(spawners)
        self.remove_arrived = remove_arrived
        self.command_queue = CommandQueue()
        self.scheduled: Dict[int, List[Command]] = defaultdict(list)
        self.t = 0
        self.running = False

        self.arrived_count = 0
        self.evicted_count = 0
        self.failed_commands: List[Command] = []
        self._counted_arrivals = set()

    def queue_command(self, command: Command):
        self.command_queue.add(command)

    def schedule(self, tick: int, command: Command):
        """Queues a command to run at the start of a given tick."""
        if tick < self.t:
            raise ValueError(f"Tick {tick} is already past (now {self.t})")
        self.scheduled[tick].append(command)

    def pending(self) -> bool:
        """True while commands are waiting, queued or scheduled."""
        return bool(self.command_queue) or any(self.scheduled.values())

    def snapshot(self) -> TownSnapshot:
        return build_snapshot(self.town, self.t)

    def tick(self) -> List[Command]:
        """
        Runs one simulation step.

        Returns:
            The commands executed during the step.
        """
        commands = self.scheduled.pop(self.t, []) + list(self.command_queue.pop_all())
        for command in commands:
            self.execute(command)

        for spawner in self.spawners:
            new_car = spawner.update(self.town)
            if new_car:
                debug_log(f"Spawned car {new_car.id} at {spawner.node} heading to {new_car.destination.name}")

        self._move_cars()

        if config.CHECK_CONSISTENCY:
            self.town.check_consistency()
        self.t += 1
        return commands

    def execute(self, command: Command):
        command.run(self.town)
        if command.error is not None:
            self.failed_commands.append(command)
            debug_log(f"Tick {self.t}: {command!r} failed: {command.error}", "warning")
            return
        if isinstance(command, RemoveVertex):
            self.evicted_count += len(command.result)
        debug_log(f"Tick {self.t}: {command!r} -> {command.result}")

    def _move_cars(self):
        for car in self.town.cars():
            if car.arrived:
                self._arrive(car)
            elif car.traveling:
                car.cross_edge()
                if car.arrived:
                    self._arrive(car)
            elif car.path:
                car.depart()
            else:
                # Stranded at a vertex: a road may have reopened since.
                car.reroute()

    def _arrive(self, car):
        # Kept cars stay arrived on later ticks, count them once.
        if car in self._counted_arrivals:
            return
        self.arrived_count += 1
        debug_log(f"Car {car.id} arrived at {car.destination.name}")
        if self.remove_arrived:
            self.town.remove_car(car)
        else:
            self._counted_arrivals.add(car)

    def run(self, max_ticks: int, tps: float = 0.0) -> int:
        """
        Ticks until the town is empty with nothing left to do, or until
        `max_ticks` ticks ran.

        Args:
            max_ticks (int): Upper bound on the number of ticks.
            tps (float): Ticks per second. 0 runs as fast as possible.

        Returns:
            The number of ticks run.
        """
        tick_duration = 1.0 / tps if tps > 0 else 0.0
        start_tick = self.t
        self.running = True
        while self.running and self.t - start_tick < max_ticks:
            started = time()
            self.tick()
            if not self.town.cars() and not self.pending() and not self.spawners:
                self.running = False
            if tick_duration:
                sleep(max(0.0, tick_duration - (time() - started)))
        self.running = False
        return self.t - start_tick
