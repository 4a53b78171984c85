import math
import random
import unittest

from core.commands import (
    AddCar,
    AdvanceCar,
    ConnectVertices,
    RemoveCar,
    RemoveVertex,
    SetEdgeWeight,
)
from core.errors import (
    NotTravelingError,
    UnknownCarError,
    UnknownEdgeError,
    UnknownVertexError,
    UnreachableError,
)
from core.simulation import Simulation
from core.snapshot import build_snapshot
from entities.car_spawner import CarSpawner
from town_fixtures import TownTestCase, chain_town, five_town, road_ids


class TestCommands(TownTestCase):
    def test_add_advance_remove(self):
        town = five_town()
        add = AddCar("A", "C")
        car_id = add.run(town)
        self.assertTrue(add.succeeded)
        self.assertEqual(car_id, town.get_car(car_id).id)

        advance = AdvanceCar(car_id)
        self.assertEqual(advance.run(town), "B")

        remove = RemoveCar(car_id)
        remove.run(town)
        self.assertTrue(remove.succeeded)
        self.assertEqual(town.cars(), [])

    def test_errors_are_recorded(self):
        town = five_town()
        cases = [
            (SetEdgeWeight("A", "D", 1), UnknownEdgeError),
            (RemoveCar(99), UnknownCarError),
            (AddCar("A", "Q"), UnknownVertexError),
        ]
        for command, error_type in cases:
            self.assertIsNone(command.run(town))
            self.assertIsInstance(command.error, error_type)
            self.assertFalse(command.succeeded)

    def test_advance_arrived_car(self):
        town = five_town()
        car_id = AddCar("A", "A").run(town)
        command = AdvanceCar(car_id)
        command.run(town)
        self.assertIsInstance(command.error, NotTravelingError)

    def test_add_car_requiring_path(self):
        town = chain_town("X", "Y")
        command = AddCar("Y", "X", require_path=True)
        command.run(town)
        self.assertIsInstance(command.error, UnreachableError)

    def test_set_weight_returns_rerouted_ids(self):
        town = five_town()
        car = town.create_car("A", "C")
        command = SetEdgeWeight("A", "B", 100)
        self.assertEqual(command.run(town), [car.id])

    def test_remove_and_connect(self):
        town = five_town()
        car = town.create_car("A", "C")
        self.assertEqual(RemoveVertex("B").run(town), [])
        self.assertEqual(ConnectVertices("E", "C", 1).run(town), ("E", "C"))
        town.update_weight(town.get_edge("A", "C"), 9)
        self.assertEqual(road_ids(car.path), [("A", "E"), ("E", "C")])


class TestSimulation(TownTestCase):
    def test_car_reaches_destination(self):
        town = five_town()
        town.create_car("A", "C")
        simulation = Simulation(town)

        ticks = simulation.run(max_ticks=20)

        # depart, cross, depart, cross
        self.assertEqual(ticks, 4)
        self.assertEqual(simulation.arrived_count, 1)
        self.assertEqual(town.cars(), [])

    def test_tick_by_tick_positions(self):
        town = five_town()
        car = town.create_car("A", "C")
        simulation = Simulation(town)
        simulation.tick()
        self.assertTrue(car.traveling)
        self.assertEqual(car.position.edge.id, ("A", "B"))
        simulation.tick()
        self.assertIs(car.vertex, town.get_vertex("B"))

    def test_scheduled_weight_change_while_driving(self):
        town = five_town()
        car = town.create_car("A", "C")
        simulation = Simulation(town)
        command = SetEdgeWeight("A", "B", 100)
        simulation.schedule(1, command)

        simulation.tick()
        self.assertTrue(simulation.pending())
        simulation.tick()

        self.assertEqual(command.result, [car.id])
        self.assertIs(car.vertex, town.get_vertex("B"))
        self.assertEqual(road_ids(car.path), [("B", "C")])

    def test_queued_commands_run_before_cars_move(self):
        town = five_town()
        car = town.create_car("A", "C")
        simulation = Simulation(town)
        simulation.queue_command(SetEdgeWeight("A", "B", 100))
        simulation.tick()
        self.assertEqual(car.position.edge.id, ("A", "C"))

    def test_failed_commands_do_not_stop_the_tick(self):
        town = five_town()
        simulation = Simulation(town)
        bad = SetEdgeWeight("A", "B", -5)
        good = AddCar("A", "C")
        simulation.queue_command(bad)
        simulation.queue_command(good)

        executed = simulation.tick()

        self.assertEqual(executed, [bad, good])
        self.assertEqual(simulation.failed_commands, [bad])
        self.assertTrue(town.get_car(good.result).traveling)

    def test_schedule_in_the_past(self):
        simulation = Simulation(five_town())
        simulation.tick()
        with self.assertRaises(ValueError):
            simulation.schedule(0, SetEdgeWeight("A", "B", 1))

    def test_stranded_car_resumes_when_road_reopens(self):
        town = chain_town("X", "Y")
        town.update_weight(town.get_edge("X", "Y"), math.inf)
        car = town.create_car("X", "Y")
        simulation = Simulation(town)
        simulation.schedule(2, SetEdgeWeight("X", "Y", 1))

        simulation.tick()
        simulation.tick()
        self.assertTrue(car.stranded)
        simulation.tick()  # reopened, car finds the road again
        self.assertFalse(car.stranded)

        simulation.run(max_ticks=10)
        self.assertEqual(simulation.arrived_count, 1)

    def test_remove_vertex_counts_evictions(self):
        town = five_town()
        town.create_car("A", "B")
        simulation = Simulation(town)
        simulation.queue_command(RemoveVertex("B"))
        simulation.tick()
        self.assertEqual(simulation.evicted_count, 1)
        self.assertEqual(town.cars(), [])

    def test_keep_arrived_cars(self):
        town = five_town()
        car = town.create_car("A", "B")
        simulation = Simulation(town, remove_arrived=False)
        simulation.run(max_ticks=5)
        self.assertEqual(simulation.t, 5)
        self.assertTrue(car.arrived)
        self.assertEqual(town.cars(), [car])
        self.assertEqual(simulation.arrived_count, 1)
        snapshot = simulation.snapshot()
        self.assertEqual(snapshot.tick, 5)
        self.assertTrue(snapshot.cars[0].arrived)

    def test_snapshot(self):
        town = five_town()
        car = town.create_car("A", "C")
        car.depart()
        snapshot = build_snapshot(town, tick=3)

        self.assertEqual(snapshot.tick, 3)
        self.assertEqual([v.name for v in snapshot.vertices], list("ABCDE"))
        (view,) = snapshot.cars
        self.assertEqual(view.car_id, car.id)
        self.assertEqual(view.edge, ("A", "B"))
        self.assertIsNone(view.vertex)
        self.assertEqual(view.path, (("A", "B"), ("B", "C")))
        self.assertFalse(view.stranded)
        road = next(e for e in snapshot.edges if (e.start, e.end) == ("A", "B"))
        self.assertEqual(road.car_ids, (car.id,))
        self.assertEqual(snapshot.as_dict()["cars"][0]["destination"], "C")


class TestCarSpawner(TownTestCase):
    def test_always_spawns_with_ratio_one(self):
        town = five_town()
        spawner = CarSpawner(1.0, "A", rng=random.Random(1))
        for _ in range(5):
            car = spawner.update(town)
            self.assertIsNotNone(car)
            self.assertIs(car.start, town.get_vertex("A"))
            self.assertIsNot(car.destination, car.start)
        self.assertEqual(len(town.cars()), 5)

    def test_never_spawns_with_ratio_zero(self):
        town = five_town()
        spawner = CarSpawner(0.0, "A", rng=random.Random(1))
        self.assertIsNone(spawner.update(town))
        self.assertEqual(town.cars(), [])

    def test_unreachable_destination(self):
        town = chain_town("X", "Y")
        spawner = CarSpawner(1.0, "Y")
        self.assertIsNone(spawner.update(town))
        self.assertEqual(town.cars(), [])

    def test_same_seed_same_cars(self):
        destinations = []
        for _ in range(2):
            town = five_town()
            simulation = Simulation(town, spawners=[CarSpawner(0.5, "A", rng=random.Random(9))])
            seen = []
            for _ in range(10):
                simulation.tick()
                seen.append(sorted((c.id, c.destination.name) for c in town.cars()))
            destinations.append(seen)
        self.assertEqual(destinations[0], destinations[1])

    def test_spawner_vertex_removed(self):
        town = five_town()
        simulation = Simulation(town, spawners=[CarSpawner(1.0, "B", rng=random.Random(0))])
        simulation.queue_command(RemoveVertex("B"))
        simulation.tick()
        self.assertEqual(town.cars(), [])
        self.assertEqual(simulation.failed_commands, [])

        self.assertEqual(simulation.run(max_ticks=3), 3)
        self.assertEqual(town.cars(), [])

    def test_invalid_ratio(self):
        with self.assertRaises(ValueError):
            CarSpawner(1.5, "A")


if __name__ == '__main__':
    unittest.main()
