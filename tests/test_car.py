import unittest

from core.errors import NotTravelingError
from entities.car import Car
from models.position import AtVertex, OnEdge
from town_fixtures import TownTestCase, five_town, road_ids


class TestCarMovement(TownTestCase):
    def test_advancing_consumes_one_edge_per_call(self):
        town = five_town()
        for start, end in (("A", "C"), ("D", "B"), ("C", "E"), ("B", "D")):
            car = town.create_car(start, end)
            hops = len(car.path)
            self.assertGreater(hops, 0)
            for done in range(1, hops + 1):
                town.advance_car(car)
                self.assertEqual(len(car.path), hops - done)
            self.assertTrue(car.arrived)
            self.assertEqual(car.position, AtVertex(town.get_vertex(end)))
            with self.assertRaises(NotTravelingError):
                town.advance_car(car)

    def test_crossing_moves_registration_to_next_edge(self):
        town = five_town()
        car = town.create_car("A", "C")
        first, second = car.path

        reached = car.cross_edge()

        self.assertIs(reached, town.get_vertex("B"))
        self.assertNotIn(car, first.cars)
        self.assertIn(car, second.cars)
        self.assertEqual(car.position, AtVertex(reached))
        self.assertEqual(road_ids(car.path), [("B", "C")])

    def test_depart_then_cross(self):
        town = five_town()
        car = town.create_car("A", "C")
        road = car.depart()
        self.assertEqual(car.position, OnEdge(road))
        self.assertIs(car.vertex, None)
        self.assertIs(car.depart(), road)  # already driving
        car.cross_edge()
        self.assertFalse(car.traveling)
        self.assertIs(car.vertex, town.get_vertex("B"))

    def test_depart_without_path(self):
        town = five_town()
        car = town.create_car("C", "C")
        with self.assertRaises(NotTravelingError):
            car.depart()

    def test_describe_path(self):
        town = five_town()
        car = town.create_car("A", "C")
        self.assertEqual(car.describe_path(), "[A -> B -> C]")
        self.assertIn("A->C", repr(car))

    def test_unregistered_car(self):
        town = five_town()
        car = Car(town.get_vertex("A"), town.get_vertex("C"))
        self.assertEqual(car.path, [])
        self.assertIsNone(car.id)
        self.assertIsNone(car.current_edge)
        self.assertTrue(car.stranded)


if __name__ == '__main__':
    unittest.main()
