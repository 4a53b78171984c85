import unittest

import config
from core.graph import Town

# Two-way roads of the five-vertex test town.
FIVE_TOWN_ROADS = [
    ("A", "B", 4),
    ("A", "C", 8),
    ("A", "E", 2),
    ("B", "C", 3),
    ("C", "D", 5),
    ("D", "E", 2),
]


def five_town() -> Town:
    town = Town()
    for name in "ABCDE":
        town.add_node(name)
    for a, b, weight in FIVE_TOWN_ROADS:
        town.connect_both_ways(a, b, weight)
    return town


def chain_town(*names: str, weight: float = 1) -> Town:
    """One-way roads names[0] -> names[1] -> ..."""
    town = Town()
    for name in names:
        town.add_node(name)
    for a, b in zip(names, names[1:]):
        town.connect_vertices(a, b, weight)
    return town


def road_ids(path):
    return [edge.id for edge in path]


class TownTestCase(unittest.TestCase):
    """Runs every test with the bookkeeping checks switched on."""

    def setUp(self):
        self._saved_check = config.CHECK_CONSISTENCY
        config.CHECK_CONSISTENCY = True

    def tearDown(self):
        config.CHECK_CONSISTENCY = self._saved_check
