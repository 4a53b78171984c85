import math
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from core.commands import Command, SetEdgeWeight
from core.errors import DuplicateNameError, UnknownVertexError
from core.fs.tokenizer import Token, TokenType, Tokenizer
from core.graph import Town, build_graph
from entities.car_spawner import CarSpawner

CAR_SECTIONS = (TokenType.CARS, TokenType.SIMULATION, TokenType.VEHICLES)
ROAD_KINDS = (TokenType.UEDGE, TokenType.BEDGE)
EVENT_KINDS = (TokenType.WEIGHT, TokenType.CLOSE)
DEFAULT_SPAWN_RATIO = 0.05
SPAWNER_BOUNDS = {"ratio": (0.0, 1.0)}
EVENT_BOUNDS = {"at": (0, math.inf)}


@dataclass
class CarRequest:
    label: str
    start: str
    end: str


@dataclass
class MapDefinition:
    """Everything a .map file describes, ready to be handed to a Simulation."""
    town: Town
    cars: List[CarRequest] = field(default_factory=list)
    spawners: List[CarSpawner] = field(default_factory=list)
    events: List[Tuple[int, Command]] = field(default_factory=list)


@dataclass
class RoadDecl:
    two_way: bool
    start: str
    end: str
    weight: Optional[float]
    line: int


@dataclass
class Located:
    """A parsed statement that names nodes, with the line it came from."""
    names: Tuple[str, ...]
    params: dict
    line: int
    label: str = ""
    kind: Optional[TokenType] = None


class Parser:
    """
    Recursive descent over the token stream of a .map file.

    One statement per line. Sections come in a fixed order: GRAPH (required),
    then CARS (or its aliases), SPAWNERS and EVENTS, each optional.
    """

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0

    def current_token(self) -> Token:
        return self.tokens[min(self.pos, len(self.tokens) - 1)]

    def at(self, *types: TokenType) -> bool:
        return self.current_token().type in types

    def advance(self) -> Token:
        token = self.current_token()
        self.pos += 1
        return token

    def expect(self, token_type: TokenType) -> Token:
        if not self.at(token_type):
            self.fail(f"Expected {token_type.value}")
        return self.advance()

    def fail(self, message: str):
        token = self.current_token()
        raise SyntaxError(f"{message}, found {token.type.value} at line {token.line}, column {token.column}")

    def skip_newlines(self):
        while self.at(TokenType.NEWLINE):
            self.advance()

    def end_statement(self):
        if not self.at(TokenType.NEWLINE, TokenType.EOF):
            self.fail("Expected end of line")
        self.skip_newlines()

    def open_section(self, headers: Sequence[TokenType]) -> bool:
        """Consumes a `HEADER:` line if one of `headers` comes next."""
        self.skip_newlines()
        if not self.at(*headers):
            return False
        self.advance()
        self.expect(TokenType.COLON)
        self.end_statement()
        return True

    def parse_params(self, bounds: Optional[Dict[str, Tuple[float, float]]] = None) -> dict:
        """Reads trailing `key=number` pairs, rejecting values outside `bounds`."""
        bounds = bounds or {}
        params = {}
        while self.at(TokenType.IDENTIFIER):
            key = self.advance().value
            self.expect(TokenType.EQUALS)
            token = self.expect(TokenType.NUMBER)
            low, high = bounds.get(key, (-math.inf, math.inf))
            if not low <= token.value <= high:
                raise SyntaxError(f"{key}={token.value} is outside [{low:g}, {high:g}] "
                                  f"at line {token.line}, column {token.column}")
            params[key] = token.value
        return params

    def parse_pair(self, item_type: TokenType) -> Tuple:
        """Reads `(first, second)` where both items are of `item_type`."""
        self.expect(TokenType.LPAREN)
        first = self.expect(item_type).value
        self.expect(TokenType.COMMA)
        second = self.expect(item_type).value
        self.expect(TokenType.RPAREN)
        return first, second

    def parse_graph(self) -> Tuple[Dict[str, Tuple[float, float]], List[RoadDecl]]:
        if not self.open_section([TokenType.GRAPH]):
            self.fail("Expected GRAPH section")

        nodes: Dict[str, Tuple[float, float]] = {}
        roads: List[RoadDecl] = []
        while self.at(TokenType.NODE, *ROAD_KINDS):
            keyword = self.advance()
            name = self.expect(TokenType.IDENTIFIER).value
            if keyword.type == TokenType.NODE:
                if name in nodes:
                    raise DuplicateNameError(f"Node '{name}' declared twice (line {keyword.line})")
                nodes[name] = self.parse_pair(TokenType.NUMBER)
            else:
                end = self.expect(TokenType.IDENTIFIER).value
                weight = self.parse_params().get("weight")
                roads.append(RoadDecl(keyword.type == TokenType.BEDGE, name, end, weight, keyword.line))
            self.end_statement()
        return nodes, roads

    def parse_cars(self) -> List[Located]:
        cars = []
        if not self.open_section(CAR_SECTIONS):
            return cars
        while self.at(TokenType.CAR):
            line = self.advance().line
            if self.at(TokenType.NUMBER):
                label = str(self.advance().value)
            else:
                label = self.expect(TokenType.IDENTIFIER).value
            cars.append(Located(self.parse_pair(TokenType.IDENTIFIER), {}, line, label=label))
            self.end_statement()
        return cars

    def parse_spawners(self) -> List[Located]:
        spawners = []
        if not self.open_section([TokenType.SPAWNERS]):
            return spawners
        while self.at(TokenType.SPAWNER):
            line = self.advance().line
            node = self.expect(TokenType.IDENTIFIER).value
            spawners.append(Located((node,), self.parse_params(SPAWNER_BOUNDS), line))
            self.end_statement()
        return spawners

    def parse_events(self) -> List[Located]:
        events = []
        if not self.open_section([TokenType.EVENTS]):
            return events
        while self.at(*EVENT_KINDS):
            keyword = self.advance()
            start = self.expect(TokenType.IDENTIFIER).value
            end = self.expect(TokenType.IDENTIFIER).value
            params = self.parse_params(EVENT_BOUNDS)
            if keyword.type == TokenType.WEIGHT and "weight" not in params:
                self.fail("Expected weight=")
            events.append(Located((start, end), params, keyword.line, kind=keyword.type))
            self.end_statement()
        return events

    def expect_end(self):
        self.skip_newlines()
        if not self.at(TokenType.EOF):
            self.fail("Unexpected statement")


def parse_map(content: str, rng: Optional[random.Random] = None) -> MapDefinition:
    """
    Parses the text of a .map file.

    Args:
        content (str): The file content.
        rng: Random generator shared by the spawners.

    Raises:
        SyntaxError: If the text does not follow the .map grammar.
        DuplicateNameError: If a node is declared twice.
        UnknownVertexError: If anything refers to an undeclared node.
        InvalidWeightError: If a road or event weight is invalid.
    """
    parser = Parser(Tokenizer(content).tokenize())
    nodes, roads = parser.parse_graph()
    car_lines = parser.parse_cars()
    spawner_lines = parser.parse_spawners()
    event_lines = parser.parse_events()
    parser.expect_end()

    for statement in car_lines + spawner_lines + event_lines:
        _require_nodes(nodes, statement.line, *statement.names)

    rng = rng or random.Random()
    cars = [CarRequest(c.label, *c.names) for c in car_lines]
    spawners = [
        CarSpawner(float(s.params.get("ratio", DEFAULT_SPAWN_RATIO)), s.names[0], rng=rng)
        for s in spawner_lines
    ]
    events = []
    for event in event_lines:
        weight = math.inf if event.kind == TokenType.CLOSE else event.params["weight"]
        events.append((int(event.params.get("at", 0)), SetEdgeWeight(*event.names, weight)))

    return MapDefinition(town=build_town(nodes, roads), cars=cars, spawners=spawners, events=events)


def import_map(file_path: str, rng: Optional[random.Random] = None) -> MapDefinition:
    with open(file_path, "r") as f:
        return parse_map(f.read(), rng=rng)


def build_town(nodes: Dict[str, Tuple[float, float]], roads: List[RoadDecl]) -> Town:
    """
    Turns the GRAPH section into a town.

    A road without an explicit weight costs the straight-line distance
    between its two nodes.
    """
    adjacency: Dict[str, List[Tuple[str, float]]] = {name: [] for name in nodes}
    for road in roads:
        _require_nodes(nodes, road.line, road.start, road.end)
        weight = road.weight
        if weight is None:
            weight = math.dist(nodes[road.start], nodes[road.end])
        adjacency[road.start].append((road.end, weight))
        if road.two_way:
            adjacency[road.end].append((road.start, weight))
    return build_graph(adjacency, nodes)


def _require_nodes(nodes: Dict[str, Tuple[float, float]], line: int, *names: str):
    for name in names:
        if name not in nodes:
            raise UnknownVertexError(f"Unknown node '{name}' at line {line}")
