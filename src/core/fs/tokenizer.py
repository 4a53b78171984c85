from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional


class TokenType(Enum):
    """Kinds of lexemes in a .map file."""
    GRAPH = "GRAPH"
    CARS = "CARS"
    SIMULATION = "SIMULATION"
    VEHICLES = "VEHICLES"
    SPAWNERS = "SPAWNERS"
    EVENTS = "EVENTS"

    NODE = "NODE"
    UEDGE = "UEDGE"  # One-way road
    BEDGE = "BEDGE"  # Two-way road
    CAR = "CAR"
    SPAWNER = "SPAWNER"
    WEIGHT = "WEIGHT"
    CLOSE = "CLOSE"

    LPAREN = "("
    RPAREN = ")"
    COLON = ":"
    COMMA = ","
    EQUALS = "="

    IDENTIFIER = "IDENTIFIER"
    NUMBER = "NUMBER"

    NEWLINE = "NEWLINE"
    EOF = "EOF"


SECTION_KEYWORDS = ("GRAPH", "CARS", "SIMULATION", "VEHICLES", "SPAWNERS", "EVENTS")
STATEMENT_KEYWORDS = ("NODE", "UEDGE", "BEDGE", "CAR", "SPAWNER", "WEIGHT", "CLOSE")
KEYWORDS = {word: TokenType(word) for word in SECTION_KEYWORDS + STATEMENT_KEYWORDS}

PUNCTUATION = {kind.value: kind for kind in
               (TokenType.LPAREN, TokenType.RPAREN, TokenType.COLON, TokenType.COMMA, TokenType.EQUALS)}


@dataclass
class Token:
    type: TokenType
    value: Any
    line: int
    column: int


class Tokenizer:
    """
    Splits the text of a .map file into tokens.

    Spaces and tabs separate tokens, newlines are significant (one statement
    per line) and everything after a '#' up to the end of the line is a
    comment. Numbers may carry a leading '-' and a single decimal point.
    """

    def __init__(self, content: str):
        self.content = content
        self.pos = 0
        self.line = 1
        self.line_start = 0
        self.tokens: List[Token] = []

    @property
    def column(self) -> int:
        return self.pos - self.line_start + 1

    def peek(self, offset: int = 0) -> Optional[str]:
        index = self.pos + offset
        return self.content[index] if index < len(self.content) else None

    def take_while(self, accept) -> str:
        """Consumes characters while `accept(char)` holds and returns them."""
        start = self.pos
        while self.pos < len(self.content) and accept(self.content[self.pos]):
            self.pos += 1
        return self.content[start:self.pos]

    def emit(self, token_type: TokenType, value: Any, column: int):
        self.tokens.append(Token(token_type, value, self.line, column))

    def read_number(self):
        column = self.column
        sign = ""
        if self.peek() == "-":
            sign = "-"
            self.pos += 1
        whole = self.take_while(str.isdigit)
        if self.peek() == "." and (self.peek(1) or "").isdigit():
            self.pos += 1
            self.emit(TokenType.NUMBER, float(f"{sign}{whole}.{self.take_while(str.isdigit)}"), column)
        else:
            self.emit(TokenType.NUMBER, int(sign + whole), column)

    def read_word(self):
        column = self.column
        word = self.take_while(lambda c: c.isalnum() or c == "_")
        self.emit(KEYWORDS.get(word, TokenType.IDENTIFIER), word, column)

    def tokenize(self) -> List[Token]:
        """
        Scans the whole content.

        Returns:
            The tokens, always terminated by an EOF token.

        Raises:
            SyntaxError: On a character that starts no token.
        """
        while self.peek() is not None:
            char = self.peek()
            if char in " \t\r":
                self.pos += 1
            elif char == "#":
                self.take_while(lambda c: c != "\n")
            elif char == "\n":
                self.emit(TokenType.NEWLINE, char, self.column)
                self.pos += 1
                self.line += 1
                self.line_start = self.pos
            elif char in PUNCTUATION:
                self.emit(PUNCTUATION[char], char, self.column)
                self.pos += 1
            elif char.isdigit() or (char == "-" and (self.peek(1) or "").isdigit()):
                self.read_number()
            elif char.isalpha() or char == "_":
                self.read_word()
            else:
                raise SyntaxError(f"Unexpected character '{char}' at line {self.line}, column {self.column}")

        self.emit(TokenType.EOF, None, self.column)
        return self.tokens
