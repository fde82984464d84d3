from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict, Optional, Tuple

from treelox.language.lox_types import LoxLiteral


class Tk(Enum):
    # punctuation
    LEFT_PAREN = auto()
    RIGHT_PAREN = auto()
    LEFT_BRACE = auto()
    RIGHT_BRACE = auto()
    COMMA = auto()
    DOT = auto()
    SEMICOLON = auto()
    # operators
    MINUS = auto()
    PLUS = auto()
    SLASH = auto()
    STAR = auto()
    BANG = auto()
    BANG_EQUAL = auto()
    EQUAL = auto()
    EQUAL_EQUAL = auto()
    GREATER = auto()
    GREATER_EQUAL = auto()
    LESS = auto()
    LESS_EQUAL = auto()
    # keywords
    AND = auto()
    CLASS = auto()
    ELSE = auto()
    FALSE = auto()
    FUN = auto()
    FOR = auto()
    IF = auto()
    NIL = auto()
    OR = auto()
    PRINT = auto()
    RETURN = auto()
    SUPER = auto()
    THIS = auto()
    TRUE = auto()
    VAR = auto()
    WHILE = auto()
    # literals
    IDENTIFIER = auto()
    STRING = auto()
    NUMBER = auto()
    EOF = auto()

    @property
    def spelling(self) -> str:
        """How the token is written in source, e.g. `'}'` for `RIGHT_BRACE`."""
        return _SPELLINGS.get(self, self.name.lower())


# Characters that always form a token by themselves. The slash is scanned separately
# since it may open a comment.
ONE_CHAR_TOKENS: Dict[str, Tk] = {
    "(": Tk.LEFT_PAREN,
    ")": Tk.RIGHT_PAREN,
    "{": Tk.LEFT_BRACE,
    "}": Tk.RIGHT_BRACE,
    ",": Tk.COMMA,
    ".": Tk.DOT,
    ";": Tk.SEMICOLON,
    "-": Tk.MINUS,
    "+": Tk.PLUS,
    "*": Tk.STAR,
}

# Characters that form one token alone and another when followed by "=".
EQUAL_SUFFIXABLE_TOKENS: Dict[str, Tuple[Tk, Tk]] = {
    "!": (Tk.BANG, Tk.BANG_EQUAL),
    "=": (Tk.EQUAL, Tk.EQUAL_EQUAL),
    ">": (Tk.GREATER, Tk.GREATER_EQUAL),
    "<": (Tk.LESS, Tk.LESS_EQUAL),
}

KEYWORDS: Dict[str, Tk] = {
    keyword.name.lower(): keyword
    for keyword in (
        Tk.AND, Tk.CLASS, Tk.ELSE, Tk.FALSE, Tk.FUN, Tk.FOR, Tk.IF, Tk.NIL,
        Tk.OR, Tk.PRINT, Tk.RETURN, Tk.SUPER, Tk.THIS, Tk.TRUE, Tk.VAR, Tk.WHILE,
    )
}

_SPELLINGS: Dict[Tk, str] = {
    **{token_type: char for char, token_type in ONE_CHAR_TOKENS.items()},
    **{single: char for char, (single, _) in EQUAL_SUFFIXABLE_TOKENS.items()},
    **{double: f"{char}=" for char, (_, double) in EQUAL_SUFFIXABLE_TOKENS.items()},
    Tk.SLASH: "/",
}


@dataclass
class Token:
    """A lexeme together with its type. `line` is the 1-based line the lexeme ends on,
    so a string spanning several lines reports its last one."""
    token_type: Tk
    lexeme: str
    literal: Optional[LoxLiteral]
    line: int

    @classmethod
    def create_arbitrary(cls, token_type: Tk, lexeme: str, line: int = 0) -> Token:
        """Build a token that was never scanned."""
        return cls(token_type, lexeme, None, line)

    def __eq__(self, other: Any) -> bool:
        # Lets a `StreamView` of tokens be matched against token types directly.
        if isinstance(other, Tk):
            return self.token_type is other
        return super().__eq__(other)

    def __str__(self) -> str:
        return f"{self.token_type.name}: lexeme={self.lexeme!r}, literal={self.literal!r} @ line {self.line}"

    def to_string(self) -> str:
        """The layout jlox uses when dumping tokens, with `null` for a missing literal."""
        literal = "null" if self.literal is None else self.literal
        return f"{self.token_type.name} {self.lexeme} {literal}"
