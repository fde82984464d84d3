from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Optional

from treelox.lexing.token import Token
from treelox.utilities.error import LoxRuntimeError

if TYPE_CHECKING:
    from treelox.language.lox_types import LoxObject


class Environment:
    """One lexical scope. Only the child knows its parent: a closure that holds on to
    an environment therefore keeps the whole enclosing chain alive, and nothing else does."""

    def __init__(self, enclosing: Optional[Environment] = None) -> None:
        self._values: Dict[str, LoxObject] = dict()
        self.enclosing = enclosing

    def __contains__(self, name: str) -> bool:
        return name in self._values

    def define(self, name: str, value: LoxObject) -> None:
        self._values[name] = value

    def assign(self, name: Token, value: LoxObject) -> None:
        if name.lexeme not in self._values:
            if self.enclosing:
                self.enclosing.assign(name, value)
                return
            raise LoxRuntimeError.at_token(name, f"Undefined variable '{name.lexeme}'.")
        self._values[name.lexeme] = value

    def get(self, name: Token) -> LoxObject:
        try:
            return self._values[name.lexeme]
        except KeyError:
            if self.enclosing:
                return self.enclosing.get(name)
            raise LoxRuntimeError.at_token(name, f"Undefined variable '{name.lexeme}'.") from None

    def ancestor(self, distance: int) -> Environment:
        environment = self
        for _ in range(distance):
            assert environment.enclosing is not None, "Resolved distance walks past the global scope"
            environment = environment.enclosing
        return environment

    def get_at(self, distance: int, name: str) -> LoxObject:
        """Read a binding that the resolver placed exactly `distance` scopes out."""
        return self.ancestor(distance)._values[name]

    def assign_at(self, distance: int, name: Token, value: LoxObject) -> None:
        self.ancestor(distance)._values[name.lexeme] = value
