from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Optional, Sequence

from treelox.language.lox_callable import LoxCallable, LoxFunction
from treelox.language.lox_types import LoxObject
from treelox.lexing.token import Token
from treelox.utilities.error import LoxRuntimeError

if TYPE_CHECKING:
    from treelox.runtime.interpreter import Interpreter

INITIALIZER_NAME = "init"


class LoxClass(LoxCallable):
    def __init__(self, name: str, superclass: Optional[LoxClass], methods: Dict[str, LoxFunction]) -> None:
        self.name = name
        self.superclass = superclass
        self._methods = methods

    def find_method(self, name: str) -> Optional[LoxFunction]:
        """Look up an unbound method, walking up the inheritance chain."""
        if name in self._methods:
            return self._methods[name]
        if self.superclass is not None:
            return self.superclass.find_method(name)
        return None

    @property  # type: ignore[override]
    def arity(self) -> int:
        if initializer := self.find_method(INITIALIZER_NAME):
            return initializer.arity
        return 0

    def call(self, interpreter: Interpreter, arguments: Sequence[LoxObject]) -> LoxObject:
        instance = LoxInstance(self)
        if initializer := self.find_method(INITIALIZER_NAME):
            initializer.bind(instance).call(interpreter, arguments)
        return instance

    def __str__(self) -> str:
        return self.name


class LoxInstance:
    def __init__(self, lox_class: LoxClass) -> None:
        self.lox_class = lox_class
        self.fields: Dict[str, LoxObject] = dict()

    def get(self, name: Token) -> LoxObject:
        # Fields shadow methods.
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]
        if method := self.lox_class.find_method(name.lexeme):
            return method.bind(self)
        raise LoxRuntimeError.at_token(name, f"Undefined property '{name.lexeme}'.")

    def set(self, name: Token, value: LoxObject) -> None:
        self.fields[name.lexeme] = value

    def __str__(self) -> str:
        return f"{self.lox_class.name} instance"
