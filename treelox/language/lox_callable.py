from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Sequence

from treelox.language.lox_types import LoxObject
from treelox.parsing.stmt import FunctionStmt
from treelox.runtime.environment import Environment

if TYPE_CHECKING:
    from treelox.language.lox_class import LoxInstance
    from treelox.runtime.interpreter import Interpreter


class LoxCallable(ABC):
    arity: int

    @abstractmethod
    def call(self, interpreter: Interpreter, arguments: Sequence[LoxObject]) -> LoxObject:
        """Invoke the callable. The caller has already checked the argument count against `arity`."""


class NativeFunction(LoxCallable):
    """A function implemented by the host. It has no closure."""

    def __init__(self, name: str, arity: int, function: Callable[..., LoxObject]) -> None:
        self.name = name
        self.arity = arity
        self._function = function

    def call(self, interpreter: Interpreter, arguments: Sequence[LoxObject]) -> LoxObject:
        return self._function(*arguments)

    def __str__(self) -> str:
        return "<native fn>"


class LoxFunction(LoxCallable):
    def __init__(self, declaration: FunctionStmt, closure: Environment, is_initializer: bool = False) -> None:
        self._declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer
        self.arity = len(declaration.params)

    @property
    def name(self) -> str:
        return self._declaration.name.lexeme

    def bind(self, instance: LoxInstance) -> LoxFunction:
        """Produce a copy of this method whose closure defines `this`.

        A fresh copy is made on each call so that the original, shared by every
        instance of the class, is never modified."""
        environment = Environment(self.closure)
        environment.define("this", instance)
        return LoxFunction(self._declaration, environment, self.is_initializer)

    def call(self, interpreter: Interpreter, arguments: Sequence[LoxObject]) -> LoxObject:
        # Parameters live in a child of the closure, never of the caller's scope.
        environment = Environment(self.closure)
        for param, arg in zip(self._declaration.params, arguments):
            environment.define(param.lexeme, arg)

        signal = interpreter.execute_block(self._declaration.body, environment)

        # An initializer always hands back its instance, even on a bare `return;`.
        if self.is_initializer:
            return self.closure.get_at(0, "this")
        if signal is not None:
            return signal.value
        return None

    def __str__(self) -> str:
        return f"<fn {self.name}>"


@dataclass(frozen=True)
class LoxReturn:
    """Signal produced by executing a `return` statement.

    Statements evaluate to `None` when control simply falls through to the next one.
    Anything that runs a list of statements must stop at the first `LoxReturn`
    and hand it upward, until a function call consumes it."""
    value: LoxObject
