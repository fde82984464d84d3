from typing import Callable, List, Optional, Tuple

import pytest

from treelox.lexing.scanner import Scanner
from treelox.lox import Lox
from treelox.parsing.parser import Parser
from treelox.parsing.stmt import Stmt
from treelox.runtime.interpreter import Interpreter
from treelox.runtime.resolver import Resolver
from treelox.utilities.error import LoxErrorHandler

Diagnostic = Tuple[int, Optional[str], str]


@pytest.fixture
def diagnostics() -> List[Diagnostic]:
    return []


@pytest.fixture
def error_handler(diagnostics: List[Diagnostic]) -> LoxErrorHandler:
    return LoxErrorHandler(lambda line, where, message: diagnostics.append((line, where, message)))


@pytest.fixture
def lox(diagnostics: List[Diagnostic]) -> Lox:
    return Lox(sink=lambda line, where, message: diagnostics.append((line, where, message)))


@pytest.fixture
def parse(error_handler: LoxErrorHandler) -> Callable[[str], List[Stmt]]:
    def _parse(source: str) -> List[Stmt]:
        return Parser(Scanner(source, error_handler).scan_tokens(), error_handler).parse()
    return _parse


@pytest.fixture
def interpreter(error_handler: LoxErrorHandler) -> Interpreter:
    return Interpreter(error_handler)


@pytest.fixture
def resolve(parse, interpreter: Interpreter, error_handler: LoxErrorHandler) -> Callable[[str], List[Stmt]]:
    """Parse and resolve `source`, recording distances into the `interpreter` fixture."""
    def _resolve(source: str) -> List[Stmt]:
        statements = parse(source)
        assert not error_handler.had_static_error, "test source does not parse"
        Resolver(interpreter, error_handler).resolve(statements)
        return statements
    return _resolve
