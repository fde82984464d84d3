"""Diagnostics for all three phases of running a Lox program.

Static errors (scanning, parsing, resolving) are collected so that as many as
possible are reported in one go. A runtime error aborts the running batch of
statements. Both end up in a `LoxErrorHandler`, which forwards them to a sink and
remembers what happened so the driver can decide whether to carry on."""

from __future__ import annotations

from typing import Callable, List, Optional

from treelox.lexing.token import Tk, Token
from treelox.utilities import eprint

# sysexits.h
EX_USAGE = 64
EX_DATAERR = 65
EX_SOFTWARE = 70

DiagnosticSink = Callable[[int, Optional[str], str], None]


class LoxError(Exception):
    def __init__(self, line: int, message: str, where: Optional[str] = "") -> None:
        super().__init__(message)
        self.line = line
        self.message = message
        self.where = where


class LoxSyntaxError(LoxError):
    """An error found before execution starts."""

    @classmethod
    def at_token(cls, token: Token, message: str) -> LoxSyntaxError:
        if token.token_type is Tk.EOF:
            return cls(token.line, message, " at end")
        return cls(token.line, message, f" at '{token.lexeme}'")


class LoxRuntimeError(LoxError):
    """An error raised while evaluating. Runtime errors carry no location text, only a line."""

    def __init__(self, token: Token, message: str) -> None:
        super().__init__(token.line, message, where=None)
        self.token = token

    @classmethod
    def at_token(cls, token: Token, message: str) -> LoxRuntimeError:
        return cls(token, message)


class LoxExit(Exception):
    """Request that the driver stop with the given exit code."""

    def __init__(self, code: int) -> None:
        super().__init__(code)
        self.code = code


def print_diagnostic(line: int, where: Optional[str], message: str) -> None:
    if where is None:
        eprint(f"{message}\n[line {line}]")
    else:
        eprint(f"[line {line}] Error{where}: {message}")


class LoxErrorHandler:
    def __init__(self, sink: Optional[DiagnosticSink] = None) -> None:
        self._sink = sink if sink is not None else print_diagnostic
        self.errors: List[LoxError] = list()

    def err(self, error: LoxError) -> None:
        self.errors.append(error)
        self._sink(error.line, error.where, error.message)

    @property
    def had_static_error(self) -> bool:
        return any(isinstance(error, LoxSyntaxError) for error in self.errors)

    @property
    def had_runtime_error(self) -> bool:
        return any(isinstance(error, LoxRuntimeError) for error in self.errors)

    @property
    def error_state(self) -> bool:
        return bool(self.errors)

    def checkpoint(self) -> None:
        """Stop before the next phase if any static errors have been reported."""
        if self.had_static_error:
            raise LoxExit(EX_DATAERR)

    def reset(self) -> None:
        self.errors.clear()


NOT_REACHED = AssertionError("Unreachable code reached")
