import sys
from typing import Optional

from treelox.lexing.scanner import Scanner
from treelox.parsing.expr import binding_name
from treelox.parsing.parser import Parser
from treelox.runtime.interpreter import Interpreter
from treelox.runtime.resolver import Resolver
from treelox.utilities import dump_internal
from treelox.utilities.configuration import Debug
from treelox.utilities.error import EX_SOFTWARE, DiagnosticSink, LoxErrorHandler, LoxExit


class Lox:
    PROMPT_CHARACTER = "> "
    # Each Lox call costs a handful of Python frames; this allows a few thousand nested calls.
    RECURSION_LIMIT = 20_000

    def __init__(self, debug_flags: Debug = Debug(0), *, sink: Optional[DiagnosticSink] = None) -> None:
        self.error_handler = LoxErrorHandler(sink)
        self.debug_flags = debug_flags
        self.interpreter = Interpreter(self.error_handler)
        if sys.getrecursionlimit() < self.RECURSION_LIMIT:
            sys.setrecursionlimit(self.RECURSION_LIMIT)

    def run_file(self, path: str) -> None:
        with open(path, "r") as fil:
            self.run(fil.read())
        if self.error_handler.had_runtime_error:
            raise LoxExit(EX_SOFTWARE)

    def run_interactive(self) -> None:
        while True:
            try:
                self.run(input(self.PROMPT_CHARACTER))
            except LoxExit:
                pass
            except (KeyboardInterrupt, EOFError):  # Exit gracefully on ctrl-c or ctrl-d.
                print()
                sys.exit(0)
            # Globals survive between lines; mistakes do not.
            self.error_handler.reset()

    def run(self, source: str) -> None:
        source = source.replace("\r\n", "\n")

        tokens = Scanner(source, self.error_handler, debug_flags=self.debug_flags).scan_tokens()
        statements = Parser(tokens, self.error_handler).parse()

        self.error_handler.checkpoint()
        if self.debug_flags & Debug.NO_RESOLVE:
            raise LoxExit(0)
        Resolver(self.interpreter, self.error_handler).resolve(statements)

        self.error_handler.checkpoint()
        if self.debug_flags & Debug.DUMP_LOCALS:
            self._dump_locals()
        if self.debug_flags & Debug.NO_INTERPRET:
            raise LoxExit(0)
        self.interpreter.interpret(statements)

    def _dump_locals(self) -> None:
        entries = []
        for expr, depth in self.interpreter.locals.items():
            name = binding_name(expr)
            assert name is not None
            entries.append(f"[line {name.line}] {name.lexeme} ({type(expr).__name__}) -> {depth}")
        dump_internal("Locals", *entries)
