import argparse
import sys
from typing import Iterable

from treelox.lox import Lox
from treelox.utilities.configuration import Debug
from treelox.utilities.error import EX_SOFTWARE, LoxExit


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="treelox",
        description="Run a Lox program, or start a REPL when given neither FILE nor -c.",
        allow_abbrev=False
    )
    parser.add_argument("script", metavar="FILE", nargs="?", help="path of a .lox script")
    parser.add_argument("-c", dest="command", metavar="STRING", help="run STRING as a Lox program")
    parser.add_argument(
        "--dbg",
        metavar="OPTION",
        choices=[flag.name for flag in Debug],
        action="append",
        default=[],
        help=f"enable a debugging aid, may be repeated; one of: {', '.join(flag.name for flag in Debug)}"
    )
    return parser


def _combine_flags(names: Iterable[str]) -> Debug:
    flags = Debug(0)
    for name in names:
        flags |= Debug[name]
    return flags


def main() -> None:
    args = _build_argument_parser().parse_args()
    lox = Lox(_combine_flags(args.dbg))
    try:
        if args.command is not None:
            lox.run(args.command)
            if lox.error_handler.had_runtime_error:
                raise LoxExit(EX_SOFTWARE)
        elif args.script is not None:
            lox.run_file(args.script)
        else:
            lox.run_interactive()
    except LoxExit as exit_request:
        sys.exit(exit_request.code)


if __name__ == "__main__":
    main()
