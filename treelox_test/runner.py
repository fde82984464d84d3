"""runner.py

Annotated-script test runner for treelox.

Every `.lox` file under `test_suite/` states what it should produce in comments:

    print 1;          // expect: 1
    print this;       // Error at 'this': Cannot use 'this' outside of a class.
    // [line 3] Error at end: Expect '}' after block.
    a + "b";          // expect runtime error: Operands must be two numbers or two strings.

Run it directly for a colourised report, or through pytest (`test_scripts.py`).

The annotation format is that of
https://github.com/munificent/craftinginterpreters/blob/93e3f56e3cfd78a9facc747b3ec6e5022ae7f4bc/util/test.py
by Bob Nystrom, licensed MIT.
"""

import re
import sys
from contextlib import redirect_stdout, suppress
from dataclasses import dataclass, field
from io import StringIO
from pathlib import Path
from typing import List, Optional

from termcolor import colored

from treelox.lox import Lox
from treelox.utilities import indent
from treelox.utilities.error import LoxExit

TEST_ROOT = Path(__file__).resolve().parent.parent / "test_suite"

EXPECT_OUTPUT = re.compile(r"// expect: ?(.*)")
EXPECT_ERROR = re.compile(r"// (Error.*)")
EXPECT_ERROR_AT_LINE = re.compile(r"// \[line (\d+)\] (Error.*)")
EXPECT_RUNTIME_ERROR = re.compile(r"// expect runtime error: (.+)")


def discover_tests(path: Path) -> List[Path]:
    return sorted(path.rglob("*.lox"))


@dataclass
class Expectations:
    output: List[str] = field(default_factory=list)
    diagnostics: List[str] = field(default_factory=list)

    @classmethod
    def from_source(cls, source: str) -> "Expectations":
        expected = cls()
        static: List[str] = list()
        runtime: List[str] = list()
        for number, line in enumerate(source.splitlines(), start=1):
            if found := EXPECT_OUTPUT.search(line):
                expected.output.append(found.group(1))
            if found := EXPECT_ERROR.search(line):
                static.append(f"[line {number}] {found.group(1)}")
            if found := EXPECT_ERROR_AT_LINE.search(line):
                static.append(f"[line {found.group(1)}] {found.group(2)}")
            if found := EXPECT_RUNTIME_ERROR.search(line):
                runtime.append(f"[line {number}] {found.group(1)}")
        # A script with a static error never runs, so it cannot also expect a runtime one.
        if static and runtime:
            raise ValueError("A script cannot expect both static and runtime errors.")
        expected.diagnostics = static or runtime
        return expected


def run_script(path: Path) -> Optional[str]:
    """Run one script. Return a description of how it misbehaved, or None if it passed."""
    source = path.read_text(encoding="utf-8")
    expected = Expectations.from_source(source)

    diagnostics: List[str] = list()

    def record(line: int, where: Optional[str], message: str) -> None:
        if where is None:
            diagnostics.append(f"[line {line}] {message}")
        else:
            diagnostics.append(f"[line {line}] Error{where}: {message}")

    stdout = StringIO()
    with suppress(LoxExit), redirect_stdout(stdout):
        Lox(sink=record).run(source)
    output = [line.strip() for line in stdout.getvalue().splitlines()]

    if diagnostics != expected.diagnostics:
        return _mismatch(expected.diagnostics, diagnostics)
    if output != expected.output:
        return _mismatch(expected.output, output)
    return None


def _mismatch(expected: List[str], actual: List[str]) -> str:
    return f"Expected:\n{indent(*expected)}Got:\n{indent(*actual)}"


def main(test_root: Path = TEST_ROOT) -> int:
    if not test_root.is_dir():
        raise FileNotFoundError(f"No test suite at '{test_root}'.")
    scripts = discover_tests(test_root)
    width = len(str(len(scripts)))
    print(f"Running {len(scripts)} scripts from '{test_root}'.\n")

    failures: List[str] = list()
    for number, script in enumerate(scripts, start=1):
        name = script.relative_to(test_root)
        progress = f"{number:>{width}}/{len(scripts)}"
        problem = run_script(script)
        if problem is None:
            print(f"{progress} [{colored('PASS', 'green')}] {name}")
            continue
        report = f"{progress} [{colored('FAIL', 'red')}] {name}\n{indent(problem)}"
        print(report, end="")
        failures.append(report)

    passed = len(scripts) - len(failures)
    if failures:
        print(f"\n{colored('Failures', 'red')}:\n")
        print(*failures, sep="", end="")
        print(f"{colored(str(len(failures)), 'red')} failed, {colored(str(passed), 'green')} passed.")
        return 1
    print(f"\nAll {colored(str(passed), 'green')} scripts passed.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
