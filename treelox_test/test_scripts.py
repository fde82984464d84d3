from pathlib import Path

import pytest

from runner import TEST_ROOT, Expectations, discover_tests, run_script


@pytest.mark.parametrize(
    "path",
    discover_tests(TEST_ROOT),
    ids=lambda path: path.relative_to(TEST_ROOT).as_posix(),
)
def test_script(path: Path) -> None:
    problem = run_script(path)
    assert problem is None, f"{path.name}\n{problem}"


def test_suite_is_not_empty() -> None:
    assert len(discover_tests(TEST_ROOT)) > 50


def test_expectations_are_read_in_line_order() -> None:
    expected = Expectations.from_source(
        "print 1; // expect: 1\n"
        "print x; // expect runtime error: Undefined variable 'x'.\n"
    )
    assert expected.output == ["1"]
    assert expected.diagnostics == ["[line 2] Undefined variable 'x'."]


def test_static_and_runtime_expectations_conflict() -> None:
    with pytest.raises(ValueError):
        Expectations.from_source("// Error at 'a': x\n// expect runtime error: y\n")
