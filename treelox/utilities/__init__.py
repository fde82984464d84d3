import sys
from typing import Any, Iterable, Optional, Type

BANNER_WIDTH = 20


def dump_internal(name: str, *content: Any) -> None:
    """Print `content` one item per line between two banners, for the `--dbg` dumps."""
    print(f" {name} Dump ".center(BANNER_WIDTH, "~"))
    for item in content:
        print(item)
    print("~" * BANNER_WIDTH)


def eprint(*args: Any, **kwargs: Any) -> None:
    print(*args, file=sys.stderr, **kwargs)


def is_arabic_numeral(char: Optional[str]) -> bool:
    return char is not None and "0" <= char <= "9"


def all_of_one_type(candidates: Iterable[Type[Any]], *values: Any) -> bool:
    """True if some type in `candidates` fits every one of `values`."""
    return any(all(isinstance(value, candidate) for value in values) for candidate in candidates)


def indent(*block: Any) -> str:
    return "".join(f"\t{line}\n" for item in block for line in str(item).splitlines())
