import time
from typing import Tuple

from treelox.language.lox_callable import NativeFunction


def _clock() -> float:
    return time.time()


def builtin_natives() -> Tuple[NativeFunction, ...]:
    """The host functions every fresh global environment starts out with."""
    return (
        NativeFunction("clock", 0, _clock),
    )
