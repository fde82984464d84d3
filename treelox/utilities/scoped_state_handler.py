from contextlib import contextmanager
from typing import Generic, Iterator, TypeVar

T = TypeVar("T")


class ScopedStateHandler(Generic[T]):
    """A value that can be temporarily overridden for the duration of a `with` block.

    The resolver uses this to track which kind of function or class body it is
    currently inside of."""

    def __init__(self, default: T) -> None:
        self.state = default

    @contextmanager
    def enter(self, state: T) -> Iterator[None]:
        outer, self.state = self.state, state
        try:
            yield
        finally:
            self.state = outer
