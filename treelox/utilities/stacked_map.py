from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, Generic, Iterator, List, Optional, TypeVar

K = TypeVar("K")
V = TypeVar("V")

Frame = Dict[K, V]


class StackedMap(Generic[K, V]):
    """A stack of mappings, innermost last.

    Unlike an `Environment`, an empty stack is meaningful: it stands for the
    top level, which has no frame of its own."""

    def __init__(self) -> None:
        self._stack: List[Frame[K, V]] = []

    def __len__(self) -> int:
        return len(self._stack)

    def clear(self) -> None:
        self._stack.clear()

    @contextmanager
    def scope(self) -> Iterator[Frame[K, V]]:
        frame: Frame[K, V] = dict()
        self._stack.append(frame)
        try:
            yield frame
        finally:
            self._stack.pop()

    def is_local(self) -> bool:
        return bool(self._stack)

    @property
    def innermost(self) -> Frame[K, V]:
        return self._stack[-1]

    def distance_to(self, key: K) -> Optional[int]:
        """Count the frames that must be skipped, starting from the innermost one,
        to reach the frame that contains `key`."""
        for distance, frame in enumerate(reversed(self._stack)):
            if key in frame:
                return distance
        return None
