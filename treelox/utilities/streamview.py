from __future__ import annotations

from typing import Any, Generic, Optional, Sequence, TypeVar, overload

T = TypeVar("T")  # pylint: disable=invalid-name


class StreamView(Generic[T]):
    """A cursor over a sequence that can look ahead (or back) without consuming.

    The scanner runs one over the source string, the parser one over the token list."""
    # pylint: disable=multiple-statements

    def __init__(self, sequence: Sequence[T]) -> None:
        self._sequence = sequence
        self._position = 0
        self._marker: Optional[int] = None

    def has_next(self, lookahead: int = 0) -> bool:
        return 0 <= self._position + lookahead < len(self._sequence)

    def peek(self, lookahead: int = 0) -> Optional[T]:
        """The item `lookahead` places past the next one, or None when out of range.
        Pass a negative `lookahead` to look back at consumed items."""
        if not self.has_next(lookahead):
            return None
        return self._sequence[self._position + lookahead]

    def peek_unwrap(self, lookahead: int = 0) -> T:
        item = self.peek(lookahead)
        assert item is not None, "peeked past the end of the stream"
        return item

    def previous(self) -> T:
        return self.peek_unwrap(-1)

    def match(self, *expected: Any) -> bool:
        return self.peek() in expected

    def advance(self) -> T:
        """Consume and return the next item."""
        if not self.has_next():
            raise IndexError("Items have been exhausted.")
        self._position += 1
        return self._sequence[self._position - 1]

    def advance_if_match(self, *expected: Any) -> bool:
        matched = self.match(*expected)
        if matched:
            self._position += 1
        return matched

    def set_marker(self) -> None:
        """Start a lexeme at the current position."""
        self._marker = self._position

    @overload
    def get_slice_from_marker(self: StreamView[str]) -> str: pass

    @overload
    def get_slice_from_marker(self) -> Sequence[T]: pass

    def get_slice_from_marker(self):
        """Everything consumed since `set_marker()`."""
        if self._marker is None:
            raise RuntimeError("Marker is not set.")
        return self._sequence[self._marker:self._position]
