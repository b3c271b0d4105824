"""Forward-only cursor over a lazily produced sequence of lines."""

from __future__ import annotations

import io
from typing import Iterable, Iterator, Union

LineSource = Union[str, Iterable[str]]

UNKNOWN = "<UNKNOWN>"


def iter_lines(source: LineSource) -> Iterator[str]:
    """Yield lines without trailing newlines, without materializing them all."""
    if isinstance(source, str):
        source = io.StringIO(source)
    for line in source:
        yield line.rstrip("\r\n")


class LineCursor:
    """Single-pass cursor with a one-line lookahead.

    ``peek`` looks at the current line without consuming it, ``advance``
    consumes and returns it. There is no way to move backwards.
    """

    _EMPTY = object()

    def __init__(self, source: LineSource) -> None:
        self._lines = iter_lines(source)
        self._pending: object = self._EMPTY

    def has_next(self) -> bool:
        if self._pending is self._EMPTY:
            self._pending = next(self._lines, self._EMPTY)
        return self._pending is not self._EMPTY

    def peek(self) -> str | None:
        if not self.has_next():
            return None
        return self._pending  # type: ignore[return-value]

    def advance(self) -> str | None:
        line = self.peek()
        self._pending = self._EMPTY
        return line

    def consume_until(self, prefix: str) -> bool:
        """Consume lines up to and including the first whose stripped text starts with *prefix*."""
        while self.has_next():
            line = self.advance()
            if line is not None and line.strip().startswith(prefix):
                return True
        return False
