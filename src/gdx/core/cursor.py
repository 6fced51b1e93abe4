"""
Cursor over an immutable source buffer.

Tracks position, line, column and the indentation of the current line.
Snapshots (``Mark``) are immutable so they can be stored in ranges and
used to roll the cursor back after a failed match.
"""

from __future__ import annotations

from dataclasses import dataclass

_BLANKS = (" ", "\t")
_IGNORABLE = (" ", "\t", "\n")


@dataclass(frozen=True, slots=True)
class Mark:
    """
    Immutable cursor snapshot.

    Attributes:
        position: Offset into the source (0-indexed)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        indent: Leading blanks counted so far on this line
        indenting: Whether the cursor is still inside the leading blank run
    """

    position: int
    line: int
    column: int
    indent: int
    indenting: bool

    @property
    def line_start(self) -> int:
        """Offset of the first character of this mark's line."""
        return self.position - (self.column - 1)


@dataclass(frozen=True, slots=True)
class Range:
    """Span between two marks; ``end`` sits just past the last character."""

    start: Mark
    end: Mark

    def __post_init__(self) -> None:
        if self.end.position < self.start.position:
            raise ValueError(
                f"Range end ({self.end.position}) precedes start ({self.start.position})"
            )

    def slice(self, text: str) -> str:
        return text[self.start.position : self.end.position]


class Cursor:
    """Mutable reading head over ``text``."""

    def __init__(self, text: str):
        self.text = text
        self._reset()

    def _reset(self) -> None:
        self.position = 0
        self.line = 1
        self.column = 1
        self.indent = 0
        self.indenting = True
        self._enter()

    def _enter(self) -> None:
        """Account for the character that just came under the cursor."""
        if self.indenting:
            if self.char in _BLANKS:
                self.indent += 1
            else:
                self.indenting = False

    @property
    def char(self) -> str:
        """Character under the cursor, or an empty string at end of input."""
        if self.position >= len(self.text):
            return ""
        return self.text[self.position]

    @property
    def eof(self) -> bool:
        return self.position >= len(self.text)

    def advance(self) -> None:
        """Move one character forward, updating line/column/indent."""
        if self.eof:
            return
        if self.text[self.position] == "\n":
            self.line += 1
            self.column = 1
            self.indent = 0
            self.indenting = True
        else:
            self.column += 1
        self.position += 1
        self._enter()

    def advance_by(self, count: int) -> None:
        for _ in range(count):
            self.advance()

    def skip_ignorable(self) -> None:
        """Skip blanks, newlines and ``#`` comments up to the next significant character."""
        while not self.eof:
            if self.char in _IGNORABLE:
                self.advance()
            elif self.char == "#":
                while not self.eof and self.char != "\n":
                    self.advance()
            else:
                break

    def snapshot(self) -> Mark:
        return Mark(self.position, self.line, self.column, self.indent, self.indenting)

    def restore(self, mark: Mark) -> None:
        self.position = mark.position
        self.line = mark.line
        self.column = mark.column
        self.indent = mark.indent
        self.indenting = mark.indenting

    def copy(self) -> Cursor:
        clone = Cursor.__new__(Cursor)
        clone.text = self.text
        clone.restore(self.snapshot())
        return clone

    def __repr__(self) -> str:
        return f"Cursor(pos={self.position}, {self.line}:{self.column}, {self.char!r})"


def line_indent(text: str, mark: Mark) -> str:
    """Leading indentation text of the line ``mark`` sits on."""
    start = mark.line_start
    end = start
    while end < len(text) and text[end] in _BLANKS:
        end += 1
    return text[start:end]
