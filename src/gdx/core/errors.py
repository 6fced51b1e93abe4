"""
Error types for GDX lexing, parsing and project configuration.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .cursor import Mark


class GdxError(Exception):
    """Base exception for all GDX errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class ParseError(GdxError):
    """
    Raised when GDX source cannot be transformed.

    Examples:
    - Unmet "must succeed" obligation (missing tag close, missing value)
    - Mismatched or missing closing tag
    - Closing tag with no corresponding open tag
    - Malformed import or declaration header
    """

    @property
    def line(self) -> int:
        return self.context.line if self.context else 0

    @property
    def column(self) -> int:
        return self.context.column if self.context else 0


class ManifestError(GdxError):
    """
    Raised when gdx.toml cannot be loaded.

    Examples:
    - Invalid TOML
    - Code generation template without its placeholder
    """

    pass


class MatchStackError(RuntimeError):
    """Raised when match frames are opened and closed out of balance."""

    pass


@dataclass
class ErrorContext:
    """
    Where an error happened.

    ``width`` is how many columns the ``^`` marker under the snippet spans,
    normally the length of the offending token on its line.
    """

    file: Path | None
    line: int
    column: int
    snippet: str | None = None
    width: int = 1

    def format(self) -> str:
        """``menu.gdx:10:5`` (or ``line 10, column 5``) followed by the marked snippet."""
        location = (
            f"{self.file}:{self.line}:{self.column}"
            if self.file
            else f"line {self.line}, column {self.column}"
        )
        if not self.snippet:
            return location
        return "\n".join([location, *self._snippet_lines()])

    def _snippet_lines(self) -> list[str]:
        # source_snippet starts up to two lines above the error line
        first = max(1, self.line - 2)
        out = []
        for number, text in enumerate(self.snippet.split("\n"), start=first):
            gutter = f"{number:4d} | "
            out.append(gutter + text)
            if number == self.line:
                out.append(" " * (len(gutter) + self.column - 1) + "^" * max(self.width, 1))
        return out


def source_snippet(text: str, line: int, context_lines: int = 2) -> str:
    """Cut the lines around ``line`` (1-indexed) out of ``text`` for error display."""
    lines = text.split("\n")
    start = max(1, line - context_lines)
    end = min(len(lines), line + context_lines)
    return "\n".join(lines[start - 1 : end])


def make_parse_error(
    message: str,
    file: Path | None,
    line: int,
    column: int,
    snippet: str | None = None,
    width: int = 1,
) -> ParseError:
    """Build a ParseError located at ``line``:``column`` of ``file``."""
    context = ErrorContext(file=file, line=line, column=column, snippet=snippet, width=width)
    return ParseError(message, context)


def marker_width(start: Mark, end: Mark | None) -> int:
    """Columns between ``start`` and ``end`` when both are on one line, else 1."""
    if end is None or end.line != start.line:
        return 1
    return max(end.column - start.column, 1)
