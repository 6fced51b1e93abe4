"""
In-place rewriting of a source buffer.

Spans are always given in original-source coordinates and must arrive
left to right. Every replacement shifts what follows it, so a running
offset (new length - old length, summed) is added to each later span
before slicing.
"""

from __future__ import annotations

import logging

from .cursor import Range

logger = logging.getLogger(__name__)


class SourceRewriter:
    """Working copy of a source with left-to-right span replacement."""

    def __init__(self, source: str):
        self.original = source
        self.text = source
        self.offset = 0
        self.replacements = 0
        self._last_end = 0

    def replace(self, span: Range, replacement: str) -> None:
        """
        Replace ``span`` (original coordinates) with ``replacement``.

        Raises:
            ValueError: If the span overlaps or precedes an earlier replacement
        """
        start = span.start.position
        end = span.end.position
        if start < self._last_end:
            raise ValueError(
                f"Span {start}-{end} overlaps an earlier replacement ending at {self._last_end}"
            )

        shifted_start = start + self.offset
        shifted_end = end + self.offset
        self.text = self.text[:shifted_start] + replacement + self.text[shifted_end:]

        delta = len(replacement) - (end - start)
        logger.debug(
            "Rewrote %d:%d (%d chars -> %d chars, offset %+d)",
            span.start.line,
            span.start.column,
            end - start,
            len(replacement),
            self.offset + delta,
        )
        self.offset += delta
        self.replacements += 1
        self._last_end = end
