"""
Backtracking match engine.

A ``MatchEngine`` owns one cursor and a stack of ``MatchFrame`` objects.
Every nested attempt opens a frame; closing a successful frame folds its
captures into one capture on the parent, closing a failed frame rolls the
cursor back to where the frame was opened.

Grammar rules are plain callables ``(engine) -> bool`` built from the
combinators at the bottom of this module::

    assignment = seq(SYMBOL, literal("="), alt(STRING, SYMBOL))
    engine.attempt(assignment)

Only obligations (``require`` / ``require_last``) raise; every other
failure is a silent backtrack.
"""

from __future__ import annotations

import re
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from .cursor import Cursor, Mark, Range
from .errors import MatchStackError, ParseError, make_parse_error, marker_width, source_snippet

# Bounded capture history per frame; the oldest captures are evicted first.
CAPTURE_LIMIT = 64

Rule = Callable[["MatchEngine"], bool]


@dataclass
class Capture:
    """Matched text and the source range it came from."""

    text: str
    range: Range


class MatchFrame:
    """State of one in-flight (possibly nested) match attempt."""

    __slots__ = ("saved", "start", "end", "captures", "failed", "last", "negate", "obligation")

    def __init__(self, saved: Mark, start: Mark):
        self.saved = saved
        self.start = start
        self.end = start
        self.captures: deque[Capture] = deque(maxlen=CAPTURE_LIMIT)
        self.failed = False
        self.last = False
        self.negate = False
        self.obligation: tuple[str, Mark] | None = None

    def push(self, capture: Capture) -> None:
        self.captures.append(capture)
        self.end = capture.range.end


class MatchEngine:
    """Stack-of-frames backtracking matcher over a single source buffer."""

    def __init__(self, text: str, file: Path | None = None):
        self.text = text
        self.file = file
        self.reset()

    def reset(self) -> None:
        self.cursor = Cursor(self.text)
        start = self.cursor.snapshot()
        self._frames: list[MatchFrame] = [MatchFrame(start, start)]

    @property
    def frame(self) -> MatchFrame:
        return self._frames[-1]

    @property
    def depth(self) -> int:
        """Number of open frames above the root frame."""
        return len(self._frames) - 1

    # ------------------------------------------------------------------ frames

    def open_frame(self) -> MatchFrame:
        saved = self.cursor.snapshot()
        self.cursor.skip_ignorable()
        frame = MatchFrame(saved, self.cursor.snapshot())
        self._frames.append(frame)
        return frame

    def close_frame(self, success: bool | None = None) -> bool:
        """
        Close the innermost frame and report whether it matched.

        On success the frame's captures are joined into one capture pushed
        onto the parent; on failure the cursor goes back to where the frame
        was opened and the parent is left untouched.
        """
        if len(self._frames) < 2:
            raise MatchStackError("Closing more match frames than were opened")

        frame = self._frames.pop()
        parent = self.frame
        if success is not None:
            frame.last = success
        found = frame.last and not frame.failed

        keep = found
        if parent.negate:
            parent.negate = False
            keep = False
            found = not found

        if keep and frame.captures:
            self.cursor.restore(frame.end)
            parent.push(Capture(self._join(frame), Range(frame.start, frame.end)))
        else:
            self.cursor.restore(frame.saved)

        parent.last = found
        self._settle_obligation(parent, found)
        return found

    def attempt(self, rule: Rule) -> bool:
        """Run ``rule`` inside its own frame."""
        if self.frame.failed:
            return False
        self.open_frame()
        ok = rule(self)
        return self.close_frame(bool(ok) and not self.frame.failed)

    def _join(self, frame: MatchFrame) -> str:
        # Gaps between captures (and anything evicted) come from the raw source.
        pieces: list[str] = []
        position = frame.start.position
        for capture in frame.captures:
            pieces.append(self.text[position : capture.range.start.position])
            pieces.append(capture.text)
            position = capture.range.end.position
        return "".join(pieces)

    # -------------------------------------------------------------- primitives

    def match_literal(self, literal: str, skip: bool = True) -> bool:
        if self.frame.failed:
            return False
        if skip:
            self.cursor.skip_ignorable()
        found = self.text.startswith(literal, self.cursor.position)
        return self._settle(found, len(literal))

    def match_regex(self, regex: re.Pattern[str], skip: bool = True) -> bool:
        if self.frame.failed:
            return False
        if skip:
            self.cursor.skip_ignorable()
        match = regex.match(self.text, self.cursor.position)
        return self._settle(match is not None, len(match.group(0)) if match else 0)

    def _settle(self, found: bool, length: int) -> bool:
        frame = self.frame
        if frame.negate:
            frame.negate = False
            found = not found
        elif found:
            start = self.cursor.snapshot()
            self.cursor.advance_by(length)
            end = self.cursor.snapshot()
            frame.push(Capture(self.text[start.position : end.position], Range(start, end)))
        frame.last = found
        self._settle_obligation(frame, found)
        return found

    def negate(self) -> None:
        """Invert the result of the next match; a negated success consumes nothing."""
        if not self.frame.failed:
            self.frame.negate = True

    def fail(self) -> None:
        """Mark the current frame failed; further matches in it are no-ops."""
        self.frame.failed = True
        self.frame.last = False

    # ------------------------------------------------------------- obligations

    def require(self, message: str) -> None:
        """The next match in this frame must succeed."""
        if self.frame.failed:
            return
        self.frame.obligation = (message, self._lookahead_mark())

    def require_last(self, message: str) -> None:
        """The match that was just evaluated must have succeeded."""
        if self.frame.failed:
            return
        if not self.frame.last:
            raise self.error(message, self._lookahead_mark())

    def _settle_obligation(self, frame: MatchFrame, found: bool) -> None:
        if frame.obligation is None:
            return
        message, mark = frame.obligation
        frame.obligation = None
        if not found:
            raise self.error(message, mark)

    def _lookahead_mark(self) -> Mark:
        probe = self.cursor.copy()
        probe.skip_ignorable()
        return probe.snapshot()

    def error(self, message: str, mark: Mark, end: Mark | None = None) -> ParseError:
        """ParseError at ``mark``; ``end`` widens the snippet marker to the offending span."""
        return make_parse_error(
            message,
            self.file,
            mark.line,
            mark.column,
            snippet=source_snippet(self.text, mark.line),
            width=marker_width(mark, end),
        )

    # ---------------------------------------------------------------- captures

    def captured(self, index: int = -1) -> Capture:
        return self.frame.captures[index]

    def replace_capture(self, index: int, text: str) -> None:
        capture = self.frame.captures[index]
        self.frame.captures[index] = Capture(text, capture.range)

    def merge_captures(self, count: int, text: str) -> None:
        """Replace the last ``count`` captures with a single capture spanning them."""
        captures = self.frame.captures
        first = captures[-count]
        last = captures[-1]
        for _ in range(count):
            captures.pop()
        self.frame.push(Capture(text, Range(first.range.start, last.range.end)))


# ---------------------------------------------------------------------------
# Combinators
# ---------------------------------------------------------------------------


def literal(text: str, *, skip: bool = True) -> Rule:
    def rule(engine: MatchEngine) -> bool:
        return engine.match_literal(text, skip)

    return rule


def pattern(regex: str, *, skip: bool = True) -> Rule:
    compiled = re.compile(regex)

    def rule(engine: MatchEngine) -> bool:
        return engine.match_regex(compiled, skip)

    return rule


_IDENT_CHAR = pattern(r"[A-Za-z0-9_]", skip=False)


def keyword(word: str) -> Rule:
    """``word`` on identifier boundaries, e.g. ``var`` but not ``my_var`` or ``variant``."""
    start = pattern(rf"(?<![A-Za-z0-9_]){re.escape(word)}")

    def rule(engine: MatchEngine) -> bool:
        if not start(engine):
            return False
        engine.negate()
        return _IDENT_CHAR(engine)

    return group(rule)


def seq(*rules: Rule) -> Rule:
    """All rules in order; the first failure fails the enclosing frame."""

    def rule(engine: MatchEngine) -> bool:
        for step in rules:
            if not step(engine):
                engine.fail()
                return False
        return True

    return rule


def alt(*rules: Rule) -> Rule:
    """First branch that matches wins; each branch runs in its own frame."""

    def rule(engine: MatchEngine) -> bool:
        for branch in rules:
            if engine.attempt(branch):
                return True
        return False

    return rule


def group(inner: Rule) -> Rule:
    def rule(engine: MatchEngine) -> bool:
        return engine.attempt(inner)

    return rule


def optional(inner: Rule) -> Rule:
    def rule(engine: MatchEngine) -> bool:
        engine.attempt(inner)
        return True

    return rule


def repeat(inner: Rule) -> Rule:
    """Zero or more matches of ``inner``."""

    def rule(engine: MatchEngine) -> bool:
        while not engine.cursor.eof:
            before = engine.cursor.position
            if not engine.attempt(inner) or engine.cursor.position == before:
                break
        return True

    return rule


def negate(inner: Rule) -> Rule:
    """Succeeds, consuming nothing, when ``inner`` does not match here."""

    def rule(engine: MatchEngine) -> bool:
        engine.negate()
        return inner(engine)

    return rule


def require(inner: Rule, message: str) -> Rule:
    def rule(engine: MatchEngine) -> bool:
        engine.require(message)
        return inner(engine)

    return rule


def require_last(inner: Rule, message: str) -> Rule:
    def rule(engine: MatchEngine) -> bool:
        ok = inner(engine)
        engine.require_last(message)
        return ok

    return rule
