"""Tests for the source cursor and its snapshots."""

from __future__ import annotations

import pytest

from gdx.core.cursor import Cursor, Range, line_indent


class TestCursor:
    def test_starts_at_line_one_column_one(self) -> None:
        cursor = Cursor("abc")
        assert (cursor.position, cursor.line, cursor.column) == (0, 1, 1)
        assert cursor.char == "a"

    def test_newline_moves_to_next_line(self) -> None:
        cursor = Cursor("ab\ncd")
        cursor.advance_by(3)
        assert (cursor.line, cursor.column) == (2, 1)
        assert cursor.char == "c"

    def test_advance_at_eof_is_noop(self) -> None:
        cursor = Cursor("a")
        cursor.advance_by(5)
        assert cursor.eof
        assert cursor.position == 1
        assert cursor.char == ""

    def test_indent_tracks_leading_blanks(self) -> None:
        cursor = Cursor("x\n\t\tfoo")
        cursor.advance_by(4)
        assert cursor.char == "f"
        assert cursor.indent == 2
        assert not cursor.indenting

    def test_skip_ignorable_skips_comments(self) -> None:
        cursor = Cursor("  # note <A/>\n\tvar")
        cursor.skip_ignorable()
        assert cursor.char == "v"
        assert cursor.line == 2

    def test_restore_rolls_back(self) -> None:
        cursor = Cursor("one\ntwo")
        mark = cursor.snapshot()
        cursor.advance_by(5)
        cursor.restore(mark)
        assert cursor.snapshot() == mark

    def test_copy_is_independent(self) -> None:
        cursor = Cursor("abc")
        clone = cursor.copy()
        clone.advance()
        assert cursor.position == 0
        assert clone.position == 1


class TestRange:
    def test_slice(self) -> None:
        cursor = Cursor("hello world")
        start = cursor.snapshot()
        cursor.advance_by(5)
        assert Range(start, cursor.snapshot()).slice(cursor.text) == "hello"

    def test_end_before_start_rejected(self) -> None:
        cursor = Cursor("abc")
        start = cursor.snapshot()
        cursor.advance()
        with pytest.raises(ValueError):
            Range(cursor.snapshot(), start)

    def test_line_start(self) -> None:
        cursor = Cursor("ab\n  cd")
        cursor.advance_by(5)
        assert cursor.snapshot().line_start == 3


class TestLineIndent:
    def test_returns_leading_whitespace_text(self) -> None:
        text = "\tfoo\n\t\tbar"
        cursor = Cursor(text)
        cursor.advance_by(text.index("bar"))
        assert line_indent(text, cursor.snapshot()) == "\t\t"

    def test_unindented_line(self) -> None:
        cursor = Cursor("foo")
        assert line_indent("foo", cursor.snapshot()) == ""
