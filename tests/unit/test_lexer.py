"""Tests for the GDX lexer.

Covers:
- Imports and declaration headers
- Tags and their property values
- Host code that must not be read as markup
- Obligation errors
"""

from __future__ import annotations

import pytest

from gdx.core.errors import MatchStackError, ParseError
from gdx.core.lexer import GdxLexer, normalize_block_string
from gdx.core.tokens import (
    FuncDeclarationToken,
    ImportToken,
    TagToken,
    TagType,
    Token,
    TokenKind,
    VarDeclarationToken,
)


def lex(source: str) -> list[Token]:
    return list(GdxLexer(source).tokenize())


def single_tag(source: str) -> TagToken:
    tokens = lex(source)
    assert len(tokens) == 1
    token = tokens[0]
    assert isinstance(token, TagToken)
    return token


def property_values(source: str) -> dict[str, str]:
    return {p.name: p.value for p in single_tag(source).properties}


# ============================================================================
# Imports and declarations
# ============================================================================


class TestImport:
    def test_import(self) -> None:
        (token,) = lex('import ClickButton from "./click_button.gdx"')
        assert isinstance(token, ImportToken)
        assert token.kind == TokenKind.IMPORT
        assert token.class_name == "ClickButton"
        assert token.relative_path == "./click_button.gdx"

    def test_import_range_covers_statement(self) -> None:
        source = 'x\nimport A from "a.gdx" # trailing'
        (token,) = lex(source)
        assert token.range.slice(source) == 'import A from "a.gdx"'
        assert (token.range.start.line, token.range.start.column) == (2, 1)

    def test_missing_from(self) -> None:
        with pytest.raises(ParseError, match='Expected token "from"'):
            lex('import A "a.gdx"')

    def test_missing_path(self) -> None:
        with pytest.raises(ParseError, match="Expected path string"):
            lex("import A from a_gdx")

    def test_missing_name(self) -> None:
        with pytest.raises(ParseError, match="Expected name of the imported component"):
            lex('import "a.gdx"')


class TestDeclarations:
    def test_var(self) -> None:
        (token,) = lex("var score: int = 0")
        assert isinstance(token, VarDeclarationToken)
        assert token.name == "score"

    def test_func_with_parameters(self) -> None:
        (token,) = lex("func move(target: Vector2, speed = [1, 2], mode := Mode.FAST) -> void:\n\tpass")
        assert isinstance(token, FuncDeclarationToken)
        assert token.name == "move"
        assert token.parameters == ["target", "speed", "mode"]

    def test_func_with_call_default(self) -> None:
        (token,) = lex("func place(at = Vector2(1, 2), size: Array[int] = []):")
        assert token.parameters == ["at", "size"]

    def test_lambda_is_not_a_declaration(self) -> None:
        tokens = lex("var callback = func(x): return x * 2")
        assert [type(t) for t in tokens] == [VarDeclarationToken]

    @pytest.mark.parametrize("source", ["variant = 1", "my_var = 2", "function_count = 3"])
    def test_keyword_inside_identifier(self, source: str) -> None:
        assert lex(source) == []

    def test_malformed_var(self) -> None:
        with pytest.raises(ParseError, match="Expected variable name"):
            lex("var = 3")

    def test_malformed_func(self) -> None:
        with pytest.raises(ParseError, match='Expected "\\)"'):
            lex("func broken(a b):")


# ============================================================================
# Tags
# ============================================================================


class TestTags:
    def test_single_tag(self) -> None:
        token = single_tag('<Label text="Hi"/>')
        assert token.type == TagType.SINGLE
        assert token.class_name == "Label"
        assert [(p.name, p.value) for p in token.properties] == [("text", '"Hi"')]

    def test_open_and_close(self) -> None:
        tokens = lex("<VBoxContainer>\n</VBoxContainer>")
        assert [t.type for t in tokens] == [TagType.OPEN, TagType.CLOSE]
        assert tokens[1].range.start.line == 2

    def test_properties_across_lines(self) -> None:
        token = single_tag('<Button\n\ttext="Go"\n\tdisabled=true\n/>')
        assert [p.name for p in token.properties] == ["text", "disabled"]
        assert token.properties[1].range.start.line == 3

    def test_namespaced_property_name(self) -> None:
        assert property_values("<Label theme_override_colors:font_color=RED/>") == {
            "theme_override_colors:font_color": "RED"
        }

    def test_tag_range(self) -> None:
        source = "b = <Button/>\n"
        token = single_tag(source)
        assert token.range.slice(source) == "<Button/>"

    def test_missing_tag_end(self) -> None:
        with pytest.raises(ParseError, match='Expected tag close "/>" or ">"'):
            lex('<Label text="Hi"')

    def test_missing_value(self) -> None:
        with pytest.raises(ParseError, match="Expected value"):
            lex("<Label text=/>")

    def test_close_tag_with_slash_end(self) -> None:
        with pytest.raises(ParseError, match="Can't end closing tag"):
            lex("</Label/>")

    def test_close_tag_with_properties(self) -> None:
        with pytest.raises(ParseError, match="can't have properties"):
            lex('</Label text="Hi">')


class TestPropertyValues:
    @pytest.mark.parametrize(
        "value",
        ['"double"', "'single'", '"esc\\"aped"', "42", "-7", "0x1F", "0b101", "1.5", "2e3", "3.0f"],
    )
    def test_literals(self, value: str) -> None:
        assert property_values(f"<A v={value}/>") == {"v": value}

    def test_symbol(self) -> None:
        assert property_values("<A v=Color.RED/>") == {"v": "Color.RED"}

    def test_call_and_accessor(self) -> None:
        assert property_values('<A v=get_node("Panel").size.x/>') == {
            "v": 'get_node("Panel").size.x'
        }

    def test_nested_call_arguments(self) -> None:
        assert property_values("<A v=Vector2(min(a, 3), 1.5)/>") == {"v": "Vector2(min(a, 3), 1.5)"}

    def test_code_block_keeps_nested_braces(self) -> None:
        assert property_values("<A v={ a + {nested} }/>") == {"v": "a + {nested}"}

    def test_code_block_across_lines(self) -> None:
        assert property_values("<A v={\n\titems.map(func(i): return {i: 1})\n}/>") == {
            "v": "items.map(func(i): return {i: 1})"
        }

    def test_unterminated_code_block(self) -> None:
        with pytest.raises(ParseError, match="Couldn't find code block end") as exc_info:
            lex("<A v={ a + 1/>")
        assert exc_info.value.column == 6

    def test_triple_quoted_string_is_folded(self) -> None:
        assert property_values('<A text="""line1\n\tline2   end"""/>') == {
            "text": '"line1 line2 end"'
        }


def test_normalize_block_string() -> None:
    assert normalize_block_string("line1\n\tline2   end") == "line1 line2 end"


# ============================================================================
# Host code
# ============================================================================


class TestHostCode:
    @pytest.mark.parametrize(
        "source",
        [
            "if a<b:\n\tpass",
            "if a < b and c <= d:",
            "x = items[0]<limit",
            "y = f(x)<limit",
            "# <Label/> commented out",
            'print("<b>import</b> var func")',
            "print('<Label/>')",
            "mask = 1<<layer",
            "flags<<shift",
            "return (a)<<b",
        ],
    )
    def test_not_markup(self, source: str) -> None:
        assert lex(source) == []

    def test_tag_after_host_string(self) -> None:
        tokens = lex('print("#")\nvar label = <Label/>')
        assert [t.kind for t in tokens] == [TokenKind.VAR_DECLARATION, TokenKind.TAG]

    def test_tokenize_restarts_from_beginning(self) -> None:
        lexer = GdxLexer("var a\nvar b")
        first = [t.name for t in lexer.tokenize()]
        second = [t.name for t in lexer.tokenize()]
        assert first == second == ["a", "b"]

    def test_tag_after_shift(self) -> None:
        tokens = lex("bits = 1<<2\nlabel = <Label/>")
        assert [t.kind for t in tokens] == [TokenKind.TAG]


class _DanglingFrameLexer(GdxLexer):
    """Lexer with a rule that opens a frame and never closes it."""

    def __init__(self, text: str):
        super().__init__(text)
        self._rules = (self.dangling, *self._rules)

    def dangling(self) -> None:
        self.open_frame()
        return None


class TestFrameBalance:
    def test_rule_leaving_frame_open_raises(self) -> None:
        lexer = _DanglingFrameLexer("var a")
        with pytest.raises(MatchStackError, match="Not all opened match frames were closed"):
            list(lexer.tokenize())

    def test_balanced_rules_leave_root_frame(self) -> None:
        lexer = GdxLexer("var a = <Label/>")
        list(lexer.tokenize())
        assert lexer.depth == 0
