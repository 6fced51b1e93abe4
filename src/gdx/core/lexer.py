"""
Lexer for GDX sources.

GDX is GDScript with embedded node markup::

    import ClickButton from "./click_button.gdx"

    func render():
        return <VBoxContainer>
            <ClickButton text="Go" on_pressed=go/>
        </VBoxContainer>

Only imports, declaration headers and tags are recognised. Everything else
is host code: the token driver steps over it one character (or one string
literal) at a time and the parser leaves it untouched.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator
from pathlib import Path

from .cursor import Mark, Range
from .errors import MatchStackError
from .matching import (
    MatchEngine,
    alt,
    group,
    keyword,
    literal,
    negate,
    optional,
    pattern,
    repeat,
    require,
    require_last,
    seq,
)
from .tokens import (
    FuncDeclarationToken,
    ImportToken,
    TagPropertyToken,
    TagToken,
    TagType,
    Token,
    VarDeclarationToken,
)

# ---------------------------------------------------------------------------
# Value grammar
# ---------------------------------------------------------------------------

SYMBOL = pattern(r"[A-Za-z_][A-Za-z0-9_.]*")
PROPERTY_NAME = pattern(r"[A-Za-z_][A-Za-z0-9_:.]*")

# Hex and binary first; a plain integer must not be the head of a float.
INTEGER = pattern(r"[+-]?(?:0x[0-9a-fA-F]+|0b[01]+|[0-9]+)(?![0-9A-Za-z_.])")
FLOAT = pattern(r"[+-]?[0-9]+(?:\.[0-9]*)?(?:[eE][+-]?[0-9]+|[fF])?")

_TRIPLE_QUOTED = pattern(r'"""[\s\S]*?"""')
QUOTED = pattern(r'"(?:[^"\\\n]|\\.)*"|\'(?:[^\'\\\n]|\\.)*\'')

_SPACE_RUN = re.compile(r" +")

# Strings in host code are skipped whole so their contents are never read as markup.
_HOST_STRING = re.compile(r'"""[\s\S]*?"""|"(?:[^"\\\n]|\\.)*"|\'(?:[^\'\\\n]|\\.)*\'')


def normalize_block_string(body: str) -> str:
    """Fold a triple-quoted body onto one line: drop tabs, newlines become spaces, collapse spaces."""
    return _SPACE_RUN.sub(" ", body.replace("\t", "").replace("\n", " "))


def triple_quoted(engine: MatchEngine) -> bool:
    if not _TRIPLE_QUOTED(engine):
        return False
    raw = engine.captured(-1).text
    engine.replace_capture(-1, '"' + normalize_block_string(raw[3:-3]) + '"')
    return True


STRING = alt(triple_quoted, QUOTED)
LITERAL = alt(STRING, INTEGER, FLOAT)


def code_block(engine: MatchEngine) -> bool:
    """``{ ... }`` with nested braces; the value is the trimmed body without the outer braces."""
    if not engine.match_literal("{"):
        return False
    opening = engine.captured(-1).range
    cursor = engine.cursor
    depth = 0
    while not cursor.eof:
        if cursor.char == "{":
            depth += 1
        elif cursor.char == "}":
            if depth == 0:
                break
            depth -= 1
        cursor.advance()
    else:
        raise engine.error("Couldn't find code block end", opening.start, opening.end)

    body = engine.text[opening.end.position : cursor.position]
    engine.match_literal("}", skip=False)
    engine.merge_captures(2, body.strip())
    return True


_CALL_HEAD = seq(SYMBOL, literal("("))


def call(engine: MatchEngine) -> bool:
    """``name(arg, ...)`` where every argument is itself a value."""
    if not _CALL_HEAD(engine):
        return False
    if engine.attempt(VALUE):
        while engine.match_literal(","):
            require_last(group(VALUE), "Expected value")(engine)
    return require(literal(")"), 'Expected ")"')(engine)


_MEMBER_CHAIN = repeat(seq(literal(".", skip=False), alt(call, SYMBOL)))


def accessor(engine: MatchEngine) -> bool:
    """A call followed by ``.member`` / ``.method(...)`` links, e.g. ``get_node("A").size``."""
    if not call(engine):
        return False
    return _MEMBER_CHAIN(engine)


VALUE = alt(LITERAL, accessor, SYMBOL, code_block)


def host_expression(engine: MatchEngine) -> bool:
    """Opaque host expression up to the next top-level "," or closing bracket."""
    engine.cursor.skip_ignorable()
    text = engine.text
    start = position = engine.cursor.position
    depth = 0
    quote = ""
    while position < len(text):
        char = text[position]
        if quote:
            if char == "\\":
                position += 1
            elif char == quote:
                quote = ""
        elif char in "\"'":
            quote = char
        elif char in "([{":
            depth += 1
        elif char in ")]}":
            if depth == 0:
                break
            depth -= 1
        elif char == "," and depth == 0:
            break
        position += 1

    expression = text[start:position].rstrip()
    if not expression:
        return False
    return engine.match_literal(expression, skip=False)


TYPE_NAME = pattern(r"[A-Za-z_][A-Za-z0-9_.]*(?:\[[A-Za-z0-9_.,\[\] ]*\])?")
TYPE_HINT = seq(literal(":"), TYPE_NAME)
DEFAULT_VALUE = seq(alt(literal(":="), literal("=")), host_expression)
RETURN_TYPE = seq(literal("->"), TYPE_NAME)

# A tag never opens right after a word character, ")", "]" or "<":
# a<b and 1<<layer stay host code.
TAG_OPEN = pattern(r"(?<![A-Za-z0-9_)\]<])<(?=[A-Za-z_])")
TAG_CLOSE = pattern(r"</(?=[A-Za-z_])")
TAG_START = alt(TAG_CLOSE, TAG_OPEN)
TAG_END = alt(literal("/>"), literal(">"))
PROPERTY_HEAD = seq(PROPERTY_NAME, literal("="))

IMPORT = keyword("import")
FROM = keyword("from")
VAR = keyword("var")
# func(...) with no name is a lambda, not a declaration header.
FUNC = seq(keyword("func"), negate(literal("(")))


class GdxLexer(MatchEngine):
    """
    Lexer for GDX source text.

    Token rules are tried in priority order at the current position; the
    first rule that matches yields a token. When none match, the cursor
    steps over one character or one host string literal.
    """

    def __init__(self, text: str, file: Path | None = None):
        super().__init__(text, file)
        self._rules: tuple[Callable[[], Token | None], ...] = (
            self.import_statement,
            self.variable_declaration,
            self.function_declaration,
            self.tag,
        )

    def tokenize(self) -> Iterator[Token]:
        """
        Lazily tokenize the whole source from the start.

        The lexer is not reentrant: drain or abandon one sequence before
        starting another.

        Raises:
            ParseError: If an obligation fails
            MatchStackError: If a rule leaves match frames open
        """
        self.reset()
        while True:
            self.cursor.skip_ignorable()
            if self.cursor.eof:
                break
            token = self._next_token()
            if self.depth != 0:
                raise MatchStackError("Not all opened match frames were closed")
            if token is None:
                self._skip_host_text()
            else:
                yield token

    def _skip_host_text(self) -> None:
        """Step over one character of host code, or a whole host string literal."""
        match = _HOST_STRING.match(self.text, self.cursor.position)
        if match:
            self.cursor.advance_by(len(match.group(0)))
        else:
            self.cursor.advance()

    def _next_token(self) -> Token | None:
        for rule in self._rules:
            token = rule()
            if token is not None:
                return token
        return None

    def _span(self, start: Mark) -> Range:
        """Range from ``start`` to the end of the current frame's last capture."""
        return Range(start, self.frame.end)

    # ---------------------------------------------------------------- imports

    def import_statement(self) -> ImportToken | None:
        self.open_frame()
        token = None

        if IMPORT(self):
            start = self.captured(-1).range.start

            require(SYMBOL, "Expected name of the imported component")(self)
            class_name = self.captured(-1).text

            require(FROM, 'Expected token "from"')(self)

            require_last(STRING, "Expected path string")(self)
            path = self.captured(-1).text

            token = ImportToken(
                range=self._span(start),
                class_name=class_name,
                relative_path=path[1:-1],
            )

        self.close_frame(token is not None)
        return token

    # ----------------------------------------------------------- declarations

    def variable_declaration(self) -> VarDeclarationToken | None:
        self.open_frame()
        token = None

        if VAR(self):
            start = self.captured(-1).range.start
            require(SYMBOL, "Expected variable name")(self)
            name = self.captured(-1).text
            optional(TYPE_HINT)(self)
            token = VarDeclarationToken(range=self._span(start), name=name)

        self.close_frame(token is not None)
        return token

    def parameter(self) -> VarDeclarationToken | None:
        self.open_frame()
        token = None

        if SYMBOL(self):
            name = self.captured(-1)
            optional(TYPE_HINT)(self)
            optional(DEFAULT_VALUE)(self)
            token = VarDeclarationToken(range=self._span(name.range.start), name=name.text)

        self.close_frame(token is not None)
        return token

    def function_declaration(self) -> FuncDeclarationToken | None:
        self.open_frame()
        token = None

        if FUNC(self):
            start = self.captured(-1).range.start
            require(SYMBOL, "Expected function name")(self)
            name = self.captured(-1).text
            require(literal("("), 'Expected "("')(self)

            parameters: list[str] = []
            parameter = self.parameter()
            while parameter is not None:
                parameters.append(parameter.name)
                if not self.match_literal(","):
                    break
                parameter = self.parameter()

            require(literal(")"), 'Expected ")"')(self)
            optional(RETURN_TYPE)(self)

            token = FuncDeclarationToken(
                range=self._span(start), name=name, parameters=parameters
            )

        self.close_frame(token is not None)
        return token

    # ------------------------------------------------------------------ tags

    def tag(self) -> TagToken | None:
        self.open_frame()
        token = None

        if TAG_START(self):
            opener = self.captured(-1)

            require(SYMBOL, "Expected tag class name")(self)
            class_name = self.captured(-1).text

            properties = self.tag_properties()

            require_last(TAG_END, 'Expected tag close "/>" or ">"')(self)
            closer = self.captured(-1)

            if opener.text == "</":
                if closer.text == "/>":
                    raise self.error(
                        'Can\'t end closing tag with "/>"', closer.range.start, closer.range.end
                    )
                if properties:
                    raise self.error(
                        f'Closing tag "</{class_name}>" can\'t have properties',
                        properties[0].range.start,
                        properties[0].range.end,
                    )
                tag_type = TagType.CLOSE
            elif closer.text == ">":
                tag_type = TagType.OPEN
            else:
                tag_type = TagType.SINGLE

            token = TagToken(
                range=self._span(opener.range.start),
                type=tag_type,
                class_name=class_name,
                properties=properties,
            )

        self.close_frame(token is not None)
        return token

    def tag_properties(self) -> list[TagPropertyToken]:
        """Read ``name=value`` pairs greedily until the next one doesn't match."""
        properties: list[TagPropertyToken] = []

        def tag_property(engine: MatchEngine) -> bool:
            if not PROPERTY_HEAD(engine):
                return False
            name = engine.captured(-2)
            require_last(group(VALUE), "Expected value")(engine)
            properties.append(
                TagPropertyToken(
                    range=Range(name.range.start, engine.frame.end),
                    name=name.text,
                    value=engine.captured(-1).text,
                )
            )
            return True

        repeat(tag_property)(self)
        return properties
