"""
GDX parser: turns a GDX source into plain GDScript.

Two passes over the same lexer:

1. Declarations: every ``var``, ``func`` and ``import`` name is recorded so
   tags can reference functions declared further down the file.
2. Tree build: tags are assembled on a stack; each finished top-level tag
   and each import is rendered and spliced into a copy of the source.

Everything that is not a tag or an import is copied through unchanged.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, Field

from .cursor import Mark, Range
from .errors import ParseError, make_parse_error, marker_width, source_snippet
from .ir import Declaration, DeclarationKind, DeclarationTable, TagNode, TagProperty
from .lexer import GdxLexer
from .manifest import CodegenConfig
from .render import NodeRenderer
from .rewriter import SourceRewriter
from .tokens import (
    FuncDeclarationToken,
    ImportToken,
    TagToken,
    TagType,
    VarDeclarationToken,
)

logger = logging.getLogger(__name__)

TEXT_PROPERTY = "text"


@dataclass
class ParseContext:
    """
    Where a source lives.

    Attributes:
        file_path: Source file, used in error locations
        file_base_name: File name without directory or suffix
        folder_path: Resource folder imports are resolved against,
            e.g. ``res://scripts``
    """

    file_path: Path | None = None
    file_base_name: str = ""
    folder_path: str = ""


class ParseResult(BaseModel):
    """Output of one transform plus what was found along the way."""

    output: str
    regions: int = Field(description="Number of rewritten tag and import spans")
    declarations: DeclarationTable


def normalize_newlines(source: str) -> str:
    return source.replace("\r\n", "\n").replace("\r", "\n")


def resolve_resource_path(folder: str, relative: str) -> str:
    """
    Join an import path onto the importing file's folder.

    Scheme prefixes are kept and dot segments collapsed::

        resolve_resource_path("res://ui", "../widgets/button.gdx")
        'res://widgets/button.gdx'
    """
    if "://" in relative:
        return relative

    scheme, separator, folder_rest = folder.partition("://")
    if not separator:
        scheme, folder_rest = "", folder

    joined = posixpath.normpath(posixpath.join(folder_rest, relative))
    if joined == ".":
        joined = ""
    if scheme:
        return f"{scheme}://{joined}"
    return joined


class GdxParser:
    """
    Two-pass GDX to GDScript transformer.

    A parser holds no per-source state between calls and can be reused.
    """

    def __init__(self, codegen: CodegenConfig | None = None):
        self.codegen = codegen or CodegenConfig()

    def parse(self, source: str, context: ParseContext | None = None) -> str:
        return self.transform(source, context).output

    def transform(self, source: str, context: ParseContext | None = None) -> ParseResult:
        """
        Transform ``source``.

        Raises:
            ParseError: On malformed markup or declaration headers
        """
        context = context or ParseContext()
        source = normalize_newlines(source)
        lexer = GdxLexer(source, context.file_path)

        declarations = self.collect_declarations(lexer)
        logger.debug(
            "Declarations in %s: %d variables, %d functions",
            context.file_path or "<string>",
            len(declarations.variables),
            len(declarations.functions),
        )

        rewriter = SourceRewriter(source)
        self._build(lexer, rewriter, declarations, context)
        logger.debug("Rewrote %d regions", rewriter.replacements)

        return ParseResult(
            output=rewriter.text,
            regions=rewriter.replacements,
            declarations=declarations,
        )

    def collect_declarations(self, lexer: GdxLexer) -> DeclarationTable:
        """First pass: names of variables, functions and imports."""
        table = DeclarationTable()
        for token in lexer.tokenize():
            line = token.range.start.line
            if isinstance(token, VarDeclarationToken):
                table.add(Declaration(name=token.name, kind=DeclarationKind.VARIABLE, line=line))
            elif isinstance(token, FuncDeclarationToken):
                table.add(
                    Declaration(
                        name=token.name,
                        kind=DeclarationKind.FUNCTION,
                        parameters=token.parameters,
                        line=line,
                    )
                )
            elif isinstance(token, ImportToken):
                # Imports declare a variable holding the loaded resource.
                table.add(
                    Declaration(name=token.class_name, kind=DeclarationKind.VARIABLE, line=line)
                )
        return table

    def _build(
        self,
        lexer: GdxLexer,
        rewriter: SourceRewriter,
        declarations: DeclarationTable,
        context: ParseContext,
    ) -> None:
        source = rewriter.original
        renderer = NodeRenderer(source, declarations, self.codegen)
        stack: list[TagNode] = []

        def error(message: str, span: Range) -> ParseError:
            start = span.start
            return make_parse_error(
                message,
                context.file_path,
                start.line,
                start.column,
                snippet=source_snippet(source, start.line),
                width=marker_width(start, span.end),
            )

        for token in lexer.tokenize():
            if isinstance(token, ImportToken):
                # Inside a tag body an import is just text.
                if not stack:
                    rewriter.replace(token.range, self.render_import(token, context))
                continue

            if not isinstance(token, TagToken):
                continue

            if token.type == TagType.CLOSE:
                if not stack:
                    raise error("This tag is closing nothing", token.range)
                node = stack.pop()
                if node.class_name != token.class_name:
                    raise error(
                        f'Closing tag "</{token.class_name}>" doesn\'t match '
                        f'parent tag "<{node.class_name}>"',
                        token.range,
                    )
                fold_text(node, source, token.range.start)
                node.range = Range(node.opening.start, token.range.end)
            else:
                node = TagNode(
                    class_name=token.class_name,
                    properties=[
                        TagProperty(name=p.name, value=p.value, range=p.range)
                        for p in token.properties
                    ],
                    opening=token.range,
                    range=token.range,
                )
                if token.type == TagType.OPEN:
                    stack.append(node)
                    continue

            if stack:
                stack[-1].children.append(node)
            else:
                rewriter.replace(node.range, renderer.render(node))

        if stack:
            raise error("Missing closing tag for this tag", stack[0].opening)

    def render_import(self, token: ImportToken, context: ParseContext) -> str:
        path = resolve_resource_path(context.folder_path, token.relative_path)
        loader = self.codegen.resource_loader.format(path=path)
        return f"var {token.class_name} = {loader}"


def fold_text(node: TagNode, source: str, closing: Mark) -> None:
    """
    Turn raw text between a childless node's tags into its ``text`` property.

    ``<Label>Hello</Label>`` gets ``"text": "Hello"``; an existing ``text``
    value is concatenated with the folded literal.
    """
    if node.children:
        return
    raw = source[node.opening.end.position : closing.position]
    text = raw.replace("\n", "").replace("\t", "").strip()
    if not text:
        return

    value = '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'
    existing = node.find_property(TEXT_PROPERTY)
    if existing is not None:
        existing.value = f"{existing.value} + {value}"
        return

    if node.properties:
        anchor = node.properties[-1].range
    else:
        anchor = Range(node.opening.end, node.opening.end)
    node.properties.append(TagProperty(name=TEXT_PROPERTY, value=value, range=anchor))


def parse(
    source: str,
    context: ParseContext | None = None,
    codegen: CodegenConfig | None = None,
) -> str:
    """Transform one GDX source into GDScript."""
    return GdxParser(codegen).parse(source, context)
