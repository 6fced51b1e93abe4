"""
Token types produced by the GDX lexer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum, auto
from typing import ClassVar

from .cursor import Range


class TokenKind(StrEnum):
    """Kinds of tokens the lexer yields."""

    IMPORT = auto()
    VAR_DECLARATION = auto()
    FUNC_DECLARATION = auto()
    TAG = auto()
    TAG_PROPERTY = auto()


class TagType(StrEnum):
    OPEN = auto()  # <Name props>
    SINGLE = auto()  # <Name props/>
    CLOSE = auto()  # </Name>


@dataclass
class Token:
    """Base token: every token knows the source range it was read from."""

    kind: ClassVar[TokenKind]

    range: Range

    def __repr__(self) -> str:
        start = self.range.start
        return f"{type(self).__name__}({self.kind.value}, {start.line}:{start.column})"


@dataclass(repr=False)
class ImportToken(Token):
    """``import Name from "path"``"""

    kind: ClassVar[TokenKind] = TokenKind.IMPORT

    class_name: str
    relative_path: str


@dataclass(repr=False)
class VarDeclarationToken(Token):
    """``var name`` header, or a function parameter."""

    kind: ClassVar[TokenKind] = TokenKind.VAR_DECLARATION

    name: str


@dataclass(repr=False)
class FuncDeclarationToken(Token):
    """``func name(params)`` header."""

    kind: ClassVar[TokenKind] = TokenKind.FUNC_DECLARATION

    name: str
    parameters: list[str] = field(default_factory=list)


@dataclass(repr=False)
class TagPropertyToken(Token):
    """``name=value`` inside a tag."""

    kind: ClassVar[TokenKind] = TokenKind.TAG_PROPERTY

    name: str
    value: str


@dataclass(repr=False)
class TagToken(Token):
    """An open, self-closing or close tag."""

    kind: ClassVar[TokenKind] = TokenKind.TAG

    type: TagType
    class_name: str
    properties: list[TagPropertyToken] = field(default_factory=list)
