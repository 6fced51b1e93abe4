"""
Intermediate representation built by the GDX parser.

``TagNode`` trees are assembled while the second pass walks the token
stream and are discarded once rendered. ``DeclarationTable`` is built by
the first pass and only read afterwards.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from .cursor import Range


class TagProperty(BaseModel):
    """A ``name=value`` pair on a tag; ``value`` is host code."""

    name: str
    value: str
    range: Range

    model_config = ConfigDict(arbitrary_types_allowed=True)


class TagNode(BaseModel):
    """
    A node under construction.

    ``opening`` is the range of the opening tag alone; ``range`` grows to
    cover the matching close tag once the node is finalized.
    """

    class_name: str
    properties: list[TagProperty] = Field(default_factory=list)
    children: list[TagNode] = Field(default_factory=list)
    opening: Range
    range: Range

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def find_property(self, name: str) -> TagProperty | None:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None


class DeclarationKind(StrEnum):
    VARIABLE = "variable"
    FUNCTION = "function"


class Declaration(BaseModel):
    """A declared name and where it was declared."""

    name: str
    kind: DeclarationKind
    parameters: list[str] = Field(default_factory=list)
    line: int = Field(description="1-indexed line of the declaration header")

    model_config = ConfigDict(frozen=True)


class DeclarationTable(BaseModel):
    """Variables (imports included) and functions declared in one source."""

    variables: dict[str, Declaration] = Field(default_factory=dict)
    functions: dict[str, Declaration] = Field(default_factory=dict)

    def add(self, declaration: Declaration) -> None:
        if declaration.kind == DeclarationKind.FUNCTION:
            self.functions[declaration.name] = declaration
        else:
            self.variables[declaration.name] = declaration

    def is_function(self, name: str) -> bool:
        return name in self.functions
