"""
Code generation for tag trees.

A node renders as a single factory call::

    <Button text="Go" on_pressed=go/>
    create_node(Button, {"text": "Go", "on_pressed": funcref(self, "go")}, [])

Line breaks between properties and children follow the source: when the
next item starts N lines below the previous one, N newlines and the
indentation of its source line are emitted before it.
"""

from __future__ import annotations

from .cursor import Mark, line_indent
from .ir import DeclarationTable, TagNode, TagProperty
from .manifest import CodegenConfig

SELF_CLASS = "self"
CHILDREN_PROPERTY = "children"


class NodeRenderer:
    """Renders ``TagNode`` trees of one source into host code."""

    def __init__(
        self,
        source: str,
        declarations: DeclarationTable,
        codegen: CodegenConfig | None = None,
    ):
        self.source = source
        self.declarations = declarations
        self.codegen = codegen or CodegenConfig()

    def render(self, node: TagNode) -> str:
        line = node.range.start.line
        properties = [p for p in node.properties if p.name != CHILDREN_PROPERTY]
        extra = node.find_property(CHILDREN_PROPERTY)

        parts = [f"{self.codegen.node_factory}({self.class_reference(node.class_name)}, {{"]
        for index, prop in enumerate(properties):
            parts.append(self._separator(index, prop.range.start, line))
            parts.append(self.render_property(prop))
            line = prop.range.end.line

        parts.append("}, [")
        for index, child in enumerate(node.children):
            parts.append(self._separator(index, child.range.start, line))
            parts.append(self.render(child))
            line = child.range.end.line

        parts.append(self._line_breaks(node.range.end, line))
        parts.append("]")
        if extra is not None:
            parts.append(f" + {extra.value}")
        parts.append(")")
        return "".join(parts)

    def class_reference(self, class_name: str) -> str:
        if class_name == SELF_CLASS:
            return self.codegen.self_reference
        return class_name

    def render_property(self, prop: TagProperty) -> str:
        return f'"{prop.name}": {self.render_value(prop.value)}'

    def render_value(self, value: str) -> str:
        """Bare names of declared functions become function references."""
        if self.declarations.is_function(value):
            return self.codegen.function_reference.format(name=value)
        return value

    def _separator(self, index: int, start: Mark, line: int) -> str:
        breaks = self._line_breaks(start, line)
        if index == 0:
            return breaks
        if breaks:
            return "," + breaks
        return ", "

    def _line_breaks(self, mark: Mark, line: int) -> str:
        delta = mark.line - line
        if delta <= 0:
            return ""
        return "\n" * delta + line_indent(self.source, mark)
