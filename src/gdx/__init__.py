"""
gdx - GDScript with embedded node markup.

Transpiles ``.gdx`` sources, GDScript mixed with ``<Tag prop=value/>``
node markup and ``import Name from "path"`` statements, into plain
GDScript that builds the node tree through a factory call.
"""

from __future__ import annotations

from ._version import get_version
from .core.errors import GdxError, ManifestError, ParseError
from .core.parser import GdxParser, ParseContext, parse

__version__ = get_version()

__all__ = [
    "__version__",
    "GdxError",
    "GdxParser",
    "ManifestError",
    "ParseContext",
    "ParseError",
    "parse",
]
