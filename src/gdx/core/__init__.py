"""Core GDX functionality: lexer, parser, code generation, project manifest, source discovery."""

from . import ir
from .errors import ErrorContext, GdxError, ManifestError, MatchStackError, ParseError
from .fileset import context_for, discover_sources, transpile_file
from .lexer import GdxLexer
from .manifest import BuildConfig, CodegenConfig, ProjectManifest, find_manifest, load_manifest
from .parser import GdxParser, ParseContext, ParseResult, parse, resolve_resource_path

__all__ = [
    "ir",
    "GdxError",
    "ParseError",
    "ManifestError",
    "MatchStackError",
    "ErrorContext",
    "GdxLexer",
    "GdxParser",
    "ParseContext",
    "ParseResult",
    "parse",
    "resolve_resource_path",
    "BuildConfig",
    "CodegenConfig",
    "ProjectManifest",
    "load_manifest",
    "find_manifest",
    "discover_sources",
    "context_for",
    "transpile_file",
]
