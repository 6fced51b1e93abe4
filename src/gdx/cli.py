"""
gdx CLI - transpile GDX sources to GDScript.

Commands:
  build   Transpile every source of a project (gdx.toml optional)
  check   Run a fixture directory and diff failures
  tokens  Show the token stream of one file
"""

from __future__ import annotations

import difflib
import logging
import platform
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from gdx._version import get_version
from gdx.core.errors import GdxError, ParseError
from gdx.core.fileset import discover_sources, transpile_file
from gdx.core.lexer import GdxLexer
from gdx.core.manifest import MANIFEST_NAME, find_manifest, load_manifest
from gdx.core.parser import GdxParser, normalize_newlines
from gdx.core.tokens import (
    FuncDeclarationToken,
    ImportToken,
    TagToken,
    Token,
    VarDeclarationToken,
)
from gdx.testing.fixtures import load_fixtures, run_fixtures

console = Console()
logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"gdx {get_version()}")
        typer.echo(f"Python {platform.python_version()} ({platform.python_implementation()})")
        raise typer.Exit()


app = typer.Typer(
    help="""gdx - GDScript with node markup

Transpiles .gdx sources (GDScript plus <Tag/> markup and imports)
into plain .gd scripts.
""",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """gdx CLI main callback for global options."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format=LOG_FORMAT)


def _print_parse_error(error: ParseError, root: Path, format: str) -> None:
    if format == "vscode" and error.context and error.context.file:
        try:
            rel_path = Path(error.context.file).relative_to(root)
        except ValueError:
            rel_path = Path(error.context.file)
        typer.echo(
            f"{rel_path}:{error.line}:{error.column}: error: {error.message}",
            err=True,
        )
    else:
        typer.echo(f"Parse error: {error}", err=True)


@app.command()
def build(
    root: Path = typer.Argument(Path("."), help="Project root"),
    manifest: Path | None = typer.Option(
        None, "--manifest", "-m", help=f"Path to {MANIFEST_NAME} (defaults to ROOT/{MANIFEST_NAME})"
    ),
    format: str = typer.Option(
        "human", "--format", "-f", help="Error output format: 'human' or 'vscode'"
    ),
) -> None:
    """
    Transpile every source under the project's source directories.

    Outputs are written next to their sources. A file that fails to parse
    is reported and skipped; the exit code is 1 if any file failed.
    """
    root = root.resolve()
    try:
        mf = load_manifest(manifest.resolve()) if manifest else find_manifest(root)
    except GdxError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    sources = discover_sources(root, mf)
    logger.debug("Found %d sources under %s", len(sources), root)
    if not sources:
        typer.echo(f"No {mf.build.source_suffix} files found under {root}")
        return

    parser = GdxParser(mf.codegen)
    failures = 0
    for path in sources:
        try:
            target = transpile_file(path, root, mf, parser)
        except ParseError as e:
            failures += 1
            _print_parse_error(e, root, format)
            continue
        typer.echo(f"  {path.relative_to(root)} -> {target.name}")

    typer.echo(f"Built {len(sources) - failures}/{len(sources)} files")
    if failures:
        raise typer.Exit(code=1)


@app.command()
def check(
    directory: Path = typer.Argument(..., help="Fixture directory of <case>.gdx / <case>.gd pairs"),
    folder: str = typer.Option("", "--folder", help="Resource folder imports resolve against"),
) -> None:
    """Transpile every fixture and compare with its expected output."""
    if not directory.is_dir():
        typer.echo(f"Error: {directory} is not a directory", err=True)
        raise typer.Exit(code=1)

    cases = load_fixtures(directory)
    expected = {case.name: case.expected for case in cases}
    report = run_fixtures(cases, folder_path=folder)

    for result in report.results:
        if result.passed:
            console.print(f"[green]PASS[/green] {escape(result.name)}")
            continue
        if result.error:
            console.print(
                f"[red]FAIL[/red] {escape(result.name)}: {escape(result.error)} "
                f"(line {result.line}, column {result.column})"
            )
            continue
        console.print(f"[red]FAIL[/red] {escape(result.name)}: output differs")
        diff = difflib.unified_diff(
            expected[result.name].splitlines(keepends=True),
            result.output.splitlines(keepends=True),
            fromfile=f"{result.name}.gd (expected)",
            tofile=f"{result.name}.gd (actual)",
        )
        typer.echo("".join(diff))

    typer.echo(
        f"{report.passed} passed, {report.failed} failed in {report.elapsed * 1000:.1f} ms"
    )
    if not report.ok:
        raise typer.Exit(code=1)


def _describe(token: Token) -> str:
    if isinstance(token, ImportToken):
        return f'{token.class_name} from "{token.relative_path}"'
    if isinstance(token, VarDeclarationToken):
        return token.name
    if isinstance(token, FuncDeclarationToken):
        return f"{token.name}({', '.join(token.parameters)})"
    if isinstance(token, TagToken):
        props = " ".join(f"{p.name}={p.value}" for p in token.properties)
        return f"{token.type.value} {token.class_name} {props}".rstrip()
    return ""


@app.command()
def tokens(
    file: Path = typer.Argument(..., help="GDX source file"),
) -> None:
    """Print the tokens the lexer reads from FILE."""
    if not file.exists():
        typer.echo(f"Error: {file} not found", err=True)
        raise typer.Exit(code=1)

    source = normalize_newlines(file.read_text(encoding="utf-8"))
    lexer = GdxLexer(source, file)

    table = Table(title=f"Tokens in {file.name}")
    table.add_column("Position", style="dim")
    table.add_column("Kind", style="cyan")
    table.add_column("Detail")

    try:
        for token in lexer.tokenize():
            start = token.range.start
            table.add_row(
                f"{start.line}:{start.column}", token.kind.value, escape(_describe(token))
            )
    except ParseError as e:
        console.print(table)
        typer.echo(f"Parse error: {e}", err=True)
        raise typer.Exit(code=1)

    console.print(table)


def main(argv: list[str] | None = None) -> None:
    app(args=argv, standalone_mode=True)


if __name__ == "__main__":
    main(sys.argv[1:])
