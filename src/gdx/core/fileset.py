"""
Source discovery and per-file transpilation.

Outputs are written next to their sources: ``ui/menu.gdx`` becomes
``ui/menu.gd``.
"""

import logging
import posixpath
from pathlib import Path

from .manifest import ProjectManifest
from .parser import GdxParser, ParseContext

logger = logging.getLogger(__name__)


def discover_sources(root: Path, manifest: ProjectManifest) -> list[Path]:
    files: list[Path] = []
    for rel in manifest.build.source_dirs:
        base = (root / rel).resolve()
        if not base.exists():
            logger.debug("Source directory %s does not exist, skipping", base)
            continue
        for p in base.rglob(f"*{manifest.build.source_suffix}"):
            files.append(p)
    return sorted(set(files))


def context_for(path: Path, root: Path, manifest: ProjectManifest) -> ParseContext:
    """Parse context for ``path``; its folder becomes a resource path under the project root."""
    path = path.resolve()
    folder = path.parent.relative_to(root.resolve()).as_posix()
    if folder == ".":
        folder = ""
    return ParseContext(
        file_path=path,
        file_base_name=path.stem,
        folder_path=posixpath.join(manifest.build.resource_root, folder),
    )


def output_path(path: Path, manifest: ProjectManifest) -> Path:
    return path.with_suffix(manifest.build.output_suffix)


def transpile_file(
    path: Path,
    root: Path,
    manifest: ProjectManifest,
    parser: GdxParser | None = None,
) -> Path:
    """
    Transpile one source and write the result alongside it.

    Raises:
        ParseError: If the source is malformed; nothing is written
    """
    parser = parser or GdxParser(manifest.codegen)
    source = path.read_text(encoding="utf-8")
    output = parser.parse(source, context_for(path, root, manifest))

    target = output_path(path, manifest)
    target.write_text(output, encoding="utf-8")
    logger.info("Wrote %s", target)
    return target
