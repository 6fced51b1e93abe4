"""Shared pytest fixtures for gdx tests."""

from pathlib import Path

import pytest

from gdx.core.parser import GdxParser, ParseContext


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def gdx_fixtures_dir(fixtures_dir: Path) -> Path:
    """Return path to the GDX input/expected-output pairs."""
    return fixtures_dir / "gdx"


@pytest.fixture
def parser() -> GdxParser:
    """Return a parser with default code generation settings."""
    return GdxParser()


@pytest.fixture
def scripts_context() -> ParseContext:
    """Context for a file living in res://scripts."""
    return ParseContext(
        file_path=Path("scripts/main.gdx"),
        file_base_name="main",
        folder_path="res://scripts",
    )


@pytest.fixture
def gdx_project(tmp_path: Path) -> Path:
    """Create a small project with a manifest and two sources."""
    scripts = tmp_path / "scripts"
    (scripts / "ui").mkdir(parents=True)

    (tmp_path / "gdx.toml").write_text(
        """
[project]
name = "clicker"

[build]
source_dirs = ["scripts"]
"""
    )
    (scripts / "main.gdx").write_text(
        'import ClickButton from "./ui/click_button.gdx"\n'
        "\n"
        "func _ready():\n"
        "\tadd_child(<ClickButton text=\"Go\" on_clicked=start/>)\n"
        "\n"
        "func start():\n"
        "\tpass\n"
    )
    (scripts / "ui" / "click_button.gdx").write_text(
        "extends Button\n"
        "\n"
        "signal clicked\n"
    )
    (scripts / "notes.txt").write_text("<NotASource/>\n")
    return tmp_path
