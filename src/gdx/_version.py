"""Version of the gdx distribution."""

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

DISTRIBUTION = "gdx-transpiler"

# Present in a source checkout, absent once installed.
_PYPROJECT = Path(__file__).resolve().parents[2] / "pyproject.toml"


def get_version() -> str:
    """Checkout version from pyproject.toml, else installed metadata, else 0.0.0."""
    if _PYPROJECT.is_file():
        with _PYPROJECT.open("rb") as f:
            project = tomllib.load(f).get("project", {})
        if project.get("name") == DISTRIBUTION and "version" in project:
            return project["version"]
    try:
        return version(DISTRIBUTION)
    except PackageNotFoundError:
        return "0.0.0"
