import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ManifestError

MANIFEST_NAME = "gdx.toml"


@dataclass
class BuildConfig:
    """Where sources live and how outputs are named."""

    source_dirs: list[str] = field(default_factory=lambda: ["."])
    source_suffix: str = ".gdx"
    output_suffix: str = ".gd"
    resource_root: str = "res://"  # Prefix for import paths


@dataclass
class CodegenConfig:
    """Names used by generated code.

    Example in gdx.toml (Godot 4 style callables):

        [codegen]
        function_reference = 'Callable(self, "{name}")'
    """

    node_factory: str = "create_node"
    self_reference: str = "get_script()"
    function_reference: str = 'funcref(self, "{name}")'
    resource_loader: str = 'ResourceLoader.load("{path}")'

    def __post_init__(self) -> None:
        if "{name}" not in self.function_reference:
            raise ManifestError(
                f"codegen.function_reference must contain {{name}}: {self.function_reference!r}"
            )
        if "{path}" not in self.resource_loader:
            raise ManifestError(
                f"codegen.resource_loader must contain {{path}}: {self.resource_loader!r}"
            )


@dataclass
class ProjectManifest:
    """Project manifest loaded from gdx.toml."""

    name: str
    build: BuildConfig = field(default_factory=BuildConfig)
    codegen: CodegenConfig = field(default_factory=CodegenConfig)


def load_manifest(path: Path) -> ProjectManifest:
    """
    Load gdx.toml.

    Raises:
        ManifestError: If the file is not valid TOML or a template is malformed
    """
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ManifestError(f"Invalid manifest {path}: {e}") from e

    project = data.get("project", {})
    build_data = data.get("build", {})
    codegen_data = data.get("codegen", {})

    defaults = BuildConfig()
    build = BuildConfig(
        source_dirs=build_data.get("source_dirs", defaults.source_dirs),
        source_suffix=build_data.get("source_suffix", defaults.source_suffix),
        output_suffix=build_data.get("output_suffix", defaults.output_suffix),
        resource_root=build_data.get("resource_root", defaults.resource_root),
    )

    codegen_defaults = CodegenConfig()
    codegen = CodegenConfig(
        node_factory=codegen_data.get("node_factory", codegen_defaults.node_factory),
        self_reference=codegen_data.get("self_reference", codegen_defaults.self_reference),
        function_reference=codegen_data.get(
            "function_reference", codegen_defaults.function_reference
        ),
        resource_loader=codegen_data.get("resource_loader", codegen_defaults.resource_loader),
    )

    return ProjectManifest(
        name=project.get("name", path.parent.name),
        build=build,
        codegen=codegen,
    )


def find_manifest(root: Path) -> ProjectManifest:
    """Manifest for ``root``, or defaults when it has no gdx.toml."""
    path = root / MANIFEST_NAME
    if path.exists():
        return load_manifest(path)
    return ProjectManifest(name=root.resolve().name)
