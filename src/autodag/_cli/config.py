"""Configuration loading from pyproject.toml."""

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import cast

from autodag._errors import AutodagError


class ConfigError(AutodagError):
    """Error in autodag configuration."""


@dataclass(slots=True, frozen=True)
class ScriptSource:
    """Script path with optional variable name."""

    script: Path
    name: str | None = None


@dataclass(slots=True, frozen=True)
class ModuleSource:
    """Module path with variable name (e.g., 'examples.diamond:graph')."""

    module_path: str


GraphSource = ScriptSource | ModuleSource


@dataclass(slots=True, frozen=True)
class AutodagConfig:
    """Configuration loaded from the [tool.autodag] table of pyproject.toml.

    Relative script paths are resolved from the project root (directory
    containing pyproject.toml).

    Attributes:
        graph: Where to load the graph from when no path is given on the command line.
        targets: Node names resolved by default when none are given.
        project_root: Directory containing pyproject.toml.

    """

    graph: GraphSource | None = None
    targets: tuple[str, ...] = field(default_factory=tuple)
    project_root: Path | None = None


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Find pyproject.toml by walking up from start_dir.

    Args:
        start_dir: Starting directory. Defaults to current working directory.

    Returns:
        Path to pyproject.toml if found, None otherwise.

    """
    current = (start_dir if start_dir is not None else Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    return None


def parse_graph_source(value: object, project_root: Path) -> GraphSource:
    """Parse a graph location, either from config or from the command line.

    Args:
        value: ``"module.path:variable"``, or a table ``{ script = "path.py", name = "graph" }``.
        project_root: Directory relative script paths are resolved from.

    Returns:
        Parsed GraphSource.

    Raises:
        ConfigError: If the value format is invalid.

    """
    if isinstance(value, str):
        if ":" not in value:
            msg = f"Invalid module path '{value}'. Expected format: 'module.path:variable_name'"
            raise ConfigError(msg)
        return ModuleSource(module_path=value)

    if isinstance(value, dict):
        value_dict = cast("dict[str, object]", value)
        script_value = value_dict.get("script")
        if not isinstance(script_value, str):
            msg = "Invalid [tool.autodag].graph.script: expected string path"
            raise ConfigError(msg)
        script_path = Path(script_value)
        if not script_path.is_absolute():
            script_path = project_root / script_path

        name = value_dict.get("name")
        if name is not None and not isinstance(name, str):
            msg = "Invalid [tool.autodag].graph.name: expected string"
            raise ConfigError(msg)

        return ScriptSource(script=script_path, name=name)

    msg = "Invalid [tool.autodag].graph configuration. Expected string or table with 'script' key."
    raise ConfigError(msg)


def load_config(pyproject_path: Path) -> AutodagConfig:
    """Load and validate [tool.autodag] config from pyproject.toml.

    Args:
        pyproject_path: Path to pyproject.toml

    Returns:
        Parsed AutodagConfig

    Raises:
        ConfigError: If the configuration is invalid

    """
    project_root = pyproject_path.parent

    with pyproject_path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {pyproject_path}: {e}"
            raise ConfigError(msg) from e

    section = data.get("tool", {}).get("autodag", {})
    if not section:
        return AutodagConfig(project_root=project_root)

    graph_source = parse_graph_source(section["graph"], project_root) if "graph" in section else None

    targets = section.get("targets", [])
    if not isinstance(targets, list) or not all(isinstance(t, str) for t in targets):
        msg = "Invalid [tool.autodag].targets: expected a list of node names"
        raise ConfigError(msg)

    return AutodagConfig(graph=graph_source, targets=tuple(targets), project_root=project_root)


def get_config() -> AutodagConfig:
    """Get config from pyproject.toml in current directory or parents.

    Returns:
        AutodagConfig (empty if no pyproject.toml or no [tool.autodag] section)

    """
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return AutodagConfig()
    return load_config(pyproject_path)
