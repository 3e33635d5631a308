"""Locating and importing the graph a command operates on.

The module path computation follows `fastapi_cli.discover` of package `fastapi-cli`.
"""

from __future__ import annotations

import importlib
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

from autodag._dag import Graph

from .config import ConfigError, GraphSource, ModuleSource, ScriptSource, parse_graph_source

logger = logging.getLogger(__name__)


@dataclass
class ModuleData:
    """Import information for a Python file."""

    module_import_str: str
    extra_sys_path: Path


def get_module_data_from_path(path: Path) -> ModuleData:
    """Work out how to import the module stored at ``path``.

    Enclosing directories with an ``__init__.py`` become parent packages.

    Args:
        path: Path to a Python file or package

    Returns:
        ModuleData with the dotted module name and the directory to put on sys.path

    """
    module_path = path.resolve()
    if module_path.is_file() and module_path.stem == "__init__":
        module_path = module_path.parent

    parts = [module_path.stem]
    root = module_path.parent
    while (root / "__init__.py").is_file():
        parts.insert(0, root.name)
        root = root.parent

    return ModuleData(module_import_str=".".join(parts), extra_sys_path=root)


def load_graph_from_script(script_path: Path, graph_name: str | None = None) -> Graph:
    """Import a script and return the graph it declares.

    Args:
        script_path: Path to the Python script declaring the graph
        graph_name: Name of the graph variable. If None, the first Graph found is used

    Returns:
        The loaded Graph instance

    Raises:
        ImportError: If the module cannot be imported
        ValueError: If no graph is found or the named variable doesn't exist
        TypeError: If the named variable is not a Graph

    """
    module_data = get_module_data_from_path(script_path)
    sys.path.insert(0, str(module_data.extra_sys_path))

    try:
        module = importlib.import_module(module_data.module_import_str)
    except (ImportError, ValueError):
        logger.exception("Import error")
        logger.warning("Ensure all the package directories have an __init__.py file")
        raise

    if graph_name:
        if not hasattr(module, graph_name):
            msg = f"Could not find graph '{graph_name}' in {module_data.module_import_str}"
            raise ValueError(msg)
        graph = getattr(module, graph_name)
        if not isinstance(graph, Graph):
            msg = f"'{graph_name}' in {module_data.module_import_str} is not a Graph instance"
            raise TypeError(msg)
        return graph

    for name, obj in vars(module).items():
        if isinstance(obj, Graph):
            logger.debug("Found graph: %s", name)
            return obj

    msg = "Could not find a Graph in module, try using --graph"
    raise ValueError(msg)


def load_graph_from_module_path(module_path: str) -> Graph:
    """Load a graph from a module path (e.g., 'examples.diamond:graph').

    Raises:
        ValueError: If the module path format is invalid
        TypeError: If the variable is not a Graph

    """
    if ":" not in module_path:
        msg = "Module path must be in format 'module.path:variable_name'"
        raise ValueError(msg)

    module_name, graph_name = module_path.split(":", 1)
    module = importlib.import_module(module_name)
    graph = getattr(module, graph_name)

    if not isinstance(graph, Graph):
        msg = f"'{graph_name}' in module '{module_name}' is not a Graph instance"
        raise TypeError(msg)

    return graph


def load_graph_from_source(source: GraphSource) -> Graph:
    """Load a graph from a GraphSource (script or module)."""
    match source:
        case ScriptSource(script=script, name=name):
            return load_graph_from_script(script, name)
        case ModuleSource(module_path=module_path):
            return load_graph_from_module_path(module_path)


def resolve_graph_source(path: str | None, graph_name: str | None, default: GraphSource | None) -> GraphSource:
    """Pick the graph location from the command line, falling back to config.

    Args:
        path: Script path or ``module:variable`` given on the command line.
        graph_name: Variable name for script paths (``--graph``).
        default: The [tool.autodag].graph source.

    Raises:
        ConfigError: If neither the command line nor config names a graph.

    """
    if path is None:
        if default is None:
            msg = "No graph given. Pass a script or module path, or set [tool.autodag].graph in pyproject.toml."
            raise ConfigError(msg)
        return default
    if ":" in path:
        return parse_graph_source(path, Path.cwd())
    return ScriptSource(script=Path(path), name=graph_name)
