"""Tests for the configuration module."""

from pathlib import Path

import pytest

from autodag import AutodagError
from autodag._cli.config import (
    AutodagConfig,
    ConfigError,
    ModuleSource,
    ScriptSource,
    find_pyproject_toml,
    load_config,
)
from autodag._cli.discover import (
    get_module_data_from_path,
    load_graph_from_script,
    resolve_graph_source,
)


class TestFindPyprojectToml:
    """Tests for find_pyproject_toml function."""

    def test_finds_in_current_directory(self, tmp_path: Path) -> None:
        """Should find pyproject.toml in current directory."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[project]\nname = 'test'\n")

        assert find_pyproject_toml(tmp_path) == pyproject.resolve()

    def test_finds_in_parent_directory(self, tmp_path: Path) -> None:
        """Should find pyproject.toml in parent directory."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[project]\nname = 'test'\n")

        subdir = tmp_path / "src" / "pkg"
        subdir.mkdir(parents=True)

        assert find_pyproject_toml(subdir) == pyproject.resolve()

    def test_returns_none_when_not_found(self, tmp_path: Path) -> None:
        """Should return None when no pyproject.toml is found."""
        assert find_pyproject_toml(tmp_path) is None


class TestLoadConfigGraph:
    """Tests for loading the graph location."""

    def test_module_path_string(self, tmp_path: Path) -> None:
        """Should parse module path string format."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            """
[tool.autodag]
graph = "examples.diamond:graph"
""",
        )

        config = load_config(pyproject)

        assert config.graph == ModuleSource(module_path="examples.diamond:graph")
        assert config.project_root == tmp_path

    def test_module_path_without_colon_raises_error(self, tmp_path: Path) -> None:
        """Should raise ConfigError for invalid module path."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            """
[tool.autodag]
graph = "examples.diamond"
""",
        )

        with pytest.raises(ConfigError, match="Invalid module path"):
            load_config(pyproject)

    def test_script_path_inline_table(self, tmp_path: Path) -> None:
        """Should resolve a relative script path from the project root."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            """
[tool.autodag]
graph = { script = "examples/diamond.py" }
""",
        )

        config = load_config(pyproject)

        assert config.graph == ScriptSource(script=tmp_path / "examples/diamond.py")

    def test_script_path_with_name(self, tmp_path: Path) -> None:
        """Should parse script path with explicit variable name."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            """
[tool.autodag]
graph = { script = "examples/diamond.py", name = "my_graph" }
""",
        )

        config = load_config(pyproject)

        assert isinstance(config.graph, ScriptSource)
        assert config.graph.name == "my_graph"

    def test_missing_script_key_raises_error(self, tmp_path: Path) -> None:
        """Should raise ConfigError when script key is missing."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            """
[tool.autodag]
graph = { name = "my_graph" }
""",
        )

        with pytest.raises(ConfigError, match="expected string path"):
            load_config(pyproject)

    def test_invalid_name_raises_error(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            """
[tool.autodag]
graph = { script = "g.py", name = 1 }
""",
        )

        with pytest.raises(ConfigError, match="graph.name"):
            load_config(pyproject)

    def test_invalid_graph_type_raises_error(self, tmp_path: Path) -> None:
        """Should raise ConfigError for invalid graph type."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            """
[tool.autodag]
graph = 123
""",
        )

        with pytest.raises(ConfigError, match=r"Invalid.*graph configuration"):
            load_config(pyproject)


class TestLoadConfigTargets:
    """Tests for loading default targets."""

    def test_targets(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            """
[tool.autodag]
graph = "pkg:graph"
targets = ["h", "g"]
""",
        )

        assert load_config(pyproject).targets == ("h", "g")

    @pytest.mark.parametrize("value", ['"h"', "[1, 2]"])
    def test_invalid_targets(self, tmp_path: Path, value: str) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(f"[tool.autodag]\ntargets = {value}\n")

        with pytest.raises(ConfigError, match="targets"):
            load_config(pyproject)


class TestLoadConfigEmptySection:
    """Tests for empty or missing configuration."""

    def test_no_tool_autodag_section(self, tmp_path: Path) -> None:
        """Should return empty config when no [tool.autodag] section."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text('[project]\nname = "test"\n')

        config = load_config(pyproject)

        assert config == AutodagConfig(project_root=tmp_path)

    def test_invalid_toml_raises_error(self, tmp_path: Path) -> None:
        """Should raise ConfigError for invalid TOML."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("invalid toml [[[")

        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_config(pyproject)

    def test_config_error_is_autodag_error(self) -> None:
        assert issubclass(ConfigError, AutodagError)


class TestAutodagConfigDataclass:
    """Tests for the AutodagConfig dataclass."""

    def test_default_values(self) -> None:
        config = AutodagConfig()

        assert config.graph is None
        assert config.targets == ()
        assert config.project_root is None

    def test_frozen(self) -> None:
        config = AutodagConfig()

        with pytest.raises(AttributeError):
            config.graph = ModuleSource("pkg:graph")  # type: ignore[misc]


class TestDiscover:
    """Tests for locating the graph a command works on."""

    def test_module_data_for_plain_script(self, tmp_path: Path) -> None:
        script = tmp_path / "standalone.py"
        script.write_text("")

        data = get_module_data_from_path(script)

        assert data.module_import_str == "standalone"
        assert data.extra_sys_path == tmp_path.resolve()

    def test_module_data_inside_package(self, tmp_path: Path) -> None:
        package = tmp_path / "pkg"
        package.mkdir()
        (package / "__init__.py").write_text("")
        script = package / "graphs.py"
        script.write_text("")

        data = get_module_data_from_path(script)

        assert data.module_import_str == "pkg.graphs"
        assert data.extra_sys_path == tmp_path.resolve()

    def test_load_named_graph(self, tmp_path: Path) -> None:
        script = tmp_path / "discover_named.py"
        script.write_text(
            'import autodag as ad\nfirst = ad.Graph("first")\nsecond = ad.Graph("second")\nnot_a_graph = 1\n',
        )

        assert load_graph_from_script(script).name == "first"
        assert load_graph_from_script(script, "second").name == "second"
        with pytest.raises(ValueError, match="Could not find graph 'third'"):
            load_graph_from_script(script, "third")
        with pytest.raises(TypeError, match="not a Graph instance"):
            load_graph_from_script(script, "not_a_graph")

    def test_load_without_graph(self, tmp_path: Path) -> None:
        script = tmp_path / "discover_empty.py"
        script.write_text("value = 1\n")

        with pytest.raises(ValueError, match="try using --graph"):
            load_graph_from_script(script)

    def test_resolve_source_prefers_command_line(self) -> None:
        default = ModuleSource("pkg:graph")

        assert resolve_graph_source("other:graph", None, default) == ModuleSource("other:graph")
        assert resolve_graph_source("g.py", "main", default) == ScriptSource(script=Path("g.py"), name="main")
        assert resolve_graph_source(None, None, default) is default

    def test_resolve_source_without_any(self) -> None:
        with pytest.raises(ConfigError, match="No graph given"):
            resolve_graph_source(None, None, None)
