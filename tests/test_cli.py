"""Tests for the autodag command line."""

import itertools
from pathlib import Path

import pytest
from typer.testing import CliRunner

from autodag._cli.main import app

runner = CliRunner()

# Imported modules stay in sys.modules, so every script gets its own name
_script_ids = itertools.count()

DIAMOND_SCRIPT = """
import autodag as ad

graph = ad.Graph("cli-diamond")
graph.value("x", 1)
graph.declare_computation("f", lambda x: x + 1, ["x"])
graph.declare_computation("g", lambda x: x * 2, ["x"])
graph.declare_computation("h", lambda f, g, x: f + g + x, ["f", "g", "x"])
"""

BROKEN_SCRIPT = """
import autodag as ad

graph = ad.Graph("cli-broken")
graph.value("x", 1)
graph.declare_computation("c", lambda missing: missing, ["missing"])
"""


def _write_script(directory: Path, source: str) -> Path:
    script = directory / f"cli_graph_{next(_script_ids)}.py"
    script.write_text(source)
    return script


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run commands from an empty directory without pyproject.toml."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestCheckCommand:
    """Tests for `autodag check`."""

    def test_valid_graph(self, workdir: Path) -> None:
        """Should list the nodes and report success."""
        script = _write_script(workdir, DIAMOND_SCRIPT)

        result = runner.invoke(app, ["check", str(script)])

        assert result.exit_code == 0
        assert "cli-diamond" in result.output
        assert "Graph is valid" in result.output

    def test_unknown_dependency(self, workdir: Path) -> None:
        """Should fail when a dependency is not declared."""
        script = _write_script(workdir, BROKEN_SCRIPT)

        result = runner.invoke(app, ["check", str(script)])

        assert result.exit_code == 1
        assert "unknown dependencies" in result.output
        assert "Graph is not resolvable" in result.output

    def test_no_graph_given(self, workdir: Path) -> None:
        """Should fail when neither the command line nor config names a graph."""
        result = runner.invoke(app, ["check"])

        assert result.exit_code == 1
        assert "No graph given" in result.output


class TestResolveCommand:
    """Tests for `autodag resolve`."""

    def test_resolve_named_nodes(self, workdir: Path) -> None:
        """Should resolve the nodes passed with -n."""
        script = _write_script(workdir, DIAMOND_SCRIPT)

        result = runner.invoke(app, ["resolve", str(script), "-n", "f", "-n", "g"])

        assert result.exit_code == 0
        assert "Resolving: f, g" in result.output
        assert "Resolution complete" in result.output

    def test_defaults_to_leaves(self, workdir: Path) -> None:
        """Should resolve the nodes nothing depends on when no node is given."""
        script = _write_script(workdir, DIAMOND_SCRIPT)

        result = runner.invoke(app, ["resolve", str(script)])

        assert result.exit_code == 0
        assert "Resolving: h" in result.output
        assert "4 node(s) resolved, 0 failed" in result.output

    def test_failure_exits_with_error(self, workdir: Path) -> None:
        """Should report failed nodes and exit with status 1."""
        script = _write_script(workdir, BROKEN_SCRIPT)

        result = runner.invoke(app, ["resolve", str(script), "-n", "c"])

        assert result.exit_code == 1
        assert "Unknown dependency 'missing'" in result.output
        assert "1 of 1 node(s) failed" in result.output

    def test_uses_config_defaults(self, workdir: Path) -> None:
        """Should take the graph and targets from [tool.autodag]."""
        script = _write_script(workdir, DIAMOND_SCRIPT)
        (workdir / "pyproject.toml").write_text(
            f"""
[tool.autodag]
graph = {{ script = "{script.name}" }}
targets = ["g"]
""",
        )

        result = runner.invoke(app, ["resolve"])

        assert result.exit_code == 0
        assert "Resolving: g" in result.output
        assert "2 node(s) resolved, 0 failed" in result.output


class TestTreeCommand:
    """Tests for `autodag tree`."""

    def test_dependency_tree(self, workdir: Path) -> None:
        script = _write_script(workdir, DIAMOND_SCRIPT)

        result = runner.invoke(app, ["tree", str(script), "-n", "h"])

        assert result.exit_code == 0
        assert "(see above)" in result.output

    def test_inverted_tree(self, workdir: Path) -> None:
        script = _write_script(workdir, DIAMOND_SCRIPT)

        result = runner.invoke(app, ["tree", str(script), "-n", "x", "--invert"])

        assert result.exit_code == 0
        for name in ("f", "g", "h"):
            assert name in result.output

    def test_unknown_node(self, workdir: Path) -> None:
        script = _write_script(workdir, DIAMOND_SCRIPT)

        result = runner.invoke(app, ["tree", str(script), "-n", "nope"])

        assert result.exit_code == 1
        assert "Unknown dependency 'nope'" in result.output

    def test_node_option_is_required(self, workdir: Path) -> None:
        script = _write_script(workdir, DIAMOND_SCRIPT)

        result = runner.invoke(app, ["tree", str(script)])

        assert result.exit_code != 0
