import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from autodag._dag import Graph
from autodag._errors import AutodagError

from .config import ModuleSource, ScriptSource, get_config
from .discover import load_graph_from_source, resolve_graph_source
from .graph_query import count_settled, get_dependency_tree, list_nodes, resolve_nodes
from .graph_render import render_node_table, render_outcomes, render_tree

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()

GraphPathArg = Annotated[
    str | None,
    typer.Argument(help="Path to Python script or module path (e.g., examples.diamond:graph)"),
]
GraphVarOption = Annotated[
    str | None,
    typer.Option("--graph", help="Name of the graph variable (for script paths only)"),
]


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Autodag CLI."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Configure rich logging handler to output to stderr
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )


def _fail(message: str) -> typer.Exit:
    err_console.print(f"[red]✗ {escape(message)}[/red]")
    err_console.print()
    return typer.Exit(code=1)


def _load_graph(path: str | None, graph_var: str | None) -> tuple[Graph, tuple[str, ...]]:
    """Load the graph named on the command line or in [tool.autodag].

    Returns:
        The graph and the default targets from config.

    """
    err_console.print()
    try:
        config = get_config()
        source = resolve_graph_source(path, graph_var, config.graph)
    except AutodagError as e:
        raise _fail(str(e)) from e

    match source:
        case ModuleSource(module_path=module_path):
            err_console.print(f"[cyan]Loading graph from module:[/cyan] {module_path}")
        case ScriptSource(script=script):
            err_console.print(f"[cyan]Loading graph from script:[/cyan] {script}")

    graph = load_graph_from_source(source)
    err_console.print(f"[cyan]Graph:[/cyan] [bold]{escape(graph.name)}[/bold] ({len(graph)} nodes)")
    err_console.print()
    return graph, config.targets


@app.command()
def check(
    path: GraphPathArg = None,
    *,
    graph_var: GraphVarOption = None,
) -> None:
    """Check that every dependency exists and that the graph has no cycle, without running it."""
    graph, _ = _load_graph(path, graph_var)

    err_console.print("[cyan]Validating dependencies...[/cyan]")
    render_node_table(list_nodes(graph), err_console)
    err_console.print()

    problems = graph.validate()
    if problems:
        for problem in problems:
            err_console.print(f"  [red]•[/red] {escape(problem)}")
        err_console.print()
        raise _fail("Graph is not resolvable")

    err_console.print("[green]✓ Graph is valid[/green]")
    err_console.print()


@app.command()
def resolve(
    path: GraphPathArg = None,
    *,
    nodes: Annotated[
        list[str] | None,
        typer.Option("-n", "--node", help="Node to resolve (repeatable). Defaults to [tool.autodag].targets"),
    ] = None,
    graph_var: GraphVarOption = None,
) -> None:
    """Resolve nodes and print their values."""
    graph, targets = _load_graph(path, graph_var)

    names = list(nodes or targets)
    if not names:
        leaves = graph.dependency_graph().leaves()
        names = [name for name in graph.names if name in leaves]
    if not names:
        raise _fail("Nothing to resolve")

    err_console.print(f"[cyan]Resolving:[/cyan] {escape(', '.join(names))}")
    outcomes = resolve_nodes(graph, names)
    err_console.print()

    render_outcomes(outcomes, out_console)

    resolved, failed = count_settled(graph)
    err_console.print()
    err_console.print(f"[dim]{resolved} node(s) resolved, {failed} failed[/dim]")

    errors = [outcome for outcome in outcomes if not outcome.ok]
    if errors:
        for outcome in errors:
            logger.debug("Resolution of %s failed", outcome.name, exc_info=outcome.error)
        raise _fail(f"{len(errors)} of {len(outcomes)} node(s) failed")

    err_console.print("[green]✓ Resolution complete[/green]")
    err_console.print()


@app.command()
def tree(
    path: GraphPathArg = None,
    *,
    node: Annotated[
        str,
        typer.Option("-n", "--node", help="Root node of the tree"),
    ],
    graph_var: GraphVarOption = None,
    depth: Annotated[
        int | None,
        typer.Option("--depth", min=0, help="Maximum depth to show"),
    ] = None,
    invert: Annotated[
        bool,
        typer.Option("--invert", help="Show the nodes depending on NODE instead of its dependencies"),
    ] = False,
) -> None:
    """Show the dependency tree of a node."""
    graph, _ = _load_graph(path, graph_var)

    try:
        tree_node = get_dependency_tree(graph, node, invert=invert, max_depth=depth)
    except AutodagError as e:
        raise _fail(str(e)) from e

    render_tree(tree_node, out_console)


def main() -> None:
    app()
