"""Rich rendering utilities for graph commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from autodag._nodes import NodeKind

if TYPE_CHECKING:
    from rich.console import Console

    from .graph_query import NodeInfo, ResolveOutcome, TreeNode

_MAX_VALUE_WIDTH = 60


def render_node_table(nodes: list[NodeInfo], console: Console) -> None:
    """Render node list as a Rich table.

    Args:
        nodes: List of NodeInfo to render.
        console: Rich Console to output to.

    """
    if not nodes:
        console.print("[dim]The graph has no nodes[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Node", style="bold")
    table.add_column("Kind")
    table.add_column("Dependencies")

    for node in nodes:
        kind_style = _get_kind_style(node.kind)
        deps = ", ".join(
            f"[red]{escape(dep)}[/red]" if dep in node.missing else escape(dep) for dep in node.dependencies
        )
        table.add_row(
            escape(node.name),
            f"[{kind_style}]{node.kind.upper()}[/{kind_style}]",
            deps or "[dim]-[/dim]",
        )

    console.print(table)
    console.print(f"\n[dim]Total: {len(nodes)} nodes[/dim]")


def render_outcomes(outcomes: list[ResolveOutcome], console: Console) -> None:
    """Render resolved values and errors as a Rich table."""
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Node", style="bold")
    table.add_column("Result")

    for outcome in outcomes:
        if outcome.ok:
            text = repr(outcome.value)
            if len(text) > _MAX_VALUE_WIDTH:
                text = text[: _MAX_VALUE_WIDTH - 3] + "..."
            table.add_row(escape(outcome.name), escape(text))
        else:
            table.add_row(escape(outcome.name), f"[red]✗ {escape(str(outcome.error))}[/red]")

    console.print(table)


def render_tree(tree_node: TreeNode, console: Console) -> None:
    """Render a dependency tree using Rich Tree.

    Args:
        tree_node: TreeNode root to render.
        console: Rich Console to output to.

    """
    rich_tree = Tree(f"[bold]{escape(tree_node.name)}[/bold]")
    _add_tree_children(rich_tree, tree_node.children)
    console.print(rich_tree)


def _add_tree_children(parent: Tree, children: list[TreeNode]) -> None:
    for child in children:
        label = escape(child.name)
        if not child.declared:
            label = f"[red]{label} (unknown)[/red]"
        elif child.repeated:
            label = f"{label} [dim](see above)[/dim]"
        child_tree = parent.add(label)
        _add_tree_children(child_tree, child.children)


def _get_kind_style(kind: NodeKind) -> str:
    match kind:
        case NodeKind.VALUE:
            return "blue"
        case NodeKind.COMPUTATION:
            return "green"
