"""Rich rendering utilities for computation graphs."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from compgraph._inspect import iter_nodes, structure_of
from compgraph._node import BinaryOp, Constant, Input, Node, UnaryOp

if TYPE_CHECKING:
    from collections.abc import Sequence

    import numpy as np
    from rich.console import Console


def _label(node: Node) -> str:
    """One-line label for a node: its own part of the expression and its stored value."""
    match node:
        case Input(name=name, value=value):
            state = "[red]unset[/red]" if value is None else f"= {value}"
            return f"[blue]{escape(name)}[/blue] {state}"
        case Constant(value=value):
            return f"[magenta]{value}[/magenta]"
        case BinaryOp(kind=kind, cache=cache) | UnaryOp(kind=kind, cache=cache):
            state = "[dim]empty[/dim]" if cache is None else f"[green]cached {cache}[/green]"
            return f"[bold]{kind.value}[/bold] ({escape(kind.symbol)}) {state}"
    msg = f"Unknown node type: {type(node).__name__}"
    raise TypeError(msg)


def render_tree(root: Node, console: Console) -> None:
    """Render an expression as a Rich tree showing each node's cache state.

    Shared subexpressions appear under every node that reads them.
    """
    rich_tree = Tree(_label(root))
    stack: list[tuple[Tree, Node]] = [(rich_tree, root)]
    while stack:
        parent, node = stack.pop()
        branches = [(parent.add(_label(operand)), operand) for operand in node.operands]
        stack.extend(reversed(branches))
    console.print(rich_tree)


def render_summary(root: Node, console: Console) -> None:
    """Render node and leaf counts of an expression."""
    graph = structure_of(root)
    console.print(f"[cyan]Nodes:[/cyan] {len(graph)} ({len(graph.leaves())} leaves)")


def render_inputs_table(root: Node, console: Console) -> None:
    """Render the inputs of an expression with the nodes a ``set`` on them invalidates.

    The Dependents column lists nodes of this expression; Elsewhere counts
    live dependents that belong to other expressions sharing the input.
    """
    order = list(iter_nodes(root))
    inputs = [node for node in order if isinstance(node, Input)]
    if not inputs:
        console.print("[dim]Expression has no inputs[/dim]")
        return

    graph = structure_of(root)
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Input", style="bold")
    table.add_column("Value", justify="right")
    table.add_column("Dependents")
    table.add_column("Elsewhere", justify="right")

    for node in inputs:
        value = "[red]unset[/red]" if node.value is None else str(node.value)
        reached = graph.descendants(node)
        dependents = ", ".join(escape(str(dep)) for dep in order if dep in reached)
        elsewhere = sum(1 for dep in node.live_dependents() if dep not in graph)
        table.add_row(escape(node.name), value, dependents or "[dim]None[/dim]", str(elsewhere))

    console.print(table)


def render_evaluation_order(root: Node, console: Console) -> None:
    """Render the order in which a cold evaluation fills caches."""
    console.print("[cyan]Evaluation order:[/cyan]")
    for step, node in enumerate(iter_nodes(root), start=1):
        console.print(f"  {step}. {escape(str(node))}")


def render_results_table(steps: Sequence[tuple[str, np.float32]], console: Console) -> None:
    """Render a table of evaluation steps and their results."""
    table = Table(show_header=True, header_style="bold cyan", box=None)
    table.add_column("Step", style="dim")
    table.add_column("Result", justify="right")

    for description, value in steps:
        table.add_row(escape(description), str(value))

    console.print(table)
