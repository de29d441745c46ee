import logging
from pathlib import Path
from typing import Annotated

import numpy as np
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel

from compgraph._builder import add, create_input, multiply
from compgraph._io import InputFileError, apply_inputs, export_results, load_input_file
from compgraph._node import Node, UnsetInputError

from .config import CompgraphConfig, ConfigError, get_config
from .discover import load_expression_from_module_path, load_expression_from_script, load_expression_from_source
from .render import (
    render_evaluation_order,
    render_inputs_table,
    render_results_table,
    render_summary,
    render_tree,
)

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output (cache misses and invalidations)"),
) -> None:
    """Compgraph CLI."""
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


def _load_config() -> CompgraphConfig:
    try:
        return get_config()
    except ConfigError as e:
        err_console.print(f"[red]Configuration error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e


def _load_expression(path: str | None, config: CompgraphConfig, name: str | None) -> Node:
    """Load the expression from the CLI path, falling back to [tool.compgraph].expression."""
    try:
        if path is not None:
            if ":" in path:
                err_console.print(f"[cyan]Loading expression from module:[/cyan] {path}")
                return load_expression_from_module_path(path)
            err_console.print(f"[cyan]Loading expression from script:[/cyan] {path}")
            return load_expression_from_script(Path(path), name)

        if config.expression is None:
            err_console.print(
                "[red]Error: No expression specified. Provide a path argument "
                "or configure \\[tool.compgraph].expression in pyproject.toml.[/red]",
            )
            raise typer.Exit(code=1)

        err_console.print(f"[cyan]Loading expression from config:[/cyan] {config.expression}")
        return load_expression_from_source(config.expression)
    except (ImportError, ValueError, TypeError, AttributeError) as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e


def _evaluate(root: Node, description: str) -> tuple[str, np.float32]:
    try:
        return description, root.compute()
    except UnsetInputError as e:
        err_console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e


@app.command()
def demo(
    *,
    a: Annotated[float, typer.Option(help="Initial value of input a")] = 10.0,
    b: Annotated[float, typer.Option(help="Value of input b")] = 50.0,
    c: Annotated[float, typer.Option(help="Value of input c")] = 30.0,
    new_a: Annotated[float, typer.Option("--new-a", help="Value assigned to a before the last evaluation")] = 20.0,
) -> None:
    """Build a + b * c, evaluate it twice, change a and evaluate again."""
    input_a = create_input("a")
    input_b = create_input("b")
    input_c = create_input("c")
    result = add(input_a, multiply(input_b, input_c))

    for node in (input_a, input_b, input_c):
        logger.debug(f"{node!r}")

    input_a.set(a)
    input_b.set(b)
    input_c.set(c)

    err_console.print(f"[cyan]Expression:[/cyan] {escape(str(result))}")
    steps = [
        _evaluate(result, "compute"),
        _evaluate(result, "compute (cached)"),
    ]
    input_a.set(new_a)
    steps.append(_evaluate(result, f"compute after a = {new_a}"))

    render_results_table(steps, out_console)
    logger.debug(f"{result!r}")


@app.command()
def calc(
    path: Annotated[
        str | None,
        typer.Argument(help="Path to Python script or module path (e.g., examples.sample:expression)"),
    ] = None,
    *,
    input: Annotated[  # noqa: A002
        Path | None,
        typer.Option("-i", "--input", help="Path to input values TOML file"),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("-o", "--output", help="Path to output TOML file"),
    ] = None,
    name: Annotated[
        str | None,
        typer.Option("--name", help="Name of the expression variable (for script paths only)"),
    ] = None,
) -> None:
    """Evaluate an expression for its input values and each update."""
    err_console.print()
    config = _load_config()
    root = _load_expression(path, config, name)
    err_console.print(f"[cyan]Expression:[/cyan] {escape(str(root))}")

    effective_input = input if input is not None else config.input
    if effective_input is None:
        err_console.print("[red]Error: Input file required. Use -i/--input or configure \\[tool.compgraph].input[/red]")
        raise typer.Exit(code=1)
    effective_output = output if output is not None else config.output

    err_console.print(f"[cyan]Loading input from:[/cyan] {effective_input}")
    try:
        input_file = load_input_file(effective_input)
        apply_inputs(root, input_file.inputs)
        steps = [_evaluate(root, "initial")]
        for index, update in enumerate(input_file.updates, start=1):
            apply_inputs(root, update)
            changed = ", ".join(f"{key} = {value}" for key, value in update.items())
            steps.append(_evaluate(root, f"update {index}: {changed}"))
    except (InputFileError, KeyError, ValueError) as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    err_console.print()
    render_results_table(steps, out_console)

    if effective_output is not None:
        err_console.print(f"[cyan]Exporting results to:[/cyan] {effective_output}")
        export_results(root, [value for _, value in steps], effective_output)

    err_console.print()
    err_console.print("[green]✓ Calculation complete[/green]")


@app.command()
def show(
    path: Annotated[
        str | None,
        typer.Argument(help="Path to Python script or module path (e.g., examples.sample:expression)"),
    ] = None,
    *,
    input: Annotated[  # noqa: A002
        Path | None,
        typer.Option("-i", "--input", help="Evaluate with these input values before showing"),
    ] = None,
    name: Annotated[
        str | None,
        typer.Option("--name", help="Name of the expression variable (for script paths only)"),
    ] = None,
) -> None:
    """Show the structure, cache state and input dependents of an expression."""
    config = _load_config()
    root = _load_expression(path, config, name)

    if input is not None:
        try:
            apply_inputs(root, load_input_file(input).inputs)
        except (InputFileError, KeyError, ValueError) as e:
            err_console.print(f"[red]Error: {escape(str(e))}[/red]")
            raise typer.Exit(code=1) from e
        _evaluate(root, "show")

    out_console.print(Panel(escape(str(root)), title="[bold]Expression[/bold]", border_style="cyan"))
    render_tree(root, out_console)
    render_summary(root, out_console)
    out_console.print()
    render_inputs_table(root, out_console)
    out_console.print()
    render_evaluation_order(root, out_console)


def main() -> None:
    app()
