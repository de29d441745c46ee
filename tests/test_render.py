"""Tests for rich rendering of expressions."""

from rich.console import Console

import compgraph as cg
from compgraph._cli.render import render_evaluation_order, render_inputs_table, render_summary, render_tree


def _console() -> Console:
    return Console(record=True, width=200, color_system=None)


class TestRenderInputsTable:
    def test_lists_dependents_in_evaluation_order(self) -> None:
        x = cg.create_input_with("x", 2.0)
        expr = cg.add(cg.sine(x), cg.multiply(x, 3.0))
        console = _console()
        render_inputs_table(expr, console)
        text = console.export_text()
        assert "sin(x), (x * 3.0), (sin(x) + (x * 3.0))" in text
        assert "2.0" in text

    def test_counts_dependents_of_other_expressions(self) -> None:
        x = cg.create_input("x")
        other = cg.sine(x)
        expr = cg.add(x, 1.0)
        console = _console()
        render_inputs_table(expr, console)
        row = next(line for line in console.export_text().splitlines() if line.lstrip("│ ").startswith("x "))
        assert row.rstrip(" │").endswith("1")
        assert "sin(x)" not in row
        assert other.peek() is None

    def test_no_inputs(self) -> None:
        console = _console()
        render_inputs_table(cg.add(1.0, 2.0), console)
        assert "Expression has no inputs" in console.export_text()


class TestRenderStructure:
    def test_tree_shows_cache_state(self) -> None:
        x = cg.create_input_with("x", 0.0)
        expr = cg.cosine(cg.add(x, 1.0))
        console = _console()
        render_tree(expr, console)
        text = console.export_text()
        assert "cos (cos) empty" in text
        assert "x = 0.0" in text

    def test_tree_of_deep_chain(self) -> None:
        node: cg.Node = cg.create_input_with("x", 0.0)
        for _ in range(50):
            node = node + 1
        node.compute()
        console = _console()
        render_tree(node, console)
        assert "cached 50.0" in console.export_text()

    def test_summary(self) -> None:
        a = cg.create_input("a")
        console = _console()
        render_summary(cg.add(a, cg.multiply(a, 2.0)), console)
        assert "Nodes: 4 (2 leaves)" in console.export_text()

    def test_evaluation_order_is_depth_first(self) -> None:
        a = cg.create_input("a")
        b = cg.create_input("b")
        c = cg.create_input("c")
        expr = cg.add(cg.sine(cg.multiply(a, b)), cg.cosine(c))
        console = _console()
        render_evaluation_order(expr, console)
        lines = [line.strip() for line in console.export_text().splitlines()]
        assert lines[1:] == [
            "1. a",
            "2. b",
            "3. (a * b)",
            "4. sin((a * b))",
            "5. c",
            "6. cos(c)",
            "7. (sin((a * b)) + cos(c))",
        ]
