"""Tests for the compgraph command-line interface."""

import tomllib
from pathlib import Path

import pytest
from typer.testing import CliRunner

from compgraph._cli.main import app

runner = CliRunner()

SCRIPT = """
import compgraph as cg

a = cg.create_input("a")
b = cg.create_input("b")
c = cg.create_input("c")
expression = cg.add(a, cg.multiply(b, c))
"""

VALUES = """
[inputs]
a = 10
b = 50
c = 30

[[updates]]
a = 20
"""


@pytest.fixture
def script(tmp_path: Path) -> Path:
    path = tmp_path / f"{tmp_path.name}_sample.py"
    path.write_text(SCRIPT)
    return path


@pytest.fixture
def values(tmp_path: Path) -> Path:
    path = tmp_path / "values.toml"
    path.write_text(VALUES)
    return path


class TestDemo:
    def test_default_values(self) -> None:
        result = runner.invoke(app, ["demo"])
        assert result.exit_code == 0, result.output
        assert "1510.0" in result.stdout
        assert "1520.0" in result.stdout
        assert "compute (cached)" in result.stdout

    def test_custom_values(self) -> None:
        result = runner.invoke(app, ["demo", "--a", "1", "--b", "2", "--c", "3", "--new-a", "4"])
        assert result.exit_code == 0, result.output
        assert "7.0" in result.stdout
        assert "10.0" in result.stdout

    def test_verbose_flag(self) -> None:
        result = runner.invoke(app, ["--verbose", "demo"])
        assert result.exit_code == 0, result.output


class TestCalc:
    def test_script_and_input(self, script: Path, values: Path) -> None:
        result = runner.invoke(app, ["calc", str(script), "-i", str(values)])
        assert result.exit_code == 0, result.output
        assert "1510.0" in result.stdout
        assert "1520.0" in result.stdout
        assert "Calculation complete" in result.output

    def test_export(self, script: Path, values: Path, tmp_path: Path) -> None:
        output = tmp_path / "results.toml"
        result = runner.invoke(app, ["calc", str(script), "-i", str(values), "-o", str(output)])
        assert result.exit_code == 0, result.output

        with output.open("rb") as f:
            data = tomllib.load(f)
        assert data["expression"] == "(a + (b * c))"
        assert data["inputs"] == {"a": 20.0, "b": 50.0, "c": 30.0}
        assert data["results"] == [1510.0, 1520.0]

    def test_missing_input(self, script: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["calc", str(script)])
        assert result.exit_code == 1
        assert "Input file required" in result.output

    def test_unset_input(self, script: Path, tmp_path: Path) -> None:
        partial = tmp_path / "partial.toml"
        partial.write_text("[inputs]\na = 1\nb = 2\n")
        result = runner.invoke(app, ["calc", str(script), "-i", str(partial)])
        assert result.exit_code == 1
        assert "Input 'c' value not set" in result.output

    def test_unknown_input(self, script: Path, tmp_path: Path) -> None:
        unknown = tmp_path / "unknown.toml"
        unknown.write_text("[inputs]\nz = 1\n")
        result = runner.invoke(app, ["calc", str(script), "-i", str(unknown)])
        assert result.exit_code == 1
        assert "Unknown input" in result.output

    def test_missing_expression_name(self, script: Path, values: Path) -> None:
        result = runner.invoke(app, ["calc", str(script), "-i", str(values), "--name", "missing"])
        assert result.exit_code == 1
        assert "Could not find expression" in result.output

    def test_falls_back_to_config(
        self,
        script: Path,
        values: Path,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        (tmp_path / "pyproject.toml").write_text(
            f'[tool.compgraph]\nexpression = {{ script = "{script.name}", name = "expression" }}\n'
            f'input = "{values.name}"\noutput = "out.toml"\n',
        )
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(app, ["calc"])
        assert result.exit_code == 0, result.output
        assert "1520.0" in result.stdout
        assert (tmp_path / "out.toml").is_file()

    def test_invalid_config(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "pyproject.toml").write_text('[tool.compgraph]\nexpression = "no_colon"\n')
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(app, ["calc"])
        assert result.exit_code == 1
        assert "Invalid module path" in result.output


class TestShow:
    def test_structure(self, script: Path) -> None:
        result = runner.invoke(app, ["show", str(script)])
        assert result.exit_code == 0, result.output
        assert "(a + (b * c))" in result.stdout
        assert "Evaluation order" in result.stdout
        assert "unset" in result.stdout

    def test_with_input(self, script: Path, values: Path) -> None:
        result = runner.invoke(app, ["show", str(script), "-i", str(values)])
        assert result.exit_code == 0, result.output
        assert "cached 1510.0" in result.stdout

    def test_evaluation_order_is_depth_first(self, tmp_path: Path) -> None:
        script = tmp_path / f"{tmp_path.name}_trig.py"
        script.write_text(
            "import compgraph as cg\n"
            "a = cg.create_input('a')\n"
            "b = cg.create_input('b')\n"
            "c = cg.create_input('c')\n"
            "expression = cg.add(cg.sine(cg.multiply(a, b)), cg.cosine(c))\n",
        )
        result = runner.invoke(app, ["show", str(script)])
        assert result.exit_code == 0, result.output
        lines = [line.strip() for line in result.stdout.splitlines()]
        start = lines.index("Evaluation order:")
        assert lines[start + 1 : start + 8] == [
            "1. a",
            "2. b",
            "3. (a * b)",
            "4. sin((a * b))",
            "5. c",
            "6. cos(c)",
            "7. (sin((a * b)) + cos(c))",
        ]
        assert "Nodes: 7 (3 leaves)" in result.stdout

