"""Configuration loading from pyproject.toml."""

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import cast


class ConfigError(Exception):
    """Error in compgraph configuration."""


@dataclass(slots=True, frozen=True)
class ScriptSource:
    """Script path with optional variable name."""

    script: Path
    name: str | None = None


@dataclass(slots=True, frozen=True)
class ModuleSource:
    """Module path with variable name (e.g., 'examples.sample:expression')."""

    module_path: str


ExpressionSource = ScriptSource | ModuleSource


@dataclass(slots=True, frozen=True)
class CompgraphConfig:
    """Configuration loaded from the [tool.compgraph] table of pyproject.toml.

    Relative paths are resolved from the directory containing pyproject.toml.
    """

    expression: ExpressionSource | None = None
    input: Path | None = None
    output: Path | None = None
    project_root: Path | None = None


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Find pyproject.toml by walking up from start_dir (default: cwd)."""
    current = (start_dir or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    return None


def _parse_expression_source(value: object, project_root: Path) -> ExpressionSource:
    """Parse the expression field: a module path string or a script table.

    Raises:
        ConfigError: If the value format is invalid

    """
    if isinstance(value, str):
        if ":" not in value:
            msg = f"Invalid module path '{value}'. Expected format: 'module.path:variable_name'"
            raise ConfigError(msg)
        return ModuleSource(module_path=value)

    if not isinstance(value, dict):
        msg = "Invalid [tool.compgraph].expression: expected string or table with 'script' key"
        raise ConfigError(msg)

    table = cast("dict[str, object]", value)
    script_value = table.get("script")
    if not isinstance(script_value, str):
        msg = "Invalid [tool.compgraph].expression.script: expected string path"
        raise ConfigError(msg)
    name = table.get("name")
    if name is not None and not isinstance(name, str):
        msg = "Invalid [tool.compgraph].expression.name: expected string"
        raise ConfigError(msg)

    script_path = Path(script_value)
    if not script_path.is_absolute():
        script_path = project_root / script_path
    return ScriptSource(script=script_path, name=name)


def _parse_path(section: dict[str, object], key: str, project_root: Path) -> Path | None:
    if key not in section:
        return None
    value = section[key]
    if not isinstance(value, str):
        msg = f"Invalid [tool.compgraph].{key}: expected string path"
        raise ConfigError(msg)
    path = Path(value)
    return path if path.is_absolute() else project_root / path


def load_config(pyproject_path: Path) -> CompgraphConfig:
    """Load and validate [tool.compgraph] config from pyproject.toml.

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

    section = data.get("tool", {}).get("compgraph", {})
    if not section:
        return CompgraphConfig(project_root=project_root)

    expression: ExpressionSource | None = None
    if "expression" in section:
        expression = _parse_expression_source(section["expression"], project_root)

    return CompgraphConfig(
        expression=expression,
        input=_parse_path(section, "input", project_root),
        output=_parse_path(section, "output", project_root),
        project_root=project_root,
    )


def get_config() -> CompgraphConfig:
    """Get config from pyproject.toml in the current directory or its parents."""
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return CompgraphConfig()
    return load_config(pyproject_path)
