"""Utilities to locate an expression node in a Python script or module.

Module resolution was adapted from `fastapi_cli.discover` of package `fastapi-cli` version 0.0.8 (77e6d1f).
"""

from __future__ import annotations

import importlib
import logging
import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING

from compgraph._node import Node

from .config import ModuleSource, ScriptSource

if TYPE_CHECKING:
    from pathlib import Path

    from .config import ExpressionSource

logger = logging.getLogger(__name__)


@dataclass
class ModuleData:
    """Import information for a Python file."""

    module_import_str: str
    extra_sys_path: Path
    module_paths: list[Path]


def get_module_data_from_path(path: Path) -> ModuleData:
    """Get the dotted import name of a file and the directory to put on sys.path.

    Parent directories holding an ``__init__.py`` are treated as packages.
    """
    use_path = path.resolve()
    module_path = use_path
    if use_path.is_file() and use_path.stem == "__init__":
        module_path = use_path.parent
    module_paths = [module_path]
    extra_sys_path = module_path.parent
    for parent in module_path.parents:
        if not (parent / "__init__.py").is_file():
            break
        module_paths.insert(0, parent)
        extra_sys_path = parent.parent

    return ModuleData(
        module_import_str=".".join(p.stem for p in module_paths),
        extra_sys_path=extra_sys_path.resolve(),
        module_paths=module_paths,
    )


def _expect_node(obj: object, name: str, where: str) -> Node:
    if not isinstance(obj, Node):
        msg = f"'{name}' in {where} is not a computation graph node"
        raise TypeError(msg)
    return obj


def load_expression_from_script(script_path: Path, name: str | None = None) -> Node:
    """Load an expression node from a Python script.

    Without a name, the last node-valued module attribute is used, which for a
    script building its expression step by step is the final result.

    Raises:
        ImportError: If the module cannot be imported
        ValueError: If no node is found or the named variable doesn't exist
        TypeError: If the named variable is not a node

    """
    module_data = get_module_data_from_path(script_path)
    sys.path.insert(0, str(module_data.extra_sys_path))

    try:
        module = importlib.import_module(module_data.module_import_str)
    except (ImportError, ValueError):
        logger.exception("Import error")
        logger.warning("Ensure all the package directories have an __init__.py file")
        raise

    if name:
        if not hasattr(module, name):
            msg = f"Could not find expression '{name}' in {module_data.module_import_str}"
            raise ValueError(msg)
        return _expect_node(getattr(module, name), name, module_data.module_import_str)

    candidates = [(attr, obj) for attr, obj in vars(module).items() if isinstance(obj, Node)]
    if not candidates:
        msg = "Could not find an expression in module, try using --name"
        raise ValueError(msg)
    attr, node = candidates[-1]
    logger.debug(f"Found expression: {attr}")
    return node


def load_expression_from_module_path(module_path: str) -> Node:
    """Load an expression node from 'module.path:variable_name'.

    Raises:
        ValueError: If module path format is invalid
        TypeError: If the variable is not a node

    """
    if ":" not in module_path:
        msg = "Module path must be in format 'module.path:variable_name'"
        raise ValueError(msg)

    module_name, name = module_path.split(":", 1)
    module = importlib.import_module(module_name)
    return _expect_node(getattr(module, name), name, f"module '{module_name}'")


def load_expression_from_source(source: ExpressionSource) -> Node:
    """Load an expression node from a configured source."""
    match source:
        case ScriptSource(script=script, name=name):
            return load_expression_from_script(script, name)
        case ModuleSource(module_path=module_path):
            return load_expression_from_module_path(module_path)
    msg = f"Unknown expression source: {source!r}"
    raise TypeError(msg)
