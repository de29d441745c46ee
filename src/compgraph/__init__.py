"""Incremental computation graph with memoized evaluation."""

__all__ = [
    "BinaryOp",
    "BinaryOpKind",
    "Constant",
    "DependencyGraph",
    "Input",
    "InputFile",
    "InputFileError",
    "Node",
    "UnaryOp",
    "UnaryOpKind",
    "UnsetInputError",
    "add",
    "apply_inputs",
    "collect_inputs",
    "compute",
    "cosine",
    "create_constant",
    "create_input",
    "create_input_with",
    "divide",
    "export_results",
    "inputs_by_name",
    "iter_nodes",
    "load_input_file",
    "multiply",
    "parse_input_file",
    "power",
    "results_to_dict",
    "set_value",
    "sine",
    "structure_of",
    "subtract",
    "to_display_string",
]

import numpy as np

from ._builder import (
    add,
    cosine,
    create_constant,
    create_input,
    create_input_with,
    divide,
    multiply,
    power,
    sine,
    subtract,
)
from ._graph import DependencyGraph
from ._inspect import collect_inputs, inputs_by_name, iter_nodes, structure_of
from ._io import (
    InputFile,
    InputFileError,
    apply_inputs,
    export_results,
    load_input_file,
    parse_input_file,
    results_to_dict,
)
from ._node import BinaryOp, Constant, Input, Node, UnaryOp, UnsetInputError
from ._ops import BinaryOpKind, UnaryOpKind


def compute(node: Node) -> np.float32:
    """Evaluate ``node``, reusing every cached result that is still valid."""
    return node.compute()


def set_value(node: Node, value: float) -> None:
    """Set the value of an input node. Ignored on any other node."""
    node.set(value)


def to_display_string(node: Node) -> str:
    """Render ``node`` as an infix expression, e.g. ``(a + (b * c))``."""
    return str(node)
