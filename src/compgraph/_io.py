"""Loading input values from TOML and exporting evaluation results."""

import logging
import tomllib
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import numpy as np
import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ._inspect import collect_inputs, inputs_by_name
from ._node import Node

logger = logging.getLogger(__name__)


class InputFileError(Exception):
    """Error in an input-values file."""


class InputFile(BaseModel):
    """Contents of an input-values file.

    ``inputs`` is applied before the first evaluation; each entry of
    ``updates`` is applied in order, with a re-evaluation after each one.
    """

    model_config = ConfigDict(extra="forbid")

    inputs: dict[str, float] = Field(default_factory=dict)
    updates: list[dict[str, float]] = Field(default_factory=list)


def parse_input_file(toml_contents: dict[str, Any]) -> InputFile:
    """Validate parsed TOML contents as an input-values file.

    Raises:
        InputFileError: If the contents do not match the expected layout.

    """
    try:
        return InputFile.model_validate(toml_contents)
    except ValidationError as e:
        msg = f"Invalid input values: {e}"
        raise InputFileError(msg) from e


def load_input_file(input_path: Path | str) -> InputFile:
    """Load and validate an input-values TOML file.

    Raises:
        InputFileError: If the file is not valid TOML or has an invalid layout.

    """
    input_path = Path(input_path)
    with input_path.open("rb") as f:
        try:
            toml_contents = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {input_path}: {e}"
            raise InputFileError(msg) from e

    input_file = parse_input_file(toml_contents)
    logger.debug(f"Loaded {len(input_file.inputs)} input value(s) from {input_path}")
    return input_file


def apply_inputs(root: Node, values: Mapping[str, float]) -> None:
    """Set the inputs reachable from ``root`` by name.

    Raises:
        KeyError: If a name does not match any input reachable from ``root``.

    """
    inputs = inputs_by_name(root)
    unknown = sorted(set(values) - set(inputs))
    if unknown:
        msg = f"Unknown input(s) for expression {root}: {', '.join(unknown)}"
        raise KeyError(msg)

    for name, value in values.items():
        logger.debug(f"Setting input '{name}' = {value!r}")
        inputs[name].set(value)


def results_to_dict(root: Node, results: Sequence[np.float32]) -> dict[str, Any]:
    """Convert evaluation results to a TOML-serializable dictionary.

    Only inputs that currently hold a value are listed.
    """
    input_values: dict[str, float] = {}
    for node in collect_inputs(root):
        value = node.peek()
        if value is not None:
            input_values[node.name] = float(value)

    return {
        "expression": str(root),
        "inputs": input_values,
        "results": [float(value) for value in results],
    }


def export_results(root: Node, results: Sequence[np.float32], output_path: Path | str) -> None:
    """Write the expression, its current inputs and results to a TOML file."""
    toml_data = results_to_dict(root, results)

    output_path = Path(output_path)
    with output_path.open("wb") as f:
        tomli_w.dump(toml_data, f)

    logger.debug(f"Exported results to {output_path}")
