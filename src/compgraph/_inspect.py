"""Structural walks over a built expression."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ._graph import DependencyGraph
from ._node import Input, Node

if TYPE_CHECKING:
    from collections.abc import Iterator


def iter_nodes(root: Node) -> Iterator[Node]:
    """Yield every node reachable from ``root`` once, operands before readers.

    Shared subexpressions are yielded once. The order is the order in which a
    cold ``root.compute()`` fills caches.
    """
    seen: set[Node] = set()
    # (node, expanded) pairs; a node is yielded when popped the second time
    stack: list[tuple[Node, bool]] = [(root, False)]
    while stack:
        node, expanded = stack.pop()
        if expanded:
            yield node
            continue
        if node in seen:
            continue
        seen.add(node)
        stack.append((node, True))
        stack.extend((operand, False) for operand in reversed(node.operands))


def collect_inputs(root: Node) -> list[Input]:
    """Inputs reachable from ``root``, in evaluation order."""
    return [node for node in iter_nodes(root) if isinstance(node, Input)]


def inputs_by_name(root: Node) -> dict[str, Input]:
    """Map input names to the inputs reachable from ``root``.

    Raises:
        ValueError: If two distinct inputs share a name.

    """
    inputs: dict[str, Input] = {}
    for node in collect_inputs(root):
        existing = inputs.setdefault(node.name, node)
        if existing is not node:
            msg = f"Ambiguous input name '{node.name}': used by more than one input"
            raise ValueError(msg)
    return inputs


def structure_of(root: Node) -> DependencyGraph[Node]:
    """Snapshot the operand edges reachable from ``root``."""
    return DependencyGraph.from_operands({node: node.operands for node in iter_nodes(root)})
