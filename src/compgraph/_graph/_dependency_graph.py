"""Immutable snapshot of the edges of a computation graph."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from ._algorithms import topological_sort


@dataclass(frozen=True, slots=True)
class DependencyGraph[T]:
    """A directed acyclic graph of operand relationships.

    Generic over the node type T:
    - operands[r] = (a, b) means "r is computed from a and b", in order
    - dependents[a] = {r} means "a is read by r"

    The live computation graph only keeps owning forward edges and weak
    backward edges on inputs; this snapshot holds both directions so that
    diagnostics can query either one.

    Attributes:
        _operands: Mapping from node to its direct operands, in evaluation order.
        _dependents: Mapping from node to the nodes reading it directly.

    """

    _operands: dict[T, tuple[T, ...]] = field(default_factory=dict)
    _dependents: dict[T, frozenset[T]] = field(default_factory=dict)

    @classmethod
    def from_operands(cls, operands: Mapping[T, Sequence[T]]) -> DependencyGraph[T]:
        """Build a graph from a mapping of node to its operands.

        Every node must appear as a key, leaves with an empty sequence. Key
        order is kept, so ties in ``topological_order`` follow it.

        Example:
            >>> graph = DependencyGraph.from_operands({"b": (), "c": (), "mul": ("b", "c")})
            >>> graph.operands("mul")
            ('b', 'c')

        """
        dependents: dict[T, set[T]] = {node: set() for node in operands}
        for node, deps in operands.items():
            for dep in deps:
                dependents[dep].add(node)

        return cls(
            _operands={k: tuple(v) for k, v in operands.items()},
            _dependents={k: frozenset(v) for k, v in dependents.items()},
        )

    @property
    def nodes(self) -> frozenset[T]:
        """All nodes in the graph."""
        return frozenset(self._operands)

    def operands(self, node: T) -> tuple[T, ...]:
        """Direct operands of a node, in evaluation order (empty for leaves)."""
        return self._operands.get(node, ())

    def dependents(self, node: T) -> frozenset[T]:
        """Nodes reading this node directly."""
        return self._dependents.get(node, frozenset())

    def leaves(self) -> frozenset[T]:
        """Nodes with no operands (inputs and constants)."""
        return frozenset(n for n, ops in self._operands.items() if not ops)

    def descendants(self, node: T) -> frozenset[T]:
        """All nodes whose value transitively depends on this node.

        For an input, this is the part of the graph a ``set`` on it
        invalidates.
        """
        visited: set[T] = set()
        stack = list(self.dependents(node))
        while stack:
            current = stack.pop()
            if current not in visited:
                visited.add(current)
                stack.extend(self.dependents(current))
        return frozenset(visited)

    def topological_order(self) -> list[T]:
        """Return nodes in topological order (operands before the nodes reading them).

        This is one valid evaluation order, not necessarily the depth-first
        order in which ``compute`` fills caches.

        Raises:
            ValueError: If the graph contains a cycle.

        """
        return topological_sort(self._operands)

    def __len__(self) -> int:
        """Return the number of nodes in the graph."""
        return len(self._operands)

    def __contains__(self, node: T) -> bool:
        """Check if a node is in the graph."""
        return node in self._operands
