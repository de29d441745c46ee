"""Structural view of a computation graph.

This module contains:
- DependencyGraph[T]: An immutable snapshot of operand/dependent edges
- topological_sort: Evaluation order (operands before the nodes reading them)
"""

from ._algorithms import topological_sort
from ._dependency_graph import DependencyGraph

__all__ = ["DependencyGraph", "topological_sort"]
