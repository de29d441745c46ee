"""Graph algorithms over operand mappings."""

from collections import deque
from collections.abc import Collection, Hashable, Mapping


def topological_sort[T: Hashable](operands: Mapping[T, Collection[T]]) -> list[T]:
    """Order nodes so that every node comes after all of its operands.

    Nodes are released breadth-first, ties broken by first appearance in
    ``operands``. The result is a valid evaluation order but generally not
    the depth-first order in which ``compute`` fills caches.

    Args:
        operands: Mapping from node to the nodes it reads from.
            Nodes appearing only as operands are treated as leaves.

    Returns:
        List of nodes in evaluation order.

    Raises:
        ValueError: If the mapping contains a cycle.

    Example:
        >>> topological_sort({"sum": ["a", "mul"], "mul": ["b", "c"]})
        ['a', 'b', 'c', 'mul', 'sum']

    """
    readers: dict[T, list[T]] = {}
    pending: dict[T, int] = {}
    # Operands are ranked before the node reading them
    rank: dict[T, int] = {}
    for node, deps in operands.items():
        for dep in deps:
            rank.setdefault(dep, len(rank))
            pending.setdefault(dep, 0)
            readers.setdefault(dep, []).append(node)
        rank.setdefault(node, len(rank))
        pending[node] = pending.get(node, 0) + len(deps)

    ready = deque(sorted((node for node, count in pending.items() if count == 0), key=rank.__getitem__))
    order: list[T] = []
    while ready:
        node = ready.popleft()
        order.append(node)
        for reader in readers.get(node, []):
            pending[reader] -= 1
            if pending[reader] == 0:
                ready.append(reader)

    if len(order) != len(pending):
        msg = "Cycle detected in graph"
        raise ValueError(msg)
    return order

