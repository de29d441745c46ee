"""Node model and the memoized evaluation / invalidation engine.

A computation graph is made of four node variants:

- ``Input``: a named leaf whose value is set by the caller
- ``Constant``: a leaf whose value is fixed at construction
- ``UnaryOp`` and ``BinaryOp``: operators holding owning references to their
  operands and a cached result

Forward edges (operator -> operand) are ordinary references and keep operands
alive. Backward edges live only on ``Input`` leaves, as weak references to
every operator reachable from them, so that setting an input can clear the
cache of each affected operator in a single pass without keeping any of them
alive.

Evaluation and rendering walk the graph with explicit stacks, so expression
depth is not bounded by the interpreter's recursion limit.
"""

from __future__ import annotations

import logging
import weakref
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from numbers import Real
from operator import methodcaller
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from ._ops import BinaryOpKind, UnaryOpKind

logger = logging.getLogger(__name__)


class UnsetInputError(RuntimeError):
    """Raised when computing an expression that reads an input never set."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Input '{name}' value not set. Aborting compute")


def is_real(value: object) -> bool:
    """Whether ``value`` is a real number accepted as a scalar (booleans are not)."""
    return not isinstance(value, bool) and isinstance(value, (Real, np.floating, np.integer))


def as_float32(value: object) -> np.float32:
    """Convert a real number to a single-precision scalar.

    Raises:
        TypeError: If the value is not a real number (booleans are rejected).

    """
    if not is_real(value):
        msg = f"Expected a real number, got {type(value).__name__}"
        raise TypeError(msg)
    return np.float32(value)


def _format_scalar(value: np.float32 | None) -> str:
    return "None" if value is None else str(value)


def _render(root: Node, parts_of: Callable[[Node], list[Node | str]]) -> str:
    """Concatenate the text pieces of ``root``, expanding nested nodes in place."""
    pieces: list[str] = []
    stack: list[Node | str] = [root]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            pieces.append(item)
        else:
            stack.extend(reversed(parts_of(item)))
    return "".join(pieces)


_display_parts = methodcaller("_display_parts")
_repr_parts = methodcaller("_repr_parts")


def _fill_caches(root: Node) -> None:
    """Recompute every stale operator under ``root``, operands first.

    Operands are visited left to right, so the first unset input met in
    evaluation order is the one reported.

    Raises:
        UnsetInputError: If a reachable input was never set.

    """
    # (node, expanded) pairs; an operator is recomputed when popped the second time
    stack: list[tuple[Node, bool]] = [(root, False)]
    while stack:
        node, expanded = stack.pop()
        if expanded:
            node._recompute()  # noqa: SLF001
            continue
        if not node.operands:
            node.compute()
            continue
        if node.peek() is not None:
            continue
        logger.debug("Cache miss %s", node)
        stack.append((node, True))
        stack.extend((operand, False) for operand in reversed(node.operands))


class Node(ABC):
    """Base class of every node in a computation graph.

    Nodes compare and hash by identity. Arithmetic operators build new nodes,
    converting plain numbers to constants.
    """

    __slots__ = ()

    @property
    def operands(self) -> tuple[Node, ...]:
        """Nodes this node reads from, in evaluation order."""
        return ()

    @abstractmethod
    def compute(self) -> np.float32:
        """Return the value of this node, recomputing only what is stale."""

    @abstractmethod
    def peek(self) -> np.float32 | None:
        """Return the stored value or cached result without computing anything."""

    def set(self, value: float) -> None:  # noqa: ARG002
        """Set the value of an input. Ignored on every other node."""
        logger.debug("Ignoring set on non-input node %s", self)

    def invalidate(self) -> None:
        """Clear the cached result. No-op on leaves."""

    def _recompute(self) -> None:
        """Refill the cache from the current operand values. No-op on leaves."""

    def iter_leaf_inputs(self) -> Iterator[Input]:
        """Yield each ``Input`` reachable from this node once, depth-first."""
        seen: set[Node] = set()
        stack: list[Node] = [self]
        while stack:
            node = stack.pop()
            if node in seen:
                continue
            seen.add(node)
            if isinstance(node, Input):
                yield node
            else:
                stack.extend(reversed(node.operands))

    @abstractmethod
    def _display_parts(self) -> list[Node | str]:
        """Infix rendering of this node, with operands left as nodes."""

    @abstractmethod
    def _repr_parts(self) -> list[Node | str]:
        """Debug rendering of this node, with operands left as nodes."""

    def __str__(self) -> str:
        return _render(self, _display_parts)

    def __repr__(self) -> str:
        return _render(self, _repr_parts)

    # Operator overloading delegates to the graph builder.
    def __add__(self, other: Node | float) -> BinaryOp:
        from ._builder import add  # noqa: PLC0415

        return add(self, other) if _is_operand(other) else NotImplemented

    def __radd__(self, other: Node | float) -> BinaryOp:
        from ._builder import add  # noqa: PLC0415

        return add(other, self) if _is_operand(other) else NotImplemented

    def __sub__(self, other: Node | float) -> BinaryOp:
        from ._builder import subtract  # noqa: PLC0415

        return subtract(self, other) if _is_operand(other) else NotImplemented

    def __rsub__(self, other: Node | float) -> BinaryOp:
        from ._builder import subtract  # noqa: PLC0415

        return subtract(other, self) if _is_operand(other) else NotImplemented

    def __mul__(self, other: Node | float) -> BinaryOp:
        from ._builder import multiply  # noqa: PLC0415

        return multiply(self, other) if _is_operand(other) else NotImplemented

    def __rmul__(self, other: Node | float) -> BinaryOp:
        from ._builder import multiply  # noqa: PLC0415

        return multiply(other, self) if _is_operand(other) else NotImplemented

    def __truediv__(self, other: Node | float) -> BinaryOp:
        from ._builder import divide  # noqa: PLC0415

        return divide(self, other) if _is_operand(other) else NotImplemented

    def __rtruediv__(self, other: Node | float) -> BinaryOp:
        from ._builder import divide  # noqa: PLC0415

        return divide(other, self) if _is_operand(other) else NotImplemented

    def __pow__(self, other: Node | float) -> BinaryOp:
        from ._builder import power  # noqa: PLC0415

        return power(self, other) if _is_operand(other) else NotImplemented

    def __rpow__(self, other: Node | float) -> BinaryOp:
        from ._builder import power  # noqa: PLC0415

        return power(other, self) if _is_operand(other) else NotImplemented


def _is_operand(value: object) -> bool:
    return isinstance(value, Node) or is_real(value)


def _forget_callback(owner: Input) -> Callable[[weakref.ref[Node]], None]:
    """Weakref callback removing a collected dependent from ``owner``.

    Holds ``owner`` weakly so that its dependents never keep it alive.
    """
    owner_ref = weakref.ref(owner)

    def forget(ref: weakref.ref[Node]) -> None:
        input_node = owner_ref()
        if input_node is not None and ref in input_node.dependents:
            input_node.dependents.remove(ref)

    return forget


@dataclass(slots=True, eq=False, repr=False, weakref_slot=True)
class Input(Node):
    """A named leaf whose value is provided by the caller.

    Attributes:
        name: Name used for display and error messages.
        value: Current value, or None until first set.
        dependents: Weak references to every operator reachable from this input.
            Entries are removed as soon as their operator is collected.

    """

    name: str
    value: np.float32 | None = None
    dependents: list[weakref.ref[Node]] = field(default_factory=list)
    _forget: Callable[[weakref.ref[Node]], None] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.value is not None:
            self.value = as_float32(self.value)
        self._forget = _forget_callback(self)

    def compute(self) -> np.float32:
        """Return the current value.

        Raises:
            UnsetInputError: If the value was never set.

        """
        if self.value is None:
            raise UnsetInputError(self.name)
        return self.value

    def peek(self) -> np.float32 | None:
        return self.value

    def set(self, value: float) -> None:
        """Store a new value and invalidate every live dependent."""
        self.value = as_float32(value)
        for ref in list(self.dependents):
            dependent = ref()
            if dependent is not None:
                dependent.invalidate()

    def live_dependents(self) -> list[Node]:
        """Dependents whose referent still exists, in registration order."""
        return [dep for dep in (ref() for ref in self.dependents) if dep is not None]

    def register_dependent(self, dependent: Node) -> None:
        """Record a weak back-reference to an operator reading this input."""
        self.dependents.append(weakref.ref(dependent, self._forget))

    def _display_parts(self) -> list[Node | str]:
        return [self.name]

    def _repr_parts(self) -> list[Node | str]:
        deps = [str(dep) for dep in self.live_dependents()]
        return [f"Input(name={self.name!r}, value={_format_scalar(self.value)}, dependents={deps!r})"]


@dataclass(slots=True, eq=False, repr=False, weakref_slot=True)
class Constant(Node):
    """A leaf whose value is fixed at construction and never invalidates anything."""

    value: np.float32

    def __post_init__(self) -> None:
        self.value = as_float32(self.value)

    def compute(self) -> np.float32:
        return self.value

    def peek(self) -> np.float32 | None:
        return self.value

    def _display_parts(self) -> list[Node | str]:
        return [str(self.value)]

    def _repr_parts(self) -> list[Node | str]:
        return [f"Constant(value={self.value})"]


@dataclass(slots=True, eq=False, repr=False, weakref_slot=True)
class UnaryOp(Node):
    """An operator applied to a single operand, with a memoized result."""

    kind: UnaryOpKind
    arg: Node
    cache: np.float32 | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        for leaf in self.iter_leaf_inputs():
            leaf.register_dependent(self)

    @property
    def operands(self) -> tuple[Node, ...]:
        return (self.arg,)

    def compute(self) -> np.float32:
        if self.cache is None:
            _fill_caches(self)
        return self.cache

    def peek(self) -> np.float32 | None:
        return self.cache

    def invalidate(self) -> None:
        logger.debug("Invalidate cache %s", self)
        self.cache = None

    def _recompute(self) -> None:
        self.cache = self.kind.apply(self.arg.peek())

    def _display_parts(self) -> list[Node | str]:
        return [f"{self.kind.symbol}(", self.arg, ")"]

    def _repr_parts(self) -> list[Node | str]:
        return [f"UnaryOp(kind={self.kind.value!r}, arg=", self.arg, f", cache={_format_scalar(self.cache)})"]


@dataclass(slots=True, eq=False, repr=False, weakref_slot=True)
class BinaryOp(Node):
    """An operator applied to two operands, with a memoized result."""

    kind: BinaryOpKind
    lhs: Node
    rhs: Node
    cache: np.float32 | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        for leaf in self.iter_leaf_inputs():
            leaf.register_dependent(self)

    @property
    def operands(self) -> tuple[Node, ...]:
        return (self.lhs, self.rhs)

    def compute(self) -> np.float32:
        if self.cache is None:
            _fill_caches(self)
        return self.cache

    def peek(self) -> np.float32 | None:
        return self.cache

    def invalidate(self) -> None:
        logger.debug("Invalidate cache %s", self)
        self.cache = None

    def _recompute(self) -> None:
        self.cache = self.kind.apply(self.lhs.peek(), self.rhs.peek())

    def _display_parts(self) -> list[Node | str]:
        return ["(", self.lhs, f" {self.kind.symbol} ", self.rhs, ")"]

    def _repr_parts(self) -> list[Node | str]:
        return [
            f"BinaryOp(kind={self.kind.value!r}, lhs=",
            self.lhs,
            ", rhs=",
            self.rhs,
            f", cache={_format_scalar(self.cache)})",
        ]
