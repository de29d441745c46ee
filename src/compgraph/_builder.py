"""Constructors for computation graph nodes.

Every operator constructor takes already-built nodes (plain numbers are
accepted and wrapped in a ``Constant``) and returns a new node whose cache
starts empty. The new node registers itself with every ``Input`` reachable
from its operands, so that setting any of those inputs clears its cache.
"""

from __future__ import annotations

from ._node import BinaryOp, Constant, Input, Node, UnaryOp
from ._ops import BinaryOpKind, UnaryOpKind


def _as_node(value: Node | float) -> Node:
    """Return the node itself, or wrap a plain number in a ``Constant``."""
    return value if isinstance(value, Node) else Constant(value)


def create_input(name: str) -> Input:
    """Create an input leaf with no value set."""
    return Input(name)


def create_input_with(name: str, value: float) -> Input:
    """Create an input leaf with an initial value."""
    return Input(name, value)


def create_constant(value: float) -> Constant:
    """Create a constant leaf. Constants never trigger invalidation."""
    return Constant(value)


def _binary(kind: BinaryOpKind, lhs: Node | float, rhs: Node | float) -> BinaryOp:
    return BinaryOp(kind, _as_node(lhs), _as_node(rhs))


def add(lhs: Node | float, rhs: Node | float) -> BinaryOp:
    """Build ``lhs + rhs``."""
    return _binary(BinaryOpKind.SUM, lhs, rhs)


def multiply(lhs: Node | float, rhs: Node | float) -> BinaryOp:
    """Build ``lhs * rhs``."""
    return _binary(BinaryOpKind.MUL, lhs, rhs)


def subtract(lhs: Node | float, rhs: Node | float) -> BinaryOp:
    """Build ``lhs - rhs``."""
    return _binary(BinaryOpKind.SUB, lhs, rhs)


def divide(lhs: Node | float, rhs: Node | float) -> BinaryOp:
    """Build ``lhs / rhs``."""
    return _binary(BinaryOpKind.DIV, lhs, rhs)


def power(base: Node | float, exponent: Node | float) -> BinaryOp:
    """Build ``base ^ exponent``.

    The exponent may be a node or a plain number. A plain number becomes a
    ``Constant``, so only the inputs under ``base`` can invalidate the result.
    """
    return _binary(BinaryOpKind.POW, base, exponent)


def sine(arg: Node | float) -> UnaryOp:
    """Build ``sin(arg)``."""
    return UnaryOp(UnaryOpKind.SIN, _as_node(arg))


def cosine(arg: Node | float) -> UnaryOp:
    """Build ``cos(arg)``."""
    return UnaryOp(UnaryOpKind.COS, _as_node(arg))
