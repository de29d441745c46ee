"""Operator kinds for computation graph nodes.

Each member carries its display symbol and a docstring, and knows how to
apply itself to single-precision operands.
"""

from enum import StrEnum
from typing import Self

import numpy as np


class _OpKind(StrEnum):
    """Base class for operator tags with a display symbol and a docstring."""

    symbol: str

    def __new__(cls, value: str, symbol: str, doc: str = "") -> Self:
        """Create a new operator member."""
        obj = str.__new__(cls, value)
        obj._value_ = value
        obj.symbol = symbol
        obj.__doc__ = doc
        return obj


class BinaryOpKind(_OpKind):
    """Operators taking two operands."""

    SUM = "sum", "+", "Sum of both operands."
    MUL = "mul", "*", "Product of both operands."
    SUB = "sub", "-", "Difference, lhs minus rhs."
    DIV = "div", "/", "Quotient, lhs divided by rhs."
    POW = "pow", "^", "lhs raised to the power of rhs."

    def apply(self, lhs: np.float32, rhs: np.float32) -> np.float32:
        """Apply the operator in single precision.

        IEEE edge cases (division by zero, overflow, NaN) propagate as float32
        arithmetic produces them, without numpy warnings.
        """
        with np.errstate(all="ignore"):
            match self:
                case BinaryOpKind.SUM:
                    return np.add(lhs, rhs, dtype=np.float32)
                case BinaryOpKind.MUL:
                    return np.multiply(lhs, rhs, dtype=np.float32)
                case BinaryOpKind.SUB:
                    return np.subtract(lhs, rhs, dtype=np.float32)
                case BinaryOpKind.DIV:
                    return np.divide(lhs, rhs, dtype=np.float32)
                case BinaryOpKind.POW:
                    return np.power(lhs, rhs, dtype=np.float32)
        msg = f"Unknown binary operator: {self!r}"
        raise ValueError(msg)


class UnaryOpKind(_OpKind):
    """Operators taking a single operand, rendered as ``func(arg)``."""

    SIN = "sin", "sin", "Sine of the operand, in radians."
    COS = "cos", "cos", "Cosine of the operand, in radians."

    def apply(self, arg: np.float32) -> np.float32:
        """Apply the operator in single precision."""
        with np.errstate(all="ignore"):
            match self:
                case UnaryOpKind.SIN:
                    return np.sin(arg, dtype=np.float32)
                case UnaryOpKind.COS:
                    return np.cos(arg, dtype=np.float32)
        msg = f"Unknown unary operator: {self!r}"
        raise ValueError(msg)
