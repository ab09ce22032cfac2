"""Element-wise arithmetic over numbers and numeric sequences."""

from __future__ import annotations

import logging
import operator
from typing import Any, Callable

from compop.ops.base import BinaryOp
from compop.types import OpType

logger = logging.getLogger(__name__)


def _is_seq(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _elementwise(fn: Callable[[Any, Any], Any], left: Any, right: Any, recycle: bool) -> Any:
    """Apply fn over scalars, broadcasting scalars and recycling sequences."""
    if not _is_seq(left) and not _is_seq(right):
        return fn(left, right)
    if not _is_seq(right):
        return [_elementwise(fn, item, right, recycle) for item in left]
    if not _is_seq(left):
        return [_elementwise(fn, left, item, recycle) for item in right]

    n, m = len(left), len(right)
    if n == 0 or m == 0:
        return []
    if n != m:
        if not recycle:
            raise ValueError(f"Operand lengths differ: {n} vs {m}")
        longest = max(n, m)
        if longest % min(n, m) != 0:
            logger.warning(
                "longer object length (%d) is not a multiple of shorter object length (%d)",
                longest, min(n, m),
            )
        return [
            _elementwise(fn, left[i % n], right[i % m], recycle)
            for i in range(longest)
        ]
    return [_elementwise(fn, a, b, recycle) for a, b in zip(left, right)]


def op_add(left: Any, right: Any, *, recycle: bool = True) -> Any:
    """Add right to left."""
    return _elementwise(operator.add, left, right, recycle)


def op_subtract(left: Any, right: Any, *, recycle: bool = True) -> Any:
    """Subtract right from left."""
    return _elementwise(operator.sub, left, right, recycle)


def op_multiply(left: Any, right: Any, *, recycle: bool = True) -> Any:
    """Multiply left by right."""
    return _elementwise(operator.mul, left, right, recycle)


def op_divide(left: Any, right: Any, *, recycle: bool = True) -> Any:
    """Divide left by right (true division; a zero divisor raises)."""
    return _elementwise(operator.truediv, left, right, recycle)


def op_negate(value: Any) -> Any:
    """Negate a number, or every element of a (possibly nested) sequence."""
    if _is_seq(value):
        return [op_negate(item) for item in value]
    return operator.neg(value)


# Registry of arithmetic operations
ARITH_OPS: dict[OpType, BinaryOp] = {
    OpType.ADD: op_add,
    OpType.SUBTRACT: op_subtract,
    OpType.MULTIPLY: op_multiply,
    OpType.DIVIDE: op_divide,
}
