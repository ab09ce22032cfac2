"""Compound assignment operators built from a single factory.

Each operator takes the *name* of its left operand rather than its value,
combines the bound value with the right operand and rebinds the name in the
scope it was given::

    scope = Scope({"x": [1, 2, 3, 4, 5]})
    add_assign("x", 1, scope)          # x is now [2, 3, 4, 5, 6]

    inc = add_assign.bind(scope)       # the two-argument infix form
    inc("x", 1)                        # x is now [3, 4, 5, 6, 7]

Index paths such as ``"out[i]"`` are written through unless the operator was
created with ``allow_paths=False``, in which case anything but a bare name
raises InvalidTargetError.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from compop.ops.arith import ARITH_OPS
from compop.scope import Scope
from compop.target import InvalidTargetError, parse_target
from compop.types import OpType, Target

logger = logging.getLogger(__name__)


class CompoundOperator:
    """A read-modify-write operator for one fixed arithmetic operation."""

    __slots__ = ("_op", "_allow_paths", "_recycle")

    def __init__(self, op: OpType | str, *, allow_paths: bool = True, recycle: bool = True):
        self._op = OpType.parse(op)
        self._allow_paths = allow_paths
        self._recycle = recycle

    @property
    def op(self) -> OpType:
        return self._op

    @property
    def allow_paths(self) -> bool:
        return self._allow_paths

    @property
    def symbol(self) -> str:
        return self._op.compound_symbol

    def __repr__(self) -> str:
        return f"CompoundOperator({self._op.value!r}, allow_paths={self._allow_paths})"

    def capture(self, target: str | Target) -> Target:
        """Turn a target reference into a Target this operator accepts."""
        if isinstance(target, str):
            captured = parse_target(target)
        elif isinstance(target, Target):
            captured = target
        else:
            raise InvalidTargetError(
                repr(target),
                f"expected a target name (str) or Target, got {type(target).__name__}",
            )
        if not captured.is_bare and not self._allow_paths:
            raise InvalidTargetError(
                str(captured), "only bare names can be assigned to"
            )
        return captured

    def apply(self, current: Any, rhs: Any) -> Any:
        """Return op(current, rhs) without touching any scope."""
        return ARITH_OPS[self._op](current, rhs, recycle=self._recycle)

    def __call__(self, target: str | Target, rhs: Any, scope: Scope) -> Any:
        """Apply the operation to the bound value and rebind it. Returns the new value."""
        captured = self.capture(target)
        current = scope.read(captured)
        new_value = self.apply(current, rhs)
        scope.write(captured, new_value)
        logger.debug("%s %s %r: %r -> %r", captured, self.symbol, rhs, current, new_value)
        return new_value

    def bind(self, scope: Scope) -> Callable[[str | Target, Any], Any]:
        """Close over a scope, giving the two-argument form ``op(target, rhs)``."""
        def bound(target: str | Target, rhs: Any) -> Any:
            return self(target, rhs, scope)
        bound.__name__ = f"{self._op.value}_assign"
        return bound


def make_operator(
    op: OpType | str, *, allow_paths: bool = True, recycle: bool = True,
) -> CompoundOperator:
    """Create a compound operator for op (an OpType, its value, or any of its symbols)."""
    return CompoundOperator(op, allow_paths=allow_paths, recycle=recycle)


add_assign = make_operator(OpType.ADD)
sub_assign = make_operator(OpType.SUBTRACT)
mul_assign = make_operator(OpType.MULTIPLY)
div_assign = make_operator(OpType.DIVIDE)

OPERATORS: dict[str, CompoundOperator] = {
    o.symbol: o for o in (add_assign, sub_assign, mul_assign, div_assign)
}
