"""Property-based tests for compound operators.

Each test states an invariant of the operators and uses Hypothesis to check
it over random numeric sequences and operands.
"""

from __future__ import annotations

import keyword
import operator

import pytest
from hypothesis import given, assume
from hypothesis import strategies as st

from compop.operators import add_assign, make_operator, mul_assign, sub_assign
from compop.scope import Scope
from compop.target import InvalidTargetError
from compop.types import OpType


# ============================================================
# Strategies
# ============================================================

values_strategy = st.lists(
    st.integers(min_value=-1000, max_value=1000), min_size=0, max_size=30,
)
nonempty_values_strategy = st.lists(
    st.integers(min_value=-1000, max_value=1000), min_size=1, max_size=30,
)
rhs_strategy = st.integers(min_value=-100, max_value=100)
op_strategy = st.sampled_from(list(OpType))
varname_strategy = st.from_regex(r"[a-z][a-z0-9_]{0,10}", fullmatch=True).filter(
    lambda s: not keyword.iskeyword(s)
)

PY_OPS = {
    OpType.ADD: operator.add,
    OpType.SUBTRACT: operator.sub,
    OpType.MULTIPLY: operator.mul,
    OpType.DIVIDE: operator.truediv,
}


# ============================================================
# Compound assignment equals name = op(name, rhs)
# ============================================================

@given(op=op_strategy, values=values_strategy, rhs=rhs_strategy, name=varname_strategy)
def test_matches_elementwise_application(op, values, rhs, name) -> None:
    assume(not (op == OpType.DIVIDE and rhs == 0))
    scope = Scope({name: list(values)})
    make_operator(op)(name, rhs, scope)
    assert scope.lookup(name) == [PY_OPS[op](v, rhs) for v in values]


@given(op=op_strategy, left=rhs_strategy, rhs=rhs_strategy)
def test_scalar_matches_python_operator(op, left, rhs) -> None:
    assume(not (op == OpType.DIVIDE and rhs == 0))
    scope = Scope({"n": left})
    make_operator(op)("n", rhs, scope)
    assert scope.lookup("n") == PY_OPS[op](left, rhs)


# ============================================================
# Identities
# ============================================================

@given(values=values_strategy)
def test_add_zero_is_identity(values) -> None:
    scope = Scope({"x": list(values)})
    add_assign("x", 0, scope)
    assert scope.lookup("x") == values


@given(values=values_strategy)
def test_multiply_one_is_identity(values) -> None:
    scope = Scope({"x": list(values)})
    mul_assign("x", 1, scope)
    assert scope.lookup("x") == values


@given(values=values_strategy, rhs=rhs_strategy)
def test_add_then_subtract_restores(values, rhs) -> None:
    scope = Scope({"x": list(values)})
    add_assign("x", rhs, scope)
    sub_assign("x", rhs, scope)
    assert scope.lookup("x") == values


# ============================================================
# Index paths touch exactly one element
# ============================================================

@given(values=nonempty_values_strategy, rhs=rhs_strategy, data=st.data())
def test_path_write_changes_one_element(values, rhs, data) -> None:
    index = data.draw(st.integers(min_value=0, max_value=len(values) - 1))
    scope = Scope({"out": list(values), "i": index})
    add_assign("out[i]", rhs, scope)
    result = scope.lookup("out")
    expected = list(values)
    expected[index] += rhs
    assert result == expected


@given(values=nonempty_values_strategy, op=op_strategy)
def test_strict_rejects_indexed_targets(values, op) -> None:
    scope = Scope({"out": list(values)})
    with pytest.raises(InvalidTargetError):
        make_operator(op, allow_paths=False)("out[0]", 1, scope)
    assert scope.lookup("out") == values


# ============================================================
# Failed calls leave the scope unchanged
# ============================================================

@given(values=nonempty_values_strategy)
def test_failed_division_leaves_scope(values) -> None:
    scope = Scope({"x": list(values)})
    with pytest.raises(ZeroDivisionError):
        make_operator(OpType.DIVIDE)("x", 0, scope)
    assert scope.lookup("x") == values
