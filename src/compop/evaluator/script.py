"""Evaluator for small compound-assignment scripts.

Scripts use a subset of Python syntax::

    out = [1, 1, 1, 1, 1]
    x = [1, 2, 3, 4, 5]
    for i in range(len(x)):
        out[i] *= x[i]

The custom-infix spelling ``x %+=% 1`` is accepted as well and means the same
as ``x += 1``. Every compound assignment goes through the operators in
compop.operators, so the same target rules apply.
"""

from __future__ import annotations

import ast
import io
import logging
import time
import tokenize
from datetime import datetime, timezone
from typing import Any, Callable

from compop.operators import CompoundOperator, make_operator
from compop.ops.arith import ARITH_OPS, op_negate
from compop.scope import Scope
from compop.target import target_from_node
from compop.trace import ScriptTrace, TraceCollector
from compop.types import CompopConfig, OpType

logger = logging.getLogger(__name__)

_COMPOUND_SYMBOLS = frozenset(op.compound_symbol for op in OpType)

_AST_OPS: dict[type[ast.operator], OpType] = {
    ast.Add: OpType.ADD,
    ast.Sub: OpType.SUBTRACT,
    ast.Mult: OpType.MULTIPLY,
    ast.Div: OpType.DIVIDE,
}


def _range(*args: int) -> list[int]:
    return list(range(*args))


BUILTINS: dict[str, Callable[..., Any]] = {
    "len": len,
    "range": _range,
    "sum": sum,
    "min": min,
    "max": max,
    "abs": abs,
}


class ScriptError(Exception):
    """Unsupported or malformed script syntax."""

    def __init__(self, message: str, line: int | None = None):
        super().__init__(f"line {line}: {message}" if line is not None else message)
        self.line = line


def normalize_infix(source: str) -> str:
    """Rewrite ``%+=%``-style operators into Python's compound assignment syntax.

    Only operator tokens are rewritten; string literals and comments are left
    alone. Source that cannot be tokenized is returned unchanged so the parser
    reports the error.
    """
    try:
        tokens = list(tokenize.generate_tokens(io.StringIO(source).readline))
    except (tokenize.TokenError, SyntaxError):
        return source

    line_starts = [0]
    for line in source.splitlines(keepends=True):
        line_starts.append(line_starts[-1] + len(line))

    def offset(pos: tuple[int, int]) -> int:
        return line_starts[pos[0] - 1] + pos[1]

    pieces: list[str] = []
    last = 0
    for left, mid, right in zip(tokens, tokens[1:], tokens[2:]):
        if (
            left.type == mid.type == right.type == tokenize.OP
            and left.string == right.string == "%"
            and mid.string in _COMPOUND_SYMBOLS
            and left.end == mid.start
            and mid.end == right.start
            and offset(left.start) >= last
        ):
            pieces.append(source[last:offset(left.start)])
            pieces.append(mid.string)
            last = offset(right.end)
    pieces.append(source[last:])
    return "".join(pieces)


class ScriptEvaluator:
    """Runs compound-assignment scripts against a Scope."""

    def __init__(
        self,
        config: CompopConfig | None = None,
        trace_collector: TraceCollector | None = None,
    ):
        self.config = config or CompopConfig()
        self.trace_collector = trace_collector or TraceCollector()
        self.operators: dict[OpType, CompoundOperator] = {
            op: make_operator(op, allow_paths=self.config.allow_paths,
                              recycle=self.config.recycle)
            for op in OpType
        }
        self.trace: ScriptTrace | None = None

    def run(self, source: str, scope: Scope | None = None) -> Scope:
        """Execute a script. Returns the scope it ran in."""
        scope = scope if scope is not None else Scope()
        self.trace = ScriptTrace(
            timestamp=datetime.now(timezone.utc).isoformat(),
            source=source,
        )
        try:
            tree = ast.parse(normalize_infix(source), mode="exec")
        except SyntaxError as e:
            error = ScriptError(f"syntax error: {e.msg}", e.lineno)
            self.trace.error = f"{type(error).__name__}: {error}"
            raise error from e

        logger.debug("Running script with %d top-level statements", len(tree.body))
        start = time.monotonic()
        try:
            self._exec_block(tree.body, scope)
        except Exception as e:
            self.trace.error = f"{type(e).__name__}: {e}"
            raise
        finally:
            self.trace.elapsed_s = time.monotonic() - start
        return scope

    def get_trace(self) -> ScriptTrace | None:
        return self.trace

    # --- statements ---

    def _exec_block(self, body: list[ast.stmt], scope: Scope) -> None:
        for stmt in body:
            self._exec(stmt, scope)

    def _exec(self, stmt: ast.stmt, scope: Scope) -> None:
        if isinstance(stmt, ast.AugAssign):
            self._exec_compound(stmt, scope)
        elif isinstance(stmt, ast.Assign):
            self._exec_assign(stmt, scope)
        elif isinstance(stmt, ast.For):
            self._exec_for(stmt, scope)
        elif isinstance(stmt, ast.Pass):
            pass
        else:
            raise ScriptError(
                f"unsupported statement: {type(stmt).__name__}", stmt.lineno
            )

    def _exec_compound(self, stmt: ast.AugAssign, scope: Scope) -> None:
        op_type = _AST_OPS.get(type(stmt.op))
        if op_type is None:
            raise ScriptError(
                f"unsupported compound operator: {type(stmt.op).__name__}", stmt.lineno
            )
        operator = self.operators[op_type]
        target = operator.capture(target_from_node(stmt.target))
        rhs = self._eval(stmt.value, scope)
        before = scope.read(target) if self.trace_collector.enabled else None
        after = operator(target, rhs, scope)
        if self.trace is not None:
            self.trace_collector.record_rebind(
                self.trace, line=stmt.lineno, target=str(target),
                op=op_type.value, rhs=rhs, before=before, after=after,
            )

    def _exec_assign(self, stmt: ast.Assign, scope: Scope) -> None:
        if len(stmt.targets) != 1:
            raise ScriptError("chained assignment is not supported", stmt.lineno)
        node = stmt.targets[0]
        value = self._eval(stmt.value, scope)
        if isinstance(node, ast.Name):
            scope.bind(node.id, value)
        else:
            scope.write(target_from_node(node), value)

    def _exec_for(self, stmt: ast.For, scope: Scope) -> None:
        if not isinstance(stmt.target, ast.Name):
            raise ScriptError("loop variable must be a bare name", stmt.lineno)
        if stmt.orelse:
            raise ScriptError("for-else is not supported", stmt.lineno)
        items = self._eval(stmt.iter, scope)
        if not isinstance(items, (list, tuple)):
            raise ScriptError(
                f"cannot iterate over {type(items).__name__}", stmt.lineno
            )
        for item in items:
            scope.bind(stmt.target.id, item)
            self._exec_block(stmt.body, scope)

    # --- expressions ---

    def _eval(self, node: ast.expr, scope: Scope) -> Any:
        if isinstance(node, ast.Constant):
            if type(node.value) not in (int, float, str):
                raise ScriptError(f"unsupported literal: {node.value!r}", node.lineno)
            return node.value
        if isinstance(node, (ast.List, ast.Tuple)):
            return [self._eval(elt, scope) for elt in node.elts]
        if isinstance(node, ast.Name):
            return scope.lookup(node.id)
        if isinstance(node, ast.Subscript):
            if isinstance(node.slice, ast.Slice):
                raise ScriptError("slices are not supported", node.lineno)
            container = self._eval(node.value, scope)
            key = self._eval(node.slice, scope)
            if type(key) not in (int, str):
                raise ScriptError(
                    f"index must be int or str, got {type(key).__name__}", node.lineno
                )
            return container[key]
        if isinstance(node, ast.UnaryOp):
            operand = self._eval(node.operand, scope)
            if isinstance(node.op, ast.UAdd):
                return operand
            if isinstance(node.op, ast.USub):
                return op_negate(operand)
            raise ScriptError(
                f"unsupported unary operator: {type(node.op).__name__}", node.lineno
            )
        if isinstance(node, ast.BinOp):
            op_type = _AST_OPS.get(type(node.op))
            if op_type is None:
                raise ScriptError(
                    f"unsupported operator: {type(node.op).__name__}", node.lineno
                )
            left = self._eval(node.left, scope)
            right = self._eval(node.right, scope)
            return ARITH_OPS[op_type](left, right, recycle=self.config.recycle)
        if isinstance(node, ast.Call):
            return self._eval_call(node, scope)
        raise ScriptError(
            f"unsupported expression: {type(node).__name__}", node.lineno
        )

    def _eval_call(self, node: ast.Call, scope: Scope) -> Any:
        if not isinstance(node.func, ast.Name) or node.func.id not in BUILTINS:
            raise ScriptError(
                f"unsupported call: {ast.unparse(node.func)}", node.lineno
            )
        if node.keywords:
            raise ScriptError("keyword arguments are not supported", node.lineno)
        args = [self._eval(arg, scope) for arg in node.args]
        return BUILTINS[node.func.id](*args)
