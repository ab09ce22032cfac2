"""Capture the left operand of a compound assignment as a Target."""

from __future__ import annotations

import ast

from compop.types import IndexRef, Target


class InvalidTargetError(Exception):
    """The left operand is not a bare name or a supported addressable path."""

    def __init__(self, source: str, reason: str):
        super().__init__(f"Invalid assignment target {source!r}: {reason}")
        self.source = source
        self.reason = reason


def parse_target(source: str) -> Target:
    """Parse a target reference such as ``"x"`` or ``"out[i]"``."""
    text = source.strip()
    if not text:
        raise InvalidTargetError(source, "empty target")
    try:
        tree = ast.parse(text, mode="eval")
    except SyntaxError as e:
        raise InvalidTargetError(source, f"syntax error ({e.msg})") from e
    return target_from_node(tree.body, source=text)


def target_from_node(node: ast.expr, source: str | None = None) -> Target:
    """Build a Target from an expression node: NAME followed by zero or more [INDEX]."""
    source = source if source is not None else ast.unparse(node)
    path: list[IndexRef] = []
    while isinstance(node, ast.Subscript):
        path.append(_index_ref(node.slice, source))
        node = node.value
    if not isinstance(node, ast.Name):
        raise InvalidTargetError(
            source, f"expected a name, got {type(node).__name__.lower()} expression"
        )
    path.reverse()
    return Target(name=node.id, path=path)


def _index_ref(node: ast.expr, source: str) -> IndexRef:
    if isinstance(node, ast.Name):
        return IndexRef(value=node.id, is_name=True)
    if isinstance(node, ast.Constant) and type(node.value) in (int, str):
        return IndexRef(value=node.value)
    if (
        isinstance(node, ast.UnaryOp)
        and isinstance(node.op, ast.USub)
        and isinstance(node.operand, ast.Constant)
        and type(node.operand.value) is int
    ):
        return IndexRef(value=-node.operand.value)
    raise InvalidTargetError(
        source, "index must be an integer, a string or a bare name"
    )
