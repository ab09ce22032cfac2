"""Base types for arithmetic operations."""

from __future__ import annotations

from typing import Any, Protocol


class BinaryOp(Protocol):
    """Protocol for the binary operations behind compound operators."""
    def __call__(self, left: Any, right: Any, *, recycle: bool = True) -> Any:
        """Combine the current value with the right operand."""
        ...
