"""Core types for compop."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class OpType(str, Enum):
    """Arithmetic operations a compound operator can apply."""
    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    DIVIDE = "divide"

    @property
    def symbol(self) -> str:
        """The binary operator symbol, e.g. "+"."""
        return _SYMBOLS[self]

    @property
    def compound_symbol(self) -> str:
        """The C-style compound assignment symbol, e.g. "+="."""
        return f"{self.symbol}="

    @property
    def infix_name(self) -> str:
        """The %-delimited spelling used for custom infix operators, e.g. "%+=%"."""
        return f"%{self.compound_symbol}%"

    @classmethod
    def parse(cls, value: OpType | str) -> OpType:
        """Resolve an OpType from itself, its value, or any of its symbols."""
        if isinstance(value, OpType):
            return value
        for op in cls:
            if value in (op.value, op.symbol, op.compound_symbol, op.infix_name):
                return op
        raise ValueError(f"Unknown operation: {value!r}")


_SYMBOLS = {
    OpType.ADD: "+",
    OpType.SUBTRACT: "-",
    OpType.MULTIPLY: "*",
    OpType.DIVIDE: "/",
}


class IndexRef(BaseModel):
    """One step of a target's index path.

    Either a literal key (``out[0]``, ``d["k"]``) or the name of a scope
    variable that holds the key (``out[i]``).
    """
    value: int | str
    is_name: bool = False

    def __str__(self) -> str:
        if self.is_name or isinstance(self.value, int):
            return str(self.value)
        return repr(self.value)


class Target(BaseModel):
    """The left operand of a compound assignment: a name plus an index path."""
    name: str
    path: list[IndexRef] = []

    @property
    def is_bare(self) -> bool:
        return not self.path

    def __str__(self) -> str:
        return self.name + "".join(f"[{ref}]" for ref in self.path)


class CompopConfig(BaseModel):
    """Configuration for operators and script runs."""
    allow_paths: bool = True  # False: only bare names are valid targets
    recycle: bool = True  # False: unequal-length sequences raise ValueError
    verbose: bool = False
