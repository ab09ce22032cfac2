"""Binding environments that compound operators read from and rebind."""

from __future__ import annotations

import copy
from typing import Any, MutableMapping

from compop.target import InvalidTargetError
from compop.types import Target

SymbolTable = MutableMapping[str, Any]


class ScopeError(Exception):
    """Parent class for Scope errors."""


class UnboundNameError(ScopeError):
    """Name has no value anywhere in the scope chain."""

    def __init__(self, name: str):
        super().__init__(f"Name is not bound in the scope: {name}")
        self.name: str = name


class Scope:
    """Hierarchy of lexical scopes, a table of known variable names.

    The symbols mapping is used as-is, so a caller can hand in its own
    namespace and observe rebindings in it.
    """

    def __init__(self, symbols: SymbolTable | None = None, parent: Scope | None = None):
        self._symbols: SymbolTable = symbols if symbols is not None else {}
        self.parent: Scope | None = parent

    def __contains__(self, name: str) -> bool:
        return self._owner(name) is not None

    def _owner(self, name: str) -> Scope | None:
        scope: Scope | None = self
        while scope is not None:
            if name in scope._symbols:
                return scope
            scope = scope.parent
        return None

    def lookup(self, name: str) -> Any:
        owner = self._owner(name)
        if owner is None:
            raise UnboundNameError(name)
        return owner._symbols[name]

    def assign(self, name: str, value: Any) -> None:
        """Rebind name in the scope that defines it."""
        owner = self._owner(name)
        if owner is None:
            raise UnboundNameError(name)
        owner._symbols[name] = value

    def define(self, name: str, value: Any) -> None:
        self._symbols[name] = value

    def bind(self, name: str, value: Any) -> None:
        """Rebind name if it is visible, otherwise define it here."""
        owner = self._owner(name) or self
        owner._symbols[name] = value

    def nested(self, symbols: SymbolTable | None = None) -> Scope:
        return Scope(symbols=symbols, parent=self)

    def snapshot(self) -> dict[str, Any]:
        """All visible bindings; inner scopes shadow outer ones."""
        chain: list[Scope] = []
        scope: Scope | None = self
        while scope is not None:
            chain.append(scope)
            scope = scope.parent
        result: dict[str, Any] = {}
        for s in reversed(chain):
            result.update(s._symbols)
        return result

    def resolve_keys(self, target: Target) -> list[int | str]:
        """Turn the target's index path into concrete keys."""
        keys: list[int | str] = []
        for ref in target.path:
            if not ref.is_name:
                keys.append(ref.value)
                continue
            key = self.lookup(str(ref.value))
            if type(key) not in (int, str):
                raise InvalidTargetError(
                    str(target),
                    f"index {ref.value} holds {type(key).__name__}, expected int or str",
                )
            keys.append(key)
        return keys

    def read(self, target: Target) -> Any:
        """Read the value a target addresses."""
        value = self.lookup(target.name)
        for key in self.resolve_keys(target):
            value = _getitem(value, key, target)
        return value

    def write(self, target: Target, value: Any) -> None:
        """Rebind a target.

        Containers along an index path are copied before the element is
        replaced, then the base name is rebound to the new outer container.
        """
        if target.is_bare:
            self.assign(target.name, value)
            return
        root = self.lookup(target.name)
        keys = self.resolve_keys(target)
        self.assign(target.name, _replace(root, keys, value, target))


def _getitem(container: Any, key: int | str, target: Target) -> Any:
    try:
        return container[key]
    except (IndexError, KeyError) as e:
        raise InvalidTargetError(str(target), f"no element at [{key!r}]") from e
    except TypeError as e:
        raise InvalidTargetError(
            str(target), f"{type(container).__name__} is not indexable by {key!r}"
        ) from e


def _replace(container: Any, keys: list[int | str], value: Any, target: Target) -> Any:
    key, rest = keys[0], keys[1:]
    current = _getitem(container, key, target)
    new_item = _replace(current, rest, value, target) if rest else value
    if type(container) is tuple:
        items = list(container)
        items[key] = new_item  # type: ignore[index]
        return tuple(items)
    if not isinstance(container, (list, dict)):
        raise InvalidTargetError(
            str(target), f"{type(container).__name__} does not support item assignment"
        )
    updated = copy.copy(container)
    updated[key] = new_item
    return updated
