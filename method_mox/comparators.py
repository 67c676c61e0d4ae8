"""Comparator objects used for wildcard argument matching."""

from __future__ import annotations

import re
import typing as t


class Comparator:
    """Callable returning ``True`` when a value matches.

    Argument expectations apply comparators during wildcard matching only, so
    a scenario declared with comparators never produces an exact match.
    """

    def __call__(self, value: object) -> bool:
        """Return ``True`` if *value* satisfies the comparison."""
        raise NotImplementedError


class Any(Comparator):
    """Match any value."""

    def __call__(self, value: object) -> bool:
        """Return ``True`` for any input."""
        return True

    def __eq__(self, other: object) -> bool:
        return type(other) is type(self)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        """Return a debug representation."""
        return "Any()"


class IsA(Comparator):
    """Match instances of ``typ``."""

    def __init__(self, typ: type | tuple[type, ...]) -> None:
        self.typ = typ

    def __call__(self, value: object) -> bool:
        """Return ``True`` when *value* is an instance of ``typ``."""
        return isinstance(value, self.typ)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"IsA(typ={self.typ!r})"


class Regex(Comparator):
    """Match strings that contain ``pattern``."""

    def __init__(self, pattern: str) -> None:
        self._pattern = re.compile(pattern)

    def __call__(self, value: object) -> bool:
        """Return ``True`` if the regex matches *value*."""
        if not isinstance(value, str):
            return False
        return bool(self._pattern.search(value))

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Regex(pattern={self._pattern.pattern!r})"


class Contains(Comparator):
    """Match if ``item`` is found in *value*."""

    def __init__(self, item: object) -> None:
        self.item = item

    def __call__(self, value: object) -> bool:
        """Return ``True`` if ``item`` is in *value*."""
        try:
            return self.item in value  # type: ignore[operator]
        except TypeError:
            return False

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Contains(item={self.item!r})"


class StartsWith(Comparator):
    """Match strings beginning with ``prefix``."""

    def __init__(self, prefix: str) -> None:
        self.prefix = prefix

    def __call__(self, value: object) -> bool:
        """Return ``True`` if *value* starts with ``prefix``."""
        return isinstance(value, str) and value.startswith(self.prefix)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"StartsWith(prefix={self.prefix!r})"


class Predicate(Comparator):
    """Use a custom ``func`` to determine a match."""

    def __init__(self, func: t.Callable[[t.Any], object]) -> None:
        self.func = func

    def __call__(self, value: object) -> bool:
        """Return ``True`` if ``func(value)`` is truthy."""
        return bool(self.func(value))

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Predicate(func={self.func!r})"


__all__ = [
    "Any",
    "Comparator",
    "Contains",
    "IsA",
    "Predicate",
    "Regex",
    "StartsWith",
]
