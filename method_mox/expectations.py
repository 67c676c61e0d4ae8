"""Argument expectations deciding whether a call matches a scenario."""

from __future__ import annotations

import typing as t

from .comparators import Comparator


class ArgumentEqualityExpectation:
    """Expect positional and keyword arguments equal to the declared ones.

    An exact match compares every argument with ``==``. A wildcard match does
    the same for plain values but lets :class:`~method_mox.comparators.Comparator`
    instances judge the argument in their position, so declaring comparators
    relaxes only the wildcard pass.
    """

    __slots__ = ("expected_arguments", "expected_keywords")

    def __init__(self, *args: object, **kwargs: object) -> None:
        self.expected_arguments: tuple[object, ...] = args
        self.expected_keywords: dict[str, object] = kwargs

    def exact_match(
        self, args: t.Sequence[object], kwargs: t.Mapping[str, object] | None = None
    ) -> bool:
        """Return ``True`` when the call arguments equal the expected ones."""
        kwargs = kwargs or {}
        if len(args) != len(self.expected_arguments):
            return False
        if kwargs.keys() != self.expected_keywords.keys():
            return False
        if list(args) != list(self.expected_arguments):
            return False
        expected = self.expected_keywords
        return all(kwargs[key] == value for key, value in expected.items())

    def wildcard_match(
        self, args: t.Sequence[object], kwargs: t.Mapping[str, object] | None = None
    ) -> bool:
        """Return ``True`` when the call satisfies the expected arguments."""
        kwargs = kwargs or {}
        if len(args) != len(self.expected_arguments):
            return False
        if kwargs.keys() != self.expected_keywords.keys():
            return False
        for actual, expected in zip(args, self.expected_arguments, strict=True):
            if not _satisfies(expected, actual):
                return False
        return all(
            _satisfies(expected, kwargs[key])
            for key, expected in self.expected_keywords.items()
        )

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return (
            self.expected_arguments == other.expected_arguments
            and self.expected_keywords == other.expected_keywords
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        """Return a debug representation."""
        parts = [repr(arg) for arg in self.expected_arguments]
        keywords = self.expected_keywords.items()
        parts.extend(f"{key}={value!r}" for key, value in keywords)
        return f"ArgumentEqualityExpectation({', '.join(parts)})"


class AnyArgumentExpectation:
    """Accept any arguments, but only as a wildcard match."""

    __slots__ = ()

    expected_arguments: tuple[object, ...] = ()
    expected_keywords: t.Mapping[str, object] = {}

    def exact_match(
        self, args: t.Sequence[object], kwargs: t.Mapping[str, object] | None = None
    ) -> bool:
        """Return ``False``; any-argument expectations never match exactly."""
        return False

    def wildcard_match(
        self, args: t.Sequence[object], kwargs: t.Mapping[str, object] | None = None
    ) -> bool:
        """Return ``True`` for any call."""
        return True

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AnyArgumentExpectation):
            return NotImplemented
        return True

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        """Return a debug representation."""
        return "AnyArgumentExpectation()"


ArgumentExpectation = ArgumentEqualityExpectation | AnyArgumentExpectation


def _satisfies(expected: object, actual: object) -> bool:
    if isinstance(expected, Comparator):
        return expected(actual)
    return actual == expected


__all__ = [
    "AnyArgumentExpectation",
    "ArgumentEqualityExpectation",
    "ArgumentExpectation",
]
