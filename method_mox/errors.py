"""Custom exceptions for method-mox."""

from __future__ import annotations

import typing as t

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .scenario import Scenario


class MethodMoxError(Exception):
    """Base exception for all method-mox errors."""


class DefinitionError(MethodMoxError):
    """Raised when a scenario is queried or chained before it is ready."""


class ArgumentError(MethodMoxError, TypeError):
    """Raised when a scenario is configured or called incorrectly."""


class VerificationError(MethodMoxError, AssertionError):
    """Base class for failures detected while dispatching or verifying."""


class NoMatchingScenarioError(VerificationError):
    """Raised when a call matches none of the declared scenarios."""

    def __init__(
        self, message: str, *, call: str, scenarios: t.Sequence[Scenario]
    ) -> None:
        super().__init__(message)
        self.call = call
        self.scenarios = tuple(scenarios)


class TimesCalledError(VerificationError):
    """Raised when a scenario is called an unexpected number of times."""

    def __init__(self, formatted_name: str, actual: int, expected: str) -> None:
        noun = "time" if actual == 1 else "times"
        super().__init__(
            f"{formatted_name}\nCalled {actual} {noun}.\nExpected {expected}."
        )
        self.formatted_name = formatted_name
        self.actual = actual
        self.expected = expected


class OrderError(VerificationError):
    """Raised when an ordered scenario fires before its predecessors."""

    def __init__(
        self, message: str, *, call: str, expected_order: t.Sequence[str]
    ) -> None:
        super().__init__(message)
        self.call = call
        self.expected_order = tuple(expected_order)


__all__ = [
    "ArgumentError",
    "DefinitionError",
    "MethodMoxError",
    "NoMatchingScenarioError",
    "OrderError",
    "TimesCalledError",
    "VerificationError",
]
