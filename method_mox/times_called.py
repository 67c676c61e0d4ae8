"""Matchers deciding whether an observed call count is acceptable.

Each matcher answers three questions about a count of calls made so far:

``matches(count)``
    Does the count satisfy the declared cardinality?
``attempt(count)``
    Would one more call still be acceptable?
``terminal(count)``
    Is the count at its ceiling, so that any further call is certainly wrong?
"""

from __future__ import annotations

import typing as t

from ._validators import validate_call_count
from .errors import ArgumentError


def _times(count: int) -> str:
    return "1 time" if count == 1 else f"{count} times"


class TimesCalledMatcher:
    """Base class for call-count matchers."""

    __slots__ = ()

    def matches(self, count: int) -> bool:
        """Return ``True`` when *count* satisfies this matcher."""
        raise NotImplementedError

    def attempt(self, count: int) -> bool:
        """Return ``True`` when another call after *count* calls is acceptable."""
        raise NotImplementedError

    def terminal(self, count: int) -> bool:
        """Return ``True`` when no further calls should occur after *count*."""
        raise NotImplementedError

    @property
    def description(self) -> str:
        """Describe the expected cardinality for error messages."""
        raise NotImplementedError

    def _key(self) -> tuple[object, ...]:
        return ()

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._key() == t.cast("TimesCalledMatcher", other)._key()

    def __hash__(self) -> int:
        return hash((type(self), self._key()))

    def __repr__(self) -> str:
        args = ", ".join(repr(value) for value in self._key())
        return f"{type(self).__name__}({args})"


class IntegerMatcher(TimesCalledMatcher):
    """Expect exactly ``times`` calls."""

    __slots__ = ("times",)

    def __init__(self, times: int) -> None:
        validate_call_count(times, name="times")
        self.times = times

    def matches(self, count: int) -> bool:
        return count == self.times

    def attempt(self, count: int) -> bool:
        return count < self.times

    def terminal(self, count: int) -> bool:
        return count >= self.times

    @property
    def description(self) -> str:
        return _times(self.times)

    def _key(self) -> tuple[object, ...]:
        return (self.times,)


class AtLeastMatcher(TimesCalledMatcher):
    """Expect ``times`` calls or more."""

    __slots__ = ("times",)

    def __init__(self, times: int) -> None:
        validate_call_count(times, name="times")
        self.times = times

    def matches(self, count: int) -> bool:
        return count >= self.times

    def attempt(self, count: int) -> bool:
        return True

    def terminal(self, count: int) -> bool:
        return False

    @property
    def description(self) -> str:
        return f"at least {_times(self.times)}"

    def _key(self) -> tuple[object, ...]:
        return (self.times,)


class AtMostMatcher(TimesCalledMatcher):
    """Expect no more than ``times`` calls."""

    __slots__ = ("times",)

    def __init__(self, times: int) -> None:
        validate_call_count(times, name="times")
        self.times = times

    def matches(self, count: int) -> bool:
        return count <= self.times

    def attempt(self, count: int) -> bool:
        return count < self.times

    def terminal(self, count: int) -> bool:
        return count >= self.times

    @property
    def description(self) -> str:
        return f"at most {_times(self.times)}"

    def _key(self) -> tuple[object, ...]:
        return (self.times,)


class RangeMatcher(TimesCalledMatcher):
    """Expect a call count that falls within ``bounds``."""

    __slots__ = ("bounds",)

    def __init__(self, bounds: range) -> None:
        if not bounds:
            msg = f"times range must not be empty: {bounds!r}"
            raise ArgumentError(msg)
        if bounds.step != 1:
            msg = f"times range must have a step of 1: {bounds!r}"
            raise ArgumentError(msg)
        validate_call_count(bounds.start, name="range start")
        self.bounds = bounds

    @property
    def maximum(self) -> int:
        """Return the largest acceptable count."""
        return self.bounds[-1]

    def matches(self, count: int) -> bool:
        return count in self.bounds

    def attempt(self, count: int) -> bool:
        return count < self.maximum

    def terminal(self, count: int) -> bool:
        return count >= self.maximum

    @property
    def description(self) -> str:
        return f"between {self.bounds.start} and {_times(self.maximum)}"

    def _key(self) -> tuple[object, ...]:
        return (self.bounds,)


class AnyTimesMatcher(TimesCalledMatcher):
    """Accept any number of calls, including none."""

    __slots__ = ()

    def matches(self, count: int) -> bool:
        return True

    def attempt(self, count: int) -> bool:
        return True

    def terminal(self, count: int) -> bool:
        return False

    @property
    def description(self) -> str:
        return "any number of times"


class ProcMatcher(TimesCalledMatcher):
    """Delegate count matching to a user-supplied predicate."""

    __slots__ = ("func",)

    def __init__(self, func: t.Callable[[int], object]) -> None:
        self.func = func

    def matches(self, count: int) -> bool:
        return bool(self.func(count))

    def attempt(self, count: int) -> bool:
        return True

    def terminal(self, count: int) -> bool:
        return False

    @property
    def description(self) -> str:
        return f"a count satisfying {self.func!r}"

    def _key(self) -> tuple[object, ...]:
        return (self.func,)


TimesValue = int | range | t.Callable[[int], object] | TimesCalledMatcher


def create_times_matcher(value: TimesValue) -> TimesCalledMatcher:
    """Build the matcher described by *value*."""
    if isinstance(value, TimesCalledMatcher):
        return value
    if isinstance(value, bool):
        msg = f"Cannot build a times matcher from {value!r}"
        raise ArgumentError(msg)
    if isinstance(value, int):
        return IntegerMatcher(value)
    if isinstance(value, range):
        return RangeMatcher(value)
    if callable(value):
        return ProcMatcher(value)
    msg = f"Cannot build a times matcher from {value!r}"
    raise ArgumentError(msg)


__all__ = [
    "AnyTimesMatcher",
    "AtLeastMatcher",
    "AtMostMatcher",
    "IntegerMatcher",
    "ProcMatcher",
    "RangeMatcher",
    "TimesCalledMatcher",
    "TimesValue",
    "create_times_matcher",
]
