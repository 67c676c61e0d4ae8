"""Unit tests for times-called matchers."""

from __future__ import annotations

import dataclasses as dc

import pytest

from method_mox.errors import ArgumentError
from method_mox.times_called import (
    AnyTimesMatcher,
    AtLeastMatcher,
    AtMostMatcher,
    IntegerMatcher,
    ProcMatcher,
    RangeMatcher,
    TimesCalledMatcher,
    create_times_matcher,
)


@dc.dataclass(slots=True, frozen=True)
class MatcherCase:
    """Expected answers of a matcher at a given count."""

    matcher: TimesCalledMatcher
    count: int
    matches: bool
    attempt: bool
    terminal: bool


_RANGE = RangeMatcher(range(1, 4))

_CASES = [
    MatcherCase(IntegerMatcher(2), 0, matches=False, attempt=True, terminal=False),
    MatcherCase(IntegerMatcher(2), 1, matches=False, attempt=True, terminal=False),
    MatcherCase(IntegerMatcher(2), 2, matches=True, attempt=False, terminal=True),
    MatcherCase(IntegerMatcher(2), 3, matches=False, attempt=False, terminal=True),
    MatcherCase(IntegerMatcher(0), 0, matches=True, attempt=False, terminal=True),
    MatcherCase(AtLeastMatcher(2), 1, matches=False, attempt=True, terminal=False),
    MatcherCase(AtLeastMatcher(2), 2, matches=True, attempt=True, terminal=False),
    MatcherCase(AtLeastMatcher(2), 9, matches=True, attempt=True, terminal=False),
    MatcherCase(AtMostMatcher(2), 0, matches=True, attempt=True, terminal=False),
    MatcherCase(AtMostMatcher(2), 1, matches=True, attempt=True, terminal=False),
    MatcherCase(AtMostMatcher(2), 2, matches=True, attempt=False, terminal=True),
    MatcherCase(AtMostMatcher(2), 3, matches=False, attempt=False, terminal=True),
    MatcherCase(_RANGE, 0, matches=False, attempt=True, terminal=False),
    MatcherCase(_RANGE, 2, matches=True, attempt=True, terminal=False),
    MatcherCase(_RANGE, 3, matches=True, attempt=False, terminal=True),
    MatcherCase(_RANGE, 4, matches=False, attempt=False, terminal=True),
    MatcherCase(AnyTimesMatcher(), 0, matches=True, attempt=True, terminal=False),
    MatcherCase(AnyTimesMatcher(), 50, matches=True, attempt=True, terminal=False),
]


@pytest.mark.parametrize(
    "case", _CASES, ids=lambda case: f"{case.matcher!r}@{case.count}"
)
def test_matcher_answers(case: MatcherCase) -> None:
    """Each matcher answers matches/attempt/terminal consistently."""
    assert case.matcher.matches(case.count) is case.matches
    assert case.matcher.attempt(case.count) is case.attempt
    assert case.matcher.terminal(case.count) is case.terminal


@pytest.mark.parametrize(
    "matcher",
    [IntegerMatcher(3), AtMostMatcher(3), RangeMatcher(range(0, 4))],
    ids=repr,
)
def test_attempt_stops_exactly_at_the_ceiling(matcher: TimesCalledMatcher) -> None:
    """Bounded matchers accept calls up to their ceiling and never beyond."""
    accepted = 0
    while matcher.attempt(accepted):
        accepted += 1
    assert accepted == 3
    assert matcher.matches(accepted)
    assert matcher.terminal(accepted)


def test_proc_matcher_delegates_to_predicate() -> None:
    """ProcMatcher uses the predicate for matches and never stops calls."""
    matcher = ProcMatcher(lambda count: count % 2 == 0)
    assert matcher.matches(2)
    assert not matcher.matches(3)
    assert matcher.attempt(100)
    assert not matcher.terminal(100)


@pytest.mark.parametrize(
    ("matcher", "description"),
    [
        (IntegerMatcher(1), "1 time"),
        (IntegerMatcher(2), "2 times"),
        (AtLeastMatcher(1), "at least 1 time"),
        (AtMostMatcher(2), "at most 2 times"),
        (RangeMatcher(range(1, 4)), "between 1 and 3 times"),
        (AnyTimesMatcher(), "any number of times"),
    ],
)
def test_descriptions(matcher: TimesCalledMatcher, description: str) -> None:
    """Descriptions feed the ``Expected ...`` line of error messages."""
    assert matcher.description == description


def test_equality_is_structural() -> None:
    """Matchers of the same kind and bound compare equal."""
    assert AtLeastMatcher(2) == AtLeastMatcher(2)
    assert AtLeastMatcher(2) != AtLeastMatcher(3)
    assert AtLeastMatcher(2) != AtMostMatcher(2)
    assert AnyTimesMatcher() == AnyTimesMatcher()
    assert RangeMatcher(range(1, 3)) == RangeMatcher(range(1, 3))


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (3, IntegerMatcher(3)),
        (range(2, 5), RangeMatcher(range(2, 5))),
        (AtMostMatcher(4), AtMostMatcher(4)),
    ],
)
def test_create_times_matcher(value: object, expected: TimesCalledMatcher) -> None:
    """Ints, ranges and matchers map to the matching matcher type."""
    assert create_times_matcher(value) == expected  # type: ignore[arg-type]


def test_create_times_matcher_wraps_callables() -> None:
    """Callables become ProcMatchers."""
    matcher = create_times_matcher(lambda count: count > 1)
    assert isinstance(matcher, ProcMatcher)
    assert matcher.matches(2)


@pytest.mark.parametrize("value", ["3", 2.5, None, True])
def test_create_times_matcher_rejects_other_values(value: object) -> None:
    """Unsupported values raise ArgumentError."""
    with pytest.raises(ArgumentError, match="Cannot build a times matcher"):
        create_times_matcher(value)  # type: ignore[arg-type]


def test_negative_bounds_are_rejected() -> None:
    """Call-count bounds must be non-negative integers."""
    with pytest.raises(ValueError, match="times must be >= 0"):
        IntegerMatcher(-1)
    with pytest.raises(TypeError, match="times must be an integer"):
        AtLeastMatcher(True)


@pytest.mark.parametrize("bounds", [range(3, 3), range(0, 10, 2)])
def test_invalid_ranges_are_rejected(bounds: range) -> None:
    """Ranges must be non-empty and contiguous."""
    with pytest.raises(ArgumentError):
        RangeMatcher(bounds)
