"""Unit tests for :mod:`method_mox.scenario`."""

from __future__ import annotations

import typing as t

import pytest

from method_mox.errors import ArgumentError, DefinitionError, TimesCalledError
from method_mox.expectations import AnyArgumentExpectation, ArgumentEqualityExpectation
from method_mox.implementations import Constant, DelegateToOriginal, Function
from method_mox.scenario import Scenario
from method_mox.times_called import (
    AnyTimesMatcher,
    AtLeastMatcher,
    AtMostMatcher,
    IntegerMatcher,
    RangeMatcher,
)

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from method_mox.space import Space


@pytest.fixture
def scenario(space: Space, subject: object) -> Scenario:
    """Return a scenario bound to ``subject.foobar``."""
    return space.define(subject, "foobar")


@pytest.mark.parametrize(
    ("configure", "expected"),
    [
        (lambda s: s.never(), IntegerMatcher(0)),
        (lambda s: s.once(), IntegerMatcher(1)),
        (lambda s: s.twice(), IntegerMatcher(2)),
        (lambda s: s.at_least(2), AtLeastMatcher(2)),
        (lambda s: s.at_most(4), AtMostMatcher(4)),
        (lambda s: s.times(3), IntegerMatcher(3)),
        (lambda s: s.times(range(1, 3)), RangeMatcher(range(1, 3))),
        (lambda s: s.any_number_of_times(), AnyTimesMatcher()),
    ],
)
def test_times_chain_sets_matcher(
    scenario: Scenario,
    configure: t.Callable[[Scenario], Scenario],
    expected: object,
) -> None:
    """Each call-count method installs its matcher and returns the scenario."""
    assert configure(scenario) is scenario
    assert scenario.times_matcher == expected


def test_argument_chain_sets_expectation(scenario: Scenario) -> None:
    """with_args, with_any_args and with_no_args install expectations."""
    assert scenario.with_args(1, b=2) is scenario
    assert scenario.argument_expectation == ArgumentEqualityExpectation(1, b=2)
    assert scenario.with_any_args() is scenario
    assert scenario.argument_expectation == AnyArgumentExpectation()
    assert scenario.with_no_args() is scenario
    assert scenario.argument_expectation == ArgumentEqualityExpectation()


def test_with_args_treats_block_as_an_expected_keyword(scenario: Scenario) -> None:
    """A ``block`` keyword is matched against the call, not installed."""

    def callback() -> None:
        return None

    scenario.with_args(1, block=callback)
    assert scenario.expected_keywords == {"block": callback}
    assert scenario.implementation is None
    assert scenario.exact_match((1,), {"block": callback})
    assert not scenario.exact_match((1,))


def test_yielding_scenario_ignores_trailing_callback(scenario: Scenario) -> None:
    """Match queries drop the caller's block only when the scenario yields."""
    scenario.with_args(1, 2)
    assert not scenario.exact_match((1, 2, print))
    scenario.yields(55)
    assert scenario.exact_match((1, 2, print))
    assert scenario.wildcard_match((1, 2, print))
    assert scenario.exact_match((1, 2))


def test_match_queries_require_an_argument_expectation(scenario: Scenario) -> None:
    """Match queries before any with_* call are a definition error."""
    with pytest.raises(DefinitionError, match="argument_expectation must be defined"):
        scenario.exact_match(())
    with pytest.raises(DefinitionError):
        scenario.wildcard_match((1,))


def test_terminal_requires_a_times_matcher(scenario: Scenario) -> None:
    """terminal() without a times matcher is a definition error."""
    with pytest.raises(DefinitionError, match="times_matcher must be defined"):
        scenario.terminal()
    scenario.once()
    assert scenario.terminal() is False
    scenario.any_number_of_times()
    assert scenario.terminal() is False
    scenario.never()
    assert scenario.terminal() is True


def test_attempt_without_matcher_is_unconstrained(scenario: Scenario) -> None:
    """A scenario without a times matcher always accepts another call."""
    scenario.with_any_args()
    assert scenario.times_matcher is None
    assert scenario.attempt()
    assert scenario.times_called_verified()


def test_returns_sets_constant_or_function(scenario: Scenario) -> None:
    """returns() stores a constant, or a function when given a block."""
    scenario.returns(False)
    assert scenario.implementation == Constant(False)

    def block() -> str:
        return "baz"

    scenario.returns(block=block)
    assert scenario.implementation == Function(block)


def test_returns_rejects_value_and_block(scenario: Scenario) -> None:
    """returns() refuses both a value and a block."""
    with pytest.raises(
        ArgumentError, match="returns cannot accept both an argument and a block"
    ):
        scenario.returns("baz", block=lambda: "another")


def test_after_call_requires_a_hook(scenario: Scenario) -> None:
    """after_call() without a hook raises ArgumentError."""
    with pytest.raises(ArgumentError, match="after_call expects a block"):
        scenario.after_call()


def test_implemented_by_accepts_callables_only(scenario: Scenario) -> None:
    """implemented_by wraps callables and rejects other values."""
    scenario.implemented_by(len)
    assert scenario.implementation == Function(len)
    with pytest.raises(ArgumentError, match="expects a callable"):
        scenario.implemented_by(42)  # type: ignore[arg-type]


def test_block_becomes_return_implementation(scenario: Scenario) -> None:
    """A chain block sets the return implementation by default."""

    def block() -> str:
        return "value"

    scenario.with_any_args(block=block)
    assert scenario.implementation == Function(block)
    assert scenario.after_call_hook is None


def test_block_becomes_after_call_for_original_method(scenario: Scenario) -> None:
    """A chain block wraps the original's result when delegating."""

    def block(value: object) -> object:
        return value

    scenario.implemented_by_original_method().once(block=block)
    assert scenario.implementation == DelegateToOriginal()
    assert scenario.after_call_hook is block


def test_ordered_requires_a_double(space: Space) -> None:
    """Unbound scenarios cannot be ordered."""
    unbound = Scenario(space)
    with pytest.raises(DefinitionError, match="dedicated Double to be ordered"):
        unbound.ordered()


def test_ordered_registers_once(space: Space, scenario: Scenario) -> None:
    """Ordering twice does not enqueue the scenario twice."""
    assert scenario.ordered() is scenario
    scenario.then()
    assert scenario.is_ordered
    assert space.ordered_scenarios == [scenario]


def test_ordered_defaults_to_false(scenario: Scenario) -> None:
    """Scenarios are unordered until ordered() is called."""
    assert not scenario.is_ordered


def test_expected_arguments(scenario: Scenario) -> None:
    """expected_arguments reflects the declared arguments."""
    assert scenario.expected_arguments == ()
    scenario.with_args(1, 2)
    assert scenario.expected_arguments == (1, 2)


@pytest.mark.parametrize(
    ("configure", "formatted"),
    [
        (lambda s: s, "foobar()"),
        (lambda s: s.with_args(1, 2), "foobar(1, 2)"),
        (lambda s: s.with_args("a", flag=True), "foobar('a', flag=True)"),
        (lambda s: s.with_any_args(), "foobar()"),
    ],
)
def test_formatted_name(
    scenario: Scenario, configure: t.Callable[[Scenario], Scenario], formatted: str
) -> None:
    """formatted_name renders the method with its expected arguments."""
    configure(scenario)
    assert scenario.formatted_name() == formatted


def test_verify_reports_counts(scenario: Scenario) -> None:
    """verify() raises until the count satisfies the matcher."""
    scenario.with_any_args().twice().returns("value")
    with pytest.raises(TimesCalledError) as excinfo:
        scenario.verify()
    assert str(excinfo.value) == "foobar()\nCalled 0 times.\nExpected 2 times."
    scenario.call((), {})
    with pytest.raises(TimesCalledError, match="Called 1 time\\."):
        scenario.verify()
    scenario.call((), {})
    scenario.verify()
    scenario.verify()
    assert scenario.call_count == 2


def test_verify_without_matcher_never_raises(scenario: Scenario) -> None:
    """Scenarios without a times matcher always verify."""
    scenario.with_any_args()
    scenario.verify()
    scenario.call((), {})
    scenario.call((), {})
    scenario.verify()


def test_verbose_logs_each_dispatch(
    scenario: Scenario, caplog: pytest.LogCaptureFixture
) -> None:
    """Verbose scenarios log the call and its result."""
    scenario.with_any_args().returns(5).verbose()
    with caplog.at_level("INFO", logger="method_mox.scenario"):
        scenario.call((1,), {"x": 2})
    assert "foobar(1, x=2) returned 5 (call 1)" in caplog.text


def test_verbose_hook_replaces_value(scenario: Scenario) -> None:
    """verbose() accepts an after-call hook."""
    scenario.with_any_args().returns(5).verbose(lambda value: value * 2)
    assert scenario.call((), {}) == 10
