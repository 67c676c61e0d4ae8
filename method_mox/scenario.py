"""Scenario definitions: one declared behaviour of a doubled method."""

from __future__ import annotations

import logging
import typing as t

from .errors import ArgumentError, DefinitionError, TimesCalledError
from .expectations import AnyArgumentExpectation, ArgumentEqualityExpectation
from .formatting import format_call
from .implementations import Constant, DelegateToOriginal, Function
from .times_called import (
    AnyTimesMatcher,
    AtLeastMatcher,
    AtMostMatcher,
    IntegerMatcher,
    create_times_matcher,
)

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .double import Double
    from .expectations import ArgumentExpectation
    from .implementations import Implementation
    from .space import Space
    from .times_called import TimesCalledMatcher, TimesValue

logger = logging.getLogger(__name__)

Block = t.Callable[..., object]

_YIELDS_WITHOUT_BLOCK = "A Block must be passed into the method call when using yields"


class Scenario:
    """Pair an argument pattern with a call-count rule and an implementation.

    Configuration methods return the scenario itself so declarations chain::

        space.mock(repo, "fetch").with_args(42).returns("row").once()

    Several configuration methods accept a keyword-only ``block``. It plays
    the role of a trailing block: it becomes an after-call hook when the
    scenario delegates to the original method, and the return implementation
    otherwise.
    """

    def __init__(self, space: Space, double: Double | None = None) -> None:
        self.space = space
        self.double = double
        self.argument_expectation: ArgumentExpectation | None = None
        self.times_matcher: TimesCalledMatcher | None = None
        self.implementation: Implementation | None = None
        self.yields_values: tuple[object, ...] | None = None
        self.after_call_hook: Block | None = None
        self.is_ordered = False
        self.is_verbose = False
        self.call_count = 0

    def __repr__(self) -> str:
        return f"<Scenario {self.formatted_name()} called={self.call_count}>"

    # ------------------------------------------------------------------
    # Argument expectations
    # ------------------------------------------------------------------
    def with_args(self, *args: object, **kwargs: object) -> Scenario:
        """Expect the call to receive exactly ``args`` and ``kwargs``.

        Every keyword is part of the expected call, ``block`` included, so
        this is the one argument clause without a chain block. Follow it with
        ``returns(block=...)`` instead.
        """
        self.argument_expectation = ArgumentEqualityExpectation(*args, **kwargs)
        return self

    def with_any_args(self, *, block: Block | None = None) -> Scenario:
        """Accept any arguments as a wildcard match."""
        self.argument_expectation = AnyArgumentExpectation()
        self._install_block(block)
        return self

    def with_no_args(self, *, block: Block | None = None) -> Scenario:
        """Expect the call to receive no arguments."""
        self.argument_expectation = ArgumentEqualityExpectation()
        self._install_block(block)
        return self

    # ------------------------------------------------------------------
    # Call counts
    # ------------------------------------------------------------------
    def never(self) -> Scenario:
        """Expect the method never to be called."""
        self.times_matcher = IntegerMatcher(0)
        return self

    def once(self, *, block: Block | None = None) -> Scenario:
        """Expect exactly one call."""
        self.times_matcher = IntegerMatcher(1)
        self._install_block(block)
        return self

    def twice(self, *, block: Block | None = None) -> Scenario:
        """Expect exactly two calls."""
        self.times_matcher = IntegerMatcher(2)
        self._install_block(block)
        return self

    def at_least(self, count: int, *, block: Block | None = None) -> Scenario:
        """Expect ``count`` calls or more."""
        self.times_matcher = AtLeastMatcher(count)
        self._install_block(block)
        return self

    def at_most(self, count: int, *, block: Block | None = None) -> Scenario:
        """Expect no more than ``count`` calls."""
        self.times_matcher = AtMostMatcher(count)
        self._install_block(block)
        return self

    def times(self, value: TimesValue, *, block: Block | None = None) -> Scenario:
        """Expect a call count described by an int, range, predicate or matcher."""
        self.times_matcher = create_times_matcher(value)
        self._install_block(block)
        return self

    def any_number_of_times(self, *, block: Block | None = None) -> Scenario:
        """Accept any number of calls."""
        self.times_matcher = AnyTimesMatcher()
        self._install_block(block)
        return self

    # ------------------------------------------------------------------
    # Behaviour
    # ------------------------------------------------------------------
    def returns(self, *value: object, block: Block | None = None) -> Scenario:
        """Return ``value`` from each call, or the result of ``block``."""
        if len(value) > 1:
            msg = "returns accepts at most one value"
            raise ArgumentError(msg)
        if value and block is not None:
            msg = "returns cannot accept both an argument and a block"
            raise ArgumentError(msg)
        if block is not None:
            self.implementation = Function(block)
        else:
            self.implementation = Constant(value[0] if value else None)
        return self

    def implemented_by(self, implementation: Block | Implementation) -> Scenario:
        """Run ``implementation`` with the call arguments."""
        if isinstance(implementation, Constant | Function | DelegateToOriginal):
            self.implementation = implementation
        elif callable(implementation):
            self.implementation = Function(implementation)
        else:
            msg = f"implemented_by expects a callable, got {implementation!r}"
            raise ArgumentError(msg)
        return self

    def implemented_by_original_method(self) -> Scenario:
        """Forward calls to the method that was replaced."""
        self.implementation = DelegateToOriginal()
        return self

    def yields(self, *values: object, block: Block | None = None) -> Scenario:
        """Call the caller's block with ``values`` on each call."""
        self.yields_values = values
        self._install_block(block)
        return self

    def after_call(self, hook: Block | None = None) -> Scenario:
        """Replace the computed return value with ``hook(value)``."""
        if hook is None:
            msg = "after_call expects a block"
            raise ArgumentError(msg)
        self.after_call_hook = hook
        return self

    def verbose(self, hook: Block | None = None) -> Scenario:
        """Log every dispatch of this scenario at INFO level."""
        self.is_verbose = True
        if hook is not None:
            self.after_call_hook = hook
        return self

    def ordered(self, *, block: Block | None = None) -> Scenario:
        """Require this scenario to fire in declaration order with its peers."""
        if self.double is None:
            msg = (
                "Scenarios must have a dedicated Double to be ordered; "
                f"{self!r} is not bound to a method"
            )
            raise DefinitionError(msg)
        if not self.is_ordered:
            self.is_ordered = True
            self.space.register_ordered_scenario(self)
        self._install_block(block)
        return self

    then = ordered

    def _install_block(self, block: Block | None) -> None:
        if block is None:
            return
        if self.implementation_is_original_method:
            self.after_call(block)
        else:
            self.returns(block=block)

    # ------------------------------------------------------------------
    # State queries
    # ------------------------------------------------------------------
    @property
    def method_name(self) -> str:
        """Return the doubled method's name, if bound."""
        if self.double is None:
            return "<unbound>"
        return self.double.method_name

    @property
    def expected_arguments(self) -> tuple[object, ...]:
        """Return the declared positional arguments, or an empty tuple."""
        if self.argument_expectation is None:
            return ()
        return tuple(self.argument_expectation.expected_arguments)

    @property
    def expected_keywords(self) -> dict[str, object]:
        """Return the declared keyword arguments, or an empty mapping."""
        if self.argument_expectation is None:
            return {}
        return dict(self.argument_expectation.expected_keywords)

    @property
    def implementation_is_original_method(self) -> bool:
        """Return ``True`` when calls are forwarded to the original method."""
        return isinstance(self.implementation, DelegateToOriginal)

    def exact_match(
        self, args: t.Sequence[object], kwargs: t.Mapping[str, object] | None = None
    ) -> bool:
        """Return ``True`` when the call arguments equal the declared ones."""
        expectation = self._require_argument_expectation()
        return expectation.exact_match(self._matched_args(args), kwargs)

    def wildcard_match(
        self, args: t.Sequence[object], kwargs: t.Mapping[str, object] | None = None
    ) -> bool:
        """Return ``True`` when the call arguments satisfy the declared ones."""
        expectation = self._require_argument_expectation()
        return expectation.wildcard_match(self._matched_args(args), kwargs)

    def _matched_args(self, args: t.Sequence[object]) -> t.Sequence[object]:
        # The caller's block is not part of the argument pattern when yielding.
        if self.yields_values is not None and args and callable(args[-1]):
            return args[:-1]
        return args

    def attempt(self) -> bool:
        """Return ``True`` when one more call is acceptable."""
        if self.times_matcher is None:
            return True
        return self.times_matcher.attempt(self.call_count)

    def terminal(self) -> bool:
        """Return ``True`` when the call count is at its ceiling."""
        if self.times_matcher is None:
            msg = f"times_matcher must be defined on {self!r}"
            raise DefinitionError(msg)
        return self.times_matcher.terminal(self.call_count)

    def times_called_verified(self, count: int | None = None) -> bool:
        """Return ``True`` when ``count`` (default: current) satisfies the matcher."""
        if self.times_matcher is None:
            return True
        return self.times_matcher.matches(self.call_count if count is None else count)

    def formatted_name(self) -> str:
        """Return ``method_name(expected, arguments)``."""
        return format_call(
            self.method_name, self.expected_arguments, self.expected_keywords
        )

    def _require_argument_expectation(self) -> ArgumentExpectation:
        if self.argument_expectation is None:
            msg = f"argument_expectation must be defined on {self!r}"
            raise DefinitionError(msg)
        return self.argument_expectation

    def _expected_description(self) -> str:
        if self.times_matcher is None:
            return AnyTimesMatcher().description
        return self.times_matcher.description

    # ------------------------------------------------------------------
    # Dispatch and verification
    # ------------------------------------------------------------------
    def call(
        self, args: tuple[object, ...], kwargs: dict[str, object]
    ) -> object:
        """Run this scenario for a call already matched to it."""
        if not self.attempt():
            raise TimesCalledError(
                self.formatted_name(), self.call_count + 1, self._expected_description()
            )
        if self.is_ordered:
            self.space.ensure_ordered_head(self)

        block = self._caller_block(args)
        value = self._compute_value(args, kwargs)
        if self.yields_values is not None:
            block_result = t.cast("Block", block)(*self.yields_values)
            if self.implementation is None:
                value = block_result
        if self.after_call_hook is not None:
            value = self.after_call_hook(value)

        self.call_count += 1
        if self.is_ordered:
            self.space.verify_ordered_scenario(self)
        if self.is_verbose:
            logger.info(
                "%s returned %r (call %d)",
                format_call(self.method_name, args, kwargs),
                value,
                self.call_count,
            )
        return value

    def _caller_block(self, args: tuple[object, ...]) -> Block | None:
        block = args[-1] if args and callable(args[-1]) else None
        if self.yields_values is not None and block is None:
            raise ArgumentError(_YIELDS_WITHOUT_BLOCK)
        return t.cast("Block | None", block)

    def _compute_value(
        self, args: tuple[object, ...], kwargs: dict[str, object]
    ) -> object:
        implementation = self.implementation
        if isinstance(implementation, DelegateToOriginal):
            if self.double is None:
                msg = f"{self!r} cannot delegate without a Double"
                raise DefinitionError(msg)
            return self.double.call_original(*args, **kwargs)
        if isinstance(implementation, Constant):
            return implementation.value
        if isinstance(implementation, Function):
            return implementation.func(*args, **kwargs)
        return None

    def verify(self) -> None:
        """Raise :class:`TimesCalledError` unless the call count is satisfied."""
        if self.times_called_verified():
            return
        raise TimesCalledError(
            self.formatted_name(), self.call_count, self._expected_description()
        )


__all__ = ["Block", "Scenario"]
