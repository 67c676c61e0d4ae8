"""Per-method dispatcher owning the scenarios declared for that method."""

from __future__ import annotations

import logging
import typing as t

from .errors import NoMatchingScenarioError
from .formatting import describe_scenarios, format_call
from .rebinder import rebinder_for

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .rebinder import Capture, MethodRebinder
    from .scenario import Scenario
    from .space import Space

logger = logging.getLogger(__name__)


class Double:
    """Intercept one method of one subject and dispatch calls to scenarios.

    The double is bound when the :class:`~method_mox.space.Space` creates it:
    from then on ``subject.method_name`` routes through :meth:`call` until
    :meth:`reset` restores the original.
    """

    def __init__(
        self,
        space: Space,
        subject: object,
        method_name: str,
        *,
        rebinder: MethodRebinder | None = None,
    ) -> None:
        self.space = space
        self.subject = subject
        self.method_name = method_name
        self.scenarios: list[Scenario] = []
        self._rebinder = rebinder if rebinder is not None else rebinder_for(subject)
        self._capture: Capture | None = None

    def __repr__(self) -> str:
        return (
            f"<Double {self.method_name} on {self.subject!r} "
            f"scenarios={len(self.scenarios)}>"
        )

    # ------------------------------------------------------------------
    # Binding
    # ------------------------------------------------------------------
    @property
    def is_bound(self) -> bool:
        """Return ``True`` while the interception is installed."""
        return self._capture is not None and not self._capture.restored

    @property
    def original_method_available(self) -> bool:
        """Return ``True`` when the subject resolved the method before binding."""
        return self._capture is not None and self._capture.original_available

    def bind(self) -> None:
        """Install the dispatch handler on the subject."""
        if self.is_bound:
            return
        self._capture = self._rebinder.intercept(
            self.subject, self.method_name, self._make_handler()
        )

    def _make_handler(self) -> t.Callable[..., object]:
        def dispatch(*args: object, **kwargs: object) -> object:
            return self.call(*args, **kwargs)

        dispatch.__name__ = self.method_name
        dispatch.__qualname__ = f"Double.{self.method_name}"
        return dispatch

    def register_scenario(self, scenario: Scenario) -> None:
        """Append *scenario*; declaration order decides matching precedence."""
        scenario.double = self
        self.scenarios.append(scenario)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def call(self, *args: object, **kwargs: object) -> object:
        """Dispatch a call on the doubled method."""
        scenario = self.find_scenario_to_attempt(args, kwargs)
        if scenario is None:
            call = format_call(self.method_name, args, kwargs)
            msg = (
                f"Unexpected method invocation {call}, expected\n"
                f"{describe_scenarios(self.scenarios)}"
            )
            raise NoMatchingScenarioError(msg, call=call, scenarios=self.scenarios)
        return scenario.call(args, kwargs)

    def find_scenario_to_attempt(
        self, args: t.Sequence[object], kwargs: t.Mapping[str, object]
    ) -> Scenario | None:
        """Select the scenario that should handle a call.

        Exact matches that still accept a call win, then wildcard matches that
        still accept a call, each in declaration order. When every matching
        scenario is exhausted, the first of them is returned anyway so the
        caller reports a times-called error against it.
        """
        declared = [s for s in self.scenarios if s.argument_expectation is not None]
        exact = [s for s in declared if s.exact_match(args, kwargs)]
        for scenario in exact:
            if scenario.attempt():
                logger.debug("Exact match for %s: %r", self.method_name, scenario)
                return scenario
        wildcard = [s for s in declared if s.wildcard_match(args, kwargs)]
        for scenario in wildcard:
            if scenario.attempt():
                logger.debug("Wildcard match for %s: %r", self.method_name, scenario)
                return scenario
        exhausted = exact or wildcard
        if exhausted:
            return exhausted[0]
        return None

    def call_original(self, *args: object, **kwargs: object) -> object:
        """Call the method the double replaced."""
        if not self.original_method_available:
            msg = f"{self.subject!r} has no original method {self.method_name!r}"
            raise AttributeError(msg)
        capture = t.cast("Capture", self._capture)
        original = t.cast("t.Callable[..., object]", capture.original)
        return original(*args, **kwargs)

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------
    def verify(self) -> None:
        """Check every scenario's call count, then reset the double."""
        try:
            for scenario in self.scenarios:
                scenario.verify()
        finally:
            self.reset()

    def reset(self) -> None:
        """Restore the original method and discard all scenarios."""
        if self._capture is not None:
            self._rebinder.restore(self._capture)
        self.scenarios.clear()

    def formatted_name(self) -> str:
        """Return ``method_name(args)`` using the first scenario's arguments."""
        if not self.scenarios:
            return format_call(self.method_name)
        return self.scenarios[0].formatted_name()


__all__ = ["Double"]
