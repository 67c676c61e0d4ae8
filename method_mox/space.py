"""Space: the registry that owns every double for a test run."""

from __future__ import annotations

import logging
import typing as t

from .double import Double
from .errors import OrderError
from .formatting import bulleted
from .scenario import Scenario

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    import types

logger = logging.getLogger(__name__)


class Space:
    """Map ``(subject, method_name)`` pairs to doubles and enforce ordering.

    A space is normally scoped to one test. It can be used as a context
    manager, in which case leaving the block verifies every double (unless the
    block raised) and always restores the patched methods::

        with Space() as space:
            space.mock(client, "fetch").with_args("a").returns(1)
            assert client.fetch("a") == 1

    :meth:`instance` returns a process-wide default space for callers that do
    not thread a space through explicitly.
    """

    _instance: t.ClassVar[Space | None] = None

    @classmethod
    def instance(cls) -> Space:
        """Return the default space, creating it on first use."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset every double in the default space and discard it."""
        space, cls._instance = cls._instance, None
        if space is not None:
            space.reset_all()

    def __init__(self, *, verify_on_exit: bool = True) -> None:
        """Create an empty space.

        Parameters
        ----------
        verify_on_exit:
            When ``True`` (the default), :meth:`__exit__` calls
            :meth:`verify_all` if the ``with`` block completed normally. The
            doubles are reset on exit either way.
        """
        self._verify_on_exit = verify_on_exit
        self.doubles: dict[int, dict[str, Double]] = {}
        self.ordered_scenarios: list[Scenario] = []

    def __repr__(self) -> str:
        count = sum(len(methods) for methods in self.doubles.values())
        return f"<Space doubles={count} ordered={len(self.ordered_scenarios)}>"

    # ------------------------------------------------------------------
    # Context manager protocol
    # ------------------------------------------------------------------
    def __enter__(self) -> Space:
        """Return the space itself."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        """Verify on a clean exit; always reset."""
        if self._verify_on_exit and exc_type is None:
            self.verify_all()
        else:
            self.reset_all()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def register_double(self, subject: object, method_name: str) -> Double:
        """Return the double for ``subject.method_name``, binding a new one."""
        methods = self.doubles.setdefault(id(subject), {})
        double = methods.get(method_name)
        if double is not None:
            if double.is_bound:
                return double
            self._forget_ordered(double)

        double = Double(self, subject, method_name)
        methods[method_name] = double
        double.bind()
        logger.debug("Registered double %r", double)
        return double

    def double_for(self, subject: object, method_name: str) -> Double | None:
        """Return the registered double for the pair, if any."""
        return self.doubles.get(id(subject), {}).get(method_name)

    def create_scenario(self, double: Double) -> Scenario:
        """Create a scenario and append it to *double*."""
        scenario = Scenario(self, double)
        double.register_scenario(scenario)
        return scenario

    def all_doubles(self) -> list[Double]:
        """Return every registered double."""
        return [dbl for methods in self.doubles.values() for dbl in methods.values()]

    # ------------------------------------------------------------------
    # Declaration facade
    # ------------------------------------------------------------------
    def define(self, subject: object, method_name: str) -> Scenario:
        """Declare a bare scenario for ``subject.method_name``."""
        return self.create_scenario(self.register_double(subject, method_name))

    def mock(self, subject: object, method_name: str) -> Scenario:
        """Declare a scenario expected to be called once with any arguments."""
        return self.define(subject, method_name).with_any_args().once()

    def stub(self, subject: object, method_name: str) -> Scenario:
        """Declare a scenario that accepts any call any number of times."""
        return self.define(subject, method_name).with_any_args().any_number_of_times()

    def probe(self, subject: object, method_name: str) -> Scenario:
        """Declare a scenario that records calls and forwards them."""
        return (
            self.define(subject, method_name)
            .with_any_args()
            .any_number_of_times()
            .implemented_by_original_method()
        )

    def do_not_allow(self, subject: object, method_name: str) -> Scenario:
        """Declare a scenario that fails as soon as a matching call arrives."""
        return self.define(subject, method_name).with_any_args().never()

    # ------------------------------------------------------------------
    # Ordering
    # ------------------------------------------------------------------
    def register_ordered_scenario(self, scenario: Scenario) -> None:
        """Append *scenario* to the global ordering queue."""
        self.ordered_scenarios.append(scenario)

    def ensure_ordered_head(self, scenario: Scenario) -> None:
        """Raise :class:`OrderError` unless *scenario* is next in order."""
        if self.ordered_scenarios and self.ordered_scenarios[0] is scenario:
            return
        call = scenario.formatted_name()
        expected = [s.formatted_name() for s in self.ordered_scenarios]
        msg = f"{call} called out of order in list\n{bulleted(expected)}"
        raise OrderError(msg, call=call, expected_order=expected)

    def verify_ordered_scenario(self, scenario: Scenario) -> Scenario:
        """Ensure *scenario* is next in order, popping it once satisfied.

        Scenarios call this after counting a completed call, so the queue only
        advances past calls that actually happened.
        """
        self.ensure_ordered_head(scenario)
        if scenario.times_called_verified():
            self.ordered_scenarios.pop(0)
        return scenario

    # ------------------------------------------------------------------
    # Verification and reset
    # ------------------------------------------------------------------
    def verify_double(self, subject: object, method_name: str) -> None:
        """Verify the double for the pair, then reset it regardless."""
        double = self._require_double(subject, method_name)
        try:
            double.verify()
        finally:
            self.reset_double(subject, method_name)

    def reset_double(self, subject: object, method_name: str) -> None:
        """Restore the pair's original method and forget its double."""
        methods = self.doubles.get(id(subject))
        if methods is None or method_name not in methods:
            return
        double = methods.pop(method_name)
        if not methods:
            del self.doubles[id(subject)]
        self._forget_ordered(double)
        double.reset()
        logger.debug("Reset double %s on %r", method_name, subject)

    def verify_all(self) -> None:
        """Verify and reset every double, raising the first failure at the end."""
        first_error: Exception | None = None
        for double in self.all_doubles():
            try:
                self.verify_double(double.subject, double.method_name)
            except Exception as err:  # noqa: BLE001 - re-raised after cleanup
                logger.debug("Verification failed for %r: %s", double, err)
                if first_error is None:
                    first_error = err
        self.ordered_scenarios.clear()
        if first_error is not None:
            raise first_error

    def reset_all(self) -> None:
        """Reset every double and clear the ordering queue."""
        for double in self.all_doubles():
            self.reset_double(double.subject, double.method_name)
        self.ordered_scenarios.clear()

    def _forget_ordered(self, double: Double) -> None:
        self.ordered_scenarios = [
            s for s in self.ordered_scenarios if s.double is not double
        ]

    def _require_double(self, subject: object, method_name: str) -> Double:
        double = self.double_for(subject, method_name)
        if double is None:
            msg = f"No double registered for {method_name!r} on {subject!r}"
            raise KeyError(msg)
        return double


__all__ = ["Space"]
