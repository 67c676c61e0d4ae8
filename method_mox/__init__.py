"""Python-native method doubles built around a declare-call-verify lifecycle.

A :class:`Space` owns one :class:`Double` per intercepted ``(subject,
method)`` pair. Each double dispatches calls to the :class:`Scenario`
declarations made against it, checking arguments, call counts and global call
order as it goes.
"""

from __future__ import annotations

from .comparators import Any, Comparator, Contains, IsA, Predicate, Regex, StartsWith
from .double import Double
from .errors import (
    ArgumentError,
    DefinitionError,
    MethodMoxError,
    NoMatchingScenarioError,
    OrderError,
    TimesCalledError,
    VerificationError,
)
from .expectations import AnyArgumentExpectation, ArgumentEqualityExpectation
from .implementations import Constant, DelegateToOriginal, Function
from .pytest_plugin import method_mox as method_mox_fixture
from .rebinder import Capture, ClassRebinder, InstanceRebinder, MethodRebinder
from .scenario import Scenario
from .space import Space
from .times_called import (
    AnyTimesMatcher,
    AtLeastMatcher,
    AtMostMatcher,
    IntegerMatcher,
    ProcMatcher,
    RangeMatcher,
    TimesCalledMatcher,
)

__all__ = [
    "Any",
    "AnyArgumentExpectation",
    "AnyTimesMatcher",
    "ArgumentEqualityExpectation",
    "ArgumentError",
    "AtLeastMatcher",
    "AtMostMatcher",
    "Capture",
    "ClassRebinder",
    "Comparator",
    "Constant",
    "Contains",
    "DefinitionError",
    "DelegateToOriginal",
    "Double",
    "Function",
    "InstanceRebinder",
    "IntegerMatcher",
    "IsA",
    "MethodMoxError",
    "MethodRebinder",
    "NoMatchingScenarioError",
    "OrderError",
    "Predicate",
    "ProcMatcher",
    "RangeMatcher",
    "Regex",
    "Scenario",
    "Space",
    "StartsWith",
    "TimesCalledError",
    "TimesCalledMatcher",
    "VerificationError",
    "method_mox_fixture",
]
