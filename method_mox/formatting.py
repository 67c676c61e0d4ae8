"""Rendering helpers for diagnostics."""

from __future__ import annotations

import typing as t

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .scenario import Scenario


def format_args(
    args: t.Sequence[object], kwargs: t.Mapping[str, object] | None = None
) -> str:
    """Return ``args`` and ``kwargs`` rendered as a call argument list."""
    parts = [repr(arg) for arg in args]
    if kwargs:
        parts.extend(f"{key}={value!r}" for key, value in kwargs.items())
    return ", ".join(parts)


def format_call(
    name: str,
    args: t.Sequence[object] = (),
    kwargs: t.Mapping[str, object] | None = None,
) -> str:
    """Return ``name(arg1, arg2, key=value)``."""
    return f"{name}({format_args(args, kwargs)})"


def bulleted(entries: t.Iterable[str]) -> str:
    """Render *entries* as ``- entry`` lines."""
    return "\n".join(f"- {entry}" for entry in entries)


def describe_scenarios(scenarios: t.Sequence[Scenario]) -> str:
    """Return one line per scenario for :class:`NoMatchingScenarioError`."""
    if not scenarios:
        return "(none)"
    return bulleted(scenario.formatted_name() for scenario in scenarios)


__all__ = ["bulleted", "describe_scenarios", "format_args", "format_call"]
