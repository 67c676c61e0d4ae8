"""Tagged implementation variants for scenarios."""

from __future__ import annotations

import dataclasses as dc
import typing as t


@dc.dataclass(slots=True, frozen=True)
class Constant:
    """Return ``value`` from every call."""

    value: object


@dc.dataclass(slots=True, frozen=True)
class Function:
    """Call ``func`` with the call arguments and return its result."""

    func: t.Callable[..., object]


@dc.dataclass(slots=True, frozen=True)
class DelegateToOriginal:
    """Forward the call to the method that was replaced."""


Implementation = Constant | Function | DelegateToOriginal

__all__ = ["Constant", "DelegateToOriginal", "Function", "Implementation"]
