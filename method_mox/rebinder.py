"""Install and remove method replacements on live objects.

A rebinder swaps a subject's attribute for a dispatch handler and records
enough about the previous state to undo the swap later. Two strategies exist:

* :class:`InstanceRebinder` writes into the subject's own ``__dict__``. It
  serves plain instances and modules. Removing the entry re-exposes the class
  attribute, or the subject's ``__getattr__`` hook, exactly as before.
* :class:`ClassRebinder` replaces the attribute on a class. The handler is
  installed as a ``staticmethod`` so it receives the same arguments whether it
  is reached through the class or through an instance, and the raw
  ``__dict__`` entry is saved so ``classmethod`` and ``staticmethod``
  descriptors survive restoration.
"""

from __future__ import annotations

import dataclasses as dc
import inspect
import logging
import typing as t

from .errors import ArgumentError

logger = logging.getLogger(__name__)


class _Missing:
    """Sentinel type for attributes that did not exist."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: t.Final = _Missing()


@dc.dataclass(slots=True)
class Capture:
    """State recorded when a method is intercepted."""

    subject: object
    method_name: str
    saved: object
    original: object
    static: bool
    restored: bool = False

    @property
    def original_available(self) -> bool:
        """Return ``True`` when the subject could resolve the method before."""
        return self.original is not MISSING

    @property
    def dynamic(self) -> bool:
        """Return ``True`` when the original came from dynamic resolution."""
        return self.original_available and not self.static


class MethodRebinder(t.Protocol):
    """Strategy for swapping a method on a subject."""

    def intercept(
        self, subject: object, method_name: str, handler: t.Callable[..., object]
    ) -> Capture:
        """Install *handler* as ``subject.method_name``."""
        ...

    def restore(self, capture: Capture) -> None:
        """Undo the interception described by *capture*."""
        ...


def _probe(subject: object, method_name: str) -> tuple[object, bool]:
    """Return ``(original, static)`` for ``subject.method_name``.

    ``static`` reports whether a lookup that bypasses ``__getattr__`` finds
    the attribute. When it does not, the regular lookup is still attempted so
    subjects that resolve names dynamically keep a usable original.
    """
    try:
        inspect.getattr_static(subject, method_name)
    except AttributeError:
        static = False
    else:
        static = True
    try:
        original = getattr(subject, method_name)
    except AttributeError:
        original = MISSING
    return original, static


class InstanceRebinder:
    """Rebind methods through the subject's own ``__dict__``."""

    def intercept(
        self, subject: object, method_name: str, handler: t.Callable[..., object]
    ) -> Capture:
        """Store *handler* in ``vars(subject)``."""
        namespace = self._namespace(subject)
        original, static = _probe(subject, method_name)
        capture = Capture(
            subject=subject,
            method_name=method_name,
            saved=namespace.get(method_name, MISSING),
            original=original,
            static=static,
        )
        namespace[method_name] = handler
        logger.debug(
            "Intercepted %s on %r (original available: %s, dynamic: %s)",
            method_name,
            subject,
            capture.original_available,
            capture.dynamic,
        )
        return capture

    def restore(self, capture: Capture) -> None:
        """Remove the handler, or put back the subject's own attribute."""
        if capture.restored:
            return
        namespace = self._namespace(capture.subject)
        if capture.saved is MISSING:
            namespace.pop(capture.method_name, None)
        else:
            namespace[capture.method_name] = capture.saved
        capture.restored = True
        logger.debug("Restored %s on %r", capture.method_name, capture.subject)

    @staticmethod
    def _namespace(subject: object) -> dict[str, object]:
        namespace = getattr(subject, "__dict__", None)
        if not isinstance(namespace, dict):
            msg = (
                f"Cannot intercept methods on {subject!r}: "
                "it has no writable __dict__"
            )
            raise ArgumentError(msg)
        return namespace


class ClassRebinder:
    """Rebind methods on a class object."""

    def intercept(
        self, subject: object, method_name: str, handler: t.Callable[..., object]
    ) -> Capture:
        """Install *handler* on the class as a ``staticmethod``."""
        cls = t.cast("type", subject)
        original, static = _probe(cls, method_name)
        capture = Capture(
            subject=cls,
            method_name=method_name,
            saved=cls.__dict__.get(method_name, MISSING),
            original=original,
            static=static,
        )
        setattr(cls, method_name, staticmethod(handler))
        logger.debug(
            "Intercepted %s on class %s (original available: %s)",
            method_name,
            cls.__qualname__,
            capture.original_available,
        )
        return capture

    def restore(self, capture: Capture) -> None:
        """Reinstate the saved class attribute, or delete the handler."""
        if capture.restored:
            return
        cls = t.cast("type", capture.subject)
        if capture.saved is MISSING:
            if capture.method_name in cls.__dict__:
                delattr(cls, capture.method_name)
        else:
            setattr(cls, capture.method_name, capture.saved)
        capture.restored = True
        logger.debug("Restored %s on class %s", capture.method_name, cls.__qualname__)


def rebinder_for(subject: object) -> MethodRebinder:
    """Return the rebinding strategy suited to *subject*."""
    if isinstance(subject, type):
        return ClassRebinder()
    return InstanceRebinder()


__all__ = [
    "MISSING",
    "Capture",
    "ClassRebinder",
    "InstanceRebinder",
    "MethodRebinder",
    "rebinder_for",
]
