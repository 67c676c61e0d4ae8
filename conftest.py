"""Global test configuration and shared fixtures."""

from __future__ import annotations

import typing as t

import pytest

from method_mox.space import Space

pytest_plugins = ("method_mox.pytest_plugin",)


class Subject:
    """Plain object whose methods the tests intercept."""

    def foobar(self, a: object, b: object) -> list[object]:
        return [b, a]

    def greet(self, name: str) -> str:
        return f"hello {name}"


@pytest.fixture(autouse=True)
def reset_default_space() -> t.Generator[None, None, None]:
    """Ensure the process-wide ``Space`` never leaks doubles between tests."""
    Space.reset_instance()
    yield
    Space.reset_instance()


@pytest.fixture
def space() -> t.Generator[Space, None, None]:
    """Provide an isolated space that is reset after the test."""
    scoped = Space(verify_on_exit=False)
    yield scoped
    scoped.reset_all()


@pytest.fixture
def subject() -> Subject:
    """Provide a fresh subject instance."""
    return Subject()
