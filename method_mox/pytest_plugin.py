"""Pytest plugin providing the ``method_mox`` fixture."""

from __future__ import annotations

import logging
import typing as t

import pytest

from .space import Space

logger = logging.getLogger(__name__)


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line and ini options for the plugin."""
    group = parser.getgroup("method_mox")
    group.addoption(
        "--method-mox-verify",
        action="store_true",
        dest="method_mox_verify",
        default=None,
        help=(
            "Verify every double declared through the method_mox fixture "
            "during teardown. Overrides the pytest.ini setting."
        ),
    )
    group.addoption(
        "--no-method-mox-verify",
        action="store_false",
        dest="method_mox_verify",
        default=None,
        help=(
            "Only reset doubles during teardown, without verifying them. "
            "Overrides the pytest.ini setting."
        ),
    )
    parser.addini(
        "method_mox_verify_on_teardown",
        "Verify doubles declared through the method_mox fixture during teardown.",
        type="bool",
        default=True,
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register plugin-specific markers."""
    config.addinivalue_line(
        "markers",
        (
            "method_mox(verify: bool = True): override teardown verification "
            "for a single test."
        ),
    )


class _MethodMoxItem(t.Protocol):
    """pytest item carrying method_mox teardown metadata."""

    _method_mox_verify_error: Exception | None


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(
    item: pytest.Item, call: pytest.CallInfo[t.Any]
) -> t.Generator[None, None, None]:
    """Attach each phase report to the item so teardown can inspect it."""
    del call
    outcome = yield
    rep = outcome.get_result()
    setattr(item, f"rep_{rep.when}", rep)
    if rep.when == "teardown":
        _apply_deferred_verify_failure(item, rep)


def _verify_enabled(request: pytest.FixtureRequest) -> bool:
    """Return whether the fixture should verify doubles at teardown.

    A per-test override wins, then the command line, then the ini file.
    """
    override = _per_test_verify(request)
    if override is not None:
        return override
    cli_value = request.config.getoption("method_mox_verify")
    if cli_value is None:
        return bool(request.config.getini("method_mox_verify_on_teardown"))
    return bool(cli_value)


def _per_test_verify(request: pytest.FixtureRequest) -> bool | None:
    """Return the marker's ``verify``, else the indirect fixture param, if set."""
    marker = request.node.get_closest_marker("method_mox")
    if marker is not None and "verify" in marker.kwargs:
        return bool(marker.kwargs["verify"])
    param = getattr(request, "param", None)
    if param is None or isinstance(param, bool):
        return param
    if isinstance(param, dict) and "verify" in param:
        return bool(param["verify"])
    if isinstance(param, dict):
        detail = f"got keys: {list(param)}"
    else:
        detail = f"got {type(param).__name__}"
    msg = f"method_mox fixture param must be a bool or dict with 'verify' key, {detail}"
    raise TypeError(msg)


def _apply_deferred_verify_failure(
    item: pytest.Item, report: pytest.TestReport
) -> None:
    """Report a verification error that was masked by a failing test body."""
    err: Exception | None = getattr(item, "_method_mox_verify_error", None)
    if err is None:
        return
    delattr(item, "_method_mox_verify_error")
    report.sections.append(("method_mox verification", f"{type(err).__name__}: {err}"))


@pytest.fixture
def method_mox(request: pytest.FixtureRequest) -> t.Generator[Space, None, None]:
    """Provide a fresh :class:`Space` that is verified and reset at teardown."""
    space = Space(verify_on_exit=False)
    should_verify = _verify_enabled(request)
    try:
        yield space
    finally:
        _teardown_space(request.node, space, should_verify=should_verify)


def _teardown_space(item: pytest.Item, space: Space, *, should_verify: bool) -> None:
    """Verify *space* when requested, always restoring every double."""
    failure: Exception | None = None
    if should_verify:
        try:
            space.verify_all()
        except Exception as err:
            logger.exception("Error during method_mox verification")
            failure = err
    try:
        space.reset_all()
    except Exception:
        logger.exception("Error during method_mox fixture cleanup")
        pytest.fail("method_mox fixture cleanup failed")
    if failure is None:
        return
    if _call_stage_failed(item):
        t.cast("_MethodMoxItem", item)._method_mox_verify_error = failure
        return
    pytest.fail(f"{type(failure).__name__}: {failure}")


def _call_stage_failed(item: pytest.Item) -> bool:
    """Return ``True`` when the test body has already failed."""
    rep_call = getattr(item, "rep_call", None)
    return bool(rep_call and rep_call.failed)
