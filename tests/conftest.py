"""
Shared test fixtures for relaunch tests.
"""

from pathlib import Path

import pytest
import structlog

from relaunch.core.config import Config
from relaunch.core.interpolate import VariableScope
from relaunch.core.launcher import build_invocation, parse_argv


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo any structlog configuration a test installed."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Hide user and env configs so only files under tmp_path are seen."""
    monkeypatch.setattr("relaunch.core.config.USER_CONFIG", tmp_path / "no-user-config")
    monkeypatch.delenv("RELAUNCH_CONFIG", raising=False)
    return tmp_path


@pytest.fixture
def scope():
    """Factory for a VariableScope with a fixed, fake environment."""

    def _make(overrides: dict | None = None, environ: dict | None = None) -> VariableScope:
        return VariableScope(overrides or {}, environ or {})

    return _make


@pytest.fixture
def launch(tmp_path):
    """Return a wrapper resolving argv into an Invocation with a fake environment."""

    def _launch(
        argv: list[str],
        config: Config | None = None,
        environ: dict | None = None,
        cwd: Path | None = None,
    ):
        if config is None:
            config = Config()
        if cwd is None:
            cwd = tmp_path
        return build_invocation(parse_argv(argv), config, environ or {}, cwd)

    return _launch
