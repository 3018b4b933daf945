"""Pytest configuration and fixtures.

Provides environment isolation and config cache resets. All fixtures here
are autouse unless noted.
"""

from __future__ import annotations

import os

import pytest

from failable.config import reset_config_cache
from tests.helpers import Probe

# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-out: @pytest.mark.allow_dotenv
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    monkeypatch.setattr("failable.config.load_dotenv", lambda *_args, **_kwargs: False)
    monkeypatch.setattr("failable.config._DOTENV_LOADED", False)


@pytest.fixture(autouse=True)
def isolate_failable_env(request, monkeypatch, tmp_path):
    """Ensure a clean configuration environment for each test.

    Clears FAILABLE_* variables and points pyproject lookup at an empty temp
    directory so the repository's own pyproject.toml never leaks in.
    Opt-out: @pytest.mark.allow_env_pollution
    """
    if not request.node.get_closest_marker("allow_env_pollution"):
        for key in list(os.environ.keys()):
            if key.startswith("FAILABLE_"):
                monkeypatch.delenv(key, raising=False)
        monkeypatch.setenv(
            "FAILABLE_PYPROJECT_PATH", str(tmp_path / "pyproject.toml")
        )

    reset_config_cache()
    yield
    reset_config_cache()


# =============================================================================
# Shared Fixtures
# =============================================================================


@pytest.fixture
def probe() -> Probe:
    """Return a fresh recording probe."""
    return Probe()
