"""Pytest configuration and fixtures."""

import os

import pytest


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch, tmp_path):
    """Isolate environment variables and default locations for each test.

    Config and data directories point into a temporary directory so no
    test reads or writes the user's real stores.
    """
    original_env = os.environ.copy()

    for name in list(os.environ):
        if name.startswith("DOCLITE_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    yield

    os.environ.clear()
    os.environ.update(original_env)
