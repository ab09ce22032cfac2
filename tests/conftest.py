"""Shared test fixtures."""

import pytest

from compop.scope import Scope


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep COMPOP_* settings from the outer environment out of tests."""
    for var in ("COMPOP_ALLOW_PATHS", "COMPOP_RECYCLE", "COMPOP_VERBOSE"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def scope():
    """A scope holding the sequences used in the blog examples."""
    return Scope({"x": [1, 2, 3, 4, 5], "out": [1, 1, 1, 1, 1]})
