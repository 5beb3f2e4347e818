"""Root test configuration: isolate tests from MDSITE_* env vars and CLI logging setup"""

import logging
import os

import pytest


@pytest.fixture(autouse=True)
def clear_mdsite_env(monkeypatch):
    """Drop any MDSITE_* env vars so config defaults are predictable."""
    for name in list(os.environ):
        if name.startswith("MDSITE_"):
            monkeypatch.delenv(name)


@pytest.fixture(autouse=True)
def restore_root_logging():
    """CLI commands reconfigure the root logger; put it back after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
