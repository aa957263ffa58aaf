"""Shared fixtures for jToolkit tests."""
import logging

import pytest


@pytest.fixture
def data_home(tmp_path, monkeypatch):
    """Point the data directory (notes, time logs...) at a temp folder."""
    home = tmp_path / "jt-home"
    monkeypatch.setenv("JTOOLKIT_HOME", str(home))
    return home


@pytest.fixture(autouse=True)
def _close_log_files():
    """Drop FileHandlers a tool attached during the test."""
    yield
    root = logging.getLogger("jtoolkit")
    for handler in list(root.handlers):
        if isinstance(handler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()
