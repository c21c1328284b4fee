"""Shared fixtures for the paygate test suite."""

import logging

import pytest


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """Undo handlers installed by configure_logging() during a test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)
