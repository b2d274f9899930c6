"""
Shared fixtures for the OneWay test suite.
"""

import logging

import pytest

from oneway import registry


@pytest.fixture(autouse=True)
def reset_registry():
    """Every test starts and ends with an empty global registry."""
    registry._reset()
    yield
    registry._reset()


@pytest.fixture
def restore_root_logging():
    """Undo setup_logging() changes to the root logger."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
