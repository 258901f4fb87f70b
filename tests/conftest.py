"""
Pytest configuration and fixtures for flakesim tests.
"""

import logging
import pytest
from pathlib import Path
import sys

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.catalog import build_default_catalog
from core.entropy import SeededEntropy
from core.structured_events import EventBuilder, EventEmitter


@pytest.fixture
def seeded_entropy():
    """Deterministic entropy source shared by one test."""
    return SeededEntropy(20240315)


@pytest.fixture
def catalog():
    return build_default_catalog()


@pytest.fixture
def event_builder():
    """Builder over an in-memory emitter (no file, no logging output)."""
    return EventBuilder(EventEmitter(enable_console=False))


@pytest.fixture
def restore_root_logging():
    """Drop any handlers a test adds to the root logger."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
