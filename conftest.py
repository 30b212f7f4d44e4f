"""Configure pytest for the Footy Analyzer project."""
import os
import sys
from pathlib import Path

import pytest

# =============================================================================
# Test Environment Configuration
# =============================================================================
# Set environment for tests BEFORE any app imports
os.environ.setdefault("FOOTY_ENVIRONMENT", "test")
os.environ.setdefault("FOOTY_DEFAULT_LANG", "zh")

# Project root on the path so `app` and `footy` import without installation
root_path = Path(__file__).parent
if str(root_path) not in sys.path:
    sys.path.insert(0, str(root_path))


def pytest_configure(config):
    """Ensure environment is set before test collection."""
    os.environ.setdefault("FOOTY_ENVIRONMENT", "test")


@pytest.fixture(autouse=True)
def fresh_history_store():
    """Every test starts with an empty in-memory history store."""
    from app.history_store import reset_history_store

    reset_history_store()
    yield
    reset_history_store()
