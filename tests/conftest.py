"""Pytest configuration and fixtures for test suite."""

import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Set test environment BEFORE any engine imports
os.environ.setdefault("LIFECYCLE_ENVIRONMENT", "test")

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Clear cached settings before and after each test."""
    from lifecycle_engine.config.settings import get_settings
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fixed_now():
    """A fixed UTC timestamp for clock-dependent tests."""
    return datetime(2025, 6, 15, 14, 30, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock(fixed_now):
    """Clock callable returning fixed_now."""
    return lambda: fixed_now


@pytest.fixture
def sample_leads():
    """Six leads: two won, one lost, one unrecognized status."""
    return [
        {"id": "L1", "status": "new", "value": 1000},
        {"id": "L2", "status": "won", "value": 12000},
        {"id": "L3", "status": "won", "value": 8000.5},
        {"id": "L4", "status": "lost", "value": 4000},
        {"id": "L5", "status": "quote_sent", "value": 15000},
        {"id": "L6", "status": "on_hold", "value": 999},
    ]
