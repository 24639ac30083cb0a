"""
ImputeGenius - Pytest Configuration
Shared fixtures and configuration for all tests
"""

import os
import sys
from pathlib import Path

# File sinks and auto-initialised logging stay off under test
os.environ.setdefault("TEST_MODE", "true")

import pytest

# Add project root to path
ROOT_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT_DIR))

from agents.imputation.schemas import ImputationConfig


# ==================== DATA FIXTURES ====================

@pytest.fixture
def numeric_records():
    """
    Twelve numeric rows, y = 2x + 1 plus a small deterministic wobble,
    z loosely tied to x. At most one missing cell per row.
    """
    xs = [1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0, 9.0, 10.0, 11.0, 12.0]
    wobble = [0.1, -0.2, 0.15, -0.1, 0.05, 0.2, -0.15, 0.1, -0.05, 0.0, 0.12, -0.08]
    zs = [5.0, 3.5, 6.0, 4.0, 7.5, 5.5, 8.0, 6.5, 9.5, 7.0, 10.0, 8.5]
    records = [
        {"x": x, "y": 2 * x + 1 + w, "z": z}
        for x, w, z in zip(xs, wobble, zs)
    ]
    records[2]["y"] = None
    records[5]["y"] = None
    records[8]["z"] = None
    records[10]["x"] = None
    return records


@pytest.fixture
def mixed_records():
    """Numeric and categorical fields, categorical gaps included."""
    return [
        {"amount": 10.0, "qty": 1, "region": "north"},
        {"amount": 20.0, "qty": 2, "region": "north"},
        {"amount": 30.0, "qty": 3, "region": "south"},
        {"amount": None, "qty": 4, "region": "south"},
        {"amount": 50.0, "qty": 5, "region": None},
        {"amount": 60.0, "qty": 6, "region": "south"},
        {"amount": 70.0, "qty": None, "region": "north"},
        {"amount": 80.0, "qty": 8, "region": "north"},
        {"amount": 90.0, "qty": 9, "region": ""},
        {"amount": 100.0, "qty": 10, "region": "north"},
    ]


@pytest.fixture
def categorical_records():
    """Two related categorical fields, both missing in row 3."""
    colours = ["red", "red", "green", None, "green", "blue", "red", "green", "blue", "red"]
    sizes = ["small", "small", "medium", None, "medium", "large", "small", "medium", "large", "small"]
    return [{"colour": c, "size": s} for c, s in zip(colours, sizes)]


@pytest.fixture
def median_records():
    """Single numeric field with one gap; the median of the rest is 6."""
    values = [1, 2, 3, None, 5, 6, 7, 8, 9, 10]
    return [{"value": v} for v in values]


@pytest.fixture
def complete_records():
    return [{"a": i, "b": f"label{i % 3}"} for i in range(10)]


@pytest.fixture
def default_config():
    """Explicit defaults, independent of environment overrides."""
    return ImputationConfig()


# ==================== PYTEST CONFIGURATION ====================

def pytest_configure(config):
    """Configure pytest"""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )

