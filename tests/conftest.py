"""Pytest configuration for local package import resolution."""

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
project_root_str = str(PROJECT_ROOT)
if project_root_str not in sys.path:
    # Ensure tests can import the project packages without installation.
    sys.path.insert(0, project_root_str)

from helpers import TODAY  # noqa: E402


@pytest.fixture
def today():
    return TODAY
