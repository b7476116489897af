"""
License Gate Test Suite — Shared Fixtures

Everything runs offline: licensing mirrors are replaced by
httpx.MockTransport handlers (see helpers.py) and the request log goes to
a throwaway SQLite file.

Usage:
    pip install -e ".[test]"
    pytest tests -v
"""

import os
import sys
import tempfile

import pytest

# Request log must not touch the working directory
_DB_DIR = tempfile.mkdtemp(prefix="license_gate_tests_")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"

# Flat module layout: make the project root importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))


@pytest.fixture()
def requests_seen():
    """Collects every request sent to the mocked mirrors."""
    return []
