"""Pytest configuration and shared fixtures."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv
load_dotenv()


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "real_db: mark test as requiring a live PostgreSQL server")


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--real-db",
        action="store_true",
        default=False,
        help="Run tests that require a live PostgreSQL server (POSTGRES_* env vars)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip real_db tests unless --real-db flag is provided."""
    if config.getoption("--real-db"):
        return

    skip_real = pytest.mark.skip(reason="Need --real-db option to run")
    for item in items:
        if "real_db" in item.keywords:
            item.add_marker(skip_real)
