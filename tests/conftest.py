"""
conftest.py

Shared pytest configuration and fixtures for the rename tool test suite.
"""

import os
import sys

# Add project root to sys.path so 'core' and 'cli' can be imported
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest


@pytest.fixture
def make_files(tmp_path):
    """Create files in a fresh folder; each file's content is its own name"""
    def _make(*names, folder="files"):
        target = tmp_path / folder
        target.mkdir(exist_ok=True)
        for name in names:
            (target / name).write_text(name, encoding="utf-8")
        return target
    return _make


def listing(folder):
    """Sorted file names in a folder"""
    return sorted(p.name for p in folder.iterdir() if p.is_file())


@pytest.fixture
def list_names():
    return listing
