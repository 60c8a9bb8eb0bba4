"""
Shared fixtures for litesnap tests.
"""

from pathlib import Path

import pytest

from tests.helpers import create_database


@pytest.fixture
def database(tmp_path) -> Path:
    """Source database with one table and two rows."""
    return create_database(tmp_path / "data" / "app.db")


@pytest.fixture
def backup_dir(tmp_path) -> Path:
    return tmp_path / "backups"
