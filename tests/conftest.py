import pytest

from building_energy.db import init_db


@pytest.fixture
def db_path(tmp_path):
    """A fresh, initialized SQLite database."""
    path = tmp_path / "energy.db"
    init_db(path)
    return path
