import sys
import os
import pytest

# Add the project root directory to sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from noirkit.db import connect, init_schema, create_user_with_password
from noirkit.services.data_service import DataService
from noirkit.services.portfolio_store import PortfolioStore


@pytest.fixture
def conn(tmp_path):
    """
    Fresh on-disk SQLite database per test.
    On-disk rather than ':memory:' so foreign keys and WAL behave as in the app.
    """
    conn = connect(tmp_path / "test.db")
    init_schema(conn)
    yield conn
    conn.close()


@pytest.fixture
def make_owner(conn):
    """Factory for portfolio owners; the password hash is never checked in these tests."""
    def _make(username: str = "owner") -> str:
        return create_user_with_password(conn, username, None, "not-a-real-hash")
    return _make


@pytest.fixture
def owner_id(make_owner):
    return make_owner("ana")


@pytest.fixture
def data_service(conn, owner_id):
    return DataService(conn, owner_id)


@pytest.fixture
def store(data_service):
    """Loaded store for the signed-in owner."""
    s = PortfolioStore(data_service)
    s.fetch_all()
    return s
