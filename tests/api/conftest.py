# tests/api/conftest.py
import os
import pytest
from fastapi.testclient import TestClient
from pathlib import Path

import noirkit.db as db
from noirkit.api.main import app
from noirkit.api.dependencies import get_db, get_jwt_secret, get_rate_limiter, get_settings
from noirkit.api.auth.security import create_access_token
from noirkit.config import Settings
from noirkit.services.rate_limiter import FixedWindowRateLimiter

TEST_JWT_SECRET = "test-secret-key-for-testing"
ALLOWED_TEST_ORIGINS = ("localhost", "noirkit.dev")

@pytest.fixture(autouse=True)
def shared_db(tmp_path, monkeypatch):
    """
    API-safe DB setup:
    - uses an on-disk temp DB (shared by path)
    - DOES NOT share a single sqlite Connection across threads
    """
    db_path = tmp_path / "test.db"
    monkeypatch.setenv("APP_DB_PATH", str(db_path))
    monkeypatch.setenv("JWT_SECRET", TEST_JWT_SECRET)

    # initialize schema once
    conn = db.connect(db_path)
    db.init_schema(conn)
    conn.close()

    yield  # test runs

    monkeypatch.delenv("APP_DB_PATH", raising=False)
    monkeypatch.delenv("JWT_SECRET", raising=False)

@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        db_path=os.environ["APP_DB_PATH"],
        storage_dir=tmp_path / "storage",
        allowed_origins=ALLOWED_TEST_ORIGINS,
    )

@pytest.fixture
def rate_limiter(test_settings):
    """Fresh limiter per test so counts never leak between tests."""
    return FixedWindowRateLimiter(
        max_requests=test_settings.rate_limit_max_requests,
        window_seconds=test_settings.rate_limit_window_seconds,
    )

@pytest.fixture
def client(test_settings, rate_limiter):
    """
    TestClient that overrides dependencies so each request gets its own connection.
    """
    db_path = Path(os.environ["APP_DB_PATH"])

    def override_get_db():
        conn = db.connect(db_path)
        db.init_schema(conn)
        try:
            yield conn
        finally:
            conn.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_jwt_secret] = lambda: TEST_JWT_SECRET
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()

@pytest.fixture
def seed_conn():
    """Convenience: a connection you can use to seed test data."""
    conn = db.connect(os.environ["APP_DB_PATH"])
    db.init_schema(conn)
    yield conn
    conn.close()

def make_token(user_id: str, username: str) -> str:
    return create_access_token(
        secret=TEST_JWT_SECRET,
        user_id=user_id,
        username=username,
        expires_minutes=60,
    )

@pytest.fixture
def owner_id(seed_conn):
    return db.create_user_with_password(seed_conn, "test-user", None, "not-a-real-hash")

@pytest.fixture
def other_owner_id(seed_conn):
    return db.create_user_with_password(seed_conn, "other-user", None, "not-a-real-hash")

@pytest.fixture
def auth_headers(owner_id):
    return {"Authorization": f"Bearer {make_token(owner_id, 'test-user')}"}

@pytest.fixture
def other_auth_headers(other_owner_id):
    return {"Authorization": f"Bearer {make_token(other_owner_id, 'other-user')}"}

@pytest.fixture
def auth_headers_nonexistent_user():
    """Create a token for a user ID that doesn't exist in the database."""
    return {"Authorization": f"Bearer {make_token('0' * 32, 'nonexistent')}"}
