from functools import lru_cache
from typing import Generator, Optional
from sqlite3 import Connection
import os
import jwt

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from noirkit.config import Settings, load_settings
from noirkit.db import connect, init_schema
from noirkit.db.users import get_user_by_id
from noirkit.api.auth.security import decode_access_token
from noirkit.api.helpers import store_errors
from noirkit.services.data_service import DataService
from noirkit.services.portfolio_store import PortfolioStore
from noirkit.services.rate_limiter import FixedWindowRateLimiter
from noirkit.services.storage_service import StorageService


@lru_cache
def get_settings() -> Settings:
    return load_settings()

def get_db(settings: Settings = Depends(get_settings)) -> Generator[Connection, None, None]:
    conn = connect(settings.db_path)
    init_schema(conn)  # ensure tables exist for API requests
    try:
        yield conn
    finally:
        conn.close()

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)

def get_jwt_secret() -> str:
    secret = os.getenv("JWT_SECRET")
    if not secret:
        raise RuntimeError("JWT_SECRET is not set")
    return secret

def get_optional_jwt_secret() -> Optional[str]:
    return os.getenv("JWT_SECRET") or None


@lru_cache
def _shared_rate_limiter(max_requests: int, window_seconds: int) -> FixedWindowRateLimiter:
    return FixedWindowRateLimiter(max_requests=max_requests, window_seconds=window_seconds)

def get_rate_limiter(settings: Settings = Depends(get_settings)) -> FixedWindowRateLimiter:
    """One limiter per process, shared by every request."""
    return _shared_rate_limiter(settings.rate_limit_max_requests, settings.rate_limit_window_seconds)

def get_storage(settings: Settings = Depends(get_settings)) -> StorageService:
    return StorageService(settings.storage_dir, settings.public_base_url)


def _user_id_from_token(conn: Connection, token: str, secret: str) -> Optional[str]:
    try:
        payload = decode_access_token(secret=secret, token=token)
        user_id = str(payload["sub"])
    except (KeyError, jwt.PyJWTError):
        return None

    user = get_user_by_id(conn, user_id)
    return user["user_id"] if user else None

def get_current_user_id(
    token: str = Depends(oauth2_scheme),
    conn: Connection = Depends(get_db),
    secret: str = Depends(get_jwt_secret),
) -> str:
    user_id = _user_id_from_token(conn, token, secret)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user_id

def get_optional_user_id(
    token: Optional[str] = Depends(optional_oauth2_scheme),
    conn: Connection = Depends(get_db),
    secret: Optional[str] = Depends(get_optional_jwt_secret),
) -> Optional[str]:
    """Same as get_current_user_id, but anonymous (or bad) tokens give None instead of 401."""
    if not token or not secret:
        return None
    return _user_id_from_token(conn, token, secret)


def get_dashboard_store(
    user_id: str = Depends(get_current_user_id),
    conn: Connection = Depends(get_db),
) -> PortfolioStore:
    """The signed-in owner's store, already loaded."""
    store = PortfolioStore(DataService(conn, user_id))
    with store_errors():
        store.fetch_all()
    return store

def get_public_store(
    user_id: Optional[str] = Depends(get_optional_user_id),
    conn: Connection = Depends(get_db),
) -> PortfolioStore:
    """Unloaded store for the public page; the route decides how to handle load failures."""
    return PortfolioStore(DataService(conn, user_id))
