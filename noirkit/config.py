"""
noirkit/config.py

Runtime settings read from environment variables.
A local .env is loaded by noirkit/api/main.py before these are read.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple


DEFAULT_ALLOWED_ORIGINS: Tuple[str, ...] = ("localhost",)


def _split_csv(raw: str | None) -> Tuple[str, ...]:
    if not raw:
        return ()
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")


@dataclass(frozen=True)
class Settings:
    db_path: str = "local_storage.db"
    storage_dir: Path = Path("./storage")
    public_base_url: str = ""
    allowed_origins: Tuple[str, ...] = DEFAULT_ALLOWED_ORIGINS
    rate_limit_max_requests: int = 5
    rate_limit_window_seconds: int = 15 * 60
    replay_window_seconds: int = 5 * 60
    access_token_minutes: int = 60


def load_settings() -> Settings:
    """Build Settings from the current process environment."""
    # localhost is always allowed; production domains are added on top
    origins = DEFAULT_ALLOWED_ORIGINS + _split_csv(os.getenv("NOIRKIT_ALLOWED_ORIGINS"))

    return Settings(
        db_path=os.getenv("APP_DB_PATH", "local_storage.db"),
        storage_dir=Path(os.getenv("NOIRKIT_STORAGE_DIR", "./storage")),
        public_base_url=os.getenv("NOIRKIT_PUBLIC_BASE_URL", "").rstrip("/"),
        allowed_origins=origins,
        rate_limit_max_requests=_int_env("NOIRKIT_RATE_LIMIT_MAX", 5),
        rate_limit_window_seconds=_int_env("NOIRKIT_RATE_LIMIT_WINDOW_SECONDS", 15 * 60),
        replay_window_seconds=_int_env("NOIRKIT_REPLAY_WINDOW_SECONDS", 5 * 60),
        access_token_minutes=_int_env("NOIRKIT_ACCESS_TOKEN_MINUTES", 60),
    )
