"""
noirkit/db/users.py

Handles all database operations related to portfolio owners:
 - Creating users with a password hash
 - Fetching users for login and token validation
"""

import sqlite3
from typing import Any, Dict, Optional

from .connection import new_id


def _normalize_username(username: str) -> str:
    """Trim whitespace and prepare username for case-insensitive lookups."""
    return username.strip()


def get_user_by_id(conn: sqlite3.Connection, user_id: str) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        "SELECT user_id, username, email FROM users WHERE user_id = ?",
        (user_id,),
    ).fetchone()
    return dict(row) if row else None


def get_user_auth_by_username(conn: sqlite3.Connection, username: str) -> Optional[Dict[str, Any]]:
    """Case-insensitive lookup that includes the password hash."""
    row = conn.execute(
        """
        SELECT user_id, username, email, password_hash
        FROM users
        WHERE LOWER(username) = LOWER(?)
        """,
        (_normalize_username(username),),
    ).fetchone()
    return dict(row) if row else None


def create_user_with_password(
    conn: sqlite3.Connection,
    username: str,
    email: Optional[str],
    password_hash: str,
) -> str:
    user_id = new_id()
    conn.execute(
        "INSERT INTO users (user_id, username, email, password_hash) VALUES (?, ?, ?, ?)",
        (user_id, _normalize_username(username), email, password_hash),
    )
    conn.commit()
    return user_id
