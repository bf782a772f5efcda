"""
noirkit/db/profiles.py

Personal info rows. One row per owner, keyed by the owner's user_id.
Rows are created on first save and never deleted by the application.
"""

import sqlite3
from typing import Any, Dict, Optional

PROFILE_COLUMNS = (
    "name",
    "job_title",
    "bio",
    "profile_image",
    "email",
    "phone",
    "location",
    "cv_file",
)


def get_profile(conn: sqlite3.Connection, owner_id: str) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        f"SELECT id, {', '.join(PROFILE_COLUMNS)} FROM profiles WHERE id = ?",
        (owner_id,),
    ).fetchone()
    return dict(row) if row else None


def get_first_profile_owner_id(conn: sqlite3.Connection) -> Optional[str]:
    """Owner of the first portfolio ever created (the public view's default)."""
    row = conn.execute(
        "SELECT id FROM profiles ORDER BY created_at ASC, rowid ASC LIMIT 1"
    ).fetchone()
    return row[0] if row else None


def upsert_profile(
    conn: sqlite3.Connection,
    owner_id: str,
    values: Dict[str, Any],
) -> Dict[str, Any]:
    """
    Insert the owner's profile or update the given columns.

    Columns not present in `values` keep their stored value; None clears a column.
    """
    unknown = set(values) - set(PROFILE_COLUMNS)
    if unknown:
        raise ValueError(f"Unknown profile fields: {', '.join(sorted(unknown))}")

    cols = [c for c in PROFILE_COLUMNS if c in values]
    params = [values[c] for c in cols]

    if cols:
        placeholders = ", ".join("?" for _ in cols)
        updates = ", ".join(f"{c} = excluded.{c}" for c in cols)
        conn.execute(
            f"""
            INSERT INTO profiles (id, {', '.join(cols)})
            VALUES (?, {placeholders})
            ON CONFLICT(id) DO UPDATE SET
                {updates},
                updated_at = datetime('now')
            """,
            (owner_id, *params),
        )
    else:
        conn.execute("INSERT OR IGNORE INTO profiles (id) VALUES (?)", (owner_id,))
    conn.commit()

    return get_profile(conn, owner_id)
