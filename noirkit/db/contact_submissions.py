"""
noirkit/db/contact_submissions.py

Visitor contact submissions. Rows are write-once: there is no update or
delete path in the application.
"""

import json
import sqlite3
from typing import Any, Dict, List, Optional

from .connection import new_id


def _row_to_dict(row: sqlite3.Row) -> Dict[str, Any]:
    data = dict(row)
    try:
        data["form_data"] = json.loads(data["form_data"])
    except (TypeError, json.JSONDecodeError):
        data["form_data"] = {}
    return data


def insert_contact_submission(
    conn: sqlite3.Connection,
    portfolio_owner_id: str,
    form_data: Dict[str, Any],
    ip_address: str,
    user_agent: str,
    submitted_at: str,
) -> Dict[str, Any]:
    submission_id = new_id()
    conn.execute(
        """
        INSERT INTO contact_submissions
            (id, portfolio_owner_id, form_data, ip_address, user_agent, submitted_at)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (
            submission_id,
            portfolio_owner_id,
            json.dumps(form_data),
            ip_address,
            user_agent,
            submitted_at,
        ),
    )
    conn.commit()
    return get_contact_submission(conn, submission_id)


def get_contact_submission(conn: sqlite3.Connection, submission_id: str) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        """
        SELECT id, portfolio_owner_id, form_data, ip_address, user_agent, submitted_at
        FROM contact_submissions
        WHERE id = ?
        """,
        (submission_id,),
    ).fetchone()
    return _row_to_dict(row) if row else None


def list_contact_submissions(conn: sqlite3.Connection, portfolio_owner_id: str) -> List[Dict[str, Any]]:
    """All submissions addressed to the owner, newest first."""
    rows = conn.execute(
        """
        SELECT id, portfolio_owner_id, form_data, ip_address, user_agent, submitted_at
        FROM contact_submissions
        WHERE portfolio_owner_id = ?
        ORDER BY submitted_at DESC, rowid DESC
        """,
        (portfolio_owner_id,),
    ).fetchall()
    return [_row_to_dict(r) for r in rows]
