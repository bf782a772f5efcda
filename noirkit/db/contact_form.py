"""
noirkit/db/contact_form.py

Contact form (one per owner) and its ordered fields.
Field writes are scoped through the owning form, so a caller can only
change fields of a form whose user_id matches.
"""

from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Optional, Sequence

from .connection import new_id

FORM_COLUMNS = ("title", "description", "show_contact_info")
FIELD_COLUMNS = ("name", "label", "type", "required", "placeholder")

_OWNED_FIELD_FILTER = """
    id = ? AND contact_form_id IN (SELECT id FROM contact_form WHERE user_id = ?)
"""


def _check(columns: Sequence[str], values: Dict[str, Any], what: str) -> List[str]:
    unknown = set(values) - set(columns)
    if unknown:
        raise ValueError(f"Unknown {what} fields: {', '.join(sorted(unknown))}")
    return [c for c in columns if c in values]


def _coerce(column: str, value: Any) -> Any:
    if column in ("show_contact_info", "required"):
        return int(bool(value))
    return value


def list_contact_fields(conn: sqlite3.Connection, form_id: str) -> List[Dict[str, Any]]:
    rows = conn.execute(
        """
        SELECT id, contact_form_id, name, label, type, required, placeholder, order_index
        FROM contact_form_fields
        WHERE contact_form_id = ?
        ORDER BY order_index ASC, rowid ASC
        """,
        (form_id,),
    ).fetchall()
    return [dict(r) for r in rows]


def get_contact_form(conn: sqlite3.Connection, user_id: str) -> Optional[Dict[str, Any]]:
    """Latest contact form of the owner, with its fields under 'fields'."""
    row = conn.execute(
        """
        SELECT id, user_id, title, description, show_contact_info, created_at
        FROM contact_form
        WHERE user_id = ?
        ORDER BY created_at DESC, rowid DESC
        LIMIT 1
        """,
        (user_id,),
    ).fetchone()
    if row is None:
        return None

    form = dict(row)
    form["show_contact_info"] = bool(form["show_contact_info"])
    form["fields"] = list_contact_fields(conn, form["id"])
    return form


def _get_owned_field(conn: sqlite3.Connection, user_id: str, field_id: str) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        f"""
        SELECT id, contact_form_id, name, label, type, required, placeholder, order_index
        FROM contact_form_fields
        WHERE {_OWNED_FIELD_FILTER}
        """,
        (field_id, user_id),
    ).fetchone()
    return dict(row) if row else None


def _get_form_by_id(conn: sqlite3.Connection, user_id: str, form_id: str) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        """
        SELECT id, user_id, title, description, show_contact_info, created_at
        FROM contact_form
        WHERE id = ? AND user_id = ?
        """,
        (form_id, user_id),
    ).fetchone()
    if row is None:
        return None
    form = dict(row)
    form["show_contact_info"] = bool(form["show_contact_info"])
    form["fields"] = list_contact_fields(conn, form_id)
    return form


def insert_contact_form(
    conn: sqlite3.Connection,
    user_id: str,
    values: Dict[str, Any],
) -> Dict[str, Any]:
    cols = _check(FORM_COLUMNS, values, "contact form")
    form_id = new_id()
    conn.execute(
        f"""
        INSERT INTO contact_form (id, user_id{''.join(', ' + c for c in cols)})
        VALUES (?, ?{', ?' * len(cols)})
        """,
        (form_id, user_id, *[_coerce(c, values[c]) for c in cols]),
    )
    conn.commit()
    return _get_form_by_id(conn, user_id, form_id)


def update_contact_form(
    conn: sqlite3.Connection,
    user_id: str,
    form_id: str,
    values: Dict[str, Any],
) -> Optional[Dict[str, Any]]:
    """Returns the updated form, or None if the form is not owned by `user_id`."""
    cols = _check(FORM_COLUMNS, values, "contact form")
    if cols:
        assignments = ", ".join(f"{c} = ?" for c in cols)
        cur = conn.execute(
            f"UPDATE contact_form SET {assignments} WHERE id = ? AND user_id = ?",
            (*[_coerce(c, values[c]) for c in cols], form_id, user_id),
        )
        conn.commit()
        if cur.rowcount == 0:
            return None
    return _get_form_by_id(conn, user_id, form_id)


def insert_contact_field(
    conn: sqlite3.Connection,
    user_id: str,
    form_id: str,
    values: Dict[str, Any],
    order_index: int,
) -> Optional[Dict[str, Any]]:
    """Returns the stored field, or None if the form is not owned by `user_id`."""
    if _get_form_by_id(conn, user_id, form_id) is None:
        return None

    cols = _check(FIELD_COLUMNS, values, "contact field")
    field_id = new_id()
    conn.execute(
        f"""
        INSERT INTO contact_form_fields (id, contact_form_id, {''.join(c + ', ' for c in cols)}order_index)
        VALUES (?, ?, {'?, ' * len(cols)}?)
        """,
        (field_id, form_id, *[_coerce(c, values[c]) for c in cols], order_index),
    )
    conn.commit()

    return _get_owned_field(conn, user_id, field_id)


def update_contact_field(
    conn: sqlite3.Connection,
    user_id: str,
    field_id: str,
    values: Dict[str, Any],
) -> Optional[Dict[str, Any]]:
    """Returns the stored field, or None if it is not on a form owned by `user_id`."""
    cols = _check(FIELD_COLUMNS, values, "contact field")
    if cols:
        assignments = ", ".join(f"{c} = ?" for c in cols)
        cur = conn.execute(
            f"UPDATE contact_form_fields SET {assignments} WHERE {_OWNED_FIELD_FILTER}",
            (*[_coerce(c, values[c]) for c in cols], field_id, user_id),
        )
        conn.commit()
        if cur.rowcount == 0:
            return None
    return _get_owned_field(conn, user_id, field_id)


def delete_contact_field(conn: sqlite3.Connection, user_id: str, field_id: str) -> bool:
    cur = conn.execute(
        f"DELETE FROM contact_form_fields WHERE {_OWNED_FIELD_FILTER}",
        (field_id, user_id),
    )
    conn.commit()
    return cur.rowcount > 0


def reorder_contact_fields(
    conn: sqlite3.Connection,
    user_id: str,
    ordered_ids: Sequence[str],
) -> List[str]:
    """Same contract as owned_rows.reorder_owned_rows: all or nothing."""
    rejected: List[str] = []
    try:
        for index, field_id in enumerate(ordered_ids):
            cur = conn.execute(
                f"UPDATE contact_form_fields SET order_index = ? WHERE {_OWNED_FIELD_FILTER}",
                (index, field_id, user_id),
            )
            if cur.rowcount == 0:
                rejected.append(field_id)
    except sqlite3.Error:
        conn.rollback()
        raise

    if rejected:
        conn.rollback()
    else:
        conn.commit()
    return rejected
