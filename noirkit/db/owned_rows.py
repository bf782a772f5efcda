"""
noirkit/db/owned_rows.py

Owner-scoped CRUD for the ordered portfolio collections:
 - social_links, projects, tech_stack, achievements

Every write is filtered by (id, user_id) so a caller can only touch rows
it owns. Writes that match nothing report it through their return value.
"""

from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

from .connection import new_id


@dataclass(frozen=True)
class TableSpec:
    name: str
    columns: Tuple[str, ...]
    json_columns: Tuple[str, ...] = ()


TABLES: Dict[str, TableSpec] = {
    "social_links": TableSpec("social_links", ("platform", "url", "icon")),
    "projects": TableSpec(
        "projects",
        ("name", "description", "deploy_link", "github_link", "tech_stack", "images"),
        json_columns=("tech_stack", "images"),
    ),
    "tech_stack": TableSpec("tech_stack", ("name", "icon")),
    "achievements": TableSpec("achievements", ("title", "description", "date", "type")),
}


def _spec(table: str) -> TableSpec:
    try:
        return TABLES[table]
    except KeyError:
        raise ValueError(f"Unknown table: {table}")


def _check_columns(spec: TableSpec, values: Dict[str, Any]) -> List[str]:
    unknown = set(values) - set(spec.columns)
    if unknown:
        raise ValueError(f"Unknown {spec.name} fields: {', '.join(sorted(unknown))}")
    return [c for c in spec.columns if c in values]


def _encode(spec: TableSpec, column: str, value: Any) -> Any:
    if column in spec.json_columns:
        if isinstance(value, (str, bytes)):
            raise ValueError(f"{spec.name}.{column} must be a list")
        return json.dumps(list(value or []))
    return value


def _decode_row(spec: TableSpec, row: sqlite3.Row) -> Dict[str, Any]:
    data = dict(row)
    for column in spec.json_columns:
        raw = data.get(column)
        try:
            data[column] = json.loads(raw) if raw else []
        except json.JSONDecodeError:
            data[column] = []
    return data


def get_owned_row(
    conn: sqlite3.Connection,
    table: str,
    user_id: str,
    row_id: str,
) -> Dict[str, Any] | None:
    spec = _spec(table)
    row = conn.execute(
        f"""
        SELECT id, user_id, {', '.join(spec.columns)}, order_index
        FROM {spec.name}
        WHERE id = ? AND user_id = ?
        """,
        (row_id, user_id),
    ).fetchone()
    return _decode_row(spec, row) if row else None


def list_owned_rows(
    conn: sqlite3.Connection,
    table: str,
    user_id: str,
) -> List[Dict[str, Any]]:
    spec = _spec(table)
    rows = conn.execute(
        f"""
        SELECT id, user_id, {', '.join(spec.columns)}, order_index
        FROM {spec.name}
        WHERE user_id = ?
        ORDER BY order_index ASC, created_at ASC
        """,
        (user_id,),
    ).fetchall()
    return [_decode_row(spec, r) for r in rows]


def insert_owned_row(
    conn: sqlite3.Connection,
    table: str,
    user_id: str,
    values: Dict[str, Any],
    order_index: int,
) -> Dict[str, Any]:
    """Insert a row for `user_id` and return it as stored."""
    spec = _spec(table)
    cols = _check_columns(spec, values)
    row_id = new_id()
    params = [_encode(spec, c, values[c]) for c in cols]

    conn.execute(
        f"""
        INSERT INTO {spec.name} (id, user_id, {''.join(c + ', ' for c in cols)}order_index)
        VALUES (?, ?, {''.join('?, ' for _ in cols)}?)
        """,
        (row_id, user_id, *params, order_index),
    )
    conn.commit()
    return get_owned_row(conn, table, user_id, row_id)


def update_owned_row(
    conn: sqlite3.Connection,
    table: str,
    user_id: str,
    row_id: str,
    values: Dict[str, Any],
) -> Dict[str, Any] | None:
    """Partial update. Returns the stored row, or None if no row with that id belongs to `user_id`."""
    spec = _spec(table)
    cols = _check_columns(spec, values)
    if cols:
        assignments = ", ".join(f"{c} = ?" for c in cols)
        params = [_encode(spec, c, values[c]) for c in cols]
        cur = conn.execute(
            f"UPDATE {spec.name} SET {assignments} WHERE id = ? AND user_id = ?",
            (*params, row_id, user_id),
        )
        conn.commit()
        if cur.rowcount == 0:
            return None
    return get_owned_row(conn, table, user_id, row_id)


def delete_owned_row(
    conn: sqlite3.Connection,
    table: str,
    user_id: str,
    row_id: str,
) -> bool:
    spec = _spec(table)
    cur = conn.execute(
        f"DELETE FROM {spec.name} WHERE id = ? AND user_id = ?",
        (row_id, user_id),
    )
    conn.commit()
    return cur.rowcount > 0


def reorder_owned_rows(
    conn: sqlite3.Connection,
    table: str,
    user_id: str,
    ordered_ids: Sequence[str],
) -> List[str]:
    """
    Persist order_index = position for every id, in one transaction.

    Each update is still scoped by (id, user_id). If any id is not owned by
    `user_id` the whole batch is rolled back and the offending ids are
    returned; an empty list means the new order was committed.
    """
    spec = _spec(table)
    rejected: List[str] = []

    try:
        for index, row_id in enumerate(ordered_ids):
            cur = conn.execute(
                f"UPDATE {spec.name} SET order_index = ? WHERE id = ? AND user_id = ?",
                (index, row_id, user_id),
            )
            if cur.rowcount == 0:
                rejected.append(row_id)
    except sqlite3.Error:
        conn.rollback()
        raise

    if rejected:
        conn.rollback()
    else:
        conn.commit()
    return rejected
