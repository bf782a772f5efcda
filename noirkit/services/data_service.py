"""
Data service used by the portfolio store.

Wraps the db layer with the guarantees the store relies on:
 - an auth-session accessor (current_user_id)
 - writes scoped to the authenticated owner
 - backend failures surfaced as DataServiceError subclasses
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

from noirkit.db import (
    delete_contact_field,
    delete_owned_row,
    get_contact_form,
    get_first_profile_owner_id,
    get_profile,
    insert_contact_field,
    insert_contact_form,
    insert_owned_row,
    list_owned_rows,
    reorder_contact_fields,
    reorder_owned_rows,
    update_contact_field,
    update_contact_form,
    update_owned_row,
    upsert_profile,
)

logger = logging.getLogger(__name__)


class DataServiceError(Exception):
    """A remote read or write failed."""


class UnauthenticatedError(DataServiceError):
    """A write needs an owner but the session has none."""


class WriteRejectedError(DataServiceError):
    """An id-scoped write matched no row owned by the caller."""


class ConstraintViolationError(DataServiceError):
    """The write broke a uniqueness or check constraint."""


class DataService:
    def __init__(self, conn: sqlite3.Connection, user_id: Optional[str] = None):
        self._conn = conn
        self._user_id = user_id

    # --- session -----------------------------------------------------------

    def current_user_id(self) -> Optional[str]:
        return self._user_id

    def require_user_id(self) -> str:
        if not self._user_id:
            raise UnauthenticatedError("No authenticated user")
        return self._user_id

    @contextmanager
    def _translate(self, action: str) -> Iterator[None]:
        try:
            yield
        except sqlite3.IntegrityError as exc:
            self._conn.rollback()
            logger.warning("%s rejected by constraint: %s", action, exc)
            raise ConstraintViolationError(f"{action} failed: {exc}") from exc
        except sqlite3.Error as exc:
            self._conn.rollback()
            logger.exception("%s failed", action)
            raise DataServiceError(f"{action} failed") from exc

    # --- reads -------------------------------------------------------------

    def first_owner_id(self) -> Optional[str]:
        with self._translate("Portfolio lookup"):
            return get_first_profile_owner_id(self._conn)

    def get_profile(self, owner_id: str) -> Optional[Dict[str, Any]]:
        with self._translate("Profile fetch"):
            return get_profile(self._conn, owner_id)

    def list_rows(self, table: str, owner_id: str) -> List[Dict[str, Any]]:
        with self._translate(f"{table} fetch"):
            return list_owned_rows(self._conn, table, owner_id)

    def get_contact_form(self, owner_id: str) -> Optional[Dict[str, Any]]:
        with self._translate("Contact form fetch"):
            return get_contact_form(self._conn, owner_id)

    # --- writes ------------------------------------------------------------

    def upsert_profile(self, values: Dict[str, Any]) -> Dict[str, Any]:
        owner_id = self.require_user_id()
        with self._translate("Profile update"):
            return upsert_profile(self._conn, owner_id, values)

    def insert_row(self, table: str, values: Dict[str, Any], order_index: int) -> Dict[str, Any]:
        owner_id = self.require_user_id()
        with self._translate(f"{table} insert"):
            return insert_owned_row(self._conn, table, owner_id, values, order_index)

    def update_row(self, table: str, row_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        owner_id = self.require_user_id()
        with self._translate(f"{table} update"):
            row = update_owned_row(self._conn, table, owner_id, row_id, values)
        if row is None:
            raise WriteRejectedError(f"{table} row {row_id} not found for this owner")
        return row

    def delete_row(self, table: str, row_id: str) -> bool:
        owner_id = self.require_user_id()
        with self._translate(f"{table} delete"):
            return delete_owned_row(self._conn, table, owner_id, row_id)

    def reorder_rows(self, table: str, ordered_ids: Sequence[str]) -> None:
        owner_id = self.require_user_id()
        with self._translate(f"{table} reorder"):
            rejected = reorder_owned_rows(self._conn, table, owner_id, ordered_ids)
        if rejected:
            raise WriteRejectedError(
                f"{table} reorder rolled back; not owned: {', '.join(rejected)}"
            )

    def insert_contact_form(self, values: Dict[str, Any]) -> Dict[str, Any]:
        owner_id = self.require_user_id()
        with self._translate("Contact form insert"):
            return insert_contact_form(self._conn, owner_id, values)

    def update_contact_form(self, form_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        owner_id = self.require_user_id()
        with self._translate("Contact form update"):
            form = update_contact_form(self._conn, owner_id, form_id, values)
        if form is None:
            raise WriteRejectedError(f"Contact form {form_id} not found for this owner")
        return form

    def insert_contact_field(self, form_id: str, values: Dict[str, Any], order_index: int) -> Dict[str, Any]:
        owner_id = self.require_user_id()
        with self._translate("Contact field insert"):
            row = insert_contact_field(self._conn, owner_id, form_id, values, order_index)
        if row is None:
            raise WriteRejectedError(f"Contact form {form_id} not found for this owner")
        return row

    def update_contact_field(self, field_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        owner_id = self.require_user_id()
        with self._translate("Contact field update"):
            row = update_contact_field(self._conn, owner_id, field_id, values)
        if row is None:
            raise WriteRejectedError(f"Contact field {field_id} not found for this owner")
        return row

    def delete_contact_field(self, field_id: str) -> bool:
        owner_id = self.require_user_id()
        with self._translate("Contact field delete"):
            return delete_contact_field(self._conn, owner_id, field_id)

    def reorder_contact_fields(self, ordered_ids: Sequence[str]) -> None:
        owner_id = self.require_user_id()
        with self._translate("Contact field reorder"):
            rejected = reorder_contact_fields(self._conn, owner_id, ordered_ids)
        if rejected:
            raise WriteRejectedError(
                f"Contact field reorder rolled back; not owned: {', '.join(rejected)}"
            )
