"""
Portfolio store: the single source of truth for one owner's portfolio
during a session.

Every mutation is write-then-reconcile: the remote write goes first and the
local collections change only after it is confirmed. A failed write leaves
local state untouched, records the message in `error` and re-raises.
Nothing here retries.

Calls are not serialized against each other. Two overlapping reorders of the
same collection end with whichever finished last (last writer wins).
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import asdict, dataclass, replace
from typing import Any, Callable, Dict, Iterator, List, Literal, Mapping, Optional, Sequence

from noirkit.models.portfolio import (
    DEFAULT_CONTACT_FORM_DESCRIPTION,
    DEFAULT_CONTACT_FORM_TITLE,
    Achievement,
    ContactField,
    ContactForm,
    PersonalInfo,
    Project,
    SocialLink,
    TechStack,
)
from noirkit.services.data_service import DataService, DataServiceError

logger = logging.getLogger(__name__)

StoreStatus = Literal["uninitialized", "loaded"]
Listener = Callable[["PortfolioStore"], None]

# Keys the caller may send but the store owns
_STORE_MANAGED_KEYS = ("id", "order")


@dataclass(frozen=True)
class _Family:
    attr: str
    table: str
    model: type
    label: str


SOCIAL_LINKS = _Family("social_links", "social_links", SocialLink, "social link")
PROJECTS = _Family("projects", "projects", Project, "project")
TECH_STACK = _Family("tech_stack", "tech_stack", TechStack, "tech stack item")
ACHIEVEMENTS = _Family("achievements", "achievements", Achievement, "achievement")

FAMILIES = (SOCIAL_LINKS, PROJECTS, TECH_STACK, ACHIEVEMENTS)


def _writable(values: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in values.items() if k not in _STORE_MANAGED_KEYS}


class PortfolioStore:
    def __init__(self, data_service: DataService):
        self._data = data_service
        self._listeners: List[Listener] = []

        self.status: StoreStatus = "uninitialized"
        self.loading = False
        self.error: Optional[str] = None

        self.owner_id: Optional[str] = None
        self.personal_info: Optional[PersonalInfo] = None
        self.social_links: List[SocialLink] = []
        self.projects: List[Project] = []
        self.tech_stack: List[TechStack] = []
        self.achievements: List[Achievement] = []
        self.contact_form: Optional[ContactForm] = None

    # --- subscriptions -----------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener(store)` after every state change. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, **changes: Any) -> None:
        for key, value in changes.items():
            setattr(self, key, value)
        for listener in list(self._listeners):
            listener(self)

    @contextmanager
    def _operation(self, action: str) -> Iterator[None]:
        self.error = None
        try:
            yield
        except Exception as exc:
            logger.error("%s failed: %s", action, exc)
            self._set(error=str(exc) or action + " failed")
            raise

    def require_owner_id(self) -> str:
        """Owner of the current session; raises UnauthenticatedError without one."""
        return self._data.require_user_id()

    def snapshot(self) -> Dict[str, Any]:
        return {
            "owner_id": self.owner_id,
            "personal_info": asdict(self.personal_info) if self.personal_info else None,
            "social_links": [asdict(x) for x in self.social_links],
            "projects": [asdict(x) for x in self.projects],
            "tech_stack": [asdict(x) for x in self.tech_stack],
            "achievements": [asdict(x) for x in self.achievements],
            "contact_form": asdict(self.contact_form) if self.contact_form else None,
        }

    # --- loading -----------------------------------------------------------

    def fetch_all(self) -> None:
        """
        Load the portfolio and replace every collection at once.

        The authenticated owner's portfolio is loaded when there is a session,
        otherwise the first available one. When no portfolio exists yet the
        store ends up loaded and empty without raising.
        """
        self._set(loading=True, error=None)
        try:
            owner_id = self._data.current_user_id() or self._data.first_owner_id()
            if owner_id is None:
                logger.info("No portfolio exists yet")
                self._set(
                    owner_id=None,
                    personal_info=None,
                    social_links=[],
                    projects=[],
                    tech_stack=[],
                    achievements=[],
                    contact_form=None,
                    status="loaded",
                    loading=False,
                )
                return

            profile = self._data.get_profile(owner_id)
            social_links = [SocialLink.from_row(r) for r in self._data.list_rows("social_links", owner_id)]
            projects = [Project.from_row(r) for r in self._data.list_rows("projects", owner_id)]
            tech_stack = [TechStack.from_row(r) for r in self._data.list_rows("tech_stack", owner_id)]
            achievements = [Achievement.from_row(r) for r in self._data.list_rows("achievements", owner_id)]
            form_row = self._data.get_contact_form(owner_id)
        except DataServiceError as exc:
            logger.error("Error fetching portfolio: %s", exc)
            self._set(loading=False, error=str(exc))
            raise

        self._set(
            owner_id=owner_id,
            personal_info=PersonalInfo.from_row(profile) if profile else None,
            social_links=social_links,
            projects=projects,
            tech_stack=tech_stack,
            achievements=achievements,
            contact_form=ContactForm.from_row(form_row) if form_row else None,
            status="loaded",
            loading=False,
        )

    # --- personal info -----------------------------------------------------

    def update_personal_info(self, changes: Mapping[str, Any]) -> PersonalInfo:
        """Save personal info fields, creating the row on first save."""
        with self._operation("Update personal info"):
            row = self._data.upsert_profile(_writable(changes))
            info = PersonalInfo.from_row(row)
            self._set(personal_info=info, owner_id=self.owner_id or info.id)
        return info

    # --- generic ordered collections --------------------------------------

    def _add(self, family: _Family, values: Mapping[str, Any]):
        with self._operation(f"Add {family.label}"):
            order_index = len(getattr(self, family.attr))
            row = self._data.insert_row(family.table, _writable(values), order_index)
            record = family.model.from_row(row)
            self._set(**{family.attr: [*getattr(self, family.attr), record]})
        return record

    def _update(self, family: _Family, item_id: str, changes: Mapping[str, Any]):
        with self._operation(f"Update {family.label}"):
            if not any(item.id == item_id for item in getattr(self, family.attr)):
                logger.debug("Skipping update of unknown %s %s", family.label, item_id)
                return None

            row = self._data.update_row(family.table, item_id, _writable(changes))

            # Rebuilt from the stored row, same as a refetch would
            updated = family.model.from_row(row)
            merged = [updated if item.id == item_id else item for item in getattr(self, family.attr)]
            self._set(**{family.attr: merged})
        return updated

    def _delete(self, family: _Family, item_id: str) -> bool:
        with self._operation(f"Delete {family.label}"):
            self._data.delete_row(family.table, item_id)
            current = getattr(self, family.attr)
            remaining = [item for item in current if item.id != item_id]
            self._set(**{family.attr: remaining})
        return len(remaining) != len(current)

    def _reorder(self, family: _Family, items: Sequence[Any]) -> list:
        items = list(items)
        with self._operation(f"Reorder {family.label}s"):
            self._data.reorder_rows(family.table, [item.id for item in items])
            reordered = [replace(item, order=index) for index, item in enumerate(items)]
            self._set(**{family.attr: reordered})
        return reordered

    # --- social links ------------------------------------------------------

    def add_social_link(self, values: Mapping[str, Any]) -> SocialLink:
        return self._add(SOCIAL_LINKS, values)

    def update_social_link(self, item_id: str, changes: Mapping[str, Any]) -> Optional[SocialLink]:
        return self._update(SOCIAL_LINKS, item_id, changes)

    def delete_social_link(self, item_id: str) -> bool:
        return self._delete(SOCIAL_LINKS, item_id)

    def reorder_social_links(self, links: Sequence[SocialLink]) -> List[SocialLink]:
        return self._reorder(SOCIAL_LINKS, links)

    # --- projects ----------------------------------------------------------

    def add_project(self, values: Mapping[str, Any]) -> Project:
        return self._add(PROJECTS, values)

    def update_project(self, item_id: str, changes: Mapping[str, Any]) -> Optional[Project]:
        return self._update(PROJECTS, item_id, changes)

    def delete_project(self, item_id: str) -> bool:
        return self._delete(PROJECTS, item_id)

    def reorder_projects(self, projects: Sequence[Project]) -> List[Project]:
        return self._reorder(PROJECTS, projects)

    # --- tech stack --------------------------------------------------------

    def add_tech_stack(self, values: Mapping[str, Any]) -> TechStack:
        return self._add(TECH_STACK, values)

    def update_tech_stack(self, item_id: str, changes: Mapping[str, Any]) -> Optional[TechStack]:
        return self._update(TECH_STACK, item_id, changes)

    def delete_tech_stack(self, item_id: str) -> bool:
        return self._delete(TECH_STACK, item_id)

    def reorder_tech_stack(self, tech_stack: Sequence[TechStack]) -> List[TechStack]:
        return self._reorder(TECH_STACK, tech_stack)

    # --- achievements ------------------------------------------------------

    def add_achievement(self, values: Mapping[str, Any]) -> Achievement:
        return self._add(ACHIEVEMENTS, values)

    def update_achievement(self, item_id: str, changes: Mapping[str, Any]) -> Optional[Achievement]:
        return self._update(ACHIEVEMENTS, item_id, changes)

    def delete_achievement(self, item_id: str) -> bool:
        return self._delete(ACHIEVEMENTS, item_id)

    def reorder_achievements(self, achievements: Sequence[Achievement]) -> List[Achievement]:
        return self._reorder(ACHIEVEMENTS, achievements)

    # --- contact form ------------------------------------------------------

    def update_contact_form(self, changes: Mapping[str, Any]) -> ContactForm:
        """Update the contact form, creating it if the owner has none yet."""
        with self._operation("Update contact form"):
            fields = {k: v for k, v in _writable(changes).items() if k != "fields"}
            current = self.contact_form

            if current is not None and current.id:
                row = self._data.update_contact_form(current.id, fields)
                form = ContactForm.from_row(row)
            else:
                row = self._data.insert_contact_form(
                    {
                        "title": DEFAULT_CONTACT_FORM_TITLE,
                        "description": DEFAULT_CONTACT_FORM_DESCRIPTION,
                        "show_contact_info": False,
                        **fields,
                    }
                )
                form = ContactForm.from_row(row)
            self._set(contact_form=form)
        return form

    def _ensure_contact_form(self) -> ContactForm:
        form = self.contact_form
        if form is not None and form.id:
            return form

        owner_id = self._data.require_user_id()
        row = self._data.get_contact_form(owner_id)
        if row is None:
            row = self._data.insert_contact_form(
                {
                    "title": DEFAULT_CONTACT_FORM_TITLE,
                    "description": DEFAULT_CONTACT_FORM_DESCRIPTION,
                    "show_contact_info": False,
                }
            )
        form = ContactForm.from_row(row)
        self._set(contact_form=form)
        return form

    def add_contact_field(self, values: Mapping[str, Any]) -> ContactField:
        """
        Append a field to the contact form.

        With no form yet, the owner's latest stored form is adopted or a
        default one is created first. Not safe against concurrent double calls.
        """
        with self._operation("Add contact field"):
            form = self._ensure_contact_form()
            row = self._data.insert_contact_field(form.id, _writable(values), len(form.fields))
            field = ContactField.from_row(row)
            self._set(contact_form=replace(self.contact_form, fields=[*self.contact_form.fields, field]))
        return field

    def update_contact_field(self, field_id: str, changes: Mapping[str, Any]) -> Optional[ContactField]:
        with self._operation("Update contact field"):
            form = self.contact_form
            if form is None or not any(f.id == field_id for f in form.fields):
                logger.debug("Skipping update of unknown contact field %s", field_id)
                return None

            row = self._data.update_contact_field(field_id, _writable(changes))

            updated = ContactField.from_row(row)
            merged = [updated if f.id == field_id else f for f in self.contact_form.fields]
            self._set(contact_form=replace(self.contact_form, fields=merged))
        return updated

    def delete_contact_field(self, field_id: str) -> bool:
        with self._operation("Delete contact field"):
            self._data.delete_contact_field(field_id)
            form = self.contact_form
            if form is None:
                return False
            remaining = [f for f in form.fields if f.id != field_id]
            self._set(contact_form=replace(form, fields=remaining))
        return len(remaining) != len(form.fields)

    def reorder_contact_fields(self, fields: Sequence[ContactField]) -> List[ContactField]:
        fields = list(fields)
        with self._operation("Reorder contact fields"):
            self._data.reorder_contact_fields([f.id for f in fields])
            reordered = [replace(f, order=index) for index, f in enumerate(fields)]
            if self.contact_form is not None:
                self._set(contact_form=replace(self.contact_form, fields=reordered))
        return reordered
