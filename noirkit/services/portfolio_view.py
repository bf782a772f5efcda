"""
Public portfolio payload built from a loaded PortfolioStore.

Project technologies are free-text labels. Each is matched against the
owner's tech stack by case-insensitive name; unmatched labels get their
upper-cased first letter as a glyph instead of an icon.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Optional, Sequence

from noirkit.models.portfolio import (
    DEFAULT_CONTACT_FORM_DESCRIPTION,
    DEFAULT_CONTACT_FORM_TITLE,
    Project,
    TechStack,
)
from noirkit.services.portfolio_store import PortfolioStore

DEFAULT_CONTACT_FIELDS: List[Dict[str, Any]] = [
    {"id": "1", "name": "name", "label": "Name", "type": "text", "required": True, "placeholder": "Your name", "order": 0},
    {"id": "2", "name": "email", "label": "Email", "type": "email", "required": True, "placeholder": "your@email.com", "order": 1},
    {"id": "3", "name": "message", "label": "Message", "type": "textarea", "required": True, "placeholder": "Your message", "order": 2},
]


def resolve_technology(name: str, tech_stack: Sequence[TechStack]) -> Dict[str, Optional[str]]:
    wanted = name.lower()
    match = next((t for t in tech_stack if t.name.lower() == wanted), None)
    if match is not None:
        return {"name": name, "icon": match.icon, "glyph": None}
    return {"name": name, "icon": None, "glyph": name[:1].upper() or None}


def project_view(project: Project, tech_stack: Sequence[TechStack]) -> Dict[str, Any]:
    data = asdict(project)
    data["technologies"] = [resolve_technology(t, tech_stack) for t in project.tech_stack]
    return data


def contact_form_view(store: PortfolioStore) -> Dict[str, Any]:
    form = store.contact_form
    if form is None:
        return {
            "title": DEFAULT_CONTACT_FORM_TITLE,
            "description": DEFAULT_CONTACT_FORM_DESCRIPTION,
            "show_contact_info": False,
            "fields": [dict(f) for f in DEFAULT_CONTACT_FIELDS],
        }

    fields = [asdict(f) for f in form.fields] or [dict(f) for f in DEFAULT_CONTACT_FIELDS]
    for f in fields:
        if not f.get("placeholder"):
            f["placeholder"] = f"Enter your {f['label'].lower()}"
    return {
        "title": form.title or DEFAULT_CONTACT_FORM_TITLE,
        "description": form.description,
        "show_contact_info": form.show_contact_info,
        "fields": fields,
    }


def empty_view() -> Dict[str, Any]:
    return {
        "is_set_up": False,
        "owner_id": None,
        "personal_info": None,
        "social_links": [],
        "projects": [],
        "tech_stack": [],
        "achievements": {"education": [], "achievement": []},
        "contact_form": None,
    }


def build_public_view(store: PortfolioStore) -> Dict[str, Any]:
    """Everything the public page renders, in display order."""
    if store.owner_id is None:
        return empty_view()

    info = store.personal_info
    return {
        "is_set_up": info is not None and bool(info.name),
        "owner_id": store.owner_id,
        "personal_info": asdict(info) if info else None,
        "social_links": [asdict(link) for link in store.social_links],
        "projects": [project_view(p, store.tech_stack) for p in store.projects],
        "tech_stack": [asdict(t) for t in store.tech_stack],
        "achievements": {
            "education": [asdict(a) for a in store.achievements if a.type == "education"],
            "achievement": [asdict(a) for a in store.achievements if a.type == "achievement"],
        },
        "contact_form": contact_form_view(store),
    }
