"""
Export and import of a whole portfolio as a JSON document.

Import appends: entries are added through the store next to whatever the
owner already has, personal info and contact form settings are overwritten.
Every entry goes through the same pydantic input models as the dashboard
routes, and the whole document is checked before the first write.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any, Dict, Mapping, Optional, Type

from pydantic import BaseModel, ValidationError

from noirkit.api.schemas.portfolio import (
    AchievementCreateDTO,
    ContactFieldCreateDTO,
    ContactFormUpdateDTO,
    PersonalInfoUpdateDTO,
    ProjectCreateDTO,
    SocialLinkCreateDTO,
    TechStackCreateDTO,
)
from noirkit.services.portfolio_store import PortfolioStore

logger = logging.getLogger(__name__)

BACKUP_VERSION = "1.0"
REQUIRED_SECTIONS = ("personal_info", "projects", "tech_stack")

_COLLECTIONS: Dict[str, Type[BaseModel]] = {
    "social_links": SocialLinkCreateDTO,
    "projects": ProjectCreateDTO,
    "tech_stack": TechStackCreateDTO,
    "achievements": AchievementCreateDTO,
}


class BackupFormatError(ValueError):
    """The uploaded document is not a portfolio backup."""


def _importable(dto: Type[BaseModel], item: Any, where: str, partial: bool = False) -> Dict[str, Any]:
    if not isinstance(item, Mapping):
        raise BackupFormatError(f"{where}: expected an object")
    try:
        parsed = dto.model_validate(item)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise BackupFormatError(f"{where}: {problems}") from exc
    return parsed.model_dump(exclude_unset=partial)


def _list_section(data: Mapping[str, Any], key: str) -> list:
    section = data.get(key) or []
    if not isinstance(section, list):
        raise BackupFormatError(f"{key} must be a list")
    return section


def backup_filename(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(UTC)
    return f"portfolio-backup-{now.date().isoformat()}.json"


def export_backup(store: PortfolioStore, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Serialize the loaded store. Call store.fetch_all() first."""
    now = now or datetime.now(UTC)
    snapshot = store.snapshot()
    snapshot.pop("owner_id", None)
    return {**snapshot, "export_date": now.isoformat(), "version": BACKUP_VERSION}


def validate_backup(data: Any) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise BackupFormatError("Invalid backup file format")
    missing = [key for key in REQUIRED_SECTIONS if data.get(key) is None]
    if missing or not isinstance(data["personal_info"], dict):
        raise BackupFormatError("Invalid backup file format")
    return data


def _parse_backup(data: Any) -> Dict[str, Any]:
    data = validate_backup(data)
    parsed: Dict[str, Any] = {
        "personal_info": _importable(PersonalInfoUpdateDTO, data["personal_info"], "personal_info", partial=True),
    }
    for key, dto in _COLLECTIONS.items():
        parsed[key] = [
            _importable(dto, item, f"{key}[{i}]") for i, item in enumerate(_list_section(data, key))
        ]

    form = data.get("contact_form")
    parsed["contact_form"] = None
    parsed["contact_fields"] = []
    if isinstance(form, dict):
        parsed["contact_form"] = _importable(ContactFormUpdateDTO, form, "contact_form", partial=True)
        parsed["contact_fields"] = [
            _importable(ContactFieldCreateDTO, item, f"contact_form.fields[{i}]")
            for i, item in enumerate(_list_section(form, "fields"))
        ]
    return parsed


def import_backup(store: PortfolioStore, data: Any) -> Dict[str, int]:
    """
    Apply a backup document to the owner's portfolio.

    Raises BackupFormatError before any write when a section is missing or an
    entry breaks the input rules. Store errors raised part way through leave
    the entries already applied in place.
    """
    parsed = _parse_backup(data)
    counts = {"social_links": 0, "projects": 0, "tech_stack": 0, "achievements": 0, "contact_fields": 0}
    adders = {
        "social_links": store.add_social_link,
        "projects": store.add_project,
        "tech_stack": store.add_tech_stack,
        "achievements": store.add_achievement,
    }

    store.update_personal_info(parsed["personal_info"])

    for key, add in adders.items():
        for values in parsed[key]:
            add(values)
            counts[key] += 1

    if parsed["contact_form"] is not None:
        store.update_contact_form(parsed["contact_form"])
        existing = {f.name for f in store.contact_form.fields}
        for values in parsed["contact_fields"]:
            if values["name"] in existing:
                continue
            store.add_contact_field(values)
            existing.add(values["name"])
            counts["contact_fields"] += 1

    logger.info("Imported backup: %s", counts)
    return counts
