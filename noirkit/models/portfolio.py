from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

AchievementType = Literal["education", "achievement"]
ContactFieldType = Literal["text", "email", "textarea"]

DEFAULT_CONTACT_FORM_TITLE = "Get In Touch"
DEFAULT_CONTACT_FORM_DESCRIPTION = "Let's discuss your next project"


@dataclass
class PersonalInfo:
    # Same id as the owning user; one row per owner
    id: str
    name: str = ""
    job_title: str = ""
    bio: str = ""
    profile_image: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    cv_file: str = ""

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "PersonalInfo":
        return cls(
            id=row["id"],
            name=row.get("name") or "",
            job_title=row.get("job_title") or "",
            bio=row.get("bio") or "",
            profile_image=row.get("profile_image") or "",
            email=row.get("email") or "",
            phone=row.get("phone") or "",
            location=row.get("location") or "",
            cv_file=row.get("cv_file") or "",
        )


@dataclass
class SocialLink:
    id: str
    platform: str
    url: str
    icon: str
    order: int = 0

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "SocialLink":
        return cls(
            id=row["id"],
            platform=row["platform"],
            url=row["url"],
            icon=row["icon"],
            order=row["order_index"],
        )


@dataclass
class Project:
    id: str
    name: str
    description: str
    deploy_link: str = ""
    github_link: str = ""
    # Free-text technology names, matched to TechStack.name by label
    tech_stack: List[str] = field(default_factory=list)
    images: List[str] = field(default_factory=list)
    order: int = 0

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Project":
        return cls(
            id=row["id"],
            name=row["name"],
            description=row.get("description") or "",
            deploy_link=row.get("deploy_link") or "",
            github_link=row.get("github_link") or "",
            tech_stack=list(row.get("tech_stack") or []),
            images=list(row.get("images") or []),
            order=row["order_index"],
        )


@dataclass
class TechStack:
    id: str
    name: str
    # Raw SVG path or markup
    icon: str
    order: int = 0

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "TechStack":
        return cls(id=row["id"], name=row["name"], icon=row["icon"], order=row["order_index"])


@dataclass
class Achievement:
    id: str
    title: str
    description: str
    # Free text: "2021", "Mar 2022", "2019 - 2023" are all valid
    date: str
    type: AchievementType = "achievement"
    order: int = 0

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Achievement":
        return cls(
            id=row["id"],
            title=row["title"],
            description=row.get("description") or "",
            date=row.get("date") or "",
            type=row["type"],
            order=row["order_index"],
        )


@dataclass
class ContactField:
    id: str
    name: str
    label: str
    type: ContactFieldType = "text"
    required: bool = False
    placeholder: Optional[str] = None
    order: int = 0

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ContactField":
        return cls(
            id=row["id"],
            name=row["name"],
            label=row["label"],
            type=row["type"],
            required=bool(row.get("required")),
            placeholder=row.get("placeholder"),
            order=row["order_index"],
        )


@dataclass
class ContactForm:
    id: str
    title: str = DEFAULT_CONTACT_FORM_TITLE
    description: str = DEFAULT_CONTACT_FORM_DESCRIPTION
    show_contact_info: bool = False
    fields: List[ContactField] = field(default_factory=list)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ContactForm":
        return cls(
            id=row["id"],
            title=row.get("title") or DEFAULT_CONTACT_FORM_TITLE,
            description=row.get("description") or DEFAULT_CONTACT_FORM_DESCRIPTION,
            show_contact_info=bool(row.get("show_contact_info")),
            fields=[ContactField.from_row(f) for f in row.get("fields") or []],
        )
