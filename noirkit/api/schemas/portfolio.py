import re
from pydantic import BaseModel, Field, field_validator
from typing import List, Literal, Optional

ACHIEVEMENT_DESCRIPTION_MAX = 140


def _not_blank(v: Optional[str]) -> Optional[str]:
    if v is not None and not v.strip():
        raise ValueError("must not be blank")
    return v.strip() if v is not None else v


def _not_null(v):
    # Omit a field to leave it unchanged; only optional columns can be cleared
    if v is None:
        raise ValueError("must not be null")
    return v


def normalize_field_name(v: str) -> str:
    """Contact field names are lowercase alphanumerics: 'Full Name!' -> 'fullname'."""
    name = re.sub(r"[^a-z0-9]", "", v.lower())
    if not name:
        raise ValueError("Field name must contain letters or digits")
    return name


# --- read models -------------------------------------------------------------

class PersonalInfoDTO(BaseModel):
    id: str
    name: str = ""
    job_title: str = ""
    bio: str = ""
    profile_image: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    cv_file: str = ""


class SocialLinkDTO(BaseModel):
    id: str
    platform: str
    url: str
    icon: str
    order: int


class ProjectDTO(BaseModel):
    id: str
    name: str
    description: str
    deploy_link: str = ""
    github_link: str = ""
    tech_stack: List[str] = []
    images: List[str] = []
    order: int


class TechStackDTO(BaseModel):
    id: str
    name: str
    icon: str
    order: int


class AchievementDTO(BaseModel):
    id: str
    title: str
    description: str
    date: str
    type: Literal["education", "achievement"]
    order: int


class ContactFieldDTO(BaseModel):
    id: str
    name: str
    label: str
    type: Literal["text", "email", "textarea"]
    required: bool = False
    placeholder: Optional[str] = None
    order: int


class ContactFormDTO(BaseModel):
    id: str
    title: str
    description: str
    show_contact_info: bool = False
    fields: List[ContactFieldDTO] = []


class PortfolioDTO(BaseModel):
    owner_id: Optional[str] = None
    personal_info: Optional[PersonalInfoDTO] = None
    social_links: List[SocialLinkDTO] = []
    projects: List[ProjectDTO] = []
    tech_stack: List[TechStackDTO] = []
    achievements: List[AchievementDTO] = []
    contact_form: Optional[ContactFormDTO] = None


# --- write models ------------------------------------------------------------

class PersonalInfoUpdateDTO(BaseModel):
    name: Optional[str] = Field(None, max_length=200)
    job_title: Optional[str] = Field(None, max_length=200)
    bio: Optional[str] = Field(None, max_length=5000)
    profile_image: Optional[str] = None
    email: Optional[str] = Field(None, max_length=320)
    phone: Optional[str] = Field(None, max_length=50)
    location: Optional[str] = Field(None, max_length=200)
    cv_file: Optional[str] = None


class SocialLinkCreateDTO(BaseModel):
    platform: str = Field(..., max_length=100)
    url: str = Field(..., max_length=2000)
    icon: str

    @field_validator("platform", "url", "icon")
    @classmethod
    def required_not_blank(cls, v: str) -> str:
        return _not_blank(v)


class SocialLinkUpdateDTO(BaseModel):
    platform: Optional[str] = Field(None, max_length=100)
    url: Optional[str] = Field(None, max_length=2000)
    icon: Optional[str] = None

    @field_validator("platform", "url", "icon")
    @classmethod
    def given_not_blank(cls, v: Optional[str]) -> str:
        return _not_blank(_not_null(v))


class ProjectCreateDTO(BaseModel):
    name: str = Field(..., max_length=200)
    description: str = Field("", max_length=5000)
    deploy_link: str = ""
    github_link: str = ""
    tech_stack: List[str] = []
    images: List[str] = []

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        return _not_blank(v)


class ProjectUpdateDTO(BaseModel):
    name: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    deploy_link: Optional[str] = None
    github_link: Optional[str] = None
    tech_stack: Optional[List[str]] = None
    images: Optional[List[str]] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> str:
        return _not_blank(_not_null(v))

    @field_validator("tech_stack", "images")
    @classmethod
    def lists_not_null(cls, v: Optional[List[str]]) -> List[str]:
        return _not_null(v)


class TechStackCreateDTO(BaseModel):
    name: str = Field(..., max_length=100)
    icon: str

    @field_validator("name", "icon")
    @classmethod
    def required_not_blank(cls, v: str) -> str:
        return _not_blank(v)


class TechStackUpdateDTO(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    icon: Optional[str] = None

    @field_validator("name", "icon")
    @classmethod
    def given_not_blank(cls, v: Optional[str]) -> str:
        return _not_blank(_not_null(v))


class AchievementCreateDTO(BaseModel):
    title: str = Field(..., max_length=200)
    description: str = Field("", max_length=ACHIEVEMENT_DESCRIPTION_MAX)
    date: str = Field("", max_length=50)
    type: Literal["education", "achievement"] = "achievement"

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        return _not_blank(v)


class AchievementUpdateDTO(BaseModel):
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=ACHIEVEMENT_DESCRIPTION_MAX)
    date: Optional[str] = Field(None, max_length=50)
    type: Optional[Literal["education", "achievement"]] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> str:
        return _not_blank(_not_null(v))

    @field_validator("type")
    @classmethod
    def type_not_null(cls, v):
        return _not_null(v)


class ContactFormUpdateDTO(BaseModel):
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    show_contact_info: Optional[bool] = None


class ContactFieldCreateDTO(BaseModel):
    name: str = Field(..., max_length=50)
    label: str = Field(..., max_length=100)
    type: Literal["text", "email", "textarea"] = "text"
    required: bool = False
    placeholder: Optional[str] = Field(None, max_length=200)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        return normalize_field_name(v)

    @field_validator("label")
    @classmethod
    def label_not_blank(cls, v: str) -> str:
        return _not_blank(v)


class ContactFieldUpdateDTO(BaseModel):
    name: Optional[str] = Field(None, max_length=50)
    label: Optional[str] = Field(None, max_length=100)
    type: Optional[Literal["text", "email", "textarea"]] = None
    required: Optional[bool] = None
    placeholder: Optional[str] = Field(None, max_length=200)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: Optional[str]) -> str:
        return normalize_field_name(_not_null(v))

    @field_validator("label")
    @classmethod
    def label_not_blank(cls, v: Optional[str]) -> str:
        return _not_blank(_not_null(v))

    @field_validator("type", "required")
    @classmethod
    def not_null(cls, v):
        return _not_null(v)
