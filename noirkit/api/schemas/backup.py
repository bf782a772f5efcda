from pydantic import BaseModel


class ImportResultDTO(BaseModel):
    social_links: int = 0
    projects: int = 0
    tech_stack: int = 0
    achievements: int = 0
    contact_fields: int = 0
