from pydantic import BaseModel


class UploadResultDTO(BaseModel):
    url: str
    message: str


class StorageStatsDTO(BaseModel):
    profile_images: int
    project_images: int
    cv_files: int
