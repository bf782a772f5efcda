from pydantic import BaseModel
from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")

class ErrorDTO(BaseModel):
    message: str
    code: int

class ApiResponse(BaseModel, Generic[T]):
    success: bool
    data: Optional[T] = None
    error: Optional[ErrorDTO] = None


class DeleteResultDTO(BaseModel):
    deleted: bool


class ReorderRequestDTO(BaseModel):
    # Every id of the collection, in the new display order
    ids: List[str]
