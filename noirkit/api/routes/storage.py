from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from noirkit.api.dependencies import get_dashboard_store, get_storage
from noirkit.api.helpers import store_errors
from noirkit.api.schemas.common import ApiResponse, DeleteResultDTO
from noirkit.api.schemas.storage import StorageStatsDTO, UploadResultDTO
from noirkit.services.portfolio_store import PortfolioStore
from noirkit.services.storage_service import (
    StorageError,
    StorageService,
    delete_cv,
    delete_profile_image,
    storage_stats,
    upload_cv,
    upload_profile_image,
    upload_project_image,
)

router = APIRouter(prefix="/dashboard/storage", tags=["storage"])


@router.get("", response_model=ApiResponse[StorageStatsDTO])
def get_storage_stats(
    store: PortfolioStore = Depends(get_dashboard_store),
    storage: StorageService = Depends(get_storage),
):
    stats = storage_stats(storage, store.require_owner_id())
    return ApiResponse(success=True, data=StorageStatsDTO(**stats), error=None)


@router.post("/profile-image", response_model=ApiResponse[UploadResultDTO])
def post_profile_image(
    file: UploadFile = File(...),
    store: PortfolioStore = Depends(get_dashboard_store),
    storage: StorageService = Depends(get_storage),
):
    try:
        with store_errors():
            url = upload_profile_image(storage, store, file.filename or "", file.file.read())
    except StorageError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    return ApiResponse(
        success=True,
        data=UploadResultDTO(url=url, message="Profile image uploaded successfully"),
        error=None,
    )


@router.delete("/profile-image", response_model=ApiResponse[DeleteResultDTO])
def delete_profile_image_route(
    store: PortfolioStore = Depends(get_dashboard_store),
    storage: StorageService = Depends(get_storage),
):
    try:
        with store_errors():
            deleted = delete_profile_image(storage, store)
    except StorageError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    return ApiResponse(success=True, data=DeleteResultDTO(deleted=deleted), error=None)


@router.post("/project-image", response_model=ApiResponse[UploadResultDTO])
def post_project_image(
    project_id: str = Form(...),
    index: int = Form(0),
    file: UploadFile = File(...),
    store: PortfolioStore = Depends(get_dashboard_store),
    storage: StorageService = Depends(get_storage),
):
    try:
        with store_errors():
            url = upload_project_image(storage, store, project_id, index, file.filename or "", file.file.read())
    except StorageError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    if url is None:
        raise HTTPException(status_code=404, detail="Project not found")
    return ApiResponse(
        success=True,
        data=UploadResultDTO(url=url, message="Project image uploaded successfully"),
        error=None,
    )


@router.post("/cv", response_model=ApiResponse[UploadResultDTO])
def post_cv(
    file: UploadFile = File(...),
    store: PortfolioStore = Depends(get_dashboard_store),
    storage: StorageService = Depends(get_storage),
):
    try:
        with store_errors():
            url = upload_cv(storage, store, file.filename or "", file.file.read())
    except StorageError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    return ApiResponse(
        success=True,
        data=UploadResultDTO(url=url, message="CV uploaded successfully"),
        error=None,
    )


@router.delete("/cv", response_model=ApiResponse[DeleteResultDTO])
def delete_cv_route(
    store: PortfolioStore = Depends(get_dashboard_store),
    storage: StorageService = Depends(get_storage),
):
    try:
        with store_errors():
            deleted = delete_cv(storage, store)
    except StorageError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    return ApiResponse(success=True, data=DeleteResultDTO(deleted=deleted), error=None)
