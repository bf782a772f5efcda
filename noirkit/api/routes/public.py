import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from noirkit.api.dependencies import get_public_store, get_storage
from noirkit.api.schemas.common import ApiResponse
from noirkit.services.data_service import DataServiceError
from noirkit.services.portfolio_store import PortfolioStore
from noirkit.services.portfolio_view import build_public_view, empty_view
from noirkit.services.storage_service import StorageService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["public"])


@router.get("/portfolio", response_model=ApiResponse[Dict[str, Any]])
def get_public_portfolio(store: PortfolioStore = Depends(get_public_store)):
    # The public page must render even if the backend is down
    try:
        store.fetch_all()
    except DataServiceError:
        logger.warning("Public portfolio unavailable, serving empty view")
        return ApiResponse(success=True, data=empty_view(), error=None)
    return ApiResponse(success=True, data=build_public_view(store), error=None)


@router.get("/storage/{bucket}/{object_path:path}")
def get_stored_file(
    bucket: str,
    object_path: str,
    storage: StorageService = Depends(get_storage),
):
    path = storage.resolve(bucket, object_path)
    if path is None:
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(path)
