from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from noirkit.api.dependencies import get_dashboard_store
from noirkit.api.helpers import store_errors
from noirkit.api.schemas.backup import ImportResultDTO
from noirkit.api.schemas.common import ApiResponse
from noirkit.services.backup_service import backup_filename, export_backup, import_backup
from noirkit.services.portfolio_store import PortfolioStore

router = APIRouter(prefix="/dashboard/backup", tags=["backup"])


@router.get("")
def get_backup(store: PortfolioStore = Depends(get_dashboard_store)):
    """Download the whole portfolio as a JSON attachment."""
    return JSONResponse(
        export_backup(store),
        headers={"Content-Disposition": f'attachment; filename="{backup_filename()}"'},
    )


@router.post("", response_model=ApiResponse[ImportResultDTO])
def post_backup(
    data: dict = Body(...),
    store: PortfolioStore = Depends(get_dashboard_store),
):
    # BackupFormatError is a ValueError, so it maps to 400
    with store_errors():
        counts = import_backup(store, data)
    return ApiResponse(success=True, data=ImportResultDTO(**counts), error=None)
