import json
import logging
from sqlite3 import Connection
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from noirkit.api.dependencies import get_db, get_optional_user_id, get_rate_limiter, get_settings
from noirkit.config import Settings
from noirkit.services.contact_service import ContactSubmissionError, list_submissions, submit_contact
from noirkit.services.rate_limiter import FixedWindowRateLimiter

logger = logging.getLogger(__name__)

# Public contact endpoint. Responses use {error} / {message, data, rateLimitRemaining}
# rather than the dashboard ApiResponse envelope.
router = APIRouter(prefix="/api/contact", tags=["contact"])


@router.post("")
async def post_contact(
    request: Request,
    conn: Connection = Depends(get_db),
    limiter: FixedWindowRateLimiter = Depends(get_rate_limiter),
    settings: Settings = Depends(get_settings),
):
    raw = await request.body()
    try:
        body = json.loads(raw) if raw else None
    except (UnicodeDecodeError, json.JSONDecodeError):
        # Still rate limited first; the structure check rejects it
        body = None

    try:
        result = await run_in_threadpool(
            submit_contact,
            conn,
            limiter,
            headers=request.headers,
            body=body,
            settings=settings,
        )
    except ContactSubmissionError as exc:
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)

    return JSONResponse(result, status_code=200)


@router.get("")
def get_contact_submissions(
    user_id: Optional[str] = Depends(get_optional_user_id),
    conn: Connection = Depends(get_db),
):
    if user_id is None:
        return JSONResponse({"error": "Unauthorized"}, status_code=401)

    try:
        data = list_submissions(conn, user_id)
    except ContactSubmissionError as exc:
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)

    return JSONResponse({"data": data}, status_code=200)
