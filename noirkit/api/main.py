import logging
import os
import sys
from dotenv import load_dotenv
from fastapi import FastAPI

from noirkit import __version__
from noirkit.api.auth.routes import router as auth_router
from noirkit.api.routes import (
    backup_router,
    contact_form_router,
    contact_router,
    dashboard_router,
    public_router,
    storage_router,
)

# Load environment variables from a local .env (if present).
# Skip under pytest to avoid cross-test side effects from a developer's local .env.
if "pytest" not in sys.modules:
    # Only override if JWT_SECRET is missing/empty in the current process environment.
    override = os.getenv("JWT_SECRET") in (None, "")
    load_dotenv(override=override)

    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

app = FastAPI(title="NoirKit API", version=__version__)

@app.get("/health")
def health():
    return {"status": "ok"}

app.include_router(auth_router)
app.include_router(dashboard_router)
app.include_router(contact_form_router)
app.include_router(backup_router)
app.include_router(storage_router)
app.include_router(contact_router)
app.include_router(public_router)
