"""
noirkit/api/routes/__init__.py

Convenience exports for FastAPI routers.
This keeps `noirkit/api/main.py` imports clean and centralized.
"""

from noirkit.api.routes.dashboard import router as dashboard_router
from noirkit.api.routes.contact_form import router as contact_form_router
from noirkit.api.routes.backup import router as backup_router
from noirkit.api.routes.storage import router as storage_router
from noirkit.api.routes.contact import router as contact_router
from noirkit.api.routes.public import router as public_router
