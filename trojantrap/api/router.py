"""Master API router: includes all sub-routers.

Mounted at the root: the web client calls ``/upload``, ``/scan`` etc.
without a version prefix.
"""

from fastapi import APIRouter

from .routes.payments import router as payments_router
from .routes.reports import router as reports_router
from .routes.scans import router as scans_router

api_router = APIRouter()

api_router.include_router(scans_router)
api_router.include_router(payments_router)
api_router.include_router(reports_router)
