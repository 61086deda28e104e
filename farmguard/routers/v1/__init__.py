from fastapi import APIRouter

from farmguard.routers.v1.reports import router as reports_router
from farmguard.routers.v1.detections import router as detections_router
from farmguard.routers.v1.automation import router as automation_router
from farmguard.routers.v1.admin import router as admin_router

api_router = APIRouter()
api_router.include_router(reports_router, tags=["reports"])
api_router.include_router(detections_router, tags=["detections"])
api_router.include_router(automation_router, tags=["automation"])
api_router.include_router(admin_router, tags=["admin"])
