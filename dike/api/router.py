from fastapi import APIRouter

from dike.api.analyze import router as analyze_router
from dike.api.export import router as export_router

api_router = APIRouter(prefix="/api")
api_router.include_router(analyze_router)
api_router.include_router(export_router)
