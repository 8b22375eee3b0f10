"""API router aggregation."""

from fastapi import APIRouter

from app.api.routes.dosen import router as dosen_router
from app.api.routes.profile import router as profile_router
from app.api.routes.thesis import router as thesis_router

api_router = APIRouter(prefix="/api")
api_router.include_router(profile_router)
api_router.include_router(thesis_router)
api_router.include_router(dosen_router)
