"""API router composition for all route groups."""

from fastapi import APIRouter

from .routes import analytics, enrich, ops, search, suggestions

api_router = APIRouter()
api_router.include_router(search.router, prefix="/search", tags=["search"])
api_router.include_router(enrich.router, prefix="/enrich", tags=["enrich"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["analytics"])
api_router.include_router(suggestions.router, prefix="/suggestions", tags=["suggestions"])
api_router.include_router(ops.router, prefix="/ops", tags=["ops"])
