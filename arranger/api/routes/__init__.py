"""API routes for Canvas Arranger."""

from fastapi import APIRouter

from arranger.api.routes.health import router as health_router
from arranger.api.routes.layout import router as layout_router

# Main API router (mounted under the API prefix)
api_router = APIRouter()
api_router.include_router(layout_router, prefix="/layout", tags=["Layout"])

__all__ = ["api_router", "health_router"]
