"""Health check routes."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from arranger.api.dependencies import get_llm_client
from arranger.config import ArrangerSettings, get_settings
from arranger.llm import LLMClient

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    timestamp: str
    version: str
    llm_available: bool


@router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: ArrangerSettings = Depends(get_settings),
    llm: LLMClient = Depends(get_llm_client),
):
    """Basic health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=settings.app_version,
        llm_available=llm.is_available(),
    )
