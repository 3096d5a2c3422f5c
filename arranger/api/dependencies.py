"""API dependencies for engine and collaborator construction."""

from typing import AsyncGenerator

from fastapi import Depends

from arranger.canvas import CanvasClient
from arranger.config import ArrangerSettings, get_settings
from arranger.engine import LayoutEngine
from arranger.llm import LLMClient, LLMConfig


def get_llm_client(settings: ArrangerSettings = Depends(get_settings)) -> LLMClient:
    """LLM client built from settings. Its API client is created on first use."""
    return LLMClient(LLMConfig(**settings.llm.model_dump()))


async def get_canvas_client(
    settings: ArrangerSettings = Depends(get_settings),
) -> AsyncGenerator[CanvasClient, None]:
    """Canvas client for one request, closed when the request ends."""
    client = CanvasClient(
        base_url=settings.canvas.base_url,
        timeout=settings.canvas.timeout,
        tool_aliases=settings.canvas.tool_aliases,
    )
    try:
        yield client
    finally:
        await client.aclose()


def get_engine(
    settings: ArrangerSettings = Depends(get_settings),
    canvas: CanvasClient = Depends(get_canvas_client),
    llm: LLMClient = Depends(get_llm_client),
) -> LayoutEngine:
    """Layout engine wired to the configured collaborators."""
    return LayoutEngine(
        canvas=canvas,
        decide=llm.decide,
        role_thresholds=settings.roles,
        pairing_thresholds=settings.pairing,
        template_batch_size=settings.batches.template_batch_size,
        delegated_batch_size=settings.batches.delegated_batch_size,
        corner_radius=settings.corner_radius,
    )
