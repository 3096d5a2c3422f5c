"""
fallback_planner.py — Try one planner, fall back to another on any failure.

Composes two planners over the same request. The usual pairing is
DelegatedPlanner first and TemplatePlanner second, so that a slow, broken or
nonsensical decision never leaves the caller without a layout.
"""

import logging
from typing import Optional

from .base_planner import BasePositionPlanner, PlanRequest, PlanResult
from .template_planner import TemplatePlanner

logger = logging.getLogger(__name__)


class FallbackPlanner(BasePositionPlanner):
    """Run the primary planner; on failure, run the fallback instead."""

    name = "fallback"

    def __init__(
        self,
        primary: BasePositionPlanner,
        fallback: Optional[BasePositionPlanner] = None,
    ):
        self.primary = primary
        self.fallback = fallback or TemplatePlanner()

    async def plan(self, request: PlanRequest) -> PlanResult:
        try:
            return await self.primary.plan(request)
        except Exception as e:
            reason = f"{type(e).__name__}: {e}"
            logger.warning(f"{self.primary.name} planner failed, using {self.fallback.name}: {reason}")

        result = await self.fallback.plan(request)
        result.used_fallback = True
        result.fallback_reason = reason
        return result
