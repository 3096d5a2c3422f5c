"""
layout_strategies — Pluggable position planners.

- TemplatePlanner: deterministic, archetype-driven placement
- DelegatedPlanner: positions proposed by an external decision-maker (LLM)
- FallbackPlanner: runs one planner and falls back to another on failure

Each planner implements the BasePositionPlanner interface and is selected by
name through get_planner().
"""

from typing import Optional

from .base_planner import (
    AssignmentBuilder,
    BasePositionPlanner,
    PlanRequest,
    PlanResult,
    Unit,
    all_units,
    unit_anchor,
)
from .delegated_planner import DecideFn, DelegatedPlanner, build_decision_prompt, parse_positions
from .fallback_planner import FallbackPlanner
from .template_planner import TemplatePlanner, button_metrics, fit_cell_width

__all__ = [
    'AssignmentBuilder',
    'BasePositionPlanner',
    'PlanRequest',
    'PlanResult',
    'Unit',
    'all_units',
    'unit_anchor',
    'DecideFn',
    'DelegatedPlanner',
    'build_decision_prompt',
    'parse_positions',
    'FallbackPlanner',
    'TemplatePlanner',
    'button_metrics',
    'fit_cell_width',
    'get_planner',
    'PLANNERS',
]


# Planner names accepted by get_planner
PLANNERS = ('template', 'delegated', 'fallback')


def get_planner(planner_name: str, decide: Optional[DecideFn] = None) -> BasePositionPlanner:
    """
    Get a planner instance by name.

    "delegated" and "fallback" need a decide callable; "fallback" wraps a
    DelegatedPlanner around the template planner.
    """
    name = planner_name.lower()
    if name not in PLANNERS:
        raise ValueError(f"Unknown planner: {planner_name}. Available: {list(PLANNERS)}")
    if name == 'template':
        return TemplatePlanner()
    if decide is None:
        raise ValueError(f"Planner '{name}' needs a decide callable")
    template = TemplatePlanner()
    delegated = DelegatedPlanner(decide, template=template)
    if name == 'delegated':
        return delegated
    return FallbackPlanner(delegated, fallback=template)
