"""
delegated_planner.py — Positions proposed by an external decision-maker.

The planner describes the layout problem as text, hands it to a decide()
callable (normally LLMClient.decide) and reads a JSON array of
{"id", "x", "y"} entries back. Whatever the response does not cover is taken
from the deterministic plan, so the result always covers every unit:

- units missing from the response keep their template position
- partner texts follow their rectangle (centered, display text right-aligned)
- width overrides always come from the template plan

A response with no usable entry raises DecisionParseError; FallbackPlanner
turns that into a plain template plan.
"""

import json
import logging
import math
import re
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Tuple

from ...llm.prompts import LAYOUT_DECISION_PROMPT, LAYOUT_SYSTEM_PROMPT
from ..canonical_tables import render_table
from ..data_models import DisplayGroup, Pair
from ..errors import DecisionParseError
from ..labels import extract_label
from .base_planner import (
    AssignmentBuilder,
    BasePositionPlanner,
    PlanRequest,
    PlanResult,
    all_units,
    unit_anchor,
    unit_role,
)
from .template_planner import TemplatePlanner, button_metrics

logger = logging.getLogger(__name__)

DecideFn = Callable[[str, str], Awaitable[str]]

_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")


# =============================================================================
# PROMPT
# =============================================================================

def describe_units(request: PlanRequest) -> List[Dict[str, Any]]:
    """One record per unit, in appearance order."""
    records = []
    for unit in all_units(request.grouped):
        anchor = unit_anchor(unit)
        if isinstance(unit, DisplayGroup):
            label = extract_label(unit.text) if unit.text is not None else ""
        elif isinstance(unit, Pair):
            label = extract_label(unit.text)
        else:
            label = extract_label(anchor)
        records.append({
            "id": anchor.id,
            "role": unit_role(unit, request.grouped),
            "label": label,
            "width": anchor.width,
            "height": anchor.height,
            "x": anchor.x,
            "y": anchor.y,
        })
    return records


def build_decision_prompt(request: PlanRequest) -> str:
    """Render the layout problem. Same request, same text."""
    ctx = request.context
    button_w, button_h = button_metrics(request.grouped)
    units = describe_units(request)
    return LAYOUT_DECISION_PROMPT.format(
        ui_type=request.ui_type.value,
        container_width=_fmt(ctx.container_width),
        container_height=_fmt(ctx.container_height),
        start_x=_fmt(ctx.start_x),
        start_y=_fmt(ctx.start_y),
        gap_x=_fmt(ctx.gap_x),
        gap_y=_fmt(ctx.gap_y),
        margin=_fmt(request.margin),
        unit_count=len(units),
        units=json.dumps(units, indent=2, ensure_ascii=False),
        button_width=_fmt(button_w),
        button_height=_fmt(button_h),
        reference=render_table(request.ui_type),
    )


def _fmt(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


# =============================================================================
# RESPONSE
# =============================================================================

def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def parse_positions(response: str, known_ids: Iterable[str]) -> Dict[str, Tuple[float, float]]:
    """
    Extract positions from a decision response.

    Args:
        response: Raw text; the first '[' to the last ']' is read as JSON
        known_ids: Ids the response may position

    Returns:
        id -> (x, y) for every valid entry (first entry wins per id)

    Raises:
        DecisionParseError: if no JSON array is found or no entry is usable
    """
    match = _JSON_ARRAY.search(response or "")
    if not match:
        raise DecisionParseError("No JSON array in decision response")
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise DecisionParseError(f"Decision response is not valid JSON: {e}") from e
    if not isinstance(data, list):
        raise DecisionParseError("Decision response is not a JSON array")

    known = set(known_ids)
    positions: Dict[str, Tuple[float, float]] = {}
    dropped = 0
    for entry in data:
        if not isinstance(entry, dict):
            dropped += 1
            continue
        element_id, x, y = entry.get("id"), entry.get("x"), entry.get("y")
        if not isinstance(element_id, str) or element_id not in known:
            dropped += 1
            continue
        if not (_is_number(x) and _is_number(y)):
            dropped += 1
            continue
        positions.setdefault(element_id, (float(x), float(y)))

    if dropped:
        logger.warning(f"Dropped {dropped} invalid entries from decision response")
    if not positions:
        raise DecisionParseError("Decision response contained no usable positions")
    return positions


# =============================================================================
# PLANNER
# =============================================================================

class DelegatedPlanner(BasePositionPlanner):
    """Planner that asks an external decision-maker for unit positions."""

    name = "delegated"

    def __init__(
        self,
        decide: DecideFn,
        template: Optional[TemplatePlanner] = None,
        system_prompt: str = LAYOUT_SYSTEM_PROMPT,
    ):
        self.decide = decide
        self.template = template or TemplatePlanner()
        self.system_prompt = system_prompt

    async def plan(self, request: PlanRequest) -> PlanResult:
        baseline = {a.element_id: a for a in self.template.compute(request).assignments()}
        units = all_units(request.grouped)

        prompt = build_decision_prompt(request)
        logger.info(f"Requesting delegated decision for {len(units)} units")
        response = await self.decide(self.system_prompt, prompt)

        positions = parse_positions(response, (unit_anchor(u).id for u in units))

        builder = AssignmentBuilder()
        for unit in units:
            anchor = unit_anchor(unit)
            if anchor.id not in positions:
                builder.copy_from(unit, baseline)
                continue
            x, y = positions[anchor.id]
            base = baseline.get(anchor.id)
            width = base.width if base is not None and base.width is not None else None
            builder.place(unit, x, y, width)

        missing = len(units) - len(positions)
        warnings = [f"{missing} units kept their template position"] if missing else []
        logger.info(f"Delegated plan: {len(positions)} decided, {missing} from template")
        return PlanResult(
            assignments=builder.assignments(),
            planner=self.name,
            warnings=warnings,
        )
