"""
base_planner.py — Abstract base class for position planners.

All planners inherit from BasePositionPlanner and implement plan() to turn a
grouped element set into a list of PositionAssignments. The AssignmentBuilder
here is shared by every planner so that partner texts are always placed the
same way relative to their rectangle.
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from ..data_models import (
    DisplayGroup,
    Element,
    GroupedElements,
    LayoutContext,
    Pair,
    PositionAssignment,
    UIType,
)
from ..thresholds import CLAMP_MARGIN, DISPLAY_TEXT_PADDING

logger = logging.getLogger(__name__)

# A unit moves as one: a display with its read-out, a labelled button, or a
# single element on its own.
Unit = Union[DisplayGroup, Pair, Element]


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class PlanRequest:
    """Everything a planner needs for one invocation."""
    grouped: GroupedElements
    ui_type: UIType
    context: LayoutContext
    margin: float = CLAMP_MARGIN


@dataclass
class PlanResult:
    """Output of a planner."""
    assignments: List[PositionAssignment]
    planner: str
    used_fallback: bool = False
    fallback_reason: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    def by_id(self) -> Dict[str, PositionAssignment]:
        return {a.element_id: a for a in self.assignments}


# =============================================================================
# UNITS
# =============================================================================

def unit_anchor(unit: Unit) -> Element:
    """The element whose position defines the unit's position."""
    if isinstance(unit, (DisplayGroup, Pair)):
        return unit.rectangle
    return unit


def unit_role(unit: Unit, grouped: GroupedElements) -> str:
    if isinstance(unit, DisplayGroup):
        return "display"
    if isinstance(unit, Pair) or unit.id in grouped.button_ids:
        return "button"
    return "text" if unit.is_text else "other"


def button_units(grouped: GroupedElements) -> List[Union[Pair, Element]]:
    """Paired buttons in reading order, then unlabelled button rectangles."""
    units: List[Union[Pair, Element]] = list(grouped.pairs)
    units.extend(grouped.unpaired_buttons)
    return units


def loose_elements(grouped: GroupedElements) -> List[Element]:
    """Standalone elements that are not button rectangles."""
    return [e for e in grouped.standalone if e.id not in grouped.button_ids]


def all_units(grouped: GroupedElements) -> List[Unit]:
    """Every unit in appearance order: displays, buttons, loose elements."""
    units: List[Unit] = list(grouped.displays)
    units.extend(button_units(grouped))
    units.extend(loose_elements(grouped))
    return units


# =============================================================================
# TEXT PLACEMENT
# =============================================================================

def centered_text_position(
    text: Element, box_x: float, box_y: float, box_width: float, box_height: float
) -> Tuple[float, float]:
    """Top-left of a text centered inside a box (floored to whole pixels)."""
    return (
        box_x + math.floor((box_width - text.width) / 2),
        box_y + math.floor((box_height - text.height) / 2),
    )


def right_aligned_text_position(
    text: Element, box_x: float, box_y: float, box_width: float, box_height: float
) -> Tuple[float, float]:
    """Top-left of a text right-aligned inside a box with fixed padding."""
    return (
        box_x + box_width - text.width - DISPLAY_TEXT_PADDING,
        box_y + math.floor((box_height - text.height) / 2),
    )


# =============================================================================
# ASSIGNMENT BUILDER
# =============================================================================

class AssignmentBuilder:
    """
    Collects assignments in placement order.

    Each element id is accepted once; later placements of the same id are
    ignored. A width override is kept only when it differs from the element's
    current width.
    """

    def __init__(self):
        self._by_id: Dict[str, PositionAssignment] = {}
        self.bottom: Optional[float] = None

    def __contains__(self, element_id: str) -> bool:
        return element_id in self._by_id

    def add(
        self,
        element: Element,
        x: float,
        y: float,
        width: Optional[float] = None,
    ) -> None:
        if element.id in self._by_id:
            logger.debug(f"Ignoring second placement of {element.id}")
            return
        override = None
        if width is not None and not math.isclose(width, element.width):
            override = width
        self._by_id[element.id] = PositionAssignment(
            element_id=element.id, x=x, y=y, width=override
        )
        bottom = y + element.height
        self.bottom = bottom if self.bottom is None else max(self.bottom, bottom)

    def place(
        self,
        unit: Unit,
        x: float,
        y: float,
        width: Optional[float] = None,
    ) -> None:
        """Place a unit with its anchor at (x, y); a partner text follows."""
        anchor = unit_anchor(unit)
        self.add(anchor, x, y, width)
        box_width = width if width is not None else anchor.width

        if isinstance(unit, Pair):
            tx, ty = centered_text_position(unit.text, x, y, box_width, anchor.height)
            self.add(unit.text, tx, ty)
        elif isinstance(unit, DisplayGroup) and unit.text is not None:
            tx, ty = right_aligned_text_position(unit.text, x, y, box_width, anchor.height)
            self.add(unit.text, tx, ty)

    def copy_from(self, unit: Unit, baseline: Dict[str, PositionAssignment]) -> None:
        """Re-use baseline assignments for a unit's elements."""
        elements = [unit_anchor(unit)]
        if isinstance(unit, Pair):
            elements.append(unit.text)
        elif isinstance(unit, DisplayGroup) and unit.text is not None:
            elements.append(unit.text)
        for element in elements:
            assignment = baseline.get(element.id)
            if assignment is not None:
                self.add(element, assignment.x, assignment.y, assignment.width)

    def next_y(self, gap_y: float, default: float) -> float:
        """First free y below everything placed so far."""
        if self.bottom is None:
            return default
        return max(default, self.bottom + gap_y)

    def assignments(self) -> List[PositionAssignment]:
        return list(self._by_id.values())


# =============================================================================
# BASE PLANNER
# =============================================================================

class BasePositionPlanner(ABC):
    """
    Abstract base class for all position planners.

    Subclasses must implement plan(). Planners hold no per-request state, so
    one instance can serve many requests.
    """

    name: str = "base"

    @abstractmethod
    async def plan(self, request: PlanRequest) -> PlanResult:
        """
        Compute positions for every element of the request.

        Args:
            request: Grouped elements, archetype and layout context

        Returns:
            PlanResult whose assignments mention each input id at most once
        """
        pass
