"""
boundary_clamp.py — Keep planned x positions inside the container.

Only the horizontal axis is clamped. A tall layout is allowed to run past the
bottom of the container rather than being squeezed.
"""

import logging
from typing import Dict, List, Tuple

from .data_models import PositionAssignment
from .thresholds import CLAMP_MARGIN

logger = logging.getLogger(__name__)


def clamp_x(x: float, width: float, container_width: float, margin: float = CLAMP_MARGIN) -> float:
    """``max(margin, min(x, container_width - width - margin))``."""
    return max(margin, min(x, container_width - width - margin))


def clamp_to_container(
    assignments: List[PositionAssignment],
    sizes: Dict[str, Tuple[float, float]],
    container_width: float,
    margin: float = CLAMP_MARGIN,
) -> List[PositionAssignment]:
    """
    Clamp every assignment's x so the element stays inside the container.

    Args:
        assignments: Planned positions
        sizes: element id -> (width, height) of the current elements
        container_width: Width of the container
        margin: Minimum distance from the left and right edges

    Returns:
        New assignment list in the same order. The width override, when
        present, is the width used. Ids without a known size pass through.
    """
    clamped: List[PositionAssignment] = []
    moved = 0
    for assignment in assignments:
        if assignment.width is not None:
            width = assignment.width
        elif assignment.element_id in sizes:
            width = sizes[assignment.element_id][0]
        else:
            clamped.append(assignment)
            continue

        x = clamp_x(assignment.x, width, container_width, margin)
        if x != assignment.x:
            moved += 1
            logger.debug(f"Clamped {assignment.element_id}: x {assignment.x} -> {x}")
            assignment = assignment.moved_to(x)
        clamped.append(assignment)

    if moved:
        logger.info(f"Clamped {moved} of {len(assignments)} positions to the container")
    return clamped
