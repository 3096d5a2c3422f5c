"""
role_classifier.py — Split elements by kind and rectangles by role.

A display is a rectangle that is wide (or display-shaped) AND sits in the top
band AND is not in the bottom band. The bottom-band gate is what keeps a
double-width bottom-row key (the calculator "0") from being read as a display.
"""

import logging
from typing import List, Optional

from .data_models import Element, ElementKind, Role, RolePartition
from .thresholds import RoleThresholds

logger = logging.getLogger(__name__)


class RoleClassifier:
    """Partitions an element list into displays, buttons, texts and others."""

    def __init__(self, thresholds: Optional[RoleThresholds] = None):
        self.thresholds = thresholds or RoleThresholds()

    def classify(self, elements: List[Element]) -> RolePartition:
        """
        Partition elements. Input order is preserved inside every bucket.

        Args:
            elements: Element snapshots in discovery order

        Returns:
            RolePartition (new lists; elements are not modified)
        """
        rectangles = [e for e in elements if e.kind == ElementKind.RECTANGLE]
        partition = RolePartition(
            texts=[e for e in elements if e.kind == ElementKind.TEXT],
            others=[e for e in elements if e.kind == ElementKind.OTHER],
        )

        if not rectangles:
            return partition

        t = self.thresholds
        avg_width = sum(r.width for r in rectangles) / len(rectangles)
        avg_height = sum(r.height for r in rectangles) / len(rectangles)
        min_y = min(r.y for r in rectangles)
        max_y = max(r.y for r in rectangles)

        top_limit = min_y + avg_height * t.top_band_heights
        bottom_limit = max_y - avg_height * t.bottom_band_heights
        wide_limit = avg_width * t.wide_factor

        for rect in rectangles:
            if self.role_of(rect, top_limit, bottom_limit, wide_limit) == Role.DISPLAY:
                partition.displays.append(rect)
            else:
                partition.buttons.append(rect)

        logger.debug(
            f"Avg size {avg_width:.1f}x{avg_height:.1f}, y range {min_y:.1f}..{max_y:.1f}: "
            f"{len(partition.displays)} displays, {len(partition.buttons)} buttons"
        )
        return partition

    def role_of(
        self,
        rect: Element,
        top_limit: float,
        bottom_limit: float,
        wide_limit: float,
    ) -> Role:
        """Role of one rectangle given the population limits."""
        in_top_band = rect.y <= top_limit
        above_bottom_band = rect.y < bottom_limit
        is_wide = rect.width > wide_limit
        aspect = rect.width / rect.height if rect.height > 0 else float("inf")
        has_display_aspect = aspect > self.thresholds.aspect_ratio

        if in_top_band and above_bottom_band and (is_wide or has_display_aspect):
            return Role.DISPLAY
        return Role.BUTTON
