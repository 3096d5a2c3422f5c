"""
spatial_pairer.py — Match each rectangle with its text label.

Rectangles are visited top-to-bottom, left-to-right. For each one the pairer
tries three passes over the unclaimed texts, first match wins:

1. Tight overlap: the text center lies inside the rectangle grown by a small
   fixed tolerance.
2. Expanded overlap: the tolerance grows with the rectangle's own size, for
   labels placed off-center.
3. Nearest neighbor: the closest text center, if it is within a multiple of
   the rectangle's larger side.

A claimed text leaves the pool at once, so no text is ever paired twice.
Displays go first against the full pool. Pairing never fails: the worst case
is that everything ends up standalone.
"""

import logging
import math
from typing import Callable, List, Optional

from .data_models import DisplayGroup, Element, GroupedElements, Pair, RolePartition
from .labels import extract_label
from .thresholds import PairingThresholds

logger = logging.getLogger(__name__)


class SpatialPairer:
    """Three-pass rectangle/text matcher."""

    def __init__(self, thresholds: Optional[PairingThresholds] = None):
        self.thresholds = thresholds or PairingThresholds()

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def pair(self, partition: RolePartition) -> GroupedElements:
        """
        Group a role partition into displays, pairs and standalone elements.

        Args:
            partition: Output of RoleClassifier.classify

        Returns:
            GroupedElements covering every input element exactly once
        """
        pool: List[Element] = list(partition.texts)

        displays: List[DisplayGroup] = []
        for rect in self.sort_by_position(partition.displays):
            text = self._claim(rect, pool)
            displays.append(DisplayGroup(rectangle=rect, text=text))

        pairs: List[Pair] = []
        unpaired_rects: List[Element] = []
        for rect in self.sort_by_position(partition.buttons):
            text = self._claim(rect, pool)
            if text is None:
                unpaired_rects.append(rect)
                continue
            pairs.append(Pair(rectangle=rect, text=text))
            logger.debug(f'Paired rect "{rect.name or rect.id}" with text "{extract_label(text)}"')

        standalone = unpaired_rects + pool + list(partition.others)

        logger.info(
            f"Display elements: {len(displays)}, button pairs: {len(pairs)}, "
            f"standalone: {len(standalone)}"
        )
        return GroupedElements(
            pairs=pairs,
            standalone=standalone,
            displays=displays,
            button_ids=frozenset(r.id for r in partition.buttons),
        )

    def sort_by_position(self, rects: List[Element]) -> List[Element]:
        """Reading order: row bucket first, then x."""
        bucket = self.thresholds.row_bucket
        return sorted(rects, key=lambda r: (math.floor(r.y / bucket), r.x))

    # =========================================================================
    # PASSES
    # =========================================================================

    def _claim(self, rect: Element, pool: List[Element]) -> Optional[Element]:
        """Find a text for rect and remove it from the pool."""
        passes: List[Callable[[Element, List[Element]], Optional[Element]]] = [
            self._tight_overlap,
            self._expanded_overlap,
            self._nearest_neighbor,
        ]
        for find in passes:
            text = find(rect, pool)
            if text is not None:
                pool.remove(text)
                return text
        return None

    def _tight_overlap(self, rect: Element, pool: List[Element]) -> Optional[Element]:
        tol = self.thresholds.tight_tolerance
        return self._first_within(rect, pool, tol, tol)

    def _expanded_overlap(self, rect: Element, pool: List[Element]) -> Optional[Element]:
        t = self.thresholds
        tol_x = max(t.expanded_floor, rect.width * t.expanded_ratio)
        tol_y = max(t.expanded_floor, rect.height * t.expanded_ratio)
        return self._first_within(rect, pool, tol_x, tol_y)

    def _nearest_neighbor(self, rect: Element, pool: List[Element]) -> Optional[Element]:
        max_distance = max(rect.width, rect.height) * self.thresholds.nearest_factor
        closest: Optional[Element] = None
        min_distance = math.inf
        for text in pool:
            distance = math.hypot(text.center_x - rect.center_x, text.center_y - rect.center_y)
            # Strict comparison keeps the earliest candidate on ties
            if distance < min_distance and distance < max_distance:
                min_distance = distance
                closest = text
        return closest

    @staticmethod
    def _first_within(
        rect: Element,
        pool: List[Element],
        tol_x: float,
        tol_y: float,
    ) -> Optional[Element]:
        for text in pool:
            if (
                rect.x - tol_x <= text.center_x <= rect.right + tol_x
                and rect.y - tol_y <= text.center_y <= rect.bottom + tol_y
            ):
                return text
        return None
