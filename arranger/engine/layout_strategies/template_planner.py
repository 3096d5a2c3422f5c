"""
template_planner.py — Deterministic, archetype-driven placement.

Layout proceeds top to bottom:

1. Displays (stacked at full usable width, or a 2-column grid on dashboards)
2. Buttons, placed by the archetype's template:
   - calculator: canonical table, then leftovers packed row-major
   - form: fields stacked, action buttons side by side on the last row
   - menu: multi-column top-to-bottom flow
   - dashboard / generic: grid, row or column per the layout mode
3. Loose elements, in the same layout-mode flow with their own sizes

Button spacing uses one sampled button size (the median) shrunk so that a full
row fits the usable width. Running the planner on its own output gives the
same positions.
"""

import logging
import math
import statistics
from typing import List, Sequence, Tuple, Union

from ..canonical_tables import CALCULATOR_TABLE, match_slots, table_columns
from ..data_models import (
    DisplayGroup,
    Element,
    GroupedElements,
    LayoutContext,
    Pair,
    UIType,
)
from ..labels import extract_label
from ..thresholds import (
    DASHBOARD_DISPLAY_COLUMNS,
    DEFAULT_BUTTON_HEIGHT,
    DEFAULT_BUTTON_WIDTH,
    MENU_COLUMN_BUCKET_PX,
)
from ..ui_type_classifier import is_action_label
from .base_planner import (
    AssignmentBuilder,
    BasePositionPlanner,
    PlanRequest,
    PlanResult,
    Unit,
    button_units,
    loose_elements,
    unit_anchor,
)

logger = logging.getLogger(__name__)

ButtonUnit = Union[Pair, Element]


def button_metrics(grouped: GroupedElements) -> Tuple[float, float]:
    """Median (width, height) of the button rectangles, 60x60 when there are none."""
    rects = [pair.rectangle for pair in grouped.pairs] + grouped.unpaired_buttons
    if not rects:
        return DEFAULT_BUTTON_WIDTH, DEFAULT_BUTTON_HEIGHT
    return (
        statistics.median(r.width for r in rects),
        statistics.median(r.height for r in rects),
    )


def fit_cell_width(width: float, columns: int, usable: float, gap_x: float) -> float:
    """Shrink (never grow) width so that ``columns`` cells fit the usable width."""
    fit = (usable - (columns - 1) * gap_x) / columns
    if fit <= 0:
        return width
    return min(width, fit)


def column_order(units: Sequence[ButtonUnit]) -> List[ButtonUnit]:
    """Column band first, then y."""
    return sorted(
        units,
        key=lambda u: (math.floor(unit_anchor(u).x / MENU_COLUMN_BUCKET_PX), unit_anchor(u).y),
    )


def button_label(unit: ButtonUnit) -> str:
    if isinstance(unit, Pair):
        return extract_label(unit.text)
    return extract_label(unit)


class TemplatePlanner(BasePositionPlanner):
    """Deterministic planner. Pure: same request, same assignments."""

    name = "template"

    async def plan(self, request: PlanRequest) -> PlanResult:
        return PlanResult(assignments=self.compute(request).assignments(), planner=self.name)

    # =========================================================================
    # ENTRY
    # =========================================================================

    def compute(self, request: PlanRequest) -> AssignmentBuilder:
        """Place every unit of the request; returns the filled builder."""
        ctx = request.context
        grouped = request.grouped
        usable = ctx.usable_width(request.margin)
        builder = AssignmentBuilder()

        if request.ui_type == UIType.DASHBOARD:
            y = self._display_grid(grouped.displays, ctx, usable, builder)
        else:
            y = self._stack_displays(grouped.displays, ctx, usable, builder)

        buttons = button_units(grouped)
        base_w, base_h = button_metrics(grouped)

        if request.ui_type == UIType.CALCULATOR:
            self._calculator(buttons, ctx, y, base_w, base_h, usable, builder)
        elif request.ui_type == UIType.FORM:
            self._form(buttons, ctx, y, usable, builder)
        elif request.ui_type == UIType.MENU:
            self._menu(buttons, ctx, y, base_w, base_h, usable, request.margin, builder)
        elif ctx.layout_mode == "grid":
            cell_w = fit_cell_width(base_w, ctx.columns, usable, ctx.gap_x)
            self._grid(buttons, ctx, y, cell_w, base_h, ctx.columns, builder)
        else:
            self._flow(buttons, ctx, y, usable, builder)

        loose = loose_elements(grouped)
        if loose:
            self._flow(loose, ctx, builder.next_y(ctx.gap_y, y), usable, builder)

        logger.debug(
            f"Template plan for {request.ui_type.value}: "
            f"{len(builder.assignments())} assignments, button size {base_w}x{base_h}"
        )
        return builder

    # =========================================================================
    # DISPLAYS
    # =========================================================================

    def _stack_displays(
        self,
        displays: List[DisplayGroup],
        ctx: LayoutContext,
        usable: float,
        builder: AssignmentBuilder,
    ) -> float:
        y = ctx.start_y
        for group in displays:
            width = usable if usable > 0 else group.rectangle.width
            builder.place(group, ctx.start_x, y, width)
            y += group.rectangle.height + ctx.gap_y
        return y

    def _display_grid(
        self,
        displays: List[DisplayGroup],
        ctx: LayoutContext,
        usable: float,
        builder: AssignmentBuilder,
    ) -> float:
        if not displays:
            return ctx.start_y
        cols = DASHBOARD_DISPLAY_COLUMNS
        width = (usable - (cols - 1) * ctx.gap_x) / cols
        pitch = max(g.rectangle.height for g in displays) + ctx.gap_y
        for i, group in enumerate(displays):
            row, col = divmod(i, cols)
            x = ctx.start_x + col * (width + ctx.gap_x)
            builder.place(group, x, ctx.start_y + row * pitch, width if width > 0 else None)
        rows = math.ceil(len(displays) / cols)
        return ctx.start_y + rows * pitch

    # =========================================================================
    # ARCHETYPES
    # =========================================================================

    def _calculator(
        self,
        buttons: List[ButtonUnit],
        ctx: LayoutContext,
        y0: float,
        base_w: float,
        base_h: float,
        usable: float,
        builder: AssignmentBuilder,
    ) -> None:
        table = CALCULATOR_TABLE
        cell_w = fit_cell_width(base_w, table_columns(table), usable, ctx.gap_x)
        pitch = base_h + ctx.gap_y

        match = match_slots([(button_label(u), u) for u in buttons], table)

        # Rows without any claimed key collapse; columns stay absolute
        used_rows = sorted({slot.row for slot, _ in match.placed})
        row_index = {row: i for i, row in enumerate(used_rows)}

        for slot, unit in match.placed:
            x = ctx.start_x + slot.col * (cell_w + ctx.gap_x)
            y = y0 + row_index[slot.row] * pitch
            if slot.span > 1:
                width = slot.span * cell_w + (slot.span - 1) * ctx.gap_x
            else:
                width = min(unit_anchor(unit).width, cell_w)
            builder.place(unit, x, y, width)

        if match.leftovers:
            logger.info(f"{len(match.leftovers)} keys outside the calculator template")
            # cell_w only fits the table width, so leftovers never wrap wider than it
            wrap = min(ctx.columns, table_columns(table))
            self._grid(
                match.leftovers, ctx, y0, cell_w, base_h, wrap, builder,
                first_row=len(used_rows),
            )

    def _form(
        self,
        buttons: List[ButtonUnit],
        ctx: LayoutContext,
        y0: float,
        usable: float,
        builder: AssignmentBuilder,
    ) -> None:
        actions = [u for u in buttons if is_action_label(button_label(u))]
        fields = [u for u in buttons if not is_action_label(button_label(u))]

        y = y0
        for unit in fields:
            anchor = unit_anchor(unit)
            builder.place(unit, ctx.start_x, y, self._fit(anchor, usable))
            y += anchor.height + ctx.gap_y

        x = ctx.start_x
        for unit in actions:
            width = self._fit(unit_anchor(unit), usable)
            builder.place(unit, x, y, width)
            x += width + ctx.gap_x

    def _menu(
        self,
        buttons: List[ButtonUnit],
        ctx: LayoutContext,
        y0: float,
        base_w: float,
        base_h: float,
        usable: float,
        margin: float,
        builder: AssignmentBuilder,
    ) -> None:
        if not buttons:
            return
        pitch = base_h + ctx.gap_y
        available = max(0.0, ctx.container_height - y0 - margin)
        rows_per_column = max(1, math.floor(available / pitch))
        columns = math.ceil(len(buttons) / rows_per_column)
        cell_w = fit_cell_width(base_w, columns, usable, ctx.gap_x)

        # Columns fill top to bottom, so read the items back column by column
        for i, unit in enumerate(column_order(buttons)):
            col, row = divmod(i, rows_per_column)
            x = ctx.start_x + col * (cell_w + ctx.gap_x)
            builder.place(unit, x, y0 + row * pitch, min(unit_anchor(unit).width, cell_w))

    # =========================================================================
    # GENERIC FLOWS
    # =========================================================================

    def _grid(
        self,
        units: Sequence[ButtonUnit],
        ctx: LayoutContext,
        y0: float,
        cell_w: float,
        cell_h: float,
        columns: int,
        builder: AssignmentBuilder,
        first_row: int = 0,
    ) -> None:
        """Uniform cells, row-major, wrapping at ``columns``."""
        for i, unit in enumerate(units):
            row, col = divmod(i, columns)
            x = ctx.start_x + col * (cell_w + ctx.gap_x)
            y = y0 + (first_row + row) * (cell_h + ctx.gap_y)
            builder.place(unit, x, y, min(unit_anchor(unit).width, cell_w))

    def _flow(
        self,
        units: Sequence[Unit],
        ctx: LayoutContext,
        y0: float,
        usable: float,
        builder: AssignmentBuilder,
    ) -> None:
        """Own-size flow following the layout mode (grid, row or column)."""
        x, y = ctx.start_x, y0
        row_height = 0.0
        col = 0
        for unit in units:
            anchor = unit_anchor(unit)
            width = self._fit(anchor, usable)

            if ctx.layout_mode == "column":
                builder.place(unit, ctx.start_x, y, width)
                y += anchor.height + ctx.gap_y
                continue

            builder.place(unit, x, y, width)
            x += width + ctx.gap_x
            row_height = max(row_height, anchor.height)

            if ctx.layout_mode == "grid":
                col += 1
                if col >= ctx.columns:
                    col = 0
                    x = ctx.start_x
                    y += row_height + ctx.gap_y
                    row_height = 0.0

    @staticmethod
    def _fit(anchor: Element, usable: float) -> float:
        if usable <= 0:
            return anchor.width
        return min(anchor.width, usable)
