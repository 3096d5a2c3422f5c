"""
orchestrator.py — Entry points of the arrangement engine.

rearrange():
    validate -> discover -> classify roles -> pair -> classify UI type
    -> plan -> clamp -> execute

place_new_elements():
    classify the intended labels -> canonical cells, ready for a creation step

Parameters are validated before any remote call. The engine holds no state
between invocations; collaborators (canvas bridge, decide callable) are
passed in by the caller.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .batch_executor import (
    BatchExecutor,
    ExecutionReport,
    build_delete_calls,
    build_position_calls,
    build_styling_calls,
)
from .boundary_clamp import clamp_to_container
from .data_models import (
    Container,
    Element,
    ElementKind,
    GroupedElements,
    LayoutContext,
    PositionAssignment,
    UIType,
    size_lookup,
)
from .discovery import (
    DiscoveryResult,
    filter_elements,
    find_duplicates,
    parse_container,
    parse_nodes,
)
from .errors import DiscoveryEmptyError, InputError
from .layout_strategies import (
    BasePositionPlanner,
    DecideFn,
    PlanRequest,
    TemplatePlanner,
    get_planner,
)
from .role_classifier import RoleClassifier
from .spatial_pairer import SpatialPairer
from .thresholds import (
    CLAMP_MARGIN,
    CORNER_RADIUS,
    DEFAULT_BUTTON_HEIGHT,
    DEFAULT_BUTTON_WIDTH,
    DEFAULT_CONTAINER_HEIGHT,
    DEFAULT_CONTAINER_WIDTH,
    DELEGATED_BATCH_SIZE,
    PairingThresholds,
    RoleThresholds,
    TEMPLATE_BATCH_SIZE,
)
from .ui_type_classifier import classify_labels, classify_ui_type

logger = logging.getLogger(__name__)


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class RearrangeOptions:
    """Caller parameters for one rearrangement."""
    layout: str = "grid"
    columns: int = 4
    gap: float = 10.0
    gap_x: Optional[float] = None       # Overrides gap horizontally
    gap_y: Optional[float] = None       # Overrides gap vertically
    start_x: float = 20.0
    start_y: float = 80.0
    within: Optional[str] = None        # Container node id
    node_ids: Optional[List[str]] = None
    exclude_types: List[str] = field(default_factory=list)
    use_delegated_decision: bool = False
    adjust_layers: bool = True
    remove_duplicates: bool = False
    margin: float = CLAMP_MARGIN
    dry_run: bool = False

    # Container size when it cannot be discovered (inline elements)
    container_width: Optional[float] = None
    container_height: Optional[float] = None

    def context_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "layout_mode": self.layout,
            "columns": self.columns,
            "gap_x": self.gap if self.gap_x is None else self.gap_x,
            "gap_y": self.gap if self.gap_y is None else self.gap_y,
            "start_x": self.start_x,
            "start_y": self.start_y,
        }
        if self.container_width is not None:
            params["container_width"] = self.container_width
        if self.container_height is not None:
            params["container_height"] = self.container_height
        return params


@dataclass
class RearrangeOutcome:
    """Result of a rearrangement."""
    ui_type: UIType
    assignments: List[PositionAssignment]
    container: Container
    planner: str
    report: Optional[ExecutionReport] = None        # None on dry runs
    used_fallback: bool = False
    fallback_reason: Optional[str] = None
    duplicate_ids: List[str] = field(default_factory=list)
    cleanup: Optional[ExecutionReport] = None
    counts: Dict[str, int] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)


@dataclass
class PlannedCell:
    """Where a not-yet-created element should go."""
    label: str
    x: float
    y: float
    width: float
    height: float


@dataclass
class PlacementPlan:
    """Cells for a set of intended labels."""
    ui_type: UIType
    cells: List[PlannedCell]


# =============================================================================
# ENGINE
# =============================================================================

class LayoutEngine:
    """
    Arranges canvas elements.

    Args:
        canvas: Bridge with find_nodes / get_node_info / get_nodes_info /
            call_tool coroutines (see arranger.canvas.CanvasClient). Only
            needed when elements are discovered or positions applied.
        decide: ``async decide(system_prompt, prompt) -> str`` for the
            delegated planner.
    """

    def __init__(
        self,
        canvas: Any = None,
        decide: Optional[DecideFn] = None,
        role_thresholds: Optional[RoleThresholds] = None,
        pairing_thresholds: Optional[PairingThresholds] = None,
        template_batch_size: int = TEMPLATE_BATCH_SIZE,
        delegated_batch_size: int = DELEGATED_BATCH_SIZE,
        corner_radius: float = CORNER_RADIUS,
    ):
        self.canvas = canvas
        self.decide = decide
        self.role_classifier = RoleClassifier(role_thresholds)
        self.pairer = SpatialPairer(pairing_thresholds)
        self.template_batch_size = template_batch_size
        self.delegated_batch_size = delegated_batch_size
        self.corner_radius = corner_radius

    # =========================================================================
    # ANALYSIS
    # =========================================================================

    def analyze(self, elements: List[Element]) -> GroupedElements:
        """Role classification followed by pairing."""
        return self.pairer.pair(self.role_classifier.classify(elements))

    # =========================================================================
    # REARRANGE
    # =========================================================================

    async def rearrange(
        self,
        options: RearrangeOptions,
        elements: Optional[Sequence[Any]] = None,
    ) -> RearrangeOutcome:
        """
        Rearrange the selected elements.

        Args:
            options: Caller parameters
            elements: Inline elements (Element objects or raw node dicts);
                skips discovery when given

        Returns:
            RearrangeOutcome

        Raises:
            InputError: invalid parameters (before any remote call)
            DiscoveryEmptyError: nothing to arrange
        """
        self._validate(options, elements)

        discovery = await self._discover(options, elements)
        if not discovery.elements:
            raise DiscoveryEmptyError("No nodes found to arrange.")

        context = LayoutContext.create(discovery.container, **options.context_params())
        nodes = discovery.elements
        grouped = self.analyze(nodes)
        ui_type = classify_ui_type(grouped)

        planner = self._planner(options)
        result = await planner.plan(
            PlanRequest(grouped=grouped, ui_type=ui_type, context=context, margin=options.margin)
        )

        sizes = size_lookup(nodes)
        assignments = clamp_to_container(
            result.assignments, sizes, context.container_width, options.margin
        )

        outcome = RearrangeOutcome(
            ui_type=ui_type,
            assignments=assignments,
            container=discovery.container,
            planner=result.planner,
            used_fallback=result.used_fallback,
            fallback_reason=result.fallback_reason,
            duplicate_ids=discovery.duplicate_ids,
            counts={
                "elements": len(nodes),
                "displays": len(grouped.displays),
                "pairs": len(grouped.pairs),
                "standalone": len(grouped.standalone),
            },
            warnings=list(result.warnings),
        )

        if options.dry_run:
            logger.info(f"Dry run: {len(assignments)} positions planned for {ui_type.value}")
            return outcome

        if options.remove_duplicates and discovery.duplicate_ids:
            cleanup = BatchExecutor(self.canvas.call_tool, self.template_batch_size)
            outcome.cleanup = await cleanup.execute(build_delete_calls(discovery.duplicate_ids))

        calls = build_position_calls(assignments, sizes)
        batch_size = self.template_batch_size
        if options.use_delegated_decision:
            calls.extend(build_styling_calls(grouped, self.corner_radius, options.adjust_layers))
            batch_size = self.delegated_batch_size

        executor = BatchExecutor(self.canvas.call_tool, batch_size)
        outcome.report = await executor.execute(calls)
        logger.info(
            f"Rearranged {len(nodes)} elements as {ui_type.value} "
            f"({outcome.report.success_count} ok, {outcome.report.failed_count} failed)"
        )
        return outcome

    def _validate(self, options: RearrangeOptions, elements: Optional[Sequence[Any]]) -> None:
        LayoutContext.create(**options.context_params())
        if options.margin < 0:
            raise InputError(f"margin must be >= 0, got {options.margin}")
        if options.node_ids is not None and not options.node_ids:
            raise InputError("node_ids is empty; list at least one element id.")
        if elements is None and not options.within and not options.node_ids:
            raise InputError("Please specify 'within' (container frame ID) or 'node_ids'.")
        if elements is None and self.canvas is None:
            raise InputError("No canvas connection configured; pass elements inline.")
        if not options.dry_run and self.canvas is None:
            raise InputError("No canvas connection configured; use dry_run to plan only.")
        if options.use_delegated_decision and self.decide is None:
            raise InputError("Delegated decision requested but no decision collaborator is configured.")

    def _planner(self, options: RearrangeOptions) -> BasePositionPlanner:
        if options.use_delegated_decision:
            return get_planner("fallback", decide=self.decide)
        return get_planner("template")

    # =========================================================================
    # DISCOVERY
    # =========================================================================

    async def _discover(
        self,
        options: RearrangeOptions,
        elements: Optional[Sequence[Any]],
    ) -> DiscoveryResult:
        if elements is not None:
            container = self._given_container(options)
            nodes = self._inline_elements(elements, options)
        elif options.within:
            info = await self.canvas.get_node_info(options.within)
            container = parse_container(info)
            nodes = self._filter(info, options, container)
            if not nodes:
                found = await self.canvas.find_nodes(options.within)
                nodes = self._filter(found, options, container)
        else:
            container = self._given_container(options)
            payload = await self.canvas.get_nodes_info(options.node_ids)
            nodes = self._filter(payload, options, container)

        unique, duplicate_ids = find_duplicates(nodes)
        if options.remove_duplicates:
            nodes = unique
        logger.info(f"Discovered {len(nodes)} elements in a {container.width}x{container.height} container")
        return DiscoveryResult(elements=nodes, container=container, duplicate_ids=duplicate_ids)

    @staticmethod
    def _given_container(options: RearrangeOptions) -> Container:
        return Container(
            width=options.container_width or DEFAULT_CONTAINER_WIDTH,
            height=options.container_height or DEFAULT_CONTAINER_HEIGHT,
        )

    def _filter(self, payload: Any, options: RearrangeOptions, container: Container) -> List[Element]:
        return parse_nodes(
            payload,
            origin=(container.offset_x, container.offset_y),
            exclude_types=options.exclude_types,
            exclude_ids=[options.within] if options.within else [],
            only_ids=options.node_ids,
        )

    def _inline_elements(self, elements: Sequence[Any], options: RearrangeOptions) -> List[Element]:
        nodes = [e for e in elements if isinstance(e, Element)]
        raw = [e for e in elements if not isinstance(e, Element)]
        if raw:
            nodes.extend(parse_nodes(raw))
        return filter_elements(nodes, exclude_types=options.exclude_types, only_ids=options.node_ids)

    # =========================================================================
    # PLACE NEW ELEMENTS
    # =========================================================================

    def place_new_elements(
        self,
        labels: Sequence[str],
        context: LayoutContext,
        button_width: float = DEFAULT_BUTTON_WIDTH,
        button_height: float = DEFAULT_BUTTON_HEIGHT,
        margin: float = CLAMP_MARGIN,
    ) -> PlacementPlan:
        """
        Cells for buttons that do not exist yet, one per label, in label order.

        The labels are classified like a discovered interface and laid out by
        the template planner, so creating the buttons at these cells gives the
        same result as creating them anywhere and rearranging afterwards.
        """
        if not labels:
            raise InputError("labels is empty; pass at least one label.")

        placeholders = [
            Element(
                id=f"new-{i}",
                kind=ElementKind.RECTANGLE,
                width=button_width,
                height=button_height,
                label=label,
            )
            for i, label in enumerate(labels)
        ]
        grouped = GroupedElements(
            standalone=placeholders,
            button_ids=frozenset(p.id for p in placeholders),
        )
        ui_type = classify_labels(labels)
        request = PlanRequest(grouped=grouped, ui_type=ui_type, context=context, margin=margin)
        assignments = clamp_to_container(
            TemplatePlanner().compute(request).assignments(),
            size_lookup(placeholders),
            context.container_width,
            margin,
        )

        by_id = {a.element_id: a for a in assignments}
        cells = []
        for label, placeholder in zip(labels, placeholders):
            a = by_id[placeholder.id]
            cells.append(PlannedCell(
                label=label,
                x=a.x,
                y=a.y,
                width=a.width if a.width is not None else button_width,
                height=button_height,
            ))
        logger.info(f"Planned {len(cells)} new {ui_type.value} cells")
        return PlacementPlan(ui_type=ui_type, cells=cells)
