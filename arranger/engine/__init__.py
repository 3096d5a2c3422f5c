"""
Arranger Engine — Layout inference and arrangement for flat canvas elements.

Pipeline:
1. Discovery: raw canvas payloads -> Elements
2. RoleClassifier: rectangles -> displays / buttons
3. SpatialPairer: rectangles <-> text labels
4. UI type classification: calculator, form, menu, dashboard, generic
5. Planning: template (deterministic) or delegated (LLM) with fallback
6. BoundaryClamp: x kept inside the container
7. BatchExecutor: positions applied in bounded concurrent batches
"""

from .batch_executor import BatchExecutor, ExecutionReport, MutationCall
from .boundary_clamp import clamp_to_container
from .canonical_tables import CALCULATOR_TABLE, CanonicalSlot, render_table
from .data_models import (
    Container,
    DisplayGroup,
    Element,
    ElementKind,
    GroupedElements,
    LayoutContext,
    Pair,
    PositionAssignment,
    Role,
    RolePartition,
    UIType,
)
from .errors import (
    ArrangerError,
    CanvasError,
    DecisionParseError,
    DiscoveryEmptyError,
    InputError,
    MutationError,
)
from .labels import extract_label, normalize_label
from .layout_strategies import (
    DelegatedPlanner,
    FallbackPlanner,
    PlanRequest,
    PlanResult,
    TemplatePlanner,
    get_planner,
)
from .orchestrator import (
    LayoutEngine,
    PlacementPlan,
    PlannedCell,
    RearrangeOptions,
    RearrangeOutcome,
)
from .role_classifier import RoleClassifier
from .spatial_pairer import SpatialPairer
from .ui_type_classifier import classify_labels, classify_ui_type

__all__ = [
    # Models
    "Container",
    "DisplayGroup",
    "Element",
    "ElementKind",
    "GroupedElements",
    "LayoutContext",
    "Pair",
    "PositionAssignment",
    "Role",
    "RolePartition",
    "UIType",
    # Errors
    "ArrangerError",
    "CanvasError",
    "DecisionParseError",
    "DiscoveryEmptyError",
    "InputError",
    "MutationError",
    # Stages
    "RoleClassifier",
    "SpatialPairer",
    "classify_labels",
    "classify_ui_type",
    "extract_label",
    "normalize_label",
    "CALCULATOR_TABLE",
    "CanonicalSlot",
    "render_table",
    "PlanRequest",
    "PlanResult",
    "TemplatePlanner",
    "DelegatedPlanner",
    "FallbackPlanner",
    "get_planner",
    "clamp_to_container",
    "BatchExecutor",
    "ExecutionReport",
    "MutationCall",
    # Entry points
    "LayoutEngine",
    "RearrangeOptions",
    "RearrangeOutcome",
    "PlacementPlan",
    "PlannedCell",
]
