"""
schemas.py — Pydantic request/response models for the API.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from arranger.engine.thresholds import (
    DEFAULT_BUTTON_HEIGHT,
    DEFAULT_BUTTON_WIDTH,
    DEFAULT_CONTAINER_HEIGHT,
    DEFAULT_CONTAINER_WIDTH,
)


# =============================================================================
# REQUEST MODELS
# =============================================================================

class LayoutParams(BaseModel):
    """Layout parameters shared by both endpoints. Validated by the engine."""
    layout: str = Field("grid", description='"grid", "row" or "column"')
    columns: int = 4
    gap: float = 10.0
    gap_x: Optional[float] = Field(None, description="Horizontal gap (defaults to gap)")
    gap_y: Optional[float] = Field(None, description="Vertical gap (defaults to gap)")
    start_x: float = 20.0
    start_y: float = 80.0
    margin: Optional[float] = Field(None, description="Clamp margin (defaults to the configured clamp_margin)")


class RearrangeRequest(LayoutParams):
    """Request to rearrange existing canvas elements."""
    within: Optional[str] = Field(None, description="Id of the container frame")
    node_ids: Optional[List[str]] = Field(None, description="Explicit element ids")
    elements: Optional[List[Dict[str, Any]]] = Field(
        None, description="Inline element nodes; skips discovery"
    )
    exclude_types: List[str] = Field(default_factory=list, description="Node types to skip, e.g. FRAME")
    container_width: Optional[float] = None
    container_height: Optional[float] = None
    use_delegated_decision: bool = False
    adjust_layers: bool = True
    remove_duplicates: bool = False
    dry_run: bool = False

    class Config:
        json_schema_extra = {
            "example": {
                "within": "12:34",
                "layout": "grid",
                "columns": 4,
                "gap": 10,
                "use_delegated_decision": False,
            }
        }


class PlaceRequest(LayoutParams):
    """Request for cells of elements that are about to be created."""
    labels: List[str] = Field(..., min_length=1)
    container_width: float = DEFAULT_CONTAINER_WIDTH
    container_height: float = DEFAULT_CONTAINER_HEIGHT
    button_width: float = Field(DEFAULT_BUTTON_WIDTH, gt=0)
    button_height: float = Field(DEFAULT_BUTTON_HEIGHT, gt=0)


# =============================================================================
# RESPONSE MODELS
# =============================================================================

class AssignmentSchema(BaseModel):
    """Target position of one element."""
    element_id: str
    x: float
    y: float
    width: Optional[float] = None


class ContainerSchema(BaseModel):
    width: float
    height: float
    offset_x: float = 0.0
    offset_y: float = 0.0


class ExecutionSchema(BaseModel):
    """Outcome of applying calls to the canvas."""
    success_count: int
    failed_count: int
    errors: List[str] = Field(default_factory=list)


class RearrangeResponse(BaseModel):
    """Result of a rearrangement."""
    ui_type: str
    planner: str
    used_fallback: bool = False
    fallback_reason: Optional[str] = None
    dry_run: bool = False
    container: ContainerSchema
    assignments: List[AssignmentSchema]
    execution: Optional[ExecutionSchema] = None
    cleanup: Optional[ExecutionSchema] = None
    duplicate_ids: List[str] = Field(default_factory=list)
    counts: Dict[str, int] = Field(default_factory=dict)
    warnings: List[str] = Field(default_factory=list)


class CellSchema(BaseModel):
    label: str
    x: float
    y: float
    width: float
    height: float


class PlaceResponse(BaseModel):
    """Cells for the requested labels, in label order."""
    ui_type: str
    cells: List[CellSchema]


class ErrorDetail(BaseModel):
    """Error body for 4xx answers that carry a hint."""
    message: str
    hint: Optional[str] = None
