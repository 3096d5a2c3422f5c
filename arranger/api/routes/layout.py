"""Layout routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from arranger.api.dependencies import get_engine
from arranger.api.schemas import (
    AssignmentSchema,
    CellSchema,
    ContainerSchema,
    ErrorDetail,
    ExecutionSchema,
    LayoutParams,
    PlaceRequest,
    PlaceResponse,
    RearrangeRequest,
    RearrangeResponse,
)
from arranger.config import ArrangerSettings, get_settings
from arranger.engine import (
    CanvasError,
    DiscoveryEmptyError,
    ExecutionReport,
    InputError,
    LayoutContext,
    LayoutEngine,
    RearrangeOptions,
    RearrangeOutcome,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _execution(report: ExecutionReport | None) -> ExecutionSchema | None:
    if report is None:
        return None
    return ExecutionSchema(
        success_count=report.success_count,
        failed_count=report.failed_count,
        errors=report.errors,
    )


def _margin(request: LayoutParams, settings: ArrangerSettings) -> float:
    return settings.clamp_margin if request.margin is None else request.margin


def _to_response(outcome: RearrangeOutcome, dry_run: bool) -> RearrangeResponse:
    return RearrangeResponse(
        ui_type=outcome.ui_type.value,
        planner=outcome.planner,
        used_fallback=outcome.used_fallback,
        fallback_reason=outcome.fallback_reason,
        dry_run=dry_run,
        container=ContainerSchema(**outcome.container.model_dump()),
        assignments=[AssignmentSchema(**a.model_dump()) for a in outcome.assignments],
        execution=_execution(outcome.report),
        cleanup=_execution(outcome.cleanup),
        duplicate_ids=outcome.duplicate_ids,
        counts=outcome.counts,
        warnings=outcome.warnings,
    )


@router.post("/rearrange", response_model=RearrangeResponse)
async def rearrange(
    request: RearrangeRequest,
    engine: LayoutEngine = Depends(get_engine),
    settings: ArrangerSettings = Depends(get_settings),
):
    """Rearrange existing elements.

    Elements come from the container ('within'), an id list ('node_ids') or
    the request itself ('elements'). With dry_run the planned positions are
    returned without touching the canvas.
    """
    options = RearrangeOptions(
        layout=request.layout,
        columns=request.columns,
        gap=request.gap,
        gap_x=request.gap_x,
        gap_y=request.gap_y,
        start_x=request.start_x,
        start_y=request.start_y,
        within=request.within,
        node_ids=request.node_ids,
        exclude_types=request.exclude_types,
        use_delegated_decision=request.use_delegated_decision,
        adjust_layers=request.adjust_layers,
        remove_duplicates=request.remove_duplicates,
        margin=_margin(request, settings),
        dry_run=request.dry_run,
        container_width=request.container_width,
        container_height=request.container_height,
    )

    try:
        outcome = await engine.rearrange(options, elements=request.elements)
    except InputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DiscoveryEmptyError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=ErrorDetail(message=str(e), hint=e.hint).model_dump(),
        )
    except CanvasError as e:
        logger.error(f"Canvas bridge error during discovery: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    return _to_response(outcome, request.dry_run)


@router.post("/place", response_model=PlaceResponse)
async def place(
    request: PlaceRequest,
    engine: LayoutEngine = Depends(get_engine),
    settings: ArrangerSettings = Depends(get_settings),
):
    """Compute cells for elements that are about to be created."""
    try:
        context = LayoutContext.create(
            layout_mode=request.layout,
            columns=request.columns,
            gap_x=request.gap if request.gap_x is None else request.gap_x,
            gap_y=request.gap if request.gap_y is None else request.gap_y,
            start_x=request.start_x,
            start_y=request.start_y,
            container_width=request.container_width,
            container_height=request.container_height,
        )
        plan = engine.place_new_elements(
            request.labels,
            context,
            button_width=request.button_width,
            button_height=request.button_height,
            margin=_margin(request, settings),
        )
    except InputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return PlaceResponse(
        ui_type=plan.ui_type.value,
        cells=[
            CellSchema(label=c.label, x=c.x, y=c.y, width=c.width, height=c.height)
            for c in plan.cells
        ],
    )
