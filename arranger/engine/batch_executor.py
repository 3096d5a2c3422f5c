"""
batch_executor.py — Apply mutation calls in bounded concurrent batches.

Batches run one after another; the calls inside a batch run concurrently.
A failing call is recorded and the rest carry on. Nothing is retried and
execute() never raises for a failed call.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from .data_models import GroupedElements, PositionAssignment
from .errors import MutationError
from .thresholds import CORNER_RADIUS, TEMPLATE_BATCH_SIZE

logger = logging.getLogger(__name__)

# dispatch(tool, args) performs one remote call
DispatchFn = Callable[[str, Dict[str, Any]], Awaitable[Any]]


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class MutationCall:
    """One remote mutation."""
    tool: str
    element_id: str
    args: Dict[str, Any] = field(default_factory=dict, hash=False)


@dataclass
class ExecutionReport:
    """Aggregate outcome of executing a list of calls."""
    success_count: int = 0
    failed_count: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.success_count + self.failed_count

    @property
    def ok(self) -> bool:
        return self.failed_count == 0

    def summary(self, limit: int = 5) -> str:
        """Short human-readable summary, listing at most ``limit`` errors."""
        if self.ok:
            return f"{self.success_count} calls succeeded"
        lines = [f"{self.success_count}/{self.total} calls succeeded, {self.failed_count} failed"]
        lines.extend(f"  - {error}" for error in self.errors[:limit])
        if len(self.errors) > limit:
            lines.append(f"  ... and {len(self.errors) - limit} more")
        return "\n".join(lines)


# =============================================================================
# CALL BUILDERS
# =============================================================================

def build_position_calls(
    assignments: List[PositionAssignment],
    sizes: Dict[str, Tuple[float, float]],
) -> List[MutationCall]:
    """set_position for every assignment, resize_node where the width changes."""
    calls: List[MutationCall] = []
    for a in assignments:
        calls.append(MutationCall(
            tool="set_position",
            element_id=a.element_id,
            args={"nodeId": a.element_id, "x": a.x, "y": a.y},
        ))
        if a.width is not None:
            height = sizes.get(a.element_id, (a.width, None))[1]
            args: Dict[str, Any] = {"nodeId": a.element_id, "width": a.width}
            if height is not None:
                args["height"] = height
            calls.append(MutationCall(tool="resize_node", element_id=a.element_id, args=args))
    return calls


def build_styling_calls(
    grouped: GroupedElements,
    radius: float = CORNER_RADIUS,
    adjust_layers: bool = True,
) -> List[MutationCall]:
    """
    Finishing touches for the delegated path.

    Rounds the corners of every display and button rectangle and, when
    adjust_layers is set, brings each label text to the front so it is not
    hidden behind its rectangle.
    """
    calls: List[MutationCall] = []
    rects = [d.rectangle for d in grouped.displays]
    rects.extend(p.rectangle for p in grouped.pairs)
    rects.extend(grouped.unpaired_buttons)
    for rect in rects:
        calls.append(MutationCall(
            tool="set_corner_radius",
            element_id=rect.id,
            args={
                "nodeId": rect.id,
                "radius": radius,
                "topLeft": radius,
                "topRight": radius,
                "bottomRight": radius,
                "bottomLeft": radius,
            },
        ))

    if adjust_layers:
        texts = [d.text for d in grouped.displays if d.text is not None]
        texts.extend(p.text for p in grouped.pairs)
        for text in texts:
            calls.append(MutationCall(
                tool="reorder_node",
                element_id=text.id,
                args={"nodeId": text.id, "position": "front"},
            ))
    return calls


def build_delete_calls(element_ids: List[str]) -> List[MutationCall]:
    return [
        MutationCall(tool="delete_node", element_id=element_id, args={"nodeId": element_id})
        for element_id in element_ids
    ]


# =============================================================================
# EXECUTOR
# =============================================================================

class BatchExecutor:
    """Runs mutation calls through a dispatch callable, batch by batch."""

    def __init__(self, dispatch: DispatchFn, batch_size: int = TEMPLATE_BATCH_SIZE):
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        self.dispatch = dispatch
        self.batch_size = batch_size

    async def execute(self, calls: List[MutationCall]) -> ExecutionReport:
        """
        Execute all calls.

        Args:
            calls: Calls in the order they should be issued

        Returns:
            ExecutionReport with one error string per failed call
        """
        report = ExecutionReport()
        total_batches = (len(calls) + self.batch_size - 1) // self.batch_size

        for start in range(0, len(calls), self.batch_size):
            batch = calls[start:start + self.batch_size]
            batch_num = start // self.batch_size + 1
            if total_batches > 1:
                logger.info(f"Executing batch {batch_num}/{total_batches} ({len(batch)} calls)")

            results = await asyncio.gather(
                *[self._run(call) for call in batch],
                return_exceptions=True,
            )

            for call, result in zip(batch, results):
                if result is None:
                    report.success_count += 1
                    continue
                report.failed_count += 1
                report.errors.append(self._describe(call, result))

        if report.failed_count:
            logger.warning(f"Mutation batch finished with failures:\n{report.summary()}")
        else:
            logger.info(report.summary())
        return report

    async def _run(self, call: MutationCall) -> Optional[BaseException]:
        try:
            await self.dispatch(call.tool, call.args)
        except Exception as e:
            return e
        return None

    @staticmethod
    def _describe(call: MutationCall, error: BaseException) -> str:
        if isinstance(error, MutationError):
            return str(error)
        return str(MutationError(call.tool, call.element_id, str(error) or type(error).__name__))
