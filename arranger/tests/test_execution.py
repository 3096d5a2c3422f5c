"""Tests for boundary clamping, call building and batch execution."""

import asyncio

import pytest

from arranger.engine import (
    BatchExecutor,
    ExecutionReport,
    MutationCall,
    PositionAssignment,
    RolePartition,
    SpatialPairer,
    clamp_to_container,
)
from arranger.engine.batch_executor import (
    build_delete_calls,
    build_position_calls,
    build_styling_calls,
)
from arranger.engine.boundary_clamp import clamp_x


def position_calls(count):
    return [
        MutationCall(tool="set_position", element_id=f"n{i}", args={"nodeId": f"n{i}", "x": 0, "y": 0})
        for i in range(count)
    ]


class ConcurrencyRecorder:
    """Dispatch callable tracking how many calls run at once."""

    def __init__(self):
        self.active = 0
        self.peak = 0
        self.order = []

    async def __call__(self, tool, args):
        self.active += 1
        self.peak = max(self.peak, self.active)
        self.order.append(args["nodeId"])
        await asyncio.sleep(0)
        self.active -= 1


class TestClamp:
    """Horizontal clamping."""

    def test_clamp_x(self):
        """Test both edges and the untouched middle."""
        assert clamp_x(-5, 60, 300, 10) == 10
        assert clamp_x(280, 60, 300, 10) == 230
        assert clamp_x(100, 60, 300, 10) == 100

    def test_override_width_is_used(self):
        """Test the width override, not the current width, bounds x."""
        assignments = [PositionAssignment(element_id="a", x=200, y=0, width=130)]

        clamped = clamp_to_container(assignments, {"a": (60, 60)}, 300, 10)

        assert clamped[0].x == 160
        assert clamped[0].width == 130

    def test_y_is_untouched(self):
        """Test y may exceed the container."""
        assignments = [PositionAssignment(element_id="a", x=500, y=5000)]

        clamped = clamp_to_container(assignments, {"a": (60, 60)}, 300, 10)

        assert (clamped[0].x, clamped[0].y) == (230, 5000)

    def test_unknown_size_passes_through(self):
        """Test ids without a size are returned unchanged."""
        assignment = PositionAssignment(element_id="ghost", x=-100, y=0)

        assert clamp_to_container([assignment], {}, 300, 10) == [assignment]

    def test_order_preserved_and_idempotent(self):
        """Test clamping twice changes nothing more."""
        sizes = {"a": (60, 60), "b": (60, 60)}
        assignments = [
            PositionAssignment(element_id="b", x=900, y=0),
            PositionAssignment(element_id="a", x=-9, y=0),
        ]

        once = clamp_to_container(assignments, sizes, 300, 10)
        twice = clamp_to_container(once, sizes, 300, 10)

        assert [a.element_id for a in once] == ["b", "a"]
        assert once == twice


class TestCallBuilders:
    """Mutation call construction."""

    def test_position_and_resize(self):
        """Test set_position always, resize_node only with a width override."""
        assignments = [
            PositionAssignment(element_id="a", x=20, y=80),
            PositionAssignment(element_id="zero", x=20, y=360, width=130),
        ]

        calls = build_position_calls(assignments, {"a": (60, 60), "zero": (60, 60)})

        assert [(c.tool, c.element_id) for c in calls] == [
            ("set_position", "a"),
            ("set_position", "zero"),
            ("resize_node", "zero"),
        ]
        assert calls[0].args == {"nodeId": "a", "x": 20, "y": 80}
        assert calls[2].args == {"nodeId": "zero", "width": 130, "height": 60}

    def test_styling_calls(self, rect, text):
        """Test corner radius for rectangles and front ordering for labels."""
        partition = RolePartition(
            displays=[rect("d", 0, 0, 300, 60)],
            buttons=[rect("b", 0, 100), rect("lonely", 500, 500)],
            texts=[text("dt", "0", 250, 20), text("bt", "7", 20, 120)],
        )
        grouped = SpatialPairer().pair(partition)

        calls = build_styling_calls(grouped, radius=8)

        corner = [c.element_id for c in calls if c.tool == "set_corner_radius"]
        front = [c.element_id for c in calls if c.tool == "reorder_node"]
        assert corner == ["d", "b", "lonely"]
        assert front == ["dt", "bt"]
        assert calls[0].args["bottomLeft"] == 8
        assert calls[-1].args == {"nodeId": "bt", "position": "front"}

    def test_styling_without_layers(self, rect):
        """Test adjust_layers=False skips reordering."""
        grouped = SpatialPairer().pair(RolePartition(buttons=[rect("b", 0, 0)]))

        calls = build_styling_calls(grouped, adjust_layers=False)

        assert [c.tool for c in calls] == ["set_corner_radius"]

    def test_delete_calls(self):
        """Test one delete_node per id."""
        calls = build_delete_calls(["x", "y"])
        assert [(c.tool, c.args) for c in calls] == [
            ("delete_node", {"nodeId": "x"}),
            ("delete_node", {"nodeId": "y"}),
        ]


class TestBatchExecutor:
    """Bounded concurrent execution."""

    def test_batches_are_bounded(self):
        """Test no more than batch_size calls are in flight."""
        recorder = ConcurrencyRecorder()

        report = asyncio.run(BatchExecutor(recorder, batch_size=3).execute(position_calls(7)))

        assert recorder.peak == 3
        assert recorder.order == [f"n{i}" for i in range(7)]
        assert report.success_count == 7
        assert report.ok

    def test_failures_are_collected(self, fake_canvas):
        """Test a failing call does not stop the others."""
        canvas = fake_canvas(fail_ids=("n1", "n4"))

        report = asyncio.run(BatchExecutor(canvas.call_tool, batch_size=2).execute(position_calls(5)))

        assert (report.success_count, report.failed_count) == (3, 2)
        assert report.errors == [
            "set_position n1: node not found",
            "set_position n4: node not found",
        ]
        assert len(canvas.calls) == 5

    def test_unexpected_exception_described(self):
        """Test arbitrary exceptions become tool/id/message strings."""
        async def dispatch(tool, args):
            if args["nodeId"] == "n0":
                raise RuntimeError("boom")
            raise ConnectionError()

        report = asyncio.run(BatchExecutor(dispatch).execute(position_calls(2)))

        assert report.errors == ["set_position n0: boom", "set_position n1: ConnectionError"]

    def test_empty_call_list(self):
        """Test nothing to do is a success."""
        report = asyncio.run(BatchExecutor(ConcurrencyRecorder()).execute([]))
        assert report.total == 0 and report.ok

    def test_invalid_batch_size(self):
        """Test batch_size must be positive."""
        with pytest.raises(ValueError):
            BatchExecutor(ConcurrencyRecorder(), batch_size=0)


class TestExecutionReport:
    """Report helpers."""

    def test_summary_truncates(self):
        """Test the summary lists a limited number of errors."""
        report = ExecutionReport(1, 7, [f"e{i}" for i in range(7)])

        summary = report.summary(limit=5)

        assert summary.splitlines()[0] == "1/8 calls succeeded, 7 failed"
        assert "  ... and 2 more" in summary

    def test_summary_success(self):
        """Test the all-good summary."""
        assert ExecutionReport(4).summary() == "4 calls succeeded"
