"""Tests for the delegated planner, its response parsing and the fallback."""

import asyncio
import json

import pytest

from arranger.engine import (
    DecisionParseError,
    DelegatedPlanner,
    FallbackPlanner,
    LayoutContext,
    LayoutEngine,
    PlanRequest,
    TemplatePlanner,
    UIType,
    get_planner,
)
from arranger.engine.layout_strategies import build_decision_prompt, parse_positions
from arranger.llm import LAYOUT_SYSTEM_PROMPT


class RecordingDecider:
    """Decide callable returning a canned response and recording prompts."""

    def __init__(self, response="", error=None):
        self.response = response
        self.error = error
        self.calls = []

    async def __call__(self, system_prompt, prompt):
        self.calls.append((system_prompt, prompt))
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def abc_request(button_factory):
    """Three generic buttons A, B, C in one row."""
    elements = []
    for i, label in enumerate(["A", "B", "C"]):
        elements.extend(button_factory(i, label, 70 * i, 0))
    grouped = LayoutEngine().analyze(elements)
    return PlanRequest(grouped=grouped, ui_type=UIType.GENERIC, context=LayoutContext())


def run(planner, request):
    return asyncio.run(planner.plan(request))


class TestParsePositions:
    """Response parsing."""

    def test_array_inside_prose(self):
        """Test the array is found inside surrounding text."""
        response = 'Here you go:\n```json\n[{"id": "a", "x": 1, "y": 2.5}]\n```'
        assert parse_positions(response, ["a"]) == {"a": (1.0, 2.5)}

    def test_invalid_entries_dropped(self):
        """Test unknown ids, non-numbers and booleans are skipped."""
        response = json.dumps([
            {"id": "a", "x": 10, "y": 20},
            {"id": "ghost", "x": 0, "y": 0},
            {"id": "b", "x": "10", "y": 0},
            {"id": "c", "x": True, "y": 0},
            {"id": 7, "x": 0, "y": 0},
            "not an object",
        ])

        assert parse_positions(response, ["a", "b", "c"]) == {"a": (10.0, 20.0)}

    def test_first_entry_wins(self):
        """Test a repeated id keeps its first position."""
        response = '[{"id": "a", "x": 1, "y": 1}, {"id": "a", "x": 9, "y": 9}]'
        assert parse_positions(response, ["a"]) == {"a": (1.0, 1.0)}

    @pytest.mark.parametrize("response", [
        "not json",
        "",
        "[not, json]",
        '[{"id": "ghost", "x": 1, "y": 1}]',
        "[]",
    ])
    def test_unusable_response(self, response):
        """Test responses with no usable entry raise DecisionParseError."""
        with pytest.raises(DecisionParseError):
            parse_positions(response, ["a"])


class TestDecisionPrompt:
    """Prompt rendering."""

    def test_prompt_lists_units(self, abc_request):
        """Test every unit id and the layout parameters appear."""
        prompt = build_decision_prompt(abc_request)

        for element_id in ["btn-0", "btn-1", "btn-2"]:
            assert element_id in prompt
        assert "generic interface" in prompt
        assert "Width: 400px" in prompt
        assert "Row-major grid" in prompt

    def test_prompt_is_deterministic(self, abc_request):
        """Test the same request renders the same text."""
        assert build_decision_prompt(abc_request) == build_decision_prompt(abc_request)

    def test_calculator_reference(self, scrambled_calculator, calculator_context):
        """Test the calculator table is included as the reference layout."""
        grouped = LayoutEngine().analyze(scrambled_calculator["elements"])
        request = PlanRequest(grouped=grouped, ui_type=UIType.CALCULATOR, context=calculator_context)

        prompt = build_decision_prompt(request)

        assert "col 1: ± or ⌫" in prompt


class TestDelegatedPlanner:
    """Merging decisions with the template baseline."""

    def test_decided_units_move_and_texts_follow(self, abc_request):
        """Test a decided rectangle moves with its label centered on it."""
        decider = RecordingDecider('[{"id": "btn-0", "x": 200, "y": 300}]')

        result = run(DelegatedPlanner(decider), abc_request)
        by_id = result.by_id()

        assert (by_id["btn-0"].x, by_id["btn-0"].y) == (200, 300)
        assert (by_id["txt-0"].x, by_id["txt-0"].y) == (220, 320)
        assert result.planner == "delegated"

    def test_missing_units_keep_template_position(self, abc_request):
        """Test undecided units take the deterministic position."""
        decider = RecordingDecider('[{"id": "btn-0", "x": 200, "y": 300}]')
        baseline = {a.element_id: a for a in TemplatePlanner().compute(abc_request).assignments()}

        result = run(DelegatedPlanner(decider), abc_request)
        by_id = result.by_id()

        for element_id in ["btn-1", "txt-1", "btn-2", "txt-2"]:
            assert by_id[element_id] == baseline[element_id]
        assert result.warnings == ["2 units kept their template position"]

    def test_covers_every_element(self, abc_request):
        """Test the merged plan has one assignment per element."""
        decider = RecordingDecider('[{"id": "btn-2", "x": 20, "y": 80}]')

        result = run(DelegatedPlanner(decider), abc_request)

        assert sorted(result.by_id()) == sorted(abc_request.grouped.element_ids())
        assert len(result.assignments) == 6

    def test_text_ids_in_response_are_ignored(self, abc_request):
        """Test a position for a partner text is not applied directly."""
        decider = RecordingDecider(
            '[{"id": "btn-0", "x": 20, "y": 80}, {"id": "txt-0", "x": 999, "y": 999}]'
        )

        result = run(DelegatedPlanner(decider), abc_request)

        assert result.by_id()["txt-0"].x == 40

    def test_spanning_width_comes_from_template(self, scrambled_calculator, calculator_context):
        """Test a decided key keeps the template width override."""
        grouped = LayoutEngine().analyze(scrambled_calculator["elements"])
        request = PlanRequest(grouped=grouped, ui_type=UIType.CALCULATOR, context=calculator_context)
        zero_rect, zero_text = scrambled_calculator["ids"]["0"]
        decider = RecordingDecider(json.dumps([{"id": zero_rect, "x": 20, "y": 400}]))

        by_id = run(DelegatedPlanner(decider), request).by_id()

        assert by_id[zero_rect].width == 130
        assert by_id[zero_text].x == 20 + 55

    def test_system_prompt_passed(self, abc_request):
        """Test the decide callable receives the system prompt and the problem."""
        decider = RecordingDecider('[{"id": "btn-0", "x": 20, "y": 80}]')

        run(DelegatedPlanner(decider), abc_request)

        system_prompt, prompt = decider.calls[0]
        assert system_prompt == LAYOUT_SYSTEM_PROMPT
        assert "btn-1" in prompt

    def test_unusable_response_raises(self, abc_request):
        """Test the planner itself does not hide a bad response."""
        with pytest.raises(DecisionParseError):
            run(DelegatedPlanner(RecordingDecider("not json")), abc_request)


class TestFallbackPlanner:
    """Recovery to the template planner."""

    def test_bad_response_equals_template(self, abc_request):
        """Test an unusable response yields exactly the template plan."""
        planner = FallbackPlanner(DelegatedPlanner(RecordingDecider("not json")))

        result = run(planner, abc_request)
        expected = TemplatePlanner().compute(abc_request).assignments()

        assert result.assignments == expected
        assert result.used_fallback is True
        assert result.fallback_reason.startswith("DecisionParseError")
        assert result.planner == "template"

    def test_decider_exception(self, abc_request):
        """Test a failing decide callable falls back."""
        decider = RecordingDecider(error=TimeoutError("too slow"))

        result = run(FallbackPlanner(DelegatedPlanner(decider)), abc_request)

        assert result.used_fallback is True
        assert "too slow" in result.fallback_reason

    def test_success_is_passed_through(self, abc_request):
        """Test a good decision is not replaced."""
        decider = RecordingDecider('[{"id": "btn-0", "x": 200, "y": 300}]')

        result = run(FallbackPlanner(DelegatedPlanner(decider)), abc_request)

        assert result.used_fallback is False
        assert result.planner == "delegated"


class TestGetPlanner:
    """Planner registry."""

    def test_template(self):
        """Test the template planner needs no collaborator."""
        assert isinstance(get_planner("template"), TemplatePlanner)

    def test_fallback_wraps_delegated(self):
        """Test fallback composes delegated over template."""
        planner = get_planner("FALLBACK", decide=RecordingDecider())

        assert isinstance(planner, FallbackPlanner)
        assert isinstance(planner.primary, DelegatedPlanner)
        assert isinstance(planner.fallback, TemplatePlanner)

    def test_unknown_name(self):
        """Test unknown planner names are rejected."""
        with pytest.raises(ValueError, match="Unknown planner"):
            get_planner("genetic")

    def test_delegated_needs_decide(self):
        """Test delegated planners require a decide callable."""
        with pytest.raises(ValueError):
            get_planner("delegated")
