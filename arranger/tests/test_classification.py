"""Tests for labels, UI type classification and canonical tables."""

import pytest

from arranger.engine import (
    CALCULATOR_TABLE,
    Element,
    ElementKind,
    GroupedElements,
    Pair,
    UIType,
    classify_labels,
    classify_ui_type,
    extract_label,
    normalize_label,
    render_table,
)
from arranger.engine.canonical_tables import get_canonical_table, match_slots, table_columns
from arranger.engine.ui_type_classifier import is_action_label


class TestLabels:
    """Label extraction and normalization."""

    @pytest.mark.parametrize("raw,expected", [
        ("*", "×"),
        ("x", "×"),
        ("/", "÷"),
        ("AC", "C"),
        ("DEL", "⌫"),
        ("+/-", "±"),
        (" 7 ", "7"),
        ("=", "="),
    ])
    def test_normalize_synonyms(self, raw, expected):
        """Test glyph variants collapse to one canonical label."""
        assert normalize_label(raw) == expected

    def test_normalize_none(self):
        """Test None normalizes to an empty string."""
        assert normalize_label(None) == ""

    def test_extract_prefers_text_content(self):
        """Test literal text wins over the name."""
        element = Element(id="t", kind=ElementKind.TEXT, name="Key", label=" 9 ")
        assert extract_label(element) == "9"

    def test_extract_meaningful_name(self):
        """Test a short custom name is used when there is no text."""
        element = Element(id="r", kind=ElementKind.RECTANGLE, name="Submit")
        assert extract_label(element) == "Submit"

    @pytest.mark.parametrize("name", ["Rectangle", "text", "", "A very long layer name"])
    def test_extract_unknown(self, name):
        """Test generic or long names give the unknown label."""
        element = Element(id="r", kind=ElementKind.RECTANGLE, name=name)
        assert extract_label(element) == "?"

    def test_extract_none(self):
        """Test a missing element gives the unknown label."""
        assert extract_label(None) == "?"


class TestClassifyLabels:
    """Archetype priority order."""

    def test_calculator(self):
        """Test digits plus operators with enough keys."""
        labels = ["7", "8", "9", "×", "4", "5", "6", "-", "1", "="]
        assert classify_labels(labels) == UIType.CALCULATOR

    def test_calculator_needs_ten_keys(self):
        """Test nine calculator-looking keys fall through."""
        labels = ["7", "8", "9", "×", "4", "5", "6", "-", "1"]
        assert classify_labels(labels) != UIType.CALCULATOR

    def test_clear_key_counts_as_operator(self):
        """Test a clear key qualifies in place of an operator."""
        labels = [str(d) for d in range(9)] + ["AC"]
        assert classify_labels(labels) == UIType.CALCULATOR

    def test_calculator_beats_form(self):
        """Test the calculator check runs before the form check."""
        labels = [str(d) for d in range(9)] + ["+", "Submit"]
        assert classify_labels(labels) == UIType.CALCULATOR

    @pytest.mark.parametrize("label", ["Submit", "cancel", "Save draft", "提交", "删除"])
    def test_form_keywords(self, label):
        """Test English and Chinese action keywords."""
        assert classify_labels(["Name", label]) == UIType.FORM

    def test_menu(self):
        """Test four or more long labels without displays."""
        labels = ["Coffee", "Latte", "Mocha", "Espresso"]
        assert classify_labels(labels) == UIType.MENU

    def test_menu_needs_no_display(self):
        """Test a display turns a menu-like set generic."""
        labels = ["Coffee", "Latte", "Mocha", "Espresso"]
        assert classify_labels(labels, display_count=1) == UIType.GENERIC

    def test_short_labels_are_not_a_menu(self):
        """Test mean label length must exceed three."""
        assert classify_labels(["Go", "Up", "On", "Off"]) == UIType.GENERIC

    def test_dashboard(self):
        """Test two displays make a dashboard."""
        assert classify_labels(["A", "B"], display_count=2) == UIType.DASHBOARD

    def test_generic(self):
        """Test the fallback archetype."""
        assert classify_labels(["A", "B"]) == UIType.GENERIC
        assert classify_labels([]) == UIType.GENERIC

    def test_deterministic(self):
        """Test repeated calls agree."""
        labels = ["Coffee", "7", "Latte", "Tea", "Mocha"]
        assert len({classify_labels(labels) for _ in range(5)}) == 1

    def test_action_label(self):
        """Test the action keyword match is case-insensitive."""
        assert is_action_label("SUBMIT order")
        assert not is_action_label("Name")


class TestClassifyGrouped:
    """Classification from a grouped element set."""

    def test_unpaired_button_names_count(self, rect, text):
        """Test unpaired buttons contribute their names."""
        pairs = [
            Pair(rectangle=rect(f"r{i}", 0, 0), text=text(f"t{i}", str(i), 0, 0))
            for i in range(9)
        ]
        plus = rect("plus", 0, 0, name="+")
        grouped = GroupedElements(
            pairs=pairs,
            standalone=[plus],
            button_ids=frozenset([p.rectangle_id for p in pairs] + ["plus"]),
        )

        assert classify_ui_type(grouped) == UIType.CALCULATOR


class TestCanonicalTables:
    """Calculator table and slot matching."""

    def test_table_shape(self):
        """Test four columns and the double-width 0."""
        assert table_columns(CALCULATOR_TABLE) == 4
        zero = [slot for slot in CALCULATOR_TABLE if slot.label == "0"][0]
        assert (zero.row, zero.col, zero.span) == (4, 0, 2)

    def test_only_calculator_has_a_table(self):
        """Test rule-based archetypes have no table."""
        assert get_canonical_table(UIType.MENU) == ()
        assert table_columns(()) == 0

    def test_match_normalizes_labels(self):
        """Test synonyms claim the canonical slot."""
        match = match_slots([("*", "times"), ("AC", "clear")], CALCULATOR_TABLE)

        placed = {slot.label: item for slot, item in match.placed}
        assert placed == {"×": "times", "C": "clear"}
        assert match.leftovers == []

    def test_shared_cell(self):
        """Test the second claimant of the shared cell is left over."""
        match = match_slots([("⌫", "back"), ("±", "sign")], CALCULATOR_TABLE)

        assert [(s.label, item) for s, item in match.placed] == [("±", "sign")]
        assert match.leftovers == ["back"]

    def test_duplicate_labels(self):
        """Test a label claims its slot once; the copy is left over."""
        match = match_slots([("7", "first"), ("7", "second"), ("AB", "other")], CALCULATOR_TABLE)

        assert [item for _, item in match.placed] == ["first"]
        assert match.leftovers == ["second", "other"]

    def test_placed_in_table_order(self):
        """Test placements follow the table walk, not the input order."""
        match = match_slots([("=", "eq"), ("C", "clear")], CALCULATOR_TABLE)

        assert [item for _, item in match.placed] == ["clear", "eq"]

    def test_render_calculator(self):
        """Test the rendering lists alternatives and spans."""
        rendered = render_table(UIType.CALCULATOR)

        assert rendered.splitlines()[0] == "Row 0: col 0: C, col 1: ± or ⌫, col 2: %, col 3: ÷"
        assert "col 0: 0 (spans 2 columns)" in rendered

    def test_render_rule_archetype(self):
        """Test archetypes without a table render their rule."""
        assert "action buttons" in render_table(UIType.FORM)
        assert render_table(UIType.GENERIC).startswith("Row-major grid")
