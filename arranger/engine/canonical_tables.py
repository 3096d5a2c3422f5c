"""
canonical_tables.py — Label -> grid cell tables for each archetype.

Only the calculator has a label-addressed table; the other archetypes place
their buttons by rule (see TemplatePlanner). Tables hold canonical labels,
so callers normalize raw labels with labels.normalize_label before matching.
"""

from dataclasses import dataclass
from typing import Dict, Generic, List, Optional, Sequence, Set, Tuple, TypeVar

from .data_models import UIType
from .labels import BACKSPACE, normalize_label

T = TypeVar("T")


@dataclass(frozen=True)
class CanonicalSlot:
    """One cell of a canonical table."""

    label: str
    row: int
    col: int
    span: int = 1


# Function row, three digit+operator rows, bottom row with a double-width "0".
# "±" and "⌫" compete for the same cell; whichever is claimed first keeps it.
CALCULATOR_TABLE: Tuple[CanonicalSlot, ...] = (
    CanonicalSlot("C", 0, 0),
    CanonicalSlot("±", 0, 1),
    CanonicalSlot(BACKSPACE, 0, 1),
    CanonicalSlot("%", 0, 2),
    CanonicalSlot("÷", 0, 3),
    CanonicalSlot("7", 1, 0),
    CanonicalSlot("8", 1, 1),
    CanonicalSlot("9", 1, 2),
    CanonicalSlot("×", 1, 3),
    CanonicalSlot("4", 2, 0),
    CanonicalSlot("5", 2, 1),
    CanonicalSlot("6", 2, 2),
    CanonicalSlot("-", 2, 3),
    CanonicalSlot("1", 3, 0),
    CanonicalSlot("2", 3, 1),
    CanonicalSlot("3", 3, 2),
    CanonicalSlot("+", 3, 3),
    CanonicalSlot("0", 4, 0, span=2),
    CanonicalSlot(".", 4, 2),
    CanonicalSlot("=", 4, 3),
)

CANONICAL_TABLES: Dict[UIType, Tuple[CanonicalSlot, ...]] = {
    UIType.CALCULATOR: CALCULATOR_TABLE,
}

# Rule descriptions for archetypes without a label table
PLACEMENT_RULES: Dict[UIType, str] = {
    UIType.FORM: "Stack fields vertically, one per row; put action buttons "
                 "(submit, cancel, save ...) side by side on the last row.",
    UIType.MENU: "Flow items top to bottom; start a new column when the "
                 "container height is used up.",
    UIType.DASHBOARD: "Arrange displays in a 2-column grid at the top, then a "
                      "row of control buttons below.",
    UIType.GENERIC: "Row-major grid, wrapping at the requested column count.",
}


def get_canonical_table(ui_type: UIType) -> Tuple[CanonicalSlot, ...]:
    """Canonical table for an archetype (empty when it is placed by rule)."""
    return CANONICAL_TABLES.get(ui_type, ())


def table_columns(table: Sequence[CanonicalSlot]) -> int:
    """Number of grid columns a table spans."""
    if not table:
        return 0
    return max(slot.col + slot.span for slot in table)


def render_table(ui_type: UIType) -> str:
    """Human-readable rendering used as reference text for the delegated planner."""
    table = get_canonical_table(ui_type)
    if not table:
        return PLACEMENT_RULES.get(ui_type, PLACEMENT_RULES[UIType.GENERIC])

    rows: Dict[int, Dict[int, List[str]]] = {}
    for slot in table:
        cell = slot.label if slot.span == 1 else f"{slot.label} (spans {slot.span} columns)"
        rows.setdefault(slot.row, {}).setdefault(slot.col, []).append(cell)

    lines = []
    for row, cols in sorted(rows.items()):
        cells = [f"col {col}: " + " or ".join(alts) for col, alts in sorted(cols.items())]
        lines.append(f"Row {row}: " + ", ".join(cells))
    return "\n".join(lines)


@dataclass
class SlotMatch(Generic[T]):
    """Result of walking a canonical table."""

    placed: List[Tuple[CanonicalSlot, T]]
    leftovers: List[T]


def match_slots(
    items: Sequence[Tuple[str, T]],
    table: Sequence[CanonicalSlot],
) -> SlotMatch[T]:
    """
    Walk the table once, claiming at most one item per slot.

    Args:
        items: (raw label, item) in priority order
        table: Canonical slots in walk order

    Returns:
        SlotMatch with placed (slot, item) pairs in table order and the
        unclaimed items in their original order.
    """
    by_label: Dict[str, List[int]] = {}
    for index, (label, _) in enumerate(items):
        by_label.setdefault(normalize_label(label), []).append(index)

    claimed: Set[int] = set()
    occupied: Set[Tuple[int, int]] = set()
    placed: List[Tuple[CanonicalSlot, T]] = []

    for slot in table:
        cells = {(slot.row, slot.col + offset) for offset in range(slot.span)}
        if cells & occupied:
            continue
        index = _first_unclaimed(by_label.get(slot.label, []), claimed)
        if index is None:
            continue
        claimed.add(index)
        occupied |= cells
        placed.append((slot, items[index][1]))

    leftovers = [item for index, (_, item) in enumerate(items) if index not in claimed]
    return SlotMatch(placed=placed, leftovers=leftovers)


def _first_unclaimed(indices: List[int], claimed: Set[int]) -> Optional[int]:
    for index in indices:
        if index not in claimed:
            return index
    return None
