"""
labels.py — Label extraction and synonym normalization.

Both functions are pure. Normalization runs once before any canonical table
lookup so that the pairer and planners never compare raw glyph variants.
"""

from typing import Dict, Optional

from .data_models import Element
from .thresholds import MEANINGFUL_NAME_MAX_LENGTH

UNKNOWN_LABEL = "?"

BACKSPACE = "⌫"

# Raw label -> canonical label
LABEL_SYNONYMS: Dict[str, str] = {
    "*": "×",
    "x": "×",
    "X": "×",
    "/": "÷",
    "AC": "C",
    "CE": "C",
    "CLR": "C",
    "⌫": BACKSPACE,
    "DEL": BACKSPACE,
    "←": BACKSPACE,
    "+/-": "±",
    "+-": "±",
}

# Names design tools give to nodes by default; they carry no meaning
GENERIC_NAMES = frozenset({"text", "rectangle", "frame", "group", "label", "button"})


def normalize_label(label: Optional[str]) -> str:
    """Collapse equivalent glyphs (``*`` -> ``×``, ``AC`` -> ``C`` ...)."""
    if label is None:
        return ""
    stripped = label.strip()
    return LABEL_SYNONYMS.get(stripped, stripped)


def extract_label(element: Optional[Element]) -> str:
    """
    Best-effort label for an element.

    Priority: literal text content, then a short meaningful name, then "?".
    """
    if element is None:
        return UNKNOWN_LABEL
    if element.label and element.label.strip():
        return element.label.strip()
    name = (element.name or "").strip()
    if name and name.lower() not in GENERIC_NAMES and len(name) <= MEANINGFUL_NAME_MAX_LENGTH:
        return name
    return UNKNOWN_LABEL
