"""
ui_type_classifier.py — Pick the interface archetype from button labels.

The decision is a pure function of the label multiset and the display count:
calling it twice on the same input always gives the same UIType.
"""

import logging
from typing import Iterable, List, Tuple

from .data_models import GroupedElements, UIType
from .labels import extract_label
from .thresholds import (
    CALCULATOR_MIN_BUTTONS,
    DASHBOARD_MIN_DISPLAYS,
    MENU_MIN_BUTTONS,
    MENU_MIN_MEAN_LABEL_LENGTH,
)

logger = logging.getLogger(__name__)

DIGITS = frozenset("0123456789")
OPERATORS = frozenset({"+", "-", "×", "÷", "=", "*", "/"})
CLEAR_KEYS = frozenset({"C", "AC", "CE", "CLR"})

# Bilingual action keywords (English / Traditional and Simplified Chinese)
FORM_KEYWORDS: Tuple[str, ...] = (
    "submit", "cancel", "save", "reset", "add", "delete",
    "提交", "送出", "取消", "儲存", "保存", "重置", "新增", "添加", "刪除", "删除",
)


def is_action_label(label: str) -> bool:
    """True when the label reads like a form action (submit, cancel ...)."""
    lowered = label.lower()
    return any(keyword in lowered for keyword in FORM_KEYWORDS)


def classify_labels(labels: Iterable[str], display_count: int = 0) -> UIType:
    """
    Classify an interface from its button labels.

    Args:
        labels: Labels of every button-role element (paired and unpaired)
        display_count: Number of display-role rectangles

    Returns:
        The first matching UIType in priority order
    """
    label_list: List[str] = [label.strip() for label in labels]
    label_set = set(label_list)
    button_count = len(label_list)

    has_digit = bool(label_set & DIGITS)
    has_operator = bool(label_set & OPERATORS)
    has_clear = bool(label_set & CLEAR_KEYS)
    if has_digit and (has_operator or has_clear) and button_count >= CALCULATOR_MIN_BUTTONS:
        return UIType.CALCULATOR

    if any(is_action_label(label) for label in label_list):
        return UIType.FORM

    if button_count >= MENU_MIN_BUTTONS and display_count == 0:
        mean_length = sum(len(label) for label in label_list) / button_count
        if mean_length > MENU_MIN_MEAN_LABEL_LENGTH:
            return UIType.MENU

    if display_count >= DASHBOARD_MIN_DISPLAYS:
        return UIType.DASHBOARD

    return UIType.GENERIC


def button_labels(grouped: GroupedElements) -> List[str]:
    """Labels of paired buttons followed by unpaired button rectangles."""
    labels = [extract_label(pair.text) for pair in grouped.pairs]
    labels.extend(extract_label(rect) for rect in grouped.unpaired_buttons)
    return labels


def classify_ui_type(grouped: GroupedElements) -> UIType:
    """Classify a grouped element set."""
    labels = button_labels(grouped)
    ui_type = classify_labels(labels, display_count=len(grouped.displays))
    logger.info(f"UI type: {ui_type.value} ({len(labels)} buttons, {len(grouped.displays)} displays)")
    return ui_type
