"""Pytest configuration and fixtures."""

from typing import Any, Callable, Dict, List, Tuple

import pytest

from arranger.engine import Element, ElementKind, LayoutContext, MutationError

# Calculator keys in reading order of the canonical layout
CALCULATOR_ROWS: List[List[str]] = [
    ["C", "±", "%", "÷"],
    ["7", "8", "9", "×"],
    ["4", "5", "6", "-"],
    ["1", "2", "3", "+"],
    ["0", ".", "="],
]
CALCULATOR_KEYS: List[str] = [key for row in CALCULATOR_ROWS for key in row]


def make_rect(element_id: str, x: float, y: float, width: float = 60, height: float = 60,
              name: str = "Rectangle") -> Element:
    return Element(id=element_id, kind=ElementKind.RECTANGLE, x=x, y=y,
                   width=width, height=height, name=name)


def make_text(element_id: str, label: str, x: float, y: float,
              width: float = 20, height: float = 20) -> Element:
    return Element(id=element_id, kind=ElementKind.TEXT, x=x, y=y,
                   width=width, height=height, name="Text", label=label)


def make_button(index: int, label: str, x: float, y: float,
                width: float = 60, height: float = 60) -> Tuple[Element, Element]:
    """A rectangle with a 20x20 label centered on it."""
    rect = make_rect(f"btn-{index}", x, y, width, height)
    text = make_text(f"txt-{index}", label, x + (width - 20) // 2, y + (height - 20) // 2)
    return rect, text


def build_calculator(positions: Dict[str, Tuple[float, float, float]]) -> Dict[str, Any]:
    """Calculator keys at the given (x, y, width) per label."""
    elements: List[Element] = []
    ids: Dict[str, Tuple[str, str]] = {}
    for index, key in enumerate(CALCULATOR_KEYS):
        x, y, width = positions[key]
        rect, text = make_button(index, key, x, y, width)
        elements.extend([rect, text])
        ids[key] = (rect.id, text.id)
    return {"elements": elements, "ids": ids}


def canonical_positions() -> Dict[str, Tuple[float, float, float]]:
    """Key positions in a 300 wide container, start (20, 80), 60x60 keys, gap 10."""
    positions = {}
    for row, keys in enumerate(CALCULATOR_ROWS):
        col = 0
        for key in keys:
            width = 130 if key == "0" else 60
            positions[key] = (20 + col * 70, 80 + row * 70, width)
            col += 2 if key == "0" else 1
    return positions


class FakeCanvas:
    """In-memory canvas bridge that records every call."""

    def __init__(self, info: Any = None, nodes: Any = None, fail_ids: Tuple[str, ...] = ()):
        self.info = info
        self.nodes = nodes if nodes is not None else {"nodes": []}
        self.fail_ids = set(fail_ids)
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.discovery_calls: List[str] = []

    async def get_node_info(self, node_id: str) -> Any:
        self.discovery_calls.append("get_node_info")
        return self.info

    async def find_nodes(self, within: str = None) -> Any:
        self.discovery_calls.append("find_nodes")
        return self.nodes

    async def get_nodes_info(self, node_ids: List[str]) -> Any:
        self.discovery_calls.append("get_nodes_info")
        return self.nodes

    async def call_tool(self, tool: str, args: Dict[str, Any]) -> Any:
        self.calls.append((tool, args))
        node_id = args.get("nodeId")
        if node_id in self.fail_ids:
            raise MutationError(tool, node_id, "node not found")
        return {"success": True}

    def tools(self) -> List[str]:
        return [tool for tool, _ in self.calls]


@pytest.fixture
def rect() -> Callable[..., Element]:
    return make_rect


@pytest.fixture
def text() -> Callable[..., Element]:
    return make_text


@pytest.fixture
def calculator_context() -> LayoutContext:
    """300x450 container, start (20, 80), gaps 10."""
    return LayoutContext(container_width=300, container_height=450)


@pytest.fixture
def canonical_calculator() -> Dict[str, Any]:
    """19 calculator keys already at their canonical positions."""
    return build_calculator(canonical_positions())


@pytest.fixture
def scrambled_calculator() -> Dict[str, Any]:
    """19 calculator keys in a shuffled 5-column grid."""
    order = ["=", "7", "C", "+", "0", "3", "÷", "5", ".", "9",
             "±", "1", "×", "4", "%", "8", "-", "2", "6"]
    positions = {}
    for i, key in enumerate(order):
        row, col = divmod(i, 5)
        positions[key] = (10 + col * 65, 100 + row * 75, 60)
    return build_calculator(positions)


@pytest.fixture
def fake_canvas() -> type:
    """The FakeCanvas class, to build per-test instances."""
    return FakeCanvas


@pytest.fixture
def button_factory() -> Callable[..., Tuple[Element, Element]]:
    return make_button
