"""
data_models.py — Value objects shared by every stage of the engine.

Elements are snapshots taken once per invocation. Nothing in the engine mutates
them; every stage returns new records. All coordinates are container-relative
canvas pixels unless stated otherwise.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import InputError


# =============================================================================
# ENUMS
# =============================================================================

class ElementKind(str, Enum):
    """Geometric kind of a canvas element."""

    RECTANGLE = "rectangle"
    TEXT = "text"
    OTHER = "other"


class Role(str, Enum):
    """Derived role of a rectangle."""

    DISPLAY = "display"
    BUTTON = "button"


class UIType(str, Enum):
    """Interface archetype governing which template applies."""

    CALCULATOR = "calculator"
    FORM = "form"
    MENU = "menu"
    DASHBOARD = "dashboard"
    GENERIC = "generic"


LayoutMode = Literal["grid", "row", "column"]
LAYOUT_MODES: Tuple[str, ...] = ("grid", "row", "column")


# =============================================================================
# GEOMETRY
# =============================================================================

class Element(BaseModel):
    """A flat element on the canvas."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    kind: ElementKind
    x: float = 0.0
    y: float = 0.0
    width: float = Field(default=100.0, ge=0)
    height: float = Field(default=40.0, ge=0)
    name: str = ""
    label: Optional[str] = Field(default=None, description="Literal text content, if any")
    type_name: str = Field(default="", description="Raw canvas node type, e.g. FRAME")

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def is_rectangle(self) -> bool:
        return self.kind == ElementKind.RECTANGLE

    @property
    def is_text(self) -> bool:
        return self.kind == ElementKind.TEXT

    @property
    def canvas_type(self) -> str:
        """Raw node type, or the kind in upper case when it was not recorded."""
        return self.type_name or self.kind.value.upper()


class Container(BaseModel):
    """The frame that holds the elements being arranged."""

    model_config = ConfigDict(frozen=True)

    width: float = Field(gt=0)
    height: float = Field(gt=0)
    offset_x: float = 0.0
    offset_y: float = 0.0

    def to_absolute(self, x: float, y: float) -> Tuple[float, float]:
        """Convert a container-relative point to the outer coordinate space."""
        return (x + self.offset_x, y + self.offset_y)


class LayoutContext(BaseModel):
    """Per-invocation layout configuration. Never mutated after construction."""

    model_config = ConfigDict(frozen=True)

    layout_mode: LayoutMode = "grid"
    columns: int = Field(default=4, ge=1)
    gap_x: float = Field(default=10.0, ge=0)
    gap_y: float = Field(default=10.0, ge=0)
    start_x: float = Field(default=20.0, ge=0)
    start_y: float = Field(default=80.0, ge=0)
    container_width: float = Field(default=400.0, gt=0)
    container_height: float = Field(default=600.0, gt=0)

    @classmethod
    def create(cls, container: Optional[Container] = None, **params) -> "LayoutContext":
        """
        Build a context from caller parameters plus the discovered container.

        Raises:
            InputError: if any parameter is invalid (unknown layout mode,
                non-positive columns, negative gaps).
        """
        mode = params.get("layout_mode", "grid")
        if mode not in LAYOUT_MODES:
            raise InputError(
                f'Invalid layout type: "{mode}". Supported types: "grid", "row", "column"'
            )
        if container is not None:
            params.setdefault("container_width", container.width)
            params.setdefault("container_height", container.height)
        try:
            return cls(**params)
        except ValidationError as e:
            raise InputError(f"Invalid layout parameters: {e.errors()[0]['msg']}") from e

    def usable_width(self, margin: float) -> float:
        """Horizontal room for a row: left inset is start_x, right inset is the margin."""
        return max(0.0, self.container_width - self.start_x - margin)


class PositionAssignment(BaseModel):
    """A computed target position for one element."""

    model_config = ConfigDict(frozen=True)

    element_id: str
    x: float
    y: float
    width: Optional[float] = Field(
        default=None, description="Only set when the element's width must change"
    )

    def moved_to(self, x: float) -> "PositionAssignment":
        return self.model_copy(update={"x": x})


# =============================================================================
# PAIRING RESULTS
# =============================================================================

@dataclass(frozen=True)
class Pair:
    """A rectangle matched with its text label."""

    rectangle: Element
    text: Element

    @property
    def rectangle_id(self) -> str:
        return self.rectangle.id

    @property
    def text_id(self) -> str:
        return self.text.id


@dataclass(frozen=True)
class DisplayGroup:
    """A display rectangle with its optional read-out text."""

    rectangle: Element
    text: Optional[Element] = None


@dataclass
class RolePartition:
    """Elements split by kind, with rectangles split by role."""

    displays: List[Element] = field(default_factory=list)
    buttons: List[Element] = field(default_factory=list)
    texts: List[Element] = field(default_factory=list)
    others: List[Element] = field(default_factory=list)


@dataclass
class GroupedElements:
    """
    Output of the spatial pairer.

    Every input element lands in exactly one of pairs, standalone or displays.
    """

    pairs: List[Pair] = field(default_factory=list)
    standalone: List[Element] = field(default_factory=list)
    displays: List[DisplayGroup] = field(default_factory=list)
    button_ids: FrozenSet[str] = frozenset()

    @property
    def unpaired_buttons(self) -> List[Element]:
        """Button-role rectangles that found no label."""
        return [e for e in self.standalone if e.id in self.button_ids]

    def element_ids(self) -> List[str]:
        """All element ids in display, pair, standalone order."""
        ids: List[str] = []
        for disp in self.displays:
            ids.append(disp.rectangle.id)
            if disp.text is not None:
                ids.append(disp.text.id)
        for pair in self.pairs:
            ids.extend([pair.rectangle.id, pair.text.id])
        ids.extend(e.id for e in self.standalone)
        return ids

    def elements_by_id(self) -> Dict[str, Element]:
        lookup: Dict[str, Element] = {}
        for disp in self.displays:
            lookup[disp.rectangle.id] = disp.rectangle
            if disp.text is not None:
                lookup[disp.text.id] = disp.text
        for pair in self.pairs:
            lookup[pair.rectangle.id] = pair.rectangle
            lookup[pair.text.id] = pair.text
        for e in self.standalone:
            lookup[e.id] = e
        return lookup


def size_lookup(elements: List[Element]) -> Dict[str, Tuple[float, float]]:
    """Map element id to (width, height)."""
    return {e.id: (e.width, e.height) for e in elements}
