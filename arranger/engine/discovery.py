"""
discovery.py — Normalize canvas discovery payloads into Elements.

Canvas bridges answer in a handful of shapes:

- a JSON list of nodes, or {"nodes": [...]}, {"children": [...]},
  {"result": {"children": [...]}}
- any of the above as a JSON string
- any of the above wrapped as {"content": [{"type": "text", "text": "<json>"}]}

A node carries its geometry either directly (x, y, width, height, relative to
its parent) or in "absoluteBoundingBox" (canvas coordinates; converted to
container-relative with the container's origin). Text content comes from
"characters" or "textContent".

A payload that cannot be read yields no elements rather than an error; the
orchestrator reports an empty discovery to the caller.
"""

import json
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .data_models import Container, Element, ElementKind
from .thresholds import (
    DEFAULT_CONTAINER_HEIGHT,
    DEFAULT_CONTAINER_WIDTH,
    DEFAULT_NODE_HEIGHT,
    DEFAULT_NODE_WIDTH,
    DUPLICATE_POSITION_BUCKET,
)

logger = logging.getLogger(__name__)

KIND_BY_TYPE: Dict[str, ElementKind] = {
    "RECTANGLE": ElementKind.RECTANGLE,
    "TEXT": ElementKind.TEXT,
}


@dataclass
class DiscoveryResult:
    """Elements found in a container, plus what was set aside."""
    elements: List[Element]
    container: Container
    duplicate_ids: List[str] = field(default_factory=list)


# =============================================================================
# PAYLOAD UNWRAPPING
# =============================================================================

def unwrap_payload(payload: Any) -> Any:
    """Strip the transport wrapping and decode JSON text. None when unreadable."""
    if isinstance(payload, dict) and isinstance(payload.get("content"), list):
        texts = [
            item.get("text") for item in payload["content"]
            if isinstance(item, dict) and item.get("type", "text") == "text"
        ]
        payload = next((t for t in texts if t), None)

    if isinstance(payload, (bytes, bytearray)):
        payload = payload.decode("utf-8", errors="replace")

    if isinstance(payload, str):
        try:
            return json.loads(payload)
        except json.JSONDecodeError as e:
            logger.warning(f"Discovery payload is not valid JSON: {e}")
            return None
    return payload


def node_list(data: Any) -> List[Dict[str, Any]]:
    """The list of raw nodes inside a decoded payload."""
    if isinstance(data, list):
        nodes = data
    elif isinstance(data, dict):
        result = data.get("result")
        nodes = (
            data.get("nodes")
            or data.get("children")
            or (result.get("children") if isinstance(result, dict) else None)
            or []
        )
    else:
        nodes = []
    if not isinstance(nodes, list):
        return []
    return [n for n in nodes if isinstance(n, dict)]


# =============================================================================
# NODES
# =============================================================================

def _number(value: Any, default: float) -> float:
    if isinstance(value, bool) or value is None:
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def node_type(raw: Dict[str, Any]) -> str:
    return str(raw.get("type") or "").upper()


def parse_node(raw: Dict[str, Any], origin: Tuple[float, float] = (0.0, 0.0)) -> Optional[Element]:
    """
    Build an Element from one raw node.

    Returns:
        The Element, or None when the node has no id.
    """
    element_id = str(raw.get("id") or "")
    if not element_id:
        return None

    bbox = raw.get("absoluteBoundingBox")
    if isinstance(bbox, dict):
        x = _number(bbox.get("x"), 0.0) - origin[0]
        y = _number(bbox.get("y"), 0.0) - origin[1]
        width = _number(bbox.get("width"), DEFAULT_NODE_WIDTH)
        height = _number(bbox.get("height"), DEFAULT_NODE_HEIGHT)
    else:
        x = _number(raw.get("x"), 0.0)
        y = _number(raw.get("y"), 0.0)
        width = _number(raw.get("width"), DEFAULT_NODE_WIDTH)
        height = _number(raw.get("height"), DEFAULT_NODE_HEIGHT)

    text = raw.get("characters") or raw.get("textContent") or raw.get("label")
    return Element(
        id=element_id,
        kind=KIND_BY_TYPE.get(node_type(raw), ElementKind.OTHER),
        x=x,
        y=y,
        width=max(0.0, width),
        height=max(0.0, height),
        name=str(raw.get("name") or ""),
        label=str(text) if text else None,
        type_name=node_type(raw),
    )


def parse_nodes(
    payload: Any,
    origin: Tuple[float, float] = (0.0, 0.0),
    exclude_types: Iterable[str] = (),
    exclude_ids: Iterable[str] = (),
    only_ids: Optional[Sequence[str]] = None,
) -> List[Element]:
    """
    Parse a discovery payload into Elements, in payload order.

    Args:
        payload: Raw discovery answer (any supported shape)
        origin: Canvas position of the container, for absoluteBoundingBox nodes
        exclude_types: Raw node types to skip (e.g. FRAME, GROUP), any case
        exclude_ids: Ids to skip (typically the container itself)
        only_ids: When given, keep only these ids
    """
    parsed = [parse_node(raw, origin) for raw in node_list(unwrap_payload(payload))]
    return filter_elements(
        [e for e in parsed if e is not None],
        exclude_types=exclude_types,
        exclude_ids=exclude_ids,
        only_ids=only_ids,
    )


def filter_elements(
    elements: Iterable[Element],
    exclude_types: Iterable[str] = (),
    exclude_ids: Iterable[str] = (),
    only_ids: Optional[Sequence[str]] = None,
) -> List[Element]:
    """Drop excluded node types (any case) and ids, keeping order."""
    excluded_types = {t.strip().upper() for t in exclude_types if t and t.strip()}
    excluded_ids = set(exclude_ids)
    wanted = set(only_ids) if only_ids is not None else None

    return [
        e for e in elements
        if e.canvas_type not in excluded_types
        and e.id not in excluded_ids
        and (wanted is None or e.id in wanted)
    ]


def parse_container(payload: Any) -> Container:
    """Container size and canvas origin; 400x600 at (0, 0) when unreadable."""
    data = unwrap_payload(payload)
    if not isinstance(data, dict):
        return Container(width=DEFAULT_CONTAINER_WIDTH, height=DEFAULT_CONTAINER_HEIGHT)

    bbox = data.get("absoluteBoundingBox")
    source = bbox if isinstance(bbox, dict) else data
    width = _number(source.get("width"), 0.0) or _number(data.get("width"), 0.0)
    height = _number(source.get("height"), 0.0) or _number(data.get("height"), 0.0)
    return Container(
        width=width if width > 0 else DEFAULT_CONTAINER_WIDTH,
        height=height if height > 0 else DEFAULT_CONTAINER_HEIGHT,
        offset_x=_number(source.get("x"), 0.0),
        offset_y=_number(source.get("y"), 0.0),
    )


# =============================================================================
# DUPLICATES
# =============================================================================

def duplicate_key(element: Element) -> Tuple[str, int, int, str]:
    """Same kind, same position rounded to the bucket, same text."""
    bucket = DUPLICATE_POSITION_BUCKET
    return (
        element.kind.value,
        math.floor(element.x / bucket + 0.5),
        math.floor(element.y / bucket + 0.5),
        element.label or element.name,
    )


def find_duplicates(elements: List[Element]) -> Tuple[List[Element], List[str]]:
    """
    Split elements into first occurrences and duplicate ids.

    Stacked copies are what a retried or parallel creation step leaves behind.
    The first element seen for a key is kept; later ones are duplicates.
    """
    seen = set()
    unique: List[Element] = []
    duplicate_ids: List[str] = []
    for element in elements:
        key = duplicate_key(element)
        if key in seen:
            logger.debug(
                f'Duplicate {element.kind.value} "{key[3]}" at ({element.x}, {element.y}): {element.id}'
            )
            duplicate_ids.append(element.id)
            continue
        seen.add(key)
        unique.append(element)
    if duplicate_ids:
        logger.info(f"{len(elements)} nodes, {len(unique)} unique, {len(duplicate_ids)} duplicates")
    return unique, duplicate_ids
