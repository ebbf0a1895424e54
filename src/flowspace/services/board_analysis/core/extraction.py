"""
Board extraction.

Normalizes a raw board snapshot into a canonical ``BoardGraph``. Extraction
never rejects a structurally odd snapshot: missing or malformed fields fall
back to empty collections, empty strings, or zero coordinates. Only a
snapshot that is not a mapping at all is refused.
"""

import math
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from ....shared import get_logger, timed_operation, InvalidSnapshotError
from ....shared.models.board import (
    BoardGraph, BoardStats, Connection, Element, ElementKind, Position,
)

logger = get_logger(__name__)

_TYPE_KEYS = ("type", "nodeType", "node_type", "shape")
_STYLE_KEYS = ("color", "backgroundColor", "strokeWidth", "tool", "locked", "style")


@timed_operation("board_extraction_duration")
def extract_board(snapshot: Any) -> BoardGraph:
    """
    Normalize a raw snapshot into a canonical board graph.

    Args:
        snapshot: ``{elements, connections, strokes, metadata}``; ``nodes`` and
            ``edges`` are accepted as aliases. Every key is optional.

    Returns:
        BoardGraph with text elements, visual elements, connections and stats

    Raises:
        InvalidSnapshotError: if the snapshot is not a mapping
    """
    if snapshot is None:
        snapshot = {}
    if not isinstance(snapshot, Mapping):
        raise InvalidSnapshotError(
            f"Board snapshot must be an object with elements/connections/strokes, "
            f"got {type(snapshot).__name__}"
        )

    raw_elements = _as_list(_first_present(snapshot, "elements", "nodes"))
    raw_connections = _as_list(_first_present(snapshot, "connections", "edges"))
    raw_strokes = _as_list(snapshot.get("strokes"))

    text_elements: List[Element] = []
    visual_elements: List[Element] = []
    node_count = 0
    stroke_count = 0

    for index, raw in enumerate(raw_elements):
        if not isinstance(raw, Mapping):
            logger.debug(f"Skipping malformed element at index {index}")
            continue
        if str(raw.get("kind", "")).lower() == ElementKind.STROKE.value:
            visual_elements.append(_stroke_element(raw, index))
            stroke_count += 1
            continue

        element = _node_element(raw, index)
        node_count += 1
        if element.has_text:
            text_elements.append(element)
        visual_elements.append(element)

    for index, raw in enumerate(raw_strokes):
        if not isinstance(raw, Mapping):
            logger.debug(f"Skipping malformed stroke at index {index}")
            continue
        visual_elements.append(_stroke_element(raw, index))
        stroke_count += 1

    connections = [
        _connection(raw, index)
        for index, raw in enumerate(raw_connections)
        if isinstance(raw, Mapping)
    ]

    metadata = snapshot.get("metadata")
    stats = BoardStats(
        node_count=node_count,
        edge_count=len(connections),
        stroke_count=stroke_count,
        total_elements=node_count + len(connections) + stroke_count,
    )

    logger.debug(
        f"Extracted {node_count} nodes ({len(text_elements)} labeled), "
        f"{len(connections)} connections, {stroke_count} strokes"
    )

    return BoardGraph(
        text_elements=text_elements,
        visual_elements=visual_elements,
        connections=connections,
        metadata=dict(metadata) if isinstance(metadata, Mapping) else {},
        stats=stats,
    )


def stroke_centroid(points: Any) -> Position:
    """
    Mean of a stroke's point coordinates.

    Accepts a flat ``[x0, y0, x1, y1, ...]`` list, ``[[x, y], ...]`` pairs or
    ``[{x, y}, ...]`` dicts. An empty or unusable list yields the origin.
    """
    coords = _point_pairs(points)
    if not coords:
        return Position()
    mean_x, mean_y = np.asarray(coords, dtype=float).mean(axis=0)
    return Position(x=float(mean_x), y=float(mean_y))


# ========== Element builders ==========

def _node_element(raw: Mapping, index: int) -> Element:
    data = raw.get("data") if isinstance(raw.get("data"), Mapping) else {}

    return Element(
        id=_as_id(raw.get("id"), f"element-{index}"),
        kind=ElementKind.NODE,
        text=_as_text(_first_present(raw, "label", "text") or _first_present(data, "label", "text")),
        position=_position(raw),
        node_type=_node_type(raw, data),
        metadata=_metadata(raw, data),
    )


def _stroke_element(raw: Mapping, index: int) -> Element:
    points = _as_list(raw.get("points"))
    return Element(
        id=_as_id(raw.get("id"), f"stroke-{index}"),
        kind=ElementKind.STROKE,
        position=stroke_centroid(points),
        metadata={
            **_metadata(raw, {}),
            "pointCount": len(_point_pairs(points)),
        },
    )


def _connection(raw: Mapping, index: int) -> Connection:
    metadata = raw.get("metadata")
    return Connection(
        id=_as_id(raw.get("id"), f"connection-{index}"),
        source=_as_text(raw.get("source")),
        target=_as_text(raw.get("target")),
        label=_as_text(raw.get("label")),
        metadata=dict(metadata) if isinstance(metadata, Mapping) else {},
    )


def _position(raw: Mapping) -> Position:
    position = raw.get("position")
    if isinstance(position, Mapping):
        return Position(x=_as_float(position.get("x")), y=_as_float(position.get("y")))
    return Position(x=_as_float(raw.get("x")), y=_as_float(raw.get("y")))


def _node_type(raw: Mapping, data: Mapping) -> Optional[str]:
    for source in (raw, data):
        for key in _TYPE_KEYS:
            value = source.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip().lower()
    return None


def _metadata(raw: Mapping, data: Mapping) -> Dict[str, Any]:
    metadata: Dict[str, Any] = {}
    extra = raw.get("metadata")
    if isinstance(extra, Mapping):
        metadata.update(extra)
    for source in (data, raw):
        for key in _STYLE_KEYS:
            if key in source and source[key] is not None:
                metadata[key] = source[key]
    return metadata


# ========== Coercion helpers ==========

def _first_present(mapping: Mapping, *keys: str) -> Any:
    for key in keys:
        if mapping.get(key) is not None:
            return mapping[key]
    return None


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def _as_text(value: Any) -> str:
    if value is None or isinstance(value, (Mapping, list, tuple)):
        return ""
    return str(value)


def _as_id(value: Any, fallback: str) -> str:
    text = _as_text(value)
    return text if text else fallback


def _as_float(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _point_pairs(points: Sequence[Any]) -> List[Tuple[float, float]]:
    if not points:
        return []

    if all(_is_number(p) for p in points):
        # Flat list; a trailing unpaired coordinate is ignored.
        return [
            (_as_float(points[i]), _as_float(points[i + 1]))
            for i in range(0, len(points) - 1, 2)
        ]

    pairs: List[Tuple[float, float]] = []
    for point in points:
        if isinstance(point, Mapping):
            pairs.append((_as_float(point.get("x")), _as_float(point.get("y"))))
        elif isinstance(point, (list, tuple)) and len(point) >= 2:
            pairs.append((_as_float(point[0]), _as_float(point[1])))
    return pairs
