"""
Spatial analysis: proximity clustering and overlap detection.
"""

import math
from typing import List, Sequence

import numpy as np

from ....shared import get_logger
from ....shared.models.board import Element, Position
from ..models import BoundingBox, Cluster, Overlap

logger = get_logger(__name__)

DEFAULT_CLUSTER_THRESHOLD = 300.0
DEFAULT_OVERLAP_THRESHOLD = 50.0
DENSITY_AREA_UNIT = 10_000.0


def _positions(elements: Sequence[Element]) -> np.ndarray:
    return np.array(
        [[e.position.x, e.position.y] for e in elements], dtype=float
    ).reshape(-1, 2)


def identify_spatial_clusters(elements: Sequence[Element],
                              threshold: float = DEFAULT_CLUSTER_THRESHOLD) -> List[Cluster]:
    """
    Group visual elements by proximity to a seed.

    Single greedy pass in input order: each unvisited element seeds a cluster
    and absorbs every other unvisited element strictly closer than
    ``threshold`` to the seed. Growth is not transitive: an element near an
    absorbed member but beyond the threshold from the seed stays out.
    Singleton groups are discarded.

    Args:
        elements: Visual elements (nodes and stroke centroids)
        threshold: Maximum seed distance, exclusive

    Returns:
        Clusters with at least two members, in seed order
    """
    positions = _positions(elements)
    visited = set()
    clusters: List[Cluster] = []

    for index, seed in enumerate(elements):
        if seed.id in visited:
            continue
        visited.add(seed.id)

        distances = np.hypot(*(positions - positions[index]).T)
        members = [index]
        for other_index, other in enumerate(elements):
            if other_index == index or other.id in visited:
                continue
            if distances[other_index] < threshold:
                members.append(other_index)
                visited.add(other.id)

        if len(members) < 2:
            continue

        member_positions = positions[members]
        min_x, min_y = member_positions.min(axis=0)
        max_x, max_y = member_positions.max(axis=0)
        bounds = BoundingBox(min_x=float(min_x), max_x=float(max_x),
                             min_y=float(min_y), max_y=float(max_y))

        clusters.append(Cluster(
            id=f"cluster-{len(clusters)}",
            element_ids=[elements[i].id for i in members],
            bounds=bounds,
            center=Position(x=(bounds.min_x + bounds.max_x) / 2,
                            y=(bounds.min_y + bounds.max_y) / 2),
            size=len(members),
            density=_density(len(members), bounds),
        ))

    logger.debug(f"Identified {len(clusters)} spatial clusters from {len(elements)} elements")
    return clusters


def _density(member_count: int, bounds: BoundingBox):
    area_units = bounds.area / DENSITY_AREA_UNIT
    if area_units <= 0:
        return None
    return member_count / area_units


def detect_overlaps(elements: Sequence[Element],
                    threshold: float = DEFAULT_OVERLAP_THRESHOLD) -> List[Overlap]:
    """
    Find element pairs placed closer than ``threshold``.

    Every unordered pair is compared once, so the scan is quadratic; callers
    are expected to guard large boards.
    """
    positions = _positions(elements)
    overlaps: List[Overlap] = []

    for i in range(len(elements)):
        distances = np.hypot(*(positions[i + 1:] - positions[i]).T)
        for offset, distance in enumerate(distances):
            if distance < threshold:
                j = i + 1 + offset
                overlaps.append(Overlap(
                    element_ids=[elements[i].id, elements[j].id],
                    distance=int(math.floor(float(distance) + 0.5)),
                ))

    return overlaps
