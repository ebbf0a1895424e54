"""
Exact and near-duplicate label detection.
"""

import math
from typing import Dict, List, Sequence

from ....shared import get_logger
from ....shared.models.board import Element
from ..models import DuplicatePair, DuplicateReport, SimilarPair

logger = get_logger(__name__)

MIN_LABEL_LENGTH = 3
DEFAULT_SIMILARITY_THRESHOLD = 0.80


def normalize_label(text: str) -> str:
    return text.lower().strip()


def edit_distance(first: str, second: str) -> int:
    """Levenshtein distance via the classic dynamic-programming table."""
    if first == second:
        return 0
    if not first or not second:
        return max(len(first), len(second))

    previous = list(range(len(second) + 1))
    for i, char in enumerate(first, start=1):
        current = [i]
        for j, other in enumerate(second, start=1):
            cost = 0 if char == other else 1
            current.append(min(previous[j - 1] + cost, current[j - 1] + 1, previous[j] + 1))
        previous = current
    return previous[-1]


def similarity(first: str, second: str) -> float:
    """
    Normalized similarity in [0, 1].

    ``(max_len - edit_distance) / max_len``; two empty strings are identical.
    """
    longest = max(len(first), len(second))
    if longest == 0:
        return 1.0
    return (longest - edit_distance(first, second)) / longest


def find_duplicates(text_elements: Sequence[Element],
                    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
                    max_pairwise: int = 500) -> DuplicateReport:
    """
    Report exact duplicate labels and near-duplicate canonical labels.

    Exact pass: the first element carrying a normalized label is canonical;
    each later element with the same normalized label is paired with it.
    Labels shorter than three characters are ignored.

    Fuzzy pass: every pair of canonical labels whose similarity is strictly
    above ``similarity_threshold``. Skipped when the number of canonical
    labels exceeds ``max_pairwise``.

    Args:
        text_elements: Labeled elements
        similarity_threshold: Fuzzy cut-off, exclusive
        max_pairwise: Element-count guard for the quadratic pass

    Returns:
        DuplicateReport with ``exact`` and ``similar`` pairs
    """
    canonical: Dict[str, Element] = {}
    exact: List[DuplicatePair] = []

    for element in text_elements:
        normalized = normalize_label(element.text)
        if len(normalized) < MIN_LABEL_LENGTH:
            continue
        first = canonical.get(normalized)
        if first is None:
            canonical[normalized] = element
            continue
        exact.append(DuplicatePair(
            text=element.text,
            element_ids=[first.id, element.id],
            positions=[first.position, element.position],
        ))

    similar: List[SimilarPair] = []
    if len(canonical) > max_pairwise:
        logger.warning(
            f"Skipping fuzzy duplicate pass: {len(canonical)} labels exceeds "
            f"the limit of {max_pairwise}"
        )
        return DuplicateReport(exact=exact, similar=similar)

    entries = list(canonical.items())
    for i, (label_a, element_a) in enumerate(entries):
        for label_b, element_b in entries[i + 1:]:
            score = similarity(label_a, label_b)
            if score > similarity_threshold:
                similar.append(SimilarPair(
                    element_ids=[element_a.id, element_b.id],
                    texts=[element_a.text, element_b.text],
                    similarity=int(math.floor(score * 100 + 0.5)),
                ))

    logger.debug(f"Found {len(exact)} exact and {len(similar)} similar label pairs")
    return DuplicateReport(exact=exact, similar=similar)
