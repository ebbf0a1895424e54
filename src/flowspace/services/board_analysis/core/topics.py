"""
Keyword topic extraction from element labels.
"""

import re
from typing import Dict, List, Sequence

import numpy as np

from ....shared.models.board import Element, Position
from ..models import Topic

DEFAULT_MAX_TOPICS = 20

STOP_WORDS = frozenset({
    'the', 'a', 'an', 'and', 'or', 'but', 'in', 'on', 'at', 'to', 'for', 'of',
    'with', 'is', 'are', 'was', 'were', 'be', 'been', 'being',
})

_NON_WORD = re.compile(r'[^\w\s]')


def tokenize(text: str) -> List[str]:
    """Lowercase, strip punctuation, drop stop-words and tokens of length <= 2."""
    words = _NON_WORD.sub(' ', text.lower()).split()
    return [w for w in words if len(w) > 2 and w not in STOP_WORDS]


def extract_topics(text_elements: Sequence[Element],
                   max_topics: int = DEFAULT_MAX_TOPICS) -> List[Topic]:
    """
    Rank keywords across all labels by frequency.

    Every occurrence counts towards the frequency and the centroid. Ties keep
    first-seen order.

    Args:
        text_elements: Labeled elements
        max_topics: Number of topics to keep

    Returns:
        Topics sorted by descending frequency
    """
    occurrences: Dict[str, List[Element]] = {}
    for element in text_elements:
        for word in tokenize(element.text):
            occurrences.setdefault(word, []).append(element)

    ranked = sorted(occurrences.items(), key=lambda item: -len(item[1]))[:max_topics]

    topics = []
    for keyword, elements in ranked:
        coords = np.array([[e.position.x, e.position.y] for e in elements], dtype=float)
        mean_x, mean_y = coords.mean(axis=0)
        topics.append(Topic(
            keyword=keyword,
            frequency=len(elements),
            element_ids=list(dict.fromkeys(e.id for e in elements)),
            center=Position(x=float(mean_x), y=float(mean_y)),
        ))
    return topics
