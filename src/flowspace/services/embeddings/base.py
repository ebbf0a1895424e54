"""
Base vector store interface.

Stores are owned by the caller: each instance holds its own namespaces and
nothing is shared through module state.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence

import numpy as np

from .models import EmbeddingItem, ScoredEmbedding


class VectorStore(ABC):
    """
    Abstract base class for namespaced vector stores.

    A namespace is typically a board id; deleting a board deletes its
    namespace.
    """

    @abstractmethod
    def upsert(self, namespace: str, item: EmbeddingItem) -> EmbeddingItem:
        """
        Insert an item, or replace the item with the same id.

        Args:
            namespace: Namespace to write to
            item: Item with a non-empty vector

        Returns:
            The stored item, stamped with ``updated_at``
        """
        pass

    @abstractmethod
    def query(self, namespace: str, vector: Sequence[float], k: int = 5) -> List[ScoredEmbedding]:
        """
        Find the ``k`` items most similar to ``vector``.

        Args:
            namespace: Namespace to search
            vector: Query vector
            k: Number of results

        Returns:
            Hits sorted by descending cosine similarity; empty for an
            unknown namespace
        """
        pass

    @abstractmethod
    def delete_namespace(self, namespace: str) -> bool:
        """Drop a namespace; returns whether it existed."""
        pass

    @abstractmethod
    def list_namespaces(self) -> List[str]:
        pass

    @abstractmethod
    def get_stats(self) -> Dict[str, Any]:
        pass

    def calculate_similarity(self, first: Sequence[float], second: Sequence[float]) -> float:
        """
        Cosine similarity of two vectors.

        Vectors of different dimensions, and zero vectors, score 0.
        """
        a = np.asarray(first, dtype=float)
        b = np.asarray(second, dtype=float)
        if a.shape != b.shape or a.size == 0:
            return 0.0

        norm_a = np.linalg.norm(a)
        norm_b = np.linalg.norm(b)
        if norm_a == 0 or norm_b == 0:
            return 0.0

        return float(np.dot(a, b) / (norm_a * norm_b))
