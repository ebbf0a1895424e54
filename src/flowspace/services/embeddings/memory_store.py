"""
In-memory vector store.

Keeps namespaces in a per-instance dictionary guarded by a lock; uses numpy
for similarity.
"""

import threading
from datetime import datetime
from typing import Any, Dict, List, Sequence

from ...shared import StorageError, ValidationError, get_logger
from .base import VectorStore
from .models import EmbeddingItem, ScoredEmbedding


class InMemoryVectorStore(VectorStore):
    """
    Ephemeral vector store for development, tests and single-process use.
    """

    def __init__(self):
        self.logger = get_logger(__name__)
        self._lock = threading.RLock()
        self._namespaces: Dict[str, List[EmbeddingItem]] = {}

    def upsert(self, namespace: str, item: EmbeddingItem) -> EmbeddingItem:
        if not namespace:
            raise StorageError("Namespace must be a non-empty string")
        if not item.vector:
            raise ValidationError(f"Item {item.id} has an empty vector")

        stored = item.model_copy(update={"updated_at": datetime.now()})

        with self._lock:
            collection = self._namespaces.setdefault(namespace, [])
            for index, existing in enumerate(collection):
                if existing.id == item.id:
                    collection[index] = stored
                    break
            else:
                collection.append(stored)

        self.logger.debug(f"Upserted embedding {item.id} in namespace {namespace}")
        return stored

    def query(self, namespace: str, vector: Sequence[float], k: int = 5) -> List[ScoredEmbedding]:
        if k <= 0:
            return []

        with self._lock:
            collection = list(self._namespaces.get(namespace, []))

        scored = [
            ScoredEmbedding(item=item, score=self.calculate_similarity(vector, item.vector))
            for item in collection
        ]
        scored.sort(key=lambda hit: hit.score, reverse=True)
        return scored[:k]

    def delete_namespace(self, namespace: str) -> bool:
        with self._lock:
            existed = self._namespaces.pop(namespace, None) is not None

        if existed:
            self.logger.info(f"Deleted embedding namespace {namespace}")
        return existed

    def list_namespaces(self) -> List[str]:
        with self._lock:
            return list(self._namespaces.keys())

    def get_stats(self) -> Dict[str, Any]:
        """Get statistics about the store."""
        with self._lock:
            sizes = {name: len(items) for name, items in self._namespaces.items()}

        return {
            'backend': 'memory',
            'total_namespaces': len(sizes),
            'total_items': sum(sizes.values()),
            'items_per_namespace': sizes,
        }
