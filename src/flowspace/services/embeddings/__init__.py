"""
Embedding storage for Flowspace.

Caller-owned, namespaced vector stores with cosine-similarity lookup.
"""

from .base import VectorStore
from .memory_store import InMemoryVectorStore
from .models import EmbeddingItem, ScoredEmbedding

__all__ = [
    "VectorStore",
    "InMemoryVectorStore",
    "EmbeddingItem",
    "ScoredEmbedding",
]
