"""
Models for the embedding store.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from ...shared.models.base import BaseModel


class EmbeddingItem(BaseModel):
    """A stored vector with its source text."""

    id: str = Field(..., description="Item identifier, unique within a namespace")
    text: str = Field(default="", description="Text the vector was computed from")
    vector: List[float] = Field(default_factory=list, description="Embedding vector")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Arbitrary item metadata")
    updated_at: Optional[datetime] = Field(default=None, description="Set by the store on upsert")


class ScoredEmbedding(BaseModel):
    """A query hit."""

    item: EmbeddingItem
    score: float
