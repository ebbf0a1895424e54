"""
Shared data models for Flowspace.
"""

from .base import BaseModel
from .board import BoardGraph, BoardStats, Connection, Element, ElementKind, Position

__all__ = [
    # Board models
    "BoardGraph",
    "BoardStats",
    "Connection",
    "Element",
    "ElementKind",
    "Position",
    # Base models
    "BaseModel",
]
