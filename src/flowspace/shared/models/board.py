"""
Board graph models for Flowspace.

These models are the canonical form of a whiteboard snapshot. They are
built fresh for every analysis call by the board extractor and are
read-only for the remainder of that call.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

import networkx as nx
from pydantic import ConfigDict, Field

from .base import BaseModel


class ElementKind(str, Enum):
    """Kinds of visual units on a board."""
    NODE = "node"
    STROKE = "stroke"


class Position(BaseModel):
    """A 2-D board coordinate."""

    model_config = ConfigDict(frozen=True)

    x: float = 0.0
    y: float = 0.0


class Element(BaseModel):
    """
    A visual unit on the board.

    Nodes may carry a text label and a type tag (decision, start, end,
    process, ...). Strokes only ever contribute a centroid position.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique element identifier")
    kind: ElementKind = Field(default=ElementKind.NODE, description="Element kind")
    text: str = Field(default="", description="Text label, empty when unlabeled")
    position: Position = Field(default_factory=Position, description="Board position")
    node_type: Optional[str] = Field(default=None, description="Geometric type tag")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Style and other metadata")

    @property
    def has_text(self) -> bool:
        return bool(self.text.strip())

    @property
    def is_node(self) -> bool:
        return self.kind == ElementKind.NODE

    def is_type(self, *node_types: str) -> bool:
        """Check the type tag case-insensitively."""
        return (self.node_type or "").lower() in {t.lower() for t in node_types}


class Connection(BaseModel):
    """A directed edge between two element ids."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique connection identifier")
    source: str = Field(default="", description="Source element id")
    target: str = Field(default="", description="Target element id")
    label: str = Field(default="", description="Edge label")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Additional edge metadata")

    @property
    def is_labeled(self) -> bool:
        return bool(self.label.strip())


class BoardStats(BaseModel):
    """Raw element counts of a snapshot."""

    node_count: int = 0
    edge_count: int = 0
    stroke_count: int = 0
    total_elements: int = 0


class BoardGraph(BaseModel):
    """
    Canonical graph of a board snapshot.

    ``visual_elements`` holds every node and stroke; ``text_elements`` is the
    subset of nodes with a non-empty label.
    """

    text_elements: List[Element] = Field(default_factory=list)
    visual_elements: List[Element] = Field(default_factory=list)
    connections: List[Connection] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    stats: BoardStats = Field(default_factory=BoardStats)

    @property
    def nodes(self) -> List[Element]:
        """Node elements in input order (strokes excluded)."""
        return [e for e in self.visual_elements if e.is_node]

    def node_map(self) -> Dict[str, Element]:
        """Map node id to node; the first occurrence of an id wins."""
        mapping: Dict[str, Element] = {}
        for node in self.nodes:
            mapping.setdefault(node.id, node)
        return mapping

    def outgoing_connections(self) -> Dict[str, List[Connection]]:
        """Map source id to its outgoing connections, in connection order."""
        outgoing: Dict[str, List[Connection]] = {}
        for conn in self.connections:
            outgoing.setdefault(conn.source, []).append(conn)
        return outgoing

    def adjacency(self) -> Dict[str, List[str]]:
        """Map source id to target ids, in connection order."""
        return {
            source: [conn.target for conn in conns]
            for source, conns in self.outgoing_connections().items()
        }

    def to_networkx(self, include_dangling_sources: bool = True) -> nx.DiGraph:
        """
        Build a directed graph of nodes and connections.

        Nodes are inserted in board order so that traversals which iterate
        ``graph.nodes`` follow the input order. Connection endpoints that do
        not resolve to a node are added with ``dangling=True``.

        Args:
            include_dangling_sources: Keep connections whose source is not a
                known node. Targets are never filtered.

        Returns:
            networkx DiGraph (parallel connections collapse into one edge)
        """
        graph = nx.DiGraph()
        for node in self.nodes:
            if node.id not in graph:
                graph.add_node(node.id, label=node.text, node_type=node.node_type, dangling=False)

        known = set(graph.nodes)
        for conn in self.connections:
            if conn.source not in known and not include_dangling_sources:
                continue
            for endpoint in (conn.source, conn.target):
                if endpoint not in graph:
                    graph.add_node(endpoint, label="", node_type=None, dangling=True)
            if not graph.has_edge(conn.source, conn.target):
                graph.add_edge(conn.source, conn.target, id=conn.id, label=conn.label)

        return graph
