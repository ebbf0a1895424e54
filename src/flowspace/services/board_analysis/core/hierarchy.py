"""
Hierarchy building from the connection graph.
"""

from typing import List, Optional

import networkx as nx

from ....shared import get_logger
from ....shared.models.board import BoardGraph
from ..models import Hierarchy, HierarchyNode

logger = get_logger(__name__)


def find_roots(board: BoardGraph, graph: Optional[nx.DiGraph] = None) -> List[str]:
    """Labeled elements with outgoing connections and no incoming ones."""
    graph = graph if graph is not None else board.to_networkx()
    roots = []
    for element in board.text_elements:
        if element.id in roots:
            continue
        if graph.in_degree(element.id) == 0 and graph.out_degree(element.id) > 0:
            roots.append(element.id)
    return roots


def build_hierarchies(board: BoardGraph) -> List[Hierarchy]:
    """
    Build one leveled tree per root.

    Levels come from a breadth-first traversal of outgoing connections, so a
    node sits at its shortest distance from the root. Nodes unreachable from
    every root appear in no hierarchy; the rule engine reports them.

    Args:
        board: Canonical board graph

    Returns:
        Hierarchies in root order; empty when the board has no root
    """
    graph = board.to_networkx()
    adjacency = board.adjacency()
    labels = {e.id: e.text for e in board.text_elements}

    hierarchies = []
    for root in find_roots(board, graph):
        levels = [
            [
                HierarchyNode(id=node_id, label=labels.get(node_id, ""),
                              children=list(adjacency.get(node_id, [])))
                for node_id in layer
            ]
            for layer in nx.bfs_layers(graph, root)
        ]
        hierarchies.append(Hierarchy(
            root=root,
            root_label=labels.get(root, ""),
            levels=levels,
            depth=len(levels),
            breadth=max((len(level) for level in levels), default=0),
        ))

    logger.debug(f"Built {len(hierarchies)} hierarchies")
    return hierarchies
