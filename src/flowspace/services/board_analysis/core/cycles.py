"""
Cycle detection over the connection graph.
"""

from typing import Dict, Iterator, List, Set, Tuple

import networkx as nx

from ....shared import get_logger

logger = get_logger(__name__)


def detect_cycles(graph: nx.DiGraph) -> List[List[str]]:
    """
    Find cycles with a depth-first search from every unvisited node.

    The search keeps an explicit path stack. Reaching a neighbor that is on
    the current path emits the path slice from that neighbor to the current
    node (the closing node is not repeated). A node is marked visited on
    entry and never expanded twice, so the output is deterministic for a
    given node and edge order.

    Args:
        graph: Directed graph; nodes are visited in insertion order

    Returns:
        List of cycles, each a list of node ids
    """
    visited: Set[str] = set()
    cycles: List[List[str]] = []

    for root in graph.nodes:
        if root in visited:
            continue

        path: List[str] = [root]
        on_path: Dict[str, int] = {root: 0}
        stack: List[Tuple[str, Iterator[str]]] = [(root, iter(graph.successors(root)))]
        visited.add(root)

        while stack:
            node, neighbors = stack[-1]
            advanced = False
            for neighbor in neighbors:
                if neighbor not in visited:
                    visited.add(neighbor)
                    on_path[neighbor] = len(path)
                    path.append(neighbor)
                    stack.append((neighbor, iter(graph.successors(neighbor))))
                    advanced = True
                    break
                if neighbor in on_path:
                    cycles.append(path[on_path[neighbor]:])

            if not advanced:
                stack.pop()
                path.pop()
                del on_path[node]

    logger.debug(f"Detected {len(cycles)} cycles")
    return cycles
