"""
Dependency chain analysis.
"""

from typing import List, Set

from ....shared.models.board import BoardGraph
from ..models import ChainStep, DependencyAnalysis, DependencyChain


def analyze_dependencies(board: BoardGraph) -> DependencyAnalysis:
    """
    Extract linear chains of connected text elements.

    For each connection not yet consumed, walk forward from its source. At
    each step follow the first outgoing connection whose target is not yet
    in the current chain, consuming it globally. Only labeled elements are
    recorded as steps; chains with fewer than two steps are dropped.

    Returns:
        Chains sorted by descending length (stable), the connection count and
        the average retained chain length
    """
    labeled = {}
    for element in board.text_elements:
        labeled.setdefault(element.id, element)
    outgoing = board.outgoing_connections()

    consumed: Set[str] = set()
    chains: List[DependencyChain] = []

    for conn in board.connections:
        if conn.id in consumed:
            continue

        steps: List[ChainStep] = []
        chain_visited: Set[str] = set()
        current = conn.source

        while current and current not in chain_visited:
            chain_visited.add(current)
            element = labeled.get(current)
            if element is not None:
                steps.append(ChainStep(id=current, label=element.text, position=element.position))

            following = next(
                (c for c in outgoing.get(current, []) if c.target not in chain_visited),
                None,
            )
            if following is None:
                break
            consumed.add(following.id)
            current = following.target

        if len(steps) > 1:
            chains.append(DependencyChain(
                id=f"chain-{len(chains)}", steps=steps, length=len(steps),
            ))

    chains.sort(key=lambda chain: -chain.length)
    average = sum(c.length for c in chains) / len(chains) if chains else 0.0

    return DependencyAnalysis(
        chains=chains,
        total_connections=len(board.connections),
        average_chain_length=average,
    )
