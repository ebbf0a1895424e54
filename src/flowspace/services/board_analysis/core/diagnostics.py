"""
Diagnostic rule engine.

A fixed battery of independent structural checks over the canonical board
graph. Each check yields zero or more ``Diagnostic`` objects; severities are
a static lookup in ``SEVERITY_RULES`` keyed by rule code.
"""

import re
from typing import Any, Dict, List, Optional, Sequence

import networkx as nx

from ....shared import get_logger
from ....shared.models.board import BoardGraph, Element
from ..models import SEVERITY_RULES, Diagnostic, DiagnosticType
from .spatial import DEFAULT_OVERLAP_THRESHOLD, detect_overlaps

logger = get_logger(__name__)

GENERIC_LABEL = re.compile(r'^(step|node|item)\s*\d+$', re.IGNORECASE)
END_WORD = re.compile(r'\bend\b', re.IGNORECASE)
MIN_LABEL_LENGTH = 3


def _position(element: Element) -> Dict[str, float]:
    return {"x": element.position.x, "y": element.position.y}


def is_end_node(element: Element) -> bool:
    """Typed ``end`` or labeled with the word "end"."""
    return element.is_type("end") or bool(END_WORD.search(element.text))


class DiagnosticRuleEngine:
    """
    Runs every structural check against one board.

    The engine holds configuration only; all per-board state lives inside
    ``run`` so one instance can be shared between calls.
    """

    def __init__(self, strict_mode: bool = False,
                 overlap_threshold: float = DEFAULT_OVERLAP_THRESHOLD,
                 max_pairwise: int = 500):
        self.strict_mode = strict_mode
        self.overlap_threshold = overlap_threshold
        self.max_pairwise = max_pairwise

    def run(self, board: BoardGraph, cycles: Sequence[List[str]] = ()) -> List[Diagnostic]:
        """
        Run all checks.

        Args:
            board: Canonical board graph
            cycles: Cycles found by the cycle detector

        Returns:
            Diagnostics in check order
        """
        nodes = list(board.node_map().values())
        known = {node.id for node in nodes}

        outgoing: Dict[str, List[Any]] = {node.id: [] for node in nodes}
        incoming: Dict[str, List[Any]] = {node.id: [] for node in nodes}
        for conn in board.connections:
            if conn.source in known:
                outgoing[conn.source].append(conn)
            if conn.target in known:
                incoming[conn.target].append(conn)

        starts = [n for n in nodes if n.is_type("start") or not incoming[n.id]]

        diagnostics: List[Diagnostic] = []
        diagnostics.extend(self._check_dead_ends(nodes, outgoing))
        diagnostics.extend(self._check_labels(nodes))
        diagnostics.extend(self._check_cycles(cycles, board))
        diagnostics.extend(self._check_unreachable(nodes, starts, board))
        diagnostics.extend(self._check_multiple_starts(starts))
        diagnostics.extend(self._check_end_points(nodes, outgoing))
        diagnostics.extend(self._check_isolated(nodes, incoming, outgoing))
        diagnostics.extend(self._check_decisions(nodes, outgoing))
        diagnostics.extend(self._check_broken_connections(board, known))
        diagnostics.extend(self._check_overlaps(board))

        logger.debug(f"Rule engine produced {len(diagnostics)} diagnostics")
        return diagnostics

    def _diagnostic(self, diagnostic_type: DiagnosticType, message: str,
                    variant: Optional[str] = None, **fields: Any) -> Diagnostic:
        code = diagnostic_type.value if variant is None else f"{diagnostic_type.value}.{variant}"
        return Diagnostic(
            type=diagnostic_type,
            code=code,
            severity=SEVERITY_RULES[code],
            message=message,
            **fields,
        )

    # ========== Node checks ==========

    def _check_dead_ends(self, nodes, outgoing) -> List[Diagnostic]:
        return [
            self._diagnostic(
                DiagnosticType.DEAD_END,
                f'Node "{node.text}" has no outgoing connections (dead end)',
                element_ids=[node.id],
                payload={"label": node.text, "position": _position(node)},
            )
            for node in nodes
            if not outgoing[node.id] and not is_end_node(node)
        ]

    def _check_labels(self, nodes) -> List[Diagnostic]:
        diagnostics = []
        for node in nodes:
            label = node.text.strip()
            payload = {"label": node.text, "position": _position(node)}
            if not label:
                diagnostics.append(self._diagnostic(
                    DiagnosticType.MISSING_LABEL, "Node has no label", "empty",
                    element_ids=[node.id], payload=payload,
                ))
            elif len(label) < MIN_LABEL_LENGTH:
                diagnostics.append(self._diagnostic(
                    DiagnosticType.MISSING_LABEL,
                    f'Node label "{node.text}" is too short (< {MIN_LABEL_LENGTH} characters)',
                    "short", element_ids=[node.id], payload=payload,
                ))
            elif GENERIC_LABEL.match(label):
                diagnostics.append(self._diagnostic(
                    DiagnosticType.MISSING_LABEL,
                    f'Node has generic label "{node.text}" - use descriptive text',
                    "generic", element_ids=[node.id], payload=payload,
                ))
        return diagnostics

    def _check_cycles(self, cycles, board: BoardGraph) -> List[Diagnostic]:
        labels = {node.id: node.text for node in board.nodes}
        diagnostics = []
        for cycle in cycles:
            if not cycle:
                continue
            cycle_labels = [labels.get(node_id) or node_id for node_id in cycle]
            diagnostics.append(self._diagnostic(
                DiagnosticType.CIRCULAR_DEPENDENCIES,
                f"Circular dependency detected: {' → '.join(cycle_labels)} → {cycle_labels[0]}",
                "strict" if self.strict_mode else None,
                element_ids=list(cycle),
                payload={"cycle": list(cycle), "cycleLabels": cycle_labels, "isIntentional": False},
            ))
        return diagnostics

    def _check_unreachable(self, nodes, starts, board: BoardGraph) -> List[Diagnostic]:
        if not starts:
            return []

        graph = board.to_networkx(include_dangling_sources=False)
        reachable = set()
        for start in starts:
            reachable.add(start.id)
            reachable.update(nx.descendants(graph, start.id))

        return [
            self._diagnostic(
                DiagnosticType.UNREACHABLE,
                f'Node "{node.text}" is unreachable from start',
                element_ids=[node.id],
                payload={"label": node.text, "position": _position(node)},
            )
            for node in nodes
            if node.id not in reachable and not node.is_type("start")
        ]

    def _check_multiple_starts(self, starts) -> List[Diagnostic]:
        if len(starts) <= 1:
            return []
        return [self._diagnostic(
            DiagnosticType.MULTIPLE_STARTS,
            f"Multiple start nodes detected ({len(starts)})",
            element_ids=[node.id for node in starts],
            payload={"labels": [node.text for node in starts]},
        )]

    def _check_end_points(self, nodes, outgoing) -> List[Diagnostic]:
        if not nodes:
            return []
        if any(node.is_type("end") or not outgoing[node.id] for node in nodes):
            return []
        return [self._diagnostic(
            DiagnosticType.NO_END_POINTS,
            "Diagram has no end points - all paths should lead to completion",
        )]

    def _check_isolated(self, nodes, incoming, outgoing) -> List[Diagnostic]:
        return [
            self._diagnostic(
                DiagnosticType.ISOLATED_NODE,
                f'Node "{node.text}" is completely isolated (no connections)',
                element_ids=[node.id],
                payload={"label": node.text, "position": _position(node)},
            )
            for node in nodes
            if not incoming[node.id] and not outgoing[node.id] and not node.is_type("start")
        ]

    def _check_decisions(self, nodes, outgoing) -> List[Diagnostic]:
        diagnostics = []
        for node in nodes:
            if not node.is_type("decision"):
                continue
            branches = outgoing[node.id]
            payload = {"label": node.text, "position": _position(node)}

            if len(branches) < 2:
                diagnostics.append(self._diagnostic(
                    DiagnosticType.INVALID_DECISION,
                    f'Decision node "{node.text}" has fewer than 2 branches (has {len(branches)})',
                    "too_few_branches",
                    element_ids=[node.id], payload={**payload, "branchCount": len(branches)},
                ))

            unlabeled = [conn.id for conn in branches if not conn.is_labeled]
            if unlabeled:
                diagnostics.append(self._diagnostic(
                    DiagnosticType.INVALID_DECISION,
                    f'Decision node "{node.text}" has {len(unlabeled)} unlabeled branch(es)',
                    "unlabeled_branches",
                    element_ids=[node.id], edge_ids=unlabeled, payload=payload,
                ))
        return diagnostics

    # ========== Board checks ==========

    def _check_broken_connections(self, board: BoardGraph, known) -> List[Diagnostic]:
        diagnostics = []
        for conn in board.connections:
            for end in ("source", "target"):
                ref = getattr(conn, end)
                if ref in known:
                    continue
                diagnostics.append(self._diagnostic(
                    DiagnosticType.BROKEN_CONNECTION,
                    f"Edge references non-existent {end} node: {ref}",
                    end,
                    edge_ids=[conn.id],
                    payload={"endpoint": end, "reference": ref},
                ))
        return diagnostics

    def _check_overlaps(self, board: BoardGraph) -> List[Diagnostic]:
        elements = board.visual_elements
        if len(elements) > self.max_pairwise:
            logger.warning(
                f"Skipping overlap scan: {len(elements)} elements exceeds "
                f"the limit of {self.max_pairwise}"
            )
            return []

        overlaps = detect_overlaps(elements, self.overlap_threshold)
        if not overlaps:
            return []

        element_ids = list(dict.fromkeys(i for o in overlaps for i in o.element_ids))
        return [self._diagnostic(
            DiagnosticType.OVERLAPPING_ELEMENTS,
            f"{len(overlaps)} element pair(s) are placed closer than "
            f"{self.overlap_threshold:g} units",
            element_ids=element_ids,
            payload={"pairs": [o.to_dict() for o in overlaps]},
        )]
