"""
Patch generation.

Maps each diagnostic category to remediation templates. Patches are
advisory; applying one is the caller's job.
"""

from typing import Any, Dict, List, Optional, Sequence, Set

from ....shared import get_logger
from ....shared.models.board import BoardStats
from ..models import (
    PRIORITY_ORDER, Cluster, Diagnostic, DiagnosticType, EnrichmentResult,
    Patch, PatchSource, Priority,
)

logger = get_logger(__name__)

BRANCH_LABEL_SUGGESTIONS = ['Yes', 'No', 'True', 'False', 'Success', 'Failure']
ORGANIZE_MIN_ELEMENTS = 10


class _PatchList:
    """Patches collected during one ``generate`` call."""

    def __init__(self):
        self.patches: List[Patch] = []
        self.removed_edges: Set[str] = set()

    def add(self, patch_type: str, priority: Priority, action: Dict[str, Any],
            reasoning: str, diagnostic: Optional[Diagnostic] = None, **fields: Any):
        self.patches.append(Patch(
            id=f"patch-{len(self.patches) + 1}",
            type=patch_type,
            priority=priority,
            action=action,
            reasoning=reasoning,
            diagnostic_type=diagnostic.type if diagnostic is not None else None,
            **fields,
        ))


class PatchGenerator:
    """
    Deterministic diagnostic-to-patch mapping.

    Holds no per-call state, so one instance can serve concurrent calls.
    """

    def generate(self, diagnostics: Sequence[Diagnostic],
                 enrichment: Optional[EnrichmentResult] = None,
                 clusters: Optional[Sequence[Cluster]] = None,
                 stats: Optional[BoardStats] = None) -> List[Patch]:
        """
        Build the patch list for one board.

        Args:
            diagnostics: Structural and terminology diagnostics
            enrichment: Optional enrichment result contributing extra patches
            clusters: Spatial clusters, used for the organization suggestion
            stats: Board stats, used for the organization suggestion

        Returns:
            Patches sorted by priority (high first, stable otherwise)
        """
        out = _PatchList()

        handlers = {
            DiagnosticType.DEAD_END.value: self._dead_end,
            DiagnosticType.MISSING_LABEL.value: self._missing_label,
            DiagnosticType.CIRCULAR_DEPENDENCIES.value: self._cycle,
            DiagnosticType.UNREACHABLE.value: self._unreachable,
            DiagnosticType.MULTIPLE_STARTS.value: self._multiple_starts,
            DiagnosticType.NO_END_POINTS.value: self._no_end_points,
            DiagnosticType.ISOLATED_NODE.value: self._isolated,
            DiagnosticType.INVALID_DECISION.value: self._invalid_decision,
            DiagnosticType.BROKEN_CONNECTION.value: self._broken_connection,
            DiagnosticType.OVERLAPPING_ELEMENTS.value: self._overlap,
            DiagnosticType.CASE_INCONSISTENCY.value: self._terminology,
            DiagnosticType.TERMINOLOGY_INCONSISTENCY.value: self._terminology,
            DiagnosticType.ABBREVIATION_INCONSISTENCY.value: self._abbreviation,
        }
        for diagnostic in diagnostics:
            handler = handlers.get(diagnostic.type)
            if handler is not None:
                handler(out, diagnostic)

        self._organization(out, clusters, stats)
        if enrichment is not None:
            self._enrichment(out, enrichment)

        patches = sorted(out.patches, key=lambda p: PRIORITY_ORDER[p.priority])
        logger.debug(f"Generated {len(patches)} patches")
        return patches


    # ========== Structural templates ==========

    def _dead_end(self, out: _PatchList, diagnostic: Diagnostic):
        node_id = diagnostic.element_ids[0]
        out.add(
            "add_end_node", Priority.MEDIUM,
            {"type": "add_node", "nodeType": "end", "label": "End", "connectFrom": node_id},
            f'Node "{diagnostic.payload.get("label", "")}" has no continuation. '
            f'Adding an end node to properly terminate this path.',
            diagnostic, target_element_ids=[node_id], auto_applicable=True,
        )

    def _missing_label(self, out: _PatchList, diagnostic: Diagnostic):
        if diagnostic.code == "missing_label.empty":
            out.add(
                "add_label", Priority.HIGH,
                {"type": "update_node", "property": "label", "value": "Unnamed Step"},
                "All nodes should have descriptive labels for clarity.",
                diagnostic, target_element_ids=list(diagnostic.element_ids),
                requires_user_input=True,
            )
        else:
            out.add(
                "expand_label", Priority.LOW,
                {"type": "update_node", "property": "label",
                 "currentValue": diagnostic.payload.get("label", "")},
                "Short or generic labels hide what a step does; describe the action instead.",
                diagnostic, target_element_ids=list(diagnostic.element_ids),
                requires_user_input=True,
            )

    def _cycle(self, out: _PatchList, diagnostic: Diagnostic):
        out.add(
            "review_cycle", Priority.MEDIUM,
            {"type": "review", "cycle": list(diagnostic.payload.get("cycle", diagnostic.element_ids)),
             "message": "Confirm the loop is an intended feedback loop or break it with an exit condition"},
            "Circular dependencies can trap a process in an endless loop unless an exit is defined.",
            diagnostic, target_element_ids=list(diagnostic.element_ids),
        )

    def _unreachable(self, out: _PatchList, diagnostic: Diagnostic):
        out.add(
            "connect_unreachable_node", Priority.HIGH,
            {"type": "suggest_connection",
             "message": f'Node "{diagnostic.payload.get("label", "")}" cannot be reached from a start node. '
                        f'Connect it to the main flow.'},
            "Steps that cannot be reached from a start point never execute.",
            diagnostic, target_element_ids=list(diagnostic.element_ids),
        )

    def _multiple_starts(self, out: _PatchList, diagnostic: Diagnostic):
        out.add(
            "merge_start_nodes", Priority.MEDIUM,
            {"type": "merge_nodes", "message": "Consider merging multiple start nodes into a single entry point"},
            "Workflows typically have one clear starting point. Multiple starts can be confusing.",
            diagnostic, target_element_ids=list(diagnostic.element_ids),
        )

    def _no_end_points(self, out: _PatchList, diagnostic: Diagnostic):
        out.add(
            "add_missing_end_node", Priority.HIGH,
            {"type": "add_node", "nodeType": "end", "label": "End",
             "message": "Add an end node to properly terminate the workflow"},
            "Every workflow should have clear end points to show completion.",
            diagnostic,
        )

    def _isolated(self, out: _PatchList, diagnostic: Diagnostic):
        out.add(
            "connect_isolated_node", Priority.HIGH,
            {"type": "suggest_connection",
             "message": f'Node "{diagnostic.payload.get("label", "")}" is isolated. '
                        f'Consider connecting it to the main flow or removing it.'},
            "Isolated nodes serve no purpose in the workflow and should be connected or removed.",
            diagnostic, target_element_ids=list(diagnostic.element_ids),
        )

    def _invalid_decision(self, out: _PatchList, diagnostic: Diagnostic):
        label = diagnostic.payload.get("label", "")
        if diagnostic.code == "invalid_decision.too_few_branches":
            out.add(
                "fix_decision_branches", Priority.HIGH,
                {"type": "add_edge",
                 "message": f'Decision node "{label}" needs at least 2 outgoing branches '
                            f'(Yes/No, True/False, etc.)'},
                "Decision nodes must have multiple branches to represent different outcomes.",
                diagnostic, target_element_ids=list(diagnostic.element_ids),
            )
        else:
            out.add(
                "label_decision_branches", Priority.MEDIUM,
                {"type": "update_edges", "property": "label",
                 "suggestions": list(BRANCH_LABEL_SUGGESTIONS)},
                "Decision branches should be clearly labeled to show which path is taken "
                "under what condition.",
                diagnostic, target_element_ids=list(diagnostic.element_ids),
                target_edge_ids=list(diagnostic.edge_ids), requires_user_input=True,
            )

    def _broken_connection(self, out: _PatchList, diagnostic: Diagnostic):
        # An edge broken at both ends gets a single removal.
        edge_ids = [e for e in diagnostic.edge_ids if e not in out.removed_edges]
        if not edge_ids:
            return
        out.removed_edges.update(edge_ids)
        out.add(
            "remove_broken_connection", Priority.HIGH,
            {"type": "remove_edge", "edgeIds": edge_ids},
            "Connections must reference existing nodes; a dangling edge cannot be followed.",
            diagnostic, target_edge_ids=edge_ids, auto_applicable=True,
        )

    def _overlap(self, out: _PatchList, diagnostic: Diagnostic):
        out.add(
            "spread_overlapping_elements", Priority.LOW,
            {"type": "reposition", "pairs": diagnostic.payload.get("pairs", [])},
            "Overlapping elements are hard to read and select; spread them apart.",
            diagnostic, target_element_ids=list(diagnostic.element_ids),
        )

    # ========== Terminology templates ==========

    def _terminology(self, out: _PatchList, diagnostic: Diagnostic):
        variations = diagnostic.payload.get("variations", [])
        if not variations:
            return
        out.add(
            "standardize_terminology", Priority.LOW,
            {"type": "find_and_replace", "find": list(variations), "replace": variations[0]},
            diagnostic.payload.get("suggestion", ""),
            diagnostic, target_element_ids=list(diagnostic.element_ids), auto_applicable=True,
        )

    def _abbreviation(self, out: _PatchList, diagnostic: Diagnostic):
        full, abbr = diagnostic.payload.get("terms", ["", ""])
        out.add(
            "standardize_abbreviation", Priority.LOW,
            {"type": "find_and_replace", "find": [abbr], "replace": full},
            diagnostic.payload.get("suggestion", ""),
            diagnostic, target_element_ids=list(diagnostic.element_ids),
            requires_user_input=True,
        )

    # ========== Board-level and external ==========

    def _organization(self, out: _PatchList,
                      clusters: Optional[Sequence[Cluster]], stats: Optional[BoardStats]):
        if stats is None or clusters is None:
            return
        if len(clusters) < 2 and stats.total_elements > ORGANIZE_MIN_ELEMENTS:
            out.add(
                "group_related_elements", Priority.LOW,
                {"type": "organize", "message": "Group related elements into visual clusters"},
                "Grouping related items spatially makes a large board easier to scan.",
            )

    def _enrichment(self, out: _PatchList, enrichment: EnrichmentResult):
        for missing in enrichment.missing_elements:
            priority = missing.severity if missing.severity in PRIORITY_ORDER else Priority.MEDIUM
            out.add(
                "add_missing_element", priority,
                {"type": "add_node", "suggestion": missing.description,
                 "location": missing.suggested_location},
                missing.description,
                source=PatchSource.ENRICHMENT,
            )

        for clarity in enrichment.clarity_issues:
            out.add(
                "improve_label_clarity", Priority.MEDIUM,
                {"type": "update_node", "property": "label",
                 "currentValue": clarity.current_label, "suggestedValue": clarity.suggested_label},
                clarity.reasoning,
                target_element_ids=[clarity.node_id] if clarity.node_id else [],
                source=PatchSource.ENRICHMENT,
            )
