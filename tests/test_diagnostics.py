"""
Tests for the diagnostic rule engine.
"""

import logging

import pytest

from flowspace.services.board_analysis.core import (
    DiagnosticRuleEngine, detect_cycles, extract_board,
)

from builders import chain, edge, node, snapshot


def _run(raw, **engine_kwargs):
    board = extract_board(raw)
    cycles = detect_cycles(board.to_networkx(include_dangling_sources=False))
    return DiagnosticRuleEngine(**engine_kwargs).run(board, cycles)


def _of(diagnostics, diagnostic_type):
    return [d for d in diagnostics if d.type == diagnostic_type]


def test_start_to_end_is_clean(start_end_board):
    diagnostics = DiagnosticRuleEngine().run(start_end_board, [])

    for diagnostic_type in ("dead_end", "isolated_node", "no_end_points", "unreachable"):
        assert _of(diagnostics, diagnostic_type) == []


def test_well_formed_flow_has_only_its_cycle(login_flow):
    diagnostics = _run(login_flow)

    assert [d.type for d in diagnostics] == ["circular_dependencies"]


class TestDeadEnds:

    def test_dead_end(self):
        diagnostics = _run(snapshot([node("a", "Process order", "start"), node("b", "Ship order")],
                                    [edge("a", "b")]))

        dead, = _of(diagnostics, "dead_end")
        assert dead.element_ids == ["b"]
        assert dead.severity == "medium"

    @pytest.mark.parametrize("label,node_type", [
        ("The End", None),
        ("end", None),
        ("Finish", "end"),
    ])
    def test_end_nodes_are_exempt(self, label, node_type):
        diagnostics = _run(snapshot([node("a", "Begin", "start"), node("b", label, node_type)],
                                    [edge("a", "b")]))

        assert _of(diagnostics, "dead_end") == []

    def test_end_must_be_a_whole_word(self):
        diagnostics = _run(snapshot([node("a", "Begin", "start"), node("b", "Send invoice")],
                                    [edge("a", "b")]))

        assert len(_of(diagnostics, "dead_end")) == 1


class TestLabels:

    @pytest.mark.parametrize("label,code,severity", [
        ("", "missing_label.empty", "high"),
        ("ab", "missing_label.short", "low"),
        ("Step 3", "missing_label.generic", "medium"),
        ("node12", "missing_label.generic", "medium"),
    ])
    def test_weak_labels(self, label, code, severity):
        diagnostic, = _of(_run(snapshot([node("a", label)])), "missing_label")

        assert diagnostic.code == code
        assert diagnostic.severity == severity

    def test_descriptive_label(self):
        assert _of(_run(snapshot([node("a", "Charge card")])), "missing_label") == []


class TestCycles:

    def test_one_diagnostic_per_cycle(self, cycle_snapshot):
        diagnostic, = _of(_run(cycle_snapshot), "circular_dependencies")

        assert diagnostic.severity == "medium"
        assert diagnostic.payload["cycle"] == ["A", "B", "C"]
        assert diagnostic.payload["isIntentional"] is False
        assert diagnostic.message.endswith("A → B → C → A")

    def test_strict_mode_escalates(self, cycle_snapshot):
        diagnostic, = _of(_run(cycle_snapshot, strict_mode=True), "circular_dependencies")

        assert diagnostic.severity == "high"
        assert diagnostic.code == "circular_dependencies.strict"

    def test_strict_mode_only_changes_cycles(self, login_flow):
        lenient = _run(login_flow)
        strict = _run(login_flow, strict_mode=True)

        assert [d.severity for d in lenient if d.type != "circular_dependencies"] == \
            [d.severity for d in strict if d.type != "circular_dependencies"]


class TestReachability:

    def test_unreachable_loop(self):
        diagnostics = _run(snapshot(
            [node(n, f"Task {n}") for n in "SACD"],
            [edge("S", "A"), edge("C", "D"), edge("D", "C")],
        ))

        assert [d.element_ids for d in _of(diagnostics, "unreachable")] == [["C"], ["D"]]
        assert all(d.severity == "high" for d in _of(diagnostics, "unreachable"))

    def test_no_start_skips_unreachable(self, cycle_snapshot):
        assert _of(_run(cycle_snapshot), "unreachable") == []

    def test_multiple_starts_is_one_diagnostic(self):
        diagnostics = _run(snapshot(
            [node("a", "Web signup"), node("b", "Mobile signup"), node("c", "Create account")],
            [edge("a", "c"), edge("b", "c")],
        ))

        starts, = _of(diagnostics, "multiple_starts")
        assert starts.element_ids == ["a", "b"]
        assert starts.severity == "medium"

    def test_no_end_points(self, cycle_snapshot):
        diagnostic, = _of(_run(cycle_snapshot), "no_end_points")

        assert diagnostic.severity == "high"
        assert diagnostic.element_ids == []

    def test_empty_board_has_no_findings(self):
        assert _run({}) == []


class TestIsolated:

    def test_isolated_node(self):
        diagnostics = _run(snapshot([node("a", "Orphan task")]))

        isolated, = _of(diagnostics, "isolated_node")
        assert isolated.element_ids == ["a"]
        assert isolated.severity == "high"

    def test_declared_start_is_not_isolated(self):
        assert _of(_run(snapshot([node("a", "Start", "start")])), "isolated_node") == []


class TestDecisions:

    def test_single_branch(self):
        diagnostics = _run(snapshot(
            [node("d", "Approved?", "decision"), node("y", "Notify user", "end")],
            [edge("d", "y", "Yes")],
        ))

        invalid = _of(diagnostics, "invalid_decision")
        assert [d.code for d in invalid] == ["invalid_decision.too_few_branches"]
        assert invalid[0].severity == "high"

    def test_single_unlabeled_branch_yields_both(self):
        diagnostics = _run(snapshot(
            [node("d", "Approved?", "decision"), node("y", "Notify user", "end")],
            [edge("d", "y")],
        ))

        codes = [d.code for d in _of(diagnostics, "invalid_decision")]
        assert codes.count("invalid_decision.too_few_branches") == 1
        assert codes.count("invalid_decision.unlabeled_branches") == 1

    def test_unlabeled_branches(self):
        diagnostics = _run(snapshot(
            [node("d", "Approved?", "decision"), node("y", "Ship", "end"), node("n", "Cancel", "end")],
            [edge("d", "y", "Yes"), edge("d", "n", "  ")],
        ))

        unlabeled, = _of(diagnostics, "invalid_decision")
        assert unlabeled.code == "invalid_decision.unlabeled_branches"
        assert unlabeled.edge_ids == ["d-n"]
        assert unlabeled.severity == "medium"


class TestBrokenConnections:

    def test_missing_target(self):
        diagnostics = _run(snapshot([node("a", "Begin", "start")], [edge("a", "ghost")]))

        broken, = _of(diagnostics, "broken_connection")
        assert broken.code == "broken_connection.target"
        assert broken.edge_ids == ["a-ghost"]
        assert broken.severity == "critical"

    def test_both_ends_missing(self):
        diagnostics = _run(snapshot([], [edge("x", "y")]))

        codes = [d.code for d in _of(diagnostics, "broken_connection")]
        assert codes == ["broken_connection.source", "broken_connection.target"]

    def test_edge_to_missing_node_still_counts_as_outgoing(self):
        diagnostics = _run(snapshot([node("a", "Begin", "start")], [edge("a", "ghost")]))

        assert _of(diagnostics, "dead_end") == []


class TestOverlaps:

    def test_overlapping_nodes(self):
        diagnostics = _run(snapshot(
            [node("a", "Begin", "start", x=0, y=0), node("b", "Finish", "end", x=10, y=0)],
            [edge("a", "b")],
        ))

        overlap, = _of(diagnostics, "overlapping_elements")
        assert overlap.severity == "low"
        assert overlap.element_ids == ["a", "b"]
        assert overlap.payload["pairs"] == [{"elementIds": ["a", "b"], "distance": 10}]

    def test_guard(self, caplog):
        raw = snapshot([node("a", "Begin", x=0, y=0), node("b", "Finish", x=10, y=0)])

        with caplog.at_level(logging.WARNING):
            diagnostics = _run(raw, max_pairwise=1)

        assert _of(diagnostics, "overlapping_elements") == []
        assert "Skipping overlap scan" in caplog.text


def test_chain_board_reports_short_labels():
    diagnostics = _run(chain("A", "B"))

    assert {d.code for d in _of(diagnostics, "missing_label")} == {"missing_label.short"}
