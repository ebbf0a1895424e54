"""
Shared pytest fixtures.
"""

import pytest

from flowspace.shared import get_metrics
from flowspace.services.board_analysis import BoardAnalysisService
from flowspace.services.board_analysis.core import extract_board

from builders import chain, edge, node, snapshot


@pytest.fixture
def metrics():
    collector = get_metrics()
    collector.reset()
    yield collector
    collector.reset()


@pytest.fixture
def service(metrics):
    return BoardAnalysisService()


@pytest.fixture
def cycle_snapshot():
    """A -> B -> C -> A and nothing else."""
    return snapshot(
        [node("A"), node("B"), node("C")],
        [edge("A", "B"), edge("B", "C"), edge("C", "A")],
    )


@pytest.fixture
def cycle_board(cycle_snapshot):
    return extract_board(cycle_snapshot)


@pytest.fixture
def login_flow():
    """A small, well-formed login flowchart."""
    return snapshot(
        [
            node("start", "Start", "start"),
            node("form", "Show login form"),
            node("check", "Credentials valid?", "decision"),
            node("home", "Open dashboard"),
            node("error", "Show error message"),
            node("end", "End", "end"),
        ],
        [
            edge("start", "form"),
            edge("form", "check"),
            edge("check", "home", "Yes"),
            edge("check", "error", "No"),
            edge("error", "form"),
            edge("home", "end"),
        ],
    )


@pytest.fixture
def start_end_board():
    return extract_board(chain("S", "E", S="start", E="end"))
