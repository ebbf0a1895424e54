"""
Tests for board extraction.
"""

import pytest

from flowspace.shared import InvalidSnapshotError, ValidationError
from flowspace.shared.models.board import ElementKind, Position
from flowspace.services.board_analysis.core import extract_board, stroke_centroid


class TestExtractBoard:

    @pytest.mark.parametrize("raw", [None, {}])
    def test_empty_snapshot(self, raw):
        board = extract_board(raw)

        assert board.text_elements == []
        assert board.visual_elements == []
        assert board.connections == []
        assert board.stats.total_elements == 0

    @pytest.mark.parametrize("raw", [[], "board", 42])
    def test_wrong_top_level_type_fails_fast(self, raw):
        with pytest.raises(InvalidSnapshotError):
            extract_board(raw)

    def test_invalid_snapshot_is_a_validation_error(self):
        assert issubclass(InvalidSnapshotError, ValidationError)

    def test_text_and_visual_elements(self):
        board = extract_board({
            "elements": [
                {"id": "a", "label": "Receive order", "position": {"x": 10, "y": 20}},
                {"id": "b", "label": "   "},
                {"id": "c"},
            ],
        })

        assert [e.id for e in board.text_elements] == ["a"]
        assert [e.id for e in board.visual_elements] == ["a", "b", "c"]
        assert board.text_elements[0].position == Position(x=10, y=20)

    def test_strokes_contribute_centroids(self):
        board = extract_board({
            "elements": [{"id": "n", "label": "Node"}],
            "strokes": [{"id": "s1", "points": [0, 0, 10, 20]}],
        })

        stroke = board.visual_elements[-1]
        assert stroke.kind == ElementKind.STROKE
        assert stroke.position == Position(x=5, y=10)
        assert stroke.metadata["pointCount"] == 2
        assert board.stats.stroke_count == 1
        assert board.text_elements[0].id == "n"

    def test_aliases(self):
        board = extract_board({
            "nodes": [
                {"id": "a", "data": {"label": "First"}, "x": 5, "y": 6, "nodeType": "Decision"},
                {"id": "b", "text": "Second", "shape": "END"},
            ],
            "edges": [{"id": "e1", "source": "a", "target": "b", "label": "Yes"}],
        })

        first, second = board.text_elements
        assert first.text == "First"
        assert first.position == Position(x=5, y=6)
        assert first.node_type == "decision"
        assert second.text == "Second"
        assert second.node_type == "end"
        assert board.connections[0].label == "Yes"

    def test_malformed_fields_fall_back(self):
        board = extract_board({
            "elements": [
                {"label": "No id", "position": {"x": "abc", "y": None}},
                "not an element",
                {"id": "x", "label": "Infinite", "position": {"x": float("inf"), "y": True}},
            ],
            "connections": [{"source": "element-0"}, None],
            "strokes": "nope",
        })

        assert [e.id for e in board.text_elements] == ["element-0", "x"]
        assert board.text_elements[0].position == Position()
        assert board.text_elements[1].position == Position()
        assert len(board.connections) == 1
        assert board.connections[0].id == "connection-0"
        assert board.connections[0].target == ""

    def test_out_of_range_integer_coordinates_fall_back(self):
        board = extract_board({
            "elements": [
                {"id": "a", "label": "Alpha", "x": 10 ** 400, "y": 7},
                {"id": "b", "label": "Beta", "position": {"x": 3, "y": -10 ** 400}},
            ],
        })

        first, second = board.text_elements
        assert first.position == Position(x=0, y=7)
        assert second.position == Position(x=3, y=0)

    def test_stats(self):
        board = extract_board({
            "elements": [{"id": "a", "label": "A"}, {"id": "b"}],
            "connections": [{"id": "e", "source": "a", "target": "b"}],
            "strokes": [{"points": []}],
        })

        assert board.stats.node_count == 2
        assert board.stats.edge_count == 1
        assert board.stats.stroke_count == 1
        assert board.stats.total_elements == 4

    def test_metadata_is_kept(self):
        board = extract_board({"metadata": {"title": "Checkout"}})

        assert board.metadata == {"title": "Checkout"}


class TestStrokeCentroid:

    @pytest.mark.parametrize("points,expected", [
        ([0, 0, 10, 10], (5, 5)),
        ([0, 0, 10, 10, 99], (5, 5)),
        ([[0, 0], [4, 8]], (2, 4)),
        ([{"x": 1, "y": 1}, {"x": 3, "y": 5}], (2, 3)),
        ([10 ** 400, 0, 2, 2], (1, 1)),
        ([[0, 10 ** 400], [4, 4]], (2, 2)),
    ])
    def test_point_formats(self, points, expected):
        assert stroke_centroid(points) == Position(x=expected[0], y=expected[1])

    @pytest.mark.parametrize("points", [[], None, ["a", "b"]])
    def test_unusable_points_yield_origin(self, points):
        assert stroke_centroid(points) == Position()
