"""
Tests for duplicate and similarity detection.
"""

import logging

import pytest

from flowspace.services.board_analysis.core import (
    edit_distance, extract_board, find_duplicates, similarity,
)

from builders import node, snapshot


def _elements(labels):
    nodes = [node(f"n{i}", label) for i, label in enumerate(labels)]
    return extract_board(snapshot(nodes)).text_elements


@pytest.mark.parametrize("first,second,expected", [
    ("kitten", "sitting", 3),
    ("", "abc", 3),
    ("flaw", "lawn", 2),
    ("same", "same", 0),
])
def test_edit_distance(first, second, expected):
    distance = edit_distance(first, second)

    assert distance == expected
    assert type(distance) is int


def test_similarity():
    assert similarity("", "") == 1.0
    assert similarity("abcd", "abcx") == 0.75


class TestExactDuplicates:

    def test_pairs_with_first_occurrence(self):
        report = find_duplicates(_elements(["Deploy", "deploy ", "Build", "DEPLOY"]))

        assert [d.element_ids for d in report.exact] == [["n0", "n1"], ["n0", "n3"]]
        assert report.exact[0].text == "deploy "
        assert len(report.exact[0].positions) == 2

    def test_reported_once_per_pair(self):
        report = find_duplicates(_elements(["Approve request", "approve request"]))

        assert len(report.exact) == 1

    def test_short_labels_ignored(self):
        report = find_duplicates(_elements(["OK", "ok", "ab"]))

        assert report.exact == []


class TestSimilar:

    def test_near_duplicates(self):
        report = find_duplicates(_elements(["Validate input", "Validate inputs", "Ship order"]))

        pair, = report.similar
        assert pair.element_ids == ["n0", "n1"]
        assert pair.texts == ["Validate input", "Validate inputs"]
        assert pair.similarity == 93

    def test_threshold_is_exclusive(self):
        report = find_duplicates(_elements(["abcde", "abcdx"]))

        assert report.similar == []

    def test_only_canonical_labels_compared(self):
        report = find_duplicates(_elements(["Send email", "send email", "Send emails"]))

        assert len(report.exact) == 1
        assert [p.element_ids for p in report.similar] == [["n0", "n2"]]

    def test_guard_skips_fuzzy_pass(self, caplog):
        elements = _elements(["Validate input", "Validate inputs", "Validate inputz", "Validate input"])

        with caplog.at_level(logging.WARNING):
            report = find_duplicates(elements, max_pairwise=2)

        assert report.similar == []
        assert len(report.exact) == 1
        assert "Skipping fuzzy duplicate pass" in caplog.text
