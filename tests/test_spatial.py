"""
Tests for spatial clustering and overlap detection.
"""

import random

from flowspace.services.board_analysis.core import (
    detect_overlaps, extract_board, identify_spatial_clusters,
)

from builders import node, snapshot


def _elements(*coords):
    nodes = [node(f"n{i}", x=x, y=y) for i, (x, y) in enumerate(coords)]
    return extract_board(snapshot(nodes)).visual_elements


class TestClustering:

    def test_tight_group_and_far_outlier(self):
        elements = _elements((0, 0), (10, 0), (0, 10), (20, 20), (30, 5), (1000, 1000))

        clusters = identify_spatial_clusters(elements)

        assert len(clusters) == 1
        assert clusters[0].element_ids == ["n0", "n1", "n2", "n3", "n4"]
        assert clusters[0].size == 5
        assert clusters[0].id == "cluster-0"

    def test_growth_is_seed_radius_only(self):
        elements = _elements((0, 0), (250, 0), (500, 0))

        clusters = identify_spatial_clusters(elements)

        assert [c.element_ids for c in clusters] == [["n0", "n1"]]

    def test_threshold_is_exclusive(self):
        assert identify_spatial_clusters(_elements((0, 0), (300, 0))) == []
        assert len(identify_spatial_clusters(_elements((0, 0), (299, 0)))) == 1

    def test_bounds_center_and_density(self):
        cluster, = identify_spatial_clusters(_elements((0, 0), (100, 100)))

        assert (cluster.bounds.min_x, cluster.bounds.max_x) == (0, 100)
        assert (cluster.center.x, cluster.center.y) == (50, 50)
        assert cluster.density == 2.0

    def test_zero_area_density_is_none(self):
        cluster, = identify_spatial_clusters(_elements((0, 0), (0, 100)))

        assert cluster.density is None

    def test_custom_threshold(self):
        elements = _elements((0, 0), (80, 0))

        assert identify_spatial_clusters(elements, threshold=50) == []
        assert len(identify_spatial_clusters(elements, threshold=100)) == 1

    def test_no_singletons_on_random_boards(self):
        rng = random.Random(7)
        for _ in range(20):
            coords = [(rng.uniform(0, 2000), rng.uniform(0, 2000)) for _ in range(30)]
            for cluster in identify_spatial_clusters(_elements(*coords)):
                assert len(cluster.element_ids) >= 2

    def test_empty(self):
        assert identify_spatial_clusters([]) == []


class TestOverlaps:

    def test_close_pair(self):
        overlaps = detect_overlaps(_elements((0, 0), (3, 4), (500, 500)))

        assert len(overlaps) == 1
        assert overlaps[0].element_ids == ["n0", "n1"]
        assert overlaps[0].distance == 5

    def test_threshold_is_exclusive(self):
        assert detect_overlaps(_elements((0, 0), (30, 40))) == []

    def test_every_pair_reported_once(self):
        overlaps = detect_overlaps(_elements((0, 0), (1, 0), (2, 0)))

        assert [o.element_ids for o in overlaps] == [["n0", "n1"], ["n0", "n2"], ["n1", "n2"]]
