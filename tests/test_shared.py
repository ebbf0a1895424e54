"""
Tests for shared configuration, models and monitoring.
"""

import pydantic
import pytest

from flowspace.shared import (
    ConfigurationError, MetricsCollector, Settings, get_settings, timed_operation,
)
from flowspace.shared.models.board import BoardGraph, Connection, Element
from flowspace.services.board_analysis.models import AnalysisOptions


class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in ("FLOWSPACE_LOG_LEVEL", "FLOWSPACE_STRICT_MODE", "FLOWSPACE_CLUSTER_DISTANCE_THRESHOLD"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.cluster_distance_threshold == 300
        assert settings.overlap_distance_threshold == 50
        assert settings.similarity_threshold == pytest.approx(0.80)
        assert settings.max_pairwise_elements == 500

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("FLOWSPACE_STRICT_MODE", "true")
        monkeypatch.setenv("FLOWSPACE_LOG_LEVEL", "debug")

        settings = Settings(_env_file=None)

        assert settings.strict_mode is True
        assert settings.log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(pydantic.ValidationError):
            Settings(_env_file=None, log_level="LOUD")

    def test_invalid_environment_is_a_configuration_error(self, monkeypatch):
        monkeypatch.setenv("FLOWSPACE_SIMILARITY_THRESHOLD", "1.5")
        get_settings.cache_clear()
        try:
            with pytest.raises(ConfigurationError):
                get_settings()
        finally:
            get_settings.cache_clear()


class TestAnalysisOptions:

    def test_seeded_from_settings(self):
        options = AnalysisOptions.from_settings(Settings(_env_file=None, strict_mode=True))

        assert options.strict_mode is True

    def test_overrides_accept_both_spellings(self):
        settings = Settings(_env_file=None)

        snake = AnalysisOptions.from_settings(settings, suggest_fixes=False)
        camel = AnalysisOptions.from_settings(settings, suggestFixes=False)

        assert snake == camel
        assert snake.suggest_fixes is False

    def test_camel_case_dump(self):
        assert AnalysisOptions().to_dict()["strictMode"] is False


class TestBoardGraph:

    def test_node_map_keeps_first_occurrence(self):
        graph = BoardGraph(visual_elements=[
            Element(id="a", text="first"),
            Element(id="a", text="second"),
        ])

        assert graph.node_map()["a"].text == "first"

    def test_networkx_marks_dangling_endpoints(self):
        graph = BoardGraph(
            visual_elements=[Element(id="a", text="A")],
            connections=[Connection(id="e1", source="a", target="ghost"),
                         Connection(id="e2", source="phantom", target="a")],
        )

        full = graph.to_networkx()
        known_sources = graph.to_networkx(include_dangling_sources=False)

        assert full.nodes["ghost"]["dangling"] is True
        assert full.has_edge("phantom", "a")
        assert not known_sources.has_edge("phantom", "a")
        assert known_sources.edges["a", "ghost"]["id"] == "e1"

    def test_element_type_check_is_case_insensitive(self):
        assert Element(id="d", node_type="Decision").is_type("decision")


class TestMetrics:

    def test_counters_gauges_timers(self):
        collector = MetricsCollector()

        collector.counter("runs")
        collector.counter("runs", 2)
        collector.gauge("size", 4.5)
        collector.timer("work", 0.2)
        collector.timer("work", 0.4)

        assert collector.get_counter("runs") == 3
        assert collector.get_gauge("size") == 4.5
        stats = collector.get_timer_stats("work")
        assert stats["count"] == 2
        assert stats["mean"] == pytest.approx(0.3)
        assert stats["max"] == 0.4

    def test_tagged_counter_breakdown(self):
        collector = MetricsCollector()

        collector.counter("failures", tags={"provider": "a"})
        collector.counter("failures", tags={"provider": "b"})
        collector.counter("failures", 2, tags={"provider": "a"})

        assert collector.get_counter("failures") == 4
        assert collector.get_counter("failures", tags={"provider": "a"}) == 3
        assert collector.get_counter("failures", tags={"provider": "c"}) == 0

    def test_reset(self):
        collector = MetricsCollector()
        collector.counter("runs")

        collector.reset()

        assert collector.get_all_metrics() == {"counters": {}, "gauges": {}, "timers": {}}

    def test_timed_operation(self, metrics):
        @timed_operation("unit_of_work")
        def work():
            return 42

        @timed_operation("failing_work")
        def fail():
            raise RuntimeError("boom")

        assert work() == 42
        with pytest.raises(RuntimeError):
            fail()

        assert metrics.get_timer_stats("unit_of_work")["count"] == 1
        assert metrics.get_timer_stats("failing_work_error")["count"] == 1
