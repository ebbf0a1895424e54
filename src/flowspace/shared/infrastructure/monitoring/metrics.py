"""
Metrics collection and monitoring for Flowspace.
"""

import time
import threading
from typing import Dict, Any, List, Optional, Tuple
from collections import defaultdict
from functools import wraps

from ...config.settings import get_settings

TagKey = Tuple[Tuple[str, str], ...]


def _tag_key(tags: Dict[str, str]) -> TagKey:
    return tuple(sorted(tags.items()))


class MetricsCollector:
    """
    Collects and stores performance metrics for analysis runs.

    Provides thread-safe counters (with an optional per-tag breakdown),
    gauges and timers with basic statistics.
    """

    def __init__(self):
        self.settings = get_settings()
        self._lock = threading.RLock()

        self.enabled = self.settings.monitoring_config.get('enabled', True)
        self.max_history = self.settings.monitoring_config.get('max_history', 1000)

        self._counters: Dict[str, int] = defaultdict(int)
        self._tagged_counters: Dict[Tuple[str, TagKey], int] = defaultdict(int)
        self._gauges: Dict[str, float] = defaultdict(float)
        self._timers: Dict[str, List[float]] = defaultdict(list)

    def counter(self, name: str, value: int = 1, tags: Optional[Dict[str, str]] = None) -> None:
        """
        Increment a counter metric.

        Args:
            name: Counter name
            value: Increment value
            tags: Optional tags; the increment is also counted under them
        """
        if not self.enabled:
            return
        with self._lock:
            self._counters[name] += value
            if tags:
                self._tagged_counters[(name, _tag_key(tags))] += value

    def gauge(self, name: str, value: float) -> None:
        """Set a gauge metric value."""
        if not self.enabled:
            return
        with self._lock:
            self._gauges[name] = value

    def timer(self, name: str, duration_seconds: float) -> None:
        """
        Record a timing metric.

        Args:
            name: Timer name
            duration_seconds: Duration in seconds
        """
        if not self.enabled:
            return
        with self._lock:
            self._timers[name].append(duration_seconds)

            if len(self._timers[name]) > self.max_history:
                self._timers[name] = self._timers[name][-self.max_history:]

    def get_counter(self, name: str, tags: Optional[Dict[str, str]] = None) -> int:
        """Get current counter value, optionally restricted to one tag set."""
        if tags:
            return self._tagged_counters.get((name, _tag_key(tags)), 0)
        return self._counters.get(name, 0)

    def get_gauge(self, name: str) -> float:
        """Get current gauge value."""
        return self._gauges.get(name, 0.0)

    def get_timer_stats(self, name: str) -> Dict[str, float]:
        """Get timer statistics."""
        timings = self._timers.get(name, [])

        if not timings:
            return {'count': 0, 'mean': 0.0, 'min': 0.0, 'max': 0.0, 'p95': 0.0}

        sorted_timings = sorted(timings)
        count = len(sorted_timings)

        return {
            'count': count,
            'mean': sum(sorted_timings) / count,
            'min': sorted_timings[0],
            'max': sorted_timings[-1],
            'p95': sorted_timings[min(int(0.95 * count), count - 1)],
        }

    def get_all_metrics(self) -> Dict[str, Any]:
        """Get all current metric values."""
        with self._lock:
            return {
                'counters': dict(self._counters),
                'gauges': dict(self._gauges),
                'timers': {name: self.get_timer_stats(name) for name in self._timers},
            }

    def reset(self) -> None:
        """Drop every recorded metric."""
        with self._lock:
            self._counters.clear()
            self._tagged_counters.clear()
            self._gauges.clear()
            self._timers.clear()

    def record_analysis(self, duration_seconds: float, diagnostics: int, enriched: bool) -> None:
        """Record one completed board analysis."""
        self.counter('board_analyses_total', tags={'enriched': str(enriched)})
        self.timer('board_analysis_duration', duration_seconds)
        self.gauge('board_analysis_diagnostics', diagnostics)


def timed_operation(metric_name: str):
    """
    Decorator for timing operations.

    Failed calls are timed under ``<metric_name>_error``.

    Args:
        metric_name: Name of the timing metric
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            metrics = get_metrics()
            start_time = time.time()

            try:
                result = func(*args, **kwargs)
                metrics.timer(metric_name, time.time() - start_time)
                return result

            except Exception:
                metrics.timer(f"{metric_name}_error", time.time() - start_time)
                raise

        return wrapper
    return decorator


# Global instance
_metrics_collector = None
_metrics_lock = threading.Lock()


def get_metrics() -> MetricsCollector:
    """
    Get the global metrics collector instance.

    Returns:
        MetricsCollector singleton instance
    """
    global _metrics_collector

    if _metrics_collector is None:
        with _metrics_lock:
            if _metrics_collector is None:
                _metrics_collector = MetricsCollector()

    return _metrics_collector
