"""Tests for the metrics registry."""

import pytest

from washrelay.metrics import Histogram, MetricsRegistry


class TestHistogram:
    def test_observe(self):
        hist = Histogram()
        hist.observe(0.01)
        hist.observe(0.02)
        assert hist.count == 2
        assert hist.sum == pytest.approx(0.03)

    def test_buckets_are_cumulative(self):
        hist = Histogram()
        hist.observe(0.001)
        hist.observe(0.02)
        assert hist.counts[0.005] == 1
        assert hist.counts[0.025] == 2
        assert hist.counts[10.0] == 0  # outside the default buckets

    def test_prometheus_lines(self):
        hist = Histogram(buckets=(0.1, 1.0))
        hist.observe(0.5)
        lines = hist.to_prometheus("latency", 'path="/webhook"')
        assert 'latency_bucket{le="0.1", path="/webhook"} 0' in lines
        assert 'latency_bucket{le="1.0", path="/webhook"} 1' in lines
        assert 'latency_bucket{le="+Inf", path="/webhook"} 1' in lines
        assert 'latency_count{path="/webhook"} 1' in lines


class TestMetricsRegistry:
    def test_counter_with_labels(self):
        registry = MetricsRegistry()
        registry.inc_counter("events_total", {"event": "register"})
        registry.inc_counter("events_total", {"event": "register"})
        registry.inc_counter("events_total", {"event": "release"})

        counters = registry.get_stats()["counters"]["events_total"]
        assert counters['event="register"'] == 2
        assert counters['event="release"'] == 1

    def test_unlabelled_counter(self):
        registry = MetricsRegistry()
        registry.inc_counter("ticks_total", value=3)
        assert registry.get_stats()["counters"]["ticks_total"][""] == 3

    def test_histogram_stats(self):
        registry = MetricsRegistry()
        registry.observe_histogram("duration", 0.1)
        registry.observe_histogram("duration", 0.2)
        stats = registry.get_stats()["histograms"]["duration"][""]
        assert stats["count"] == 2
        assert stats["sum"] == pytest.approx(0.3)

    def test_prometheus_output(self):
        registry = MetricsRegistry()
        registry.inc_counter("requests_total", {"path": "/health"})
        registry.observe_histogram("request_duration", 0.1)
        output = registry.to_prometheus()
        assert "# TYPE requests_total counter" in output
        assert 'requests_total{path="/health"} 1' in output
        assert "# TYPE request_duration histogram" in output
