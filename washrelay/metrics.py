"""Application metrics for observability.

Keeps Prometheus-style counters and latency histograms in process for:
- HTTP requests
- Machine state transitions
- Outbound notifications
"""

from collections import defaultdict
from dataclasses import dataclass, field
from threading import Lock
from typing import Any

DEFAULT_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0)


def _label_str(label_key: str, extra: str = "") -> str:
    parts = ", ".join(p for p in (extra, label_key) if p)
    return f"{{{parts}}}" if parts else ""


@dataclass
class Histogram:
    """Cumulative-bucket latency histogram."""

    buckets: tuple[float, ...] = DEFAULT_BUCKETS
    counts: dict[float, int] = field(default_factory=lambda: defaultdict(int))
    sum: float = 0.0
    count: int = 0

    def observe(self, value: float) -> None:
        self.sum += value
        self.count += 1
        for bucket in self.buckets:
            if value <= bucket:
                self.counts[bucket] += 1

    def to_prometheus(self, name: str, label_key: str = "") -> list[str]:
        lines = []
        for bucket in self.buckets:
            le = f'le="{bucket}"'
            lines.append(f"{name}_bucket{_label_str(label_key, le)} {self.counts[bucket]}")
        inf = 'le="+Inf"'
        lines.append(f"{name}_bucket{_label_str(label_key, inf)} {self.count}")
        lines.append(f"{name}_sum{_label_str(label_key)} {self.sum}")
        lines.append(f"{name}_count{_label_str(label_key)} {self.count}")
        return lines


class MetricsRegistry:
    """Thread-safe registry of labelled counters and histograms."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._counters: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
        self._histograms: dict[str, dict[str, Histogram]] = defaultdict(dict)

    @staticmethod
    def _key(labels: dict[str, str] | None) -> str:
        if not labels:
            return ""
        return ",".join(f'{k}="{v}"' for k, v in sorted(labels.items()))

    def inc_counter(self, name: str, labels: dict[str, str] | None = None, value: int = 1) -> None:
        key = self._key(labels)
        with self._lock:
            self._counters[name][key] += value

    def observe_histogram(
        self, name: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        key = self._key(labels)
        with self._lock:
            self._histograms[name].setdefault(key, Histogram()).observe(value)

    def to_prometheus(self) -> str:
        """Render all metrics in the Prometheus text exposition format."""
        lines: list[str] = []
        with self._lock:
            for name, values in self._counters.items():
                lines.append(f"# TYPE {name} counter")
                lines.extend(f"{name}{_label_str(key)} {value}" for key, value in values.items())
            for name, histograms in self._histograms.items():
                lines.append(f"# TYPE {name} histogram")
                for key, histogram in histograms.items():
                    lines.extend(histogram.to_prometheus(name, key))
        return "\n".join(lines) + "\n"

    def get_stats(self) -> dict[str, Any]:
        """Metrics as plain dicts for the JSON endpoint."""
        with self._lock:
            return {
                "counters": {k: dict(v) for k, v in self._counters.items()},
                "histograms": {
                    k: {key: {"count": h.count, "sum": h.sum} for key, h in v.items()}
                    for k, v in self._histograms.items()
                },
            }


# Global metrics registry
metrics = MetricsRegistry()


def record_request(method: str, path: str, status_code: int, duration: float) -> None:
    """Record an HTTP request."""
    labels = {"method": method, "path": path, "status": str(status_code)}
    metrics.inc_counter("washrelay_http_requests_total", labels)
    metrics.observe_histogram(
        "washrelay_http_request_duration_seconds", duration, {"path": path}
    )


def record_transition(event: str, outcome: str) -> None:
    """Record a state machine transition or rejection."""
    metrics.inc_counter("washrelay_transitions_total", {"event": event, "outcome": outcome})


def record_notification(channel: str, delivered: bool) -> None:
    """Record an outbound notification attempt."""
    labels = {"channel": channel, "result": "delivered" if delivered else "failed"}
    metrics.inc_counter("washrelay_notifications_total", labels)
