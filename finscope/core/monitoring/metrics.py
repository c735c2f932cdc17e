"""Prometheus metrics helpers for price source activity."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import DefaultDict

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest


@dataclass
class _SourceStats:
    """Internal container tracking per-source success and failure counts."""

    total: int = 0
    failures: int = 0


class MetricsCollector:
    """Collects Prometheus metrics for source fetches and refresh cycles."""

    def __init__(self, *, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()
        self.fetch_latency_seconds = Histogram(
            "finscope_source_fetch_latency_seconds",
            "Latency distribution for price source fetches.",
            ("source",),
            buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, float("inf")),
            registry=self.registry,
        )
        self.fetch_total = Counter(
            "finscope_source_fetch_total",
            "Total count of price source fetches.",
            ("source",),
            registry=self.registry,
        )
        self.fetch_failures_total = Counter(
            "finscope_source_fetch_failures_total",
            "Total count of failed price source fetches.",
            ("source",),
            registry=self.registry,
        )
        self.source_error_rate = Gauge(
            "finscope_source_error_rate",
            "Error rate for each price source (0-1 range).",
            ("source",),
            registry=self.registry,
        )
        self.refresh_cycles_total = Counter(
            "finscope_refresh_cycles_total",
            "Refresh cycles grouped by outcome.",
            ("outcome",),
            registry=self.registry,
        )
        self._source_stats: DefaultDict[str, _SourceStats] = defaultdict(_SourceStats)

    def observe_fetch(self, source: str, latency_seconds: float, *, success: bool = True) -> None:
        """Record a completed source fetch."""

        self.fetch_latency_seconds.labels(source=source).observe(latency_seconds)
        self._record_outcome(source=source, success=success)

    def increment_failure(self, source: str) -> None:
        """Count a failure that never produced a latency sample (timeouts, skips)."""

        self._record_outcome(source=source, success=False)

    def record_cycle(self, outcome: str) -> None:
        """Count a finished refresh cycle (``success`` or ``failed``)."""

        self.refresh_cycles_total.labels(outcome=outcome).inc()

    def render(self) -> bytes:
        """Render metrics in Prometheus exposition format."""

        return generate_latest(self.registry)

    def _record_outcome(self, *, source: str, success: bool) -> None:
        stats = self._source_stats[source]
        stats.total += 1
        self.fetch_total.labels(source=source).inc()
        if not success:
            stats.failures += 1
            self.fetch_failures_total.labels(source=source).inc()
        self.source_error_rate.labels(source=source).set(stats.failures / stats.total)


_DEFAULT_COLLECTOR: MetricsCollector | None = None


def get_metrics_collector() -> MetricsCollector:
    """Return the global metrics collector instance."""

    global _DEFAULT_COLLECTOR
    if _DEFAULT_COLLECTOR is None:
        _DEFAULT_COLLECTOR = MetricsCollector()
    return _DEFAULT_COLLECTOR


def configure_metrics_collector(collector: MetricsCollector | None) -> None:
    """Override the global metrics collector for application wiring or tests."""

    global _DEFAULT_COLLECTOR
    _DEFAULT_COLLECTOR = collector
