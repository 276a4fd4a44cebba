"""Metrics collector — Prometheus counters and histograms for deliveries.

- ``webhook_deliveries_total`` counter-vec (event_type, outcome)
- ``webhook_delivery_attempts_total`` counter-vec (event_type)
- ``webhook_delivery_duration_seconds`` histogram-vec (event_type)
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING

from prometheus_client import CollectorRegistry, Counter, Histogram

if TYPE_CHECKING:
    from collections.abc import Iterator

_PREFIX = "webhook"

OUTCOME_SUCCESS = "success"
OUTCOME_FAILURE = "failure"


class MetricsCollector:
    """Low-level Prometheus collector that owns the registry.

    Use :class:`DeliveryMetrics` for the high-level tracking interface.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or CollectorRegistry()

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._registry

    def histogram(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Histogram:
        """Register and return a Histogram."""
        return Histogram(name, doc, labels, registry=self._registry)

    def counter(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Counter:
        """Register and return a Counter."""
        return Counter(name, doc, labels, registry=self._registry)


class DeliveryMetrics:
    """Per-event-type delivery outcomes and latency."""

    def __init__(self, collector: MetricsCollector | None = None) -> None:
        self._collector = collector or MetricsCollector()

        self._deliveries = self._collector.counter(
            f"{_PREFIX}_deliveries",
            "Webhook deliveries by final outcome",
            ("event_type", "outcome"),
        )
        self._attempts = self._collector.counter(
            f"{_PREFIX}_delivery_attempts",
            "Outbound webhook HTTP attempts, including retries",
            ("event_type",),
        )
        self._duration = self._collector.histogram(
            f"{_PREFIX}_delivery_duration_seconds",
            "Duration of a single webhook delivery including retries",
            ("event_type",),
        )

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._collector.registry

    def record_attempt(self, event_type: str) -> None:
        """Count one outbound HTTP attempt."""
        self._attempts.labels(event_type=event_type).inc()

    def record_outcome(self, event_type: str, *, success: bool) -> None:
        """Count a finished delivery."""
        outcome = OUTCOME_SUCCESS if success else OUTCOME_FAILURE
        self._deliveries.labels(event_type=event_type, outcome=outcome).inc()

    @contextmanager
    def track_delivery(self, event_type: str) -> Iterator[None]:
        """Track the duration of one registration's delivery."""
        start = time.monotonic()
        try:
            yield
        finally:
            self._duration.labels(event_type=event_type).observe(time.monotonic() - start)
