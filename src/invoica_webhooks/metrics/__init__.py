"""Metrics — Prometheus metrics collection and exposure."""

from __future__ import annotations

from invoica_webhooks.metrics.collector import DeliveryMetrics, MetricsCollector
from invoica_webhooks.metrics.middleware import PrometheusMiddleware

__all__ = ["DeliveryMetrics", "MetricsCollector", "PrometheusMiddleware"]
