"""Configuration — layered settings from env vars, YAML and defaults."""

from __future__ import annotations

from invoica_webhooks.config.settings import (
    AppConfig,
    DatabaseConfig,
    DeliveryConfig,
    MetricsConfig,
    ServerConfig,
)

__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "DeliveryConfig",
    "MetricsConfig",
    "ServerConfig",
]
