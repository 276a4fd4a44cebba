"""Shared test fixtures for the invoica-webhooks test suite."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from invoica_webhooks.notifications.registrations import (
    InMemoryRegistrationStore,
    WebhookRegistration,
)

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def app_config(tmp_path: Path):
    """Provide a test AppConfig with safe defaults."""
    from invoica_webhooks.config.settings import AppConfig, DatabaseConfig, DeliveryConfig

    return AppConfig(
        debug=True,
        db=DatabaseConfig(dsn=f"sqlite+aiosqlite:///{tmp_path / 'webhooks.db'}"),
        delivery=DeliveryConfig(timeout=2.0, max_retries=0, retry_backoff=0.0),
    )


@pytest.fixture
def registration() -> WebhookRegistration:
    """An active registration for ``invoice.created``."""
    return WebhookRegistration(
        url="https://example.com/webhook",
        events=("invoice.created",),
        secret="whsec_" + "ab" * 24,
    )


@pytest.fixture
def memory_store(registration: WebhookRegistration) -> InMemoryRegistrationStore:
    """In-memory store pre-loaded with :func:`registration`."""
    return InMemoryRegistrationStore([registration])
