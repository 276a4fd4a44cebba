"""Notifications — webhook registration, signing and dispatch.

Provides:
- ``WebhookEvent`` / ``EventType`` — the event envelope and taxonomy
- ``generate_signature`` / ``verify_signature`` — HMAC-SHA256 signing
- ``RegistrationService`` and stores — who receives which events
- ``WebhookDispatcher`` — delivers events to matching registrations
"""

from __future__ import annotations

from invoica_webhooks.notifications.dispatcher import (
    DeliveryResult,
    RetryPolicy,
    WebhookDispatcher,
)
from invoica_webhooks.notifications.events import EventType, WebhookEvent
from invoica_webhooks.notifications.registrations import (
    InMemoryRegistrationStore,
    RegistrationRequest,
    RegistrationService,
    RegistrationStore,
    WebhookRegistration,
)
from invoica_webhooks.notifications.signing import (
    generate_signature,
    generate_webhook_secret,
    verify_signature,
)

__all__ = [
    "DeliveryResult",
    "EventType",
    "InMemoryRegistrationStore",
    "RegistrationRequest",
    "RegistrationService",
    "RegistrationStore",
    "RetryPolicy",
    "WebhookDispatcher",
    "WebhookEvent",
    "WebhookRegistration",
    "generate_signature",
    "generate_webhook_secret",
    "verify_signature",
]
