"""Receiver SDK — authenticate and parse inbound Invoica webhooks."""

from __future__ import annotations

from invoica_webhooks.errors.webhook_errors import PayloadParseError, WebhookVerificationError
from invoica_webhooks.sdk.receiver import WebhookReceiver
from invoica_webhooks.sdk.verifier import (
    construct_event,
    parse_webhook_event,
    verify_payload,
    verify_webhook_signature,
)

__all__ = [
    "PayloadParseError",
    "WebhookReceiver",
    "WebhookVerificationError",
    "construct_event",
    "parse_webhook_event",
    "verify_payload",
    "verify_webhook_signature",
]
