"""Errors — tagged webhook error hierarchy and pre-defined instances."""

from __future__ import annotations

from invoica_webhooks.errors.webhook_errors import (
    DeliveryError,
    ErrorKind,
    PayloadParseError,
    WebhookError,
    WebhookVerificationError,
)

__all__ = [
    "DeliveryError",
    "ErrorKind",
    "PayloadParseError",
    "WebhookError",
    "WebhookVerificationError",
]
