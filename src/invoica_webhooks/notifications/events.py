"""Event types for the webhook system.

- ``EventType`` — the closed set of event names receivers can subscribe to
- ``WebhookEvent`` — immutable envelope with type, payload and timestamp
"""

from __future__ import annotations

import enum
import json
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Self

from invoica_webhooks.errors.definitions import ErrUnknownEventType
from invoica_webhooks.errors.webhook_errors import PayloadParseError, WebhookError


class EventType(enum.StrEnum):
    """Supported webhook event types."""

    INVOICE_CREATED = "invoice.created"
    INVOICE_UPDATED = "invoice.updated"
    INVOICE_PAID = "invoice.paid"
    SETTLEMENT_CREATED = "settlement.created"
    SETTLEMENT_CONFIRMED = "settlement.confirmed"

    @classmethod
    def parse(cls, value: str) -> EventType:
        """Return the member for *value*.

        Raises:
            WebhookError: ``unknown-event-type`` if *value* is not a member.
        """
        try:
            return cls(value)
        except ValueError:
            raise WebhookError(
                f"{ErrUnknownEventType.message}: {value!r}",
                status_code=ErrUnknownEventType.status_code,
                code=ErrUnknownEventType.code,
            ) from None


def _new_event_id() -> str:
    return f"evt_{uuid.uuid4().hex[:24]}"


@dataclass(frozen=True)
class WebhookEvent:
    """A domain event to be delivered to subscribed endpoints.

    Field order defines the key order of the serialized body.
    """

    type: str
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: int = field(default_factory=lambda: int(time.time()))
    id: str = field(default_factory=_new_event_id)

    @classmethod
    def create(cls, type: str, payload: dict[str, Any] | None = None) -> Self:  # noqa: A002
        """Build an event, rejecting types outside :class:`EventType`."""
        event_type = EventType.parse(type)
        return cls(type=event_type.value, payload=dict(payload or {}))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict in wire key order."""
        return {
            "id": self.id,
            "type": self.type,
            "payload": self.payload,
            "timestamp": self.timestamp,
        }

    def to_json(self) -> str:
        """Canonical compact JSON body; sign and send this exact string."""
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Any) -> Self:
        """Build an event from a decoded JSON document.

        Accepts ``payload`` or ``data`` for the body mapping.

        Raises:
            PayloadParseError: If required fields are missing or mistyped.
        """
        if not isinstance(data, dict):
            raise PayloadParseError("webhook payload must be a JSON object")
        event_type = data.get("type")
        if not isinstance(event_type, str) or not event_type:
            raise PayloadParseError("webhook payload is missing 'type'")
        body = data.get("payload", data.get("data", {}))
        if not isinstance(body, dict):
            raise PayloadParseError("webhook 'payload' must be a JSON object")
        timestamp = data.get("timestamp", 0)
        if isinstance(timestamp, bool) or not isinstance(timestamp, int):
            raise PayloadParseError("webhook 'timestamp' must be an integer")
        event_id = data.get("id") or ""
        if not isinstance(event_id, str):
            raise PayloadParseError("webhook 'id' must be a string")
        return cls(type=event_type, payload=body, timestamp=timestamp, id=event_id)

    @classmethod
    def from_json(cls, raw: str | bytes) -> Self:
        """Decode *raw* JSON and build an event.

        Raises:
            PayloadParseError: On malformed JSON or an invalid envelope.
        """
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise PayloadParseError(f"webhook payload is not valid JSON: {exc}") from exc
        return cls.from_dict(data)
