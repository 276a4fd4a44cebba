"""Receiver-side webhook verification.

Receivers authenticate the raw request body before looking at it::

    event = construct_event(raw_body, request.headers["X-Invoica-Signature"], secret)

Parsing happens only after the signature has been checked, so untrusted
bytes are never interpreted as JSON.
"""

from __future__ import annotations

import hmac
import re

from invoica_webhooks.errors.definitions import ErrInvalidSignature, ErrMissingSignature
from invoica_webhooks.errors.webhook_errors import WebhookVerificationError
from invoica_webhooks.notifications.events import WebhookEvent
from invoica_webhooks.notifications.signing import SIGNATURE_PREFIX, compute_digest

_HEX_DIGEST = re.compile(r"[0-9a-f]{64}")


def _decode_signature(signature_header: str | None) -> bytes:
    if not signature_header:
        raise ErrMissingSignature
    value = signature_header.strip()
    if not value.startswith(SIGNATURE_PREFIX):
        raise WebhookVerificationError(
            f"signature must start with {SIGNATURE_PREFIX!r}", code="malformed-signature"
        )
    digest = value.removeprefix(SIGNATURE_PREFIX)
    if not _HEX_DIGEST.fullmatch(digest):
        raise WebhookVerificationError(
            "signature must be 64 lowercase hex characters", code="malformed-signature"
        )
    return bytes.fromhex(digest)


def verify_payload(raw_payload: str | bytes, signature_header: str | None, secret: str) -> None:
    """Check *signature_header* against *raw_payload*.

    Raises:
        WebhookVerificationError: On a missing, malformed or mismatching signature.
    """
    provided = _decode_signature(signature_header)
    expected = compute_digest(raw_payload, secret)
    if not hmac.compare_digest(provided, expected):
        raise ErrInvalidSignature


def construct_event(
    raw_payload: str | bytes,
    signature_header: str | None,
    secret: str,
) -> WebhookEvent:
    """Verify *raw_payload* and return it as a :class:`WebhookEvent`.

    Raises:
        WebhookVerificationError: If the signature does not match.
        PayloadParseError: If the authenticated payload is not a valid event.
    """
    verify_payload(raw_payload, signature_header, secret)
    return WebhookEvent.from_json(raw_payload)


def verify_webhook_signature(
    raw_payload: str | bytes, signature_header: str | None, secret: str
) -> bool:
    """Non-raising variant of :func:`verify_payload`."""
    try:
        verify_payload(raw_payload, signature_header, secret)
    except WebhookVerificationError:
        return False
    return True


def parse_webhook_event(raw_payload: str | bytes) -> WebhookEvent:
    """Parse a payload that has already been authenticated elsewhere."""
    return WebhookEvent.from_json(raw_payload)
