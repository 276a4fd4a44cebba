"""HMAC-SHA256 webhook signatures.

Signatures have the form ``sha256=<64 lowercase hex chars>`` and are computed
over the exact bytes sent as the request body.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets

SIGNATURE_PREFIX = "sha256="
SECRET_PREFIX = "whsec_"
SECRET_BYTES = 24

# Delivery headers
SIGNATURE_HEADER = "X-Invoica-Signature"
EVENT_HEADER = "X-Invoica-Event"
TIMESTAMP_HEADER = "X-Invoica-Timestamp"


def _to_bytes(payload: str | bytes) -> bytes:
    return payload.encode("utf-8") if isinstance(payload, str) else payload


def compute_digest(payload: str | bytes, secret: str) -> bytes:
    """Raw HMAC-SHA256 digest of *payload* keyed with *secret*."""
    return hmac.new(secret.encode("utf-8"), _to_bytes(payload), hashlib.sha256).digest()


def generate_signature(payload: str | bytes, secret: str) -> str:
    """Return the ``sha256=<hex>`` signature for *payload*."""
    return SIGNATURE_PREFIX + compute_digest(payload, secret).hex()


def verify_signature(payload: str | bytes, secret: str, signature: str) -> bool:
    """Check *signature* against the one expected for *payload* and *secret*.

    The length check only looks at the signature format, which is public;
    the content comparison is constant-time.
    """
    expected = generate_signature(payload, secret)
    if len(signature) != len(expected):
        return False
    return hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8", "replace"))


def generate_webhook_secret() -> str:
    """Generate a shared secret: ``whsec_`` followed by 48 lowercase hex chars."""
    return SECRET_PREFIX + secrets.token_hex(SECRET_BYTES)
