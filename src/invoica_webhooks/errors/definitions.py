"""Pre-defined webhook error instances."""

from __future__ import annotations

from invoica_webhooks.errors.webhook_errors import (
    ErrorKind,
    WebhookError,
    WebhookVerificationError,
)

# -- Registration validation ------------------------------------------------

ErrInvalidURL = WebhookError(
    "webhook url must be an absolute http(s) URL", status_code=400, code="invalid-url"
)
ErrNoEvents = WebhookError(
    "at least one event type is required", status_code=400, code="missing-events"
)
ErrUnknownEventType = WebhookError(
    "unknown event type", status_code=400, code="unknown-event-type"
)
ErrSecretLength = WebhookError(
    "webhook secret must be between 16 and 64 characters",
    status_code=400,
    code="invalid-secret",
)

# -- Not Found --------------------------------------------------------------

ErrRegistrationNotFound = WebhookError(
    "webhook registration not found",
    kind=ErrorKind.NOT_FOUND,
    status_code=404,
    code="registration-not-found",
)

# -- Verification -----------------------------------------------------------

ErrMissingSignature = WebhookVerificationError(
    "missing webhook signature header", code="missing-signature"
)
ErrInvalidSignature = WebhookVerificationError("invalid webhook signature")
