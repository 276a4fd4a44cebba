"""WebhookError — base exception class for all webhook errors."""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from invoica_webhooks.notifications.dispatcher import DeliveryResult


class ErrorKind(enum.StrEnum):
    """Tag identifying which part of the webhook flow an error belongs to."""

    VALIDATION = "validation"
    AUTH = "auth"
    DELIVERY = "delivery"
    VERIFICATION = "verification"
    NOT_FOUND = "not_found"


class WebhookError(Exception):
    """Base error for all webhook operations.

    Attributes:
        message: Human-readable error description.
        kind: Error category, so callers can branch on the tag instead of
            the exception type.
        status_code: Suggested HTTP status code.
        code: Machine-readable error code string.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind = ErrorKind.VALIDATION,
        status_code: int = 500,
        code: str = "webhook-error",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.status_code = status_code
        self.code = code


class WebhookVerificationError(WebhookError):
    """Raised when an inbound payload fails signature verification."""

    def __init__(
        self,
        message: str = "webhook signature verification failed",
        *,
        status_code: int = 401,
        code: str = "invalid-signature",
    ) -> None:
        super().__init__(
            message,
            kind=ErrorKind.VERIFICATION,
            status_code=status_code,
            code=code,
        )


class PayloadParseError(WebhookError):
    """Raised when a verified payload is not a well-formed webhook event."""

    def __init__(
        self,
        message: str = "webhook payload is not a valid event",
        *,
        status_code: int = 400,
        code: str = "invalid-payload",
    ) -> None:
        super().__init__(
            message,
            kind=ErrorKind.VALIDATION,
            status_code=status_code,
            code=code,
        )


class DeliveryError(WebhookError):
    """A failed delivery, raised only on explicit request by the caller."""

    def __init__(self, result: DeliveryResult) -> None:
        detail = result.error or f"HTTP {result.status_code}"
        super().__init__(
            f"delivery to {result.url} failed: {detail}",
            kind=ErrorKind.DELIVERY,
            status_code=502,
            code="delivery-failed",
        )
        self.result = result
