"""Tests for error classes and pre-defined error instances."""

from __future__ import annotations

import pytest

from invoica_webhooks.errors import definitions as defs
from invoica_webhooks.errors.webhook_errors import (
    DeliveryError,
    ErrorKind,
    PayloadParseError,
    WebhookError,
    WebhookVerificationError,
)
from invoica_webhooks.notifications.dispatcher import DeliveryResult

# ---------------------------------------------------------------------------
# WebhookError base class
# ---------------------------------------------------------------------------


class TestWebhookError:
    def test_default_attributes(self) -> None:
        err = WebhookError("something broke")
        assert str(err) == "something broke"
        assert err.message == "something broke"
        assert err.kind is ErrorKind.VALIDATION
        assert err.status_code == 500
        assert err.code == "webhook-error"

    def test_custom_attributes(self) -> None:
        err = WebhookError("denied", kind=ErrorKind.AUTH, status_code=403, code="forbidden")
        assert err.kind == "auth"
        assert err.status_code == 403
        assert err.code == "forbidden"

    def test_is_exception(self) -> None:
        with pytest.raises(WebhookError, match="boom"):
            raise WebhookError("boom")

    def test_kind_values(self) -> None:
        assert [k.value for k in ErrorKind] == [
            "validation",
            "auth",
            "delivery",
            "verification",
            "not_found",
        ]


# ---------------------------------------------------------------------------
# Subclasses
# ---------------------------------------------------------------------------


class TestWebhookVerificationError:
    def test_defaults(self) -> None:
        err = WebhookVerificationError()
        assert isinstance(err, WebhookError)
        assert err.kind is ErrorKind.VERIFICATION
        assert err.status_code == 401
        assert err.code == "invalid-signature"

    def test_custom_code(self) -> None:
        err = WebhookVerificationError("bad prefix", code="malformed-signature")
        assert err.message == "bad prefix"
        assert err.code == "malformed-signature"
        assert err.kind is ErrorKind.VERIFICATION


class TestPayloadParseError:
    def test_defaults(self) -> None:
        err = PayloadParseError()
        assert err.kind is ErrorKind.VALIDATION
        assert err.status_code == 400
        assert err.code == "invalid-payload"


class TestDeliveryError:
    def test_carries_result(self) -> None:
        result = DeliveryResult(
            registration_id="wh_1",
            url="https://example.com/hook",
            event_id="evt_1",
            event_type="invoice.paid",
            signature="sha256=" + "0" * 64,
            success=False,
            status_code=503,
            error="HTTP 503",
        )
        err = DeliveryError(result)
        assert err.result is result
        assert err.kind is ErrorKind.DELIVERY
        assert err.status_code == 502
        assert err.code == "delivery-failed"
        assert "https://example.com/hook" in err.message
        assert "HTTP 503" in err.message

    def test_raise_for_failure_noop_on_success(self) -> None:
        result = DeliveryResult(
            registration_id="wh_1",
            url="https://example.com/hook",
            event_id="evt_1",
            event_type="invoice.paid",
            signature="sha256=" + "0" * 64,
            success=True,
            status_code=200,
        )
        assert result.raise_for_failure() is None


# ---------------------------------------------------------------------------
# Pre-defined errors
# ---------------------------------------------------------------------------


class TestDefinitions:
    @pytest.mark.parametrize(
        ("err", "code"),
        [
            (defs.ErrInvalidURL, "invalid-url"),
            (defs.ErrNoEvents, "missing-events"),
            (defs.ErrUnknownEventType, "unknown-event-type"),
            (defs.ErrSecretLength, "invalid-secret"),
        ],
    )
    def test_validation_errors(self, err: WebhookError, code: str) -> None:
        assert err.code == code
        assert err.status_code == 400
        assert err.kind is ErrorKind.VALIDATION

    def test_not_found(self) -> None:
        assert defs.ErrRegistrationNotFound.status_code == 404
        assert defs.ErrRegistrationNotFound.code == "registration-not-found"
        assert defs.ErrRegistrationNotFound.kind is ErrorKind.NOT_FOUND
        assert defs.ErrRegistrationNotFound.kind == "not_found"

    @pytest.mark.parametrize("err", [defs.ErrMissingSignature, defs.ErrInvalidSignature])
    def test_verification_errors(self, err: WebhookError) -> None:
        assert isinstance(err, WebhookVerificationError)
        assert err.status_code == 401

    def test_codes_unique(self) -> None:
        errors = [v for v in vars(defs).values() if isinstance(v, WebhookError)]
        codes = [e.code for e in errors]
        assert len(codes) == len(set(codes))
