"""FastAPI dependency injection helpers.

Provides ``Depends()``-compatible callables for the services stored on
``app.state`` during lifespan startup.
"""

from __future__ import annotations

from fastapi import Request

from invoica_webhooks.notifications.dispatcher import WebhookDispatcher  # noqa: TC001
from invoica_webhooks.notifications.registrations import RegistrationService  # noqa: TC001


def get_registration_service(request: Request) -> RegistrationService:
    """Retrieve the registration service from ``app.state``.

    Raises:
        RuntimeError: If the app has not been started.
    """
    service: RegistrationService | None = getattr(request.app.state, "registrations", None)
    if service is None:
        msg = "Registration service is not initialized"
        raise RuntimeError(msg)
    return service


def get_dispatcher(request: Request) -> WebhookDispatcher:
    """Retrieve the webhook dispatcher from ``app.state``."""
    dispatcher: WebhookDispatcher | None = getattr(request.app.state, "dispatcher", None)
    if dispatcher is None:
        msg = "Webhook dispatcher is not initialized"
        raise RuntimeError(msg)
    return dispatcher
