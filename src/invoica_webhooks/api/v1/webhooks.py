"""V1 webhook registration endpoints.

Registrations subscribe a URL to one or more event types. The secret is
returned once, in the creation response; list and detail views omit it.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from invoica_webhooks.api.dependencies import get_registration_service
from invoica_webhooks.notifications.registrations import (
    RegistrationRequest,
    RegistrationService,
)

router = APIRouter(tags=["webhooks"])

Service = Annotated[RegistrationService, Depends(get_registration_service)]


class ActivationRequest(BaseModel):
    """Request body for enabling or disabling a registration."""

    active: bool


@router.post("/webhooks", status_code=201)
async def register_webhook(body: RegistrationRequest, service: Service) -> dict[str, Any]:
    """Register a webhook endpoint."""
    registration = await service.register(body)
    return registration.to_dict()


@router.get("/webhooks")
async def list_webhooks(service: Service) -> dict[str, Any]:
    """List all registrations (secrets omitted)."""
    registrations = await service.list()
    return {
        "webhooks": [r.to_dict(include_secret=False) for r in registrations],
        "total": len(registrations),
    }


@router.get("/webhooks/{registration_id}")
async def get_webhook(registration_id: str, service: Service) -> dict[str, Any]:
    """Return a single registration (secret omitted)."""
    registration = await service.get(registration_id)
    return registration.to_dict(include_secret=False)


@router.patch("/webhooks/{registration_id}")
async def set_webhook_active(
    registration_id: str, body: ActivationRequest, service: Service
) -> dict[str, Any]:
    """Activate or deactivate a registration."""
    registration = await service.set_active(registration_id, body.active)
    return registration.to_dict(include_secret=False)


@router.delete("/webhooks/{registration_id}", status_code=204)
async def delete_webhook(registration_id: str, service: Service) -> Response:
    """Delete a registration."""
    await service.unregister(registration_id)
    return Response(status_code=204)
