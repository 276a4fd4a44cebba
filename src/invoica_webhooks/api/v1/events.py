"""V1 event emission endpoint.

In-process producers can use the dispatcher directly; this route lets
other services emit an event over HTTP. Delivery runs in the background,
so the response only acknowledges that the event was accepted.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from invoica_webhooks.api.dependencies import get_dispatcher
from invoica_webhooks.notifications.dispatcher import WebhookDispatcher
from invoica_webhooks.notifications.events import WebhookEvent

router = APIRouter(tags=["events"])


class EmitEventRequest(BaseModel):
    """Request body for emitting an event."""

    type: str
    payload: dict[str, Any] = Field(default_factory=dict)


@router.post("/events", status_code=202)
async def emit_event(
    body: EmitEventRequest,
    dispatcher: Annotated[WebhookDispatcher, Depends(get_dispatcher)],
) -> dict[str, Any]:
    """Queue an event for delivery to every subscribed registration."""
    event = WebhookEvent.create(body.type, body.payload)
    dispatcher.publish(event)
    return {"id": event.id, "type": event.type, "timestamp": event.timestamp}
