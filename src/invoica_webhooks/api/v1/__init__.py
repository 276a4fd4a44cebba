"""V1 REST API routes.

Combines all sub-routers under the ``/v1`` prefix.
"""

from fastapi import APIRouter

from invoica_webhooks.api.v1.events import router as events_router
from invoica_webhooks.api.v1.webhooks import router as webhooks_router

v1_router = APIRouter(prefix="/v1")

v1_router.include_router(webhooks_router)
v1_router.include_router(events_router)

__all__ = ["v1_router"]
