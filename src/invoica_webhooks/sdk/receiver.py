"""FastAPI dependency for endpoints that receive Invoica webhooks.

Usage::

    receiver = WebhookReceiver(secret=settings.webhook_secret)

    @app.post("/webhooks/invoica")
    async def handle(event: Annotated[WebhookEvent, Depends(receiver)]) -> dict[str, bool]:
        ...
        return {"received": True}
"""

import logging

from fastapi import HTTPException, Request

from invoica_webhooks.errors.webhook_errors import PayloadParseError, WebhookVerificationError
from invoica_webhooks.notifications.events import WebhookEvent
from invoica_webhooks.notifications.signing import SIGNATURE_HEADER
from invoica_webhooks.sdk.verifier import construct_event

logger = logging.getLogger(__name__)


class WebhookReceiver:
    """Callable dependency returning the verified event of the current request.

    Signature failures become 401 responses, malformed payloads 400.
    """

    def __init__(self, secret: str, *, header: str = SIGNATURE_HEADER) -> None:
        self._secret = secret
        self._header = header

    async def __call__(self, request: Request) -> WebhookEvent:
        raw = await request.body()
        try:
            return construct_event(raw, request.headers.get(self._header), self._secret)
        except WebhookVerificationError as exc:
            logger.warning("Rejected webhook from %s: %s", _client_host(request), exc.message)
            raise HTTPException(
                status_code=exc.status_code, detail={"code": exc.code, "message": exc.message}
            ) from exc
        except PayloadParseError as exc:
            raise HTTPException(
                status_code=exc.status_code, detail={"code": exc.code, "message": exc.message}
            ) from exc


def _client_host(request: Request) -> str:
    if request.client:
        return request.client.host
    return "unknown"
