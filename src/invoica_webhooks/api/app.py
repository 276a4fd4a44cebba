"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest
from starlette.responses import Response

from invoica_webhooks import __version__
from invoica_webhooks.api.v1 import v1_router
from invoica_webhooks.config.settings import AppConfig
from invoica_webhooks.datastore.client import Datastore
from invoica_webhooks.datastore.models import Base
from invoica_webhooks.datastore.store import SQLRegistrationStore
from invoica_webhooks.errors.webhook_errors import WebhookError
from invoica_webhooks.metrics.collector import DeliveryMetrics
from invoica_webhooks.metrics.middleware import PrometheusMiddleware
from invoica_webhooks.notifications.dispatcher import WebhookDispatcher
from invoica_webhooks.notifications.registrations import (
    RegistrationService,
    RegistrationStore,
    validation_error,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle hooks.

    Opens the registration datastore (unless a store was injected) and
    starts the dispatcher; on exit waits for in-flight deliveries and
    releases connections.
    """
    config: AppConfig = app.state.config
    store: RegistrationStore | None = app.state.store
    datastore: Datastore | None = None

    if store is None:
        datastore = Datastore(config.db, base=Base)
        await datastore.open()
        store = SQLRegistrationStore(datastore)

    dispatcher: WebhookDispatcher | None = app.state.dispatcher
    if dispatcher is None:
        dispatcher = WebhookDispatcher(
            store,
            config=config.delivery,
            metrics=app.state.metrics,
        )
        app.state.dispatcher = dispatcher

    app.state.registrations = RegistrationService(store)
    try:
        await dispatcher.start()
        logger.info("Webhook dispatcher started")
        yield
    finally:
        await dispatcher.stop()
        if datastore is not None:
            await datastore.close()
        logger.info("Webhook service shut down")


def create_app(
    *,
    config: AppConfig | None = None,
    store: RegistrationStore | None = None,
    dispatcher: WebhookDispatcher | None = None,
) -> FastAPI:
    """Build and return the FastAPI application.

    Args:
        config: Optional AppConfig. If *None*, a default config is created
            from environment variables.
        store: Registration store to use instead of the SQL datastore.
        dispatcher: Pre-built dispatcher, e.g. one with a mock HTTP client.
    """
    if config is None:
        config = AppConfig()

    app = FastAPI(
        title="invoica-webhooks",
        version=__version__,
        description="Webhook registration and signed event delivery",
        lifespan=_lifespan,
    )

    app.state.config = config
    app.state.store = store
    app.state.dispatcher = dispatcher
    app.state.metrics = DeliveryMetrics() if config.metrics.enabled else None

    # -- Error handlers --
    @app.exception_handler(WebhookError)
    async def _webhook_error_handler(request: Request, exc: WebhookError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"code": exc.code, "message": exc.message},
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        err = validation_error(exc.errors())
        return JSONResponse(
            status_code=err.status_code,
            content={"code": err.code, "message": err.message},
        )

    # -- Base routes --
    @app.get("/health", tags=["base"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/metrics", tags=["base"], include_in_schema=False)
    async def metrics_endpoint() -> Response:
        """Prometheus metrics endpoint."""
        metrics: DeliveryMetrics | None = app.state.metrics
        body = generate_latest(metrics.registry) if metrics is not None else b""
        return Response(
            content=body,
            media_type="text/plain; version=0.0.4; charset=utf-8",
        )

    if app.state.metrics is not None:
        app.add_middleware(PrometheusMiddleware, registry=app.state.metrics.registry)

    app.include_router(v1_router)

    return app
