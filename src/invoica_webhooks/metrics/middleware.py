"""Prometheus request metrics for the webhook API.

Tracks:
- ``http_request_total`` (counter) by method, route, status
- ``http_request_duration_seconds`` (histogram) by method, route

Paths are labelled with the route template (``/v1/webhooks/{registration_id}``)
so registration ids never become label values. The scrape endpoint itself
is not counted.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from prometheus_client import Counter, Histogram

if TYPE_CHECKING:
    from collections.abc import Iterable

    from prometheus_client import CollectorRegistry
    from starlette.types import ASGIApp, Message, Receive, Scope, Send

_APP_LABEL = "invoica-webhooks"


class PrometheusMiddleware:
    """ASGI middleware recording request count and duration per route."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        registry: CollectorRegistry,
        exclude_paths: Iterable[str] = ("/metrics",),
    ) -> None:
        self.app = app
        self._exclude = frozenset(exclude_paths)
        self._requests = Counter(
            "http_request_total",
            "Total HTTP requests",
            ("method", "path", "status_code", "app"),
            registry=registry,
        )
        self._duration = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ("method", "path", "app"),
            registry=registry,
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["path"] in self._exclude:
            await self.app(scope, receive, send)
            return

        status_code = 500
        start = time.monotonic()

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            duration = time.monotonic() - start
            route = scope.get("route")
            path = getattr(route, "path", scope["path"])
            self._requests.labels(
                method=scope["method"], path=path, status_code=str(status_code), app=_APP_LABEL
            ).inc()
            self._duration.labels(method=scope["method"], path=path, app=_APP_LABEL).observe(
                duration
            )
