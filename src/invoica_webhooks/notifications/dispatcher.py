"""Webhook delivery — signed POSTs to every matching registration.

For each event the body is serialized once, signed per registration with
that registration's secret, and sent with the ``X-Invoica-*`` headers.
Deliveries run concurrently and fail independently: a slow, erroring or
unreachable endpoint never affects its siblings and never raises to the
producer.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Self

import httpx

from invoica_webhooks.config.settings import DeliveryConfig
from invoica_webhooks.errors.webhook_errors import DeliveryError
from invoica_webhooks.notifications.signing import (
    EVENT_HEADER,
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
    generate_signature,
)

if TYPE_CHECKING:
    from invoica_webhooks.metrics.collector import DeliveryMetrics
    from invoica_webhooks.notifications.events import WebhookEvent
    from invoica_webhooks.notifications.registrations import (
        RegistrationStore,
        WebhookRegistration,
    )

logger = logging.getLogger(__name__)

_RETRYABLE_STATUSES = frozenset({408, 429})


@dataclass(frozen=True)
class RetryPolicy:
    """How many times, and how long apart, a failed delivery is re-sent."""

    max_retries: int = 2
    backoff: float = 1.0
    backoff_max: float = 30.0

    @classmethod
    def from_config(cls, config: DeliveryConfig) -> Self:
        return cls(
            max_retries=config.max_retries,
            backoff=config.retry_backoff,
            backoff_max=config.retry_backoff_max,
        )

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay(self, attempt: int) -> float:
        """Seconds to wait after failed *attempt* (1-based)."""
        return min(self.backoff * 2 ** (attempt - 1), self.backoff_max)

    @staticmethod
    def is_retryable_status(status_code: int) -> bool:
        return status_code >= 500 or status_code in _RETRYABLE_STATUSES


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of delivering one event to one registration.

    Lives only for the duration of a dispatch call; nothing is persisted.
    """

    registration_id: str
    url: str
    event_id: str
    event_type: str
    signature: str
    success: bool
    status_code: int = 0  # 0 when no HTTP response was received
    retryable: bool = False
    attempts: int = 1
    error: str | None = None

    def raise_for_failure(self) -> None:
        """Raise :class:`DeliveryError` if this delivery failed."""
        if not self.success:
            raise DeliveryError(self)


class WebhookDispatcher:
    """Delivers events to the registrations that subscribe to them.

    Usage::

        async with WebhookDispatcher(store) as dispatcher:
            results = await dispatcher.dispatch(event)

    An ``httpx.AsyncClient`` may be injected (tests, shared pools); otherwise
    :meth:`start` creates one and :meth:`stop` closes it.
    """

    def __init__(
        self,
        store: RegistrationStore,
        *,
        client: httpx.AsyncClient | None = None,
        config: DeliveryConfig | None = None,
        retry: RetryPolicy | None = None,
        metrics: DeliveryMetrics | None = None,
    ) -> None:
        self._store = store
        self._config = config or DeliveryConfig()
        self._retry = retry or RetryPolicy.from_config(self._config)
        self._metrics = metrics
        self._client = client
        self._owns_client = client is None
        self._semaphore = asyncio.Semaphore(self._config.max_concurrency)
        self._pending: set[asyncio.Task[list[DeliveryResult]]] = set()

    async def __aenter__(self) -> Self:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    @property
    def is_running(self) -> bool:
        """Whether an HTTP client is available for deliveries."""
        return self._client is not None

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry

    async def start(self) -> None:
        """Create the pooled HTTP client if none was injected."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._config.timeout,
                headers={"User-Agent": self._config.user_agent},
            )
            self._owns_client = True

    async def stop(self) -> None:
        """Wait for background dispatches, then close an owned client."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def cancel(self) -> None:
        """Cancel background dispatches still in flight.

        Deliveries that already completed are not affected; only requests not
        yet answered are abandoned.
        """
        tasks = list(self._pending)
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def publish(self, event: WebhookEvent) -> asyncio.Task[list[DeliveryResult]]:
        """Schedule :meth:`dispatch` in the background and return its task.

        Must be called from within a running event loop. A dispatch that raises is
        logged at ERROR instead of being lost with the task.
        """
        task = asyncio.create_task(self.dispatch(event), name=f"webhook-dispatch-{event.id}")
        self._pending.add(task)
        task.add_done_callback(self._on_publish_done)
        return task

    def _on_publish_done(self, task: asyncio.Task[list[DeliveryResult]]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Background webhook dispatch %s failed", task.get_name(), exc_info=exc)

    async def dispatch(self, event: WebhookEvent) -> list[DeliveryResult]:
        """Deliver *event* to every active registration subscribed to its type.

        Returns one :class:`DeliveryResult` per matching registration. Delivery
        failures are reported in the results and logged; they never raise.

        Raises:
            RuntimeError: If the dispatcher has no HTTP client.
        """
        client = self._client
        if client is None:
            msg = "WebhookDispatcher is not started. Call start() first."
            raise RuntimeError(msg)

        body = event.to_json()
        registrations = await self._store.find_active(event.type)
        if not registrations:
            logger.debug("No webhook registrations for %s", event.type)
            return []

        results = await asyncio.gather(
            *(self._deliver(client, event, body, registration) for registration in registrations)
        )
        failed = sum(1 for r in results if not r.success)
        if failed:
            logger.warning(
                "Event %s (%s): %d of %d webhook deliveries failed",
                event.id,
                event.type,
                failed,
                len(results),
            )
        return list(results)

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def _build_headers(self, event: WebhookEvent, signature: str) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            SIGNATURE_HEADER: signature,
            EVENT_HEADER: event.type,
            TIMESTAMP_HEADER: str(event.timestamp),
        }

    async def _deliver(
        self,
        client: httpx.AsyncClient,
        event: WebhookEvent,
        body: str,
        registration: WebhookRegistration,
    ) -> DeliveryResult:
        signature = generate_signature(body, registration.secret)
        headers = self._build_headers(event, signature)
        content = body.encode("utf-8")

        if self._metrics is None:
            return await self._send_with_retries(
                client, event, registration, signature, headers, content
            )
        with self._metrics.track_delivery(event.type):
            result = await self._send_with_retries(
                client, event, registration, signature, headers, content
            )
        self._metrics.record_outcome(event.type, success=result.success)
        return result

    async def _send_once(
        self,
        client: httpx.AsyncClient,
        url: str,
        headers: dict[str, str],
        content: bytes,
    ) -> httpx.Response:
        """One POST with its body read, bounded by the configured timeout.

        The deadline also applies to transports that never answer.
        """
        async with asyncio.timeout(self._config.timeout):
            request = client.build_request(
                "POST", url, content=content, headers=headers, timeout=self._config.timeout
            )
            return await client.send(request)

    async def _send_with_retries(
        self,
        client: httpx.AsyncClient,
        event: WebhookEvent,
        registration: WebhookRegistration,
        signature: str,
        headers: dict[str, str],
        content: bytes,
    ) -> DeliveryResult:
        status_code = 0
        error: str | None = None
        retryable = False
        attempt = 0

        for attempt in range(1, self._retry.max_attempts + 1):
            if self._metrics is not None:
                self._metrics.record_attempt(event.type)
            try:
                async with self._semaphore:
                    response = await self._send_once(client, registration.url, headers, content)
            except TimeoutError:
                status_code = 0
                error = f"Timeout: no response within {self._config.timeout}s"
                retryable = True
                logger.warning(
                    "Webhook %s (%s) timed out (attempt %d/%d)",
                    registration.id,
                    registration.url,
                    attempt,
                    self._retry.max_attempts,
                )
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                status_code = 0
                error = f"{type(exc).__name__}: {exc}" if str(exc) else type(exc).__name__
                retryable = True
                logger.warning(
                    "Webhook %s (%s) error: %s (attempt %d/%d)",
                    registration.id,
                    registration.url,
                    error,
                    attempt,
                    self._retry.max_attempts,
                )
            else:
                status_code = response.status_code
                await response.aclose()
                if response.is_success:
                    logger.debug(
                        "Webhook %s delivered %s to %s (%d)",
                        registration.id,
                        event.type,
                        registration.url,
                        status_code,
                    )
                    return DeliveryResult(
                        registration_id=registration.id,
                        url=registration.url,
                        event_id=event.id,
                        event_type=event.type,
                        signature=signature,
                        success=True,
                        status_code=status_code,
                        attempts=attempt,
                    )
                error = f"HTTP {status_code}"
                retryable = self._retry.is_retryable_status(status_code)
                logger.warning(
                    "Webhook %s (%s) returned %d (attempt %d/%d)",
                    registration.id,
                    registration.url,
                    status_code,
                    attempt,
                    self._retry.max_attempts,
                )

            if not retryable or attempt >= self._retry.max_attempts:
                break
            await asyncio.sleep(self._retry.delay(attempt))

        if retryable and self._retry.max_retries:
            logger.warning(
                "Webhook %s (%s) giving up on %s after %d attempts",
                registration.id,
                registration.url,
                event.id,
                attempt,
            )
        return DeliveryResult(
            registration_id=registration.id,
            url=registration.url,
            event_id=event.id,
            event_type=event.type,
            signature=signature,
            success=False,
            status_code=status_code,
            retryable=retryable,
            attempts=attempt,
            error=error,
        )

