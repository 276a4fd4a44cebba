"""Webhook registrations — validation, model and stores.

The dispatcher depends only on :meth:`RegistrationStore.find_active`; the
remaining store methods back the registration CRUD endpoints.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any, Protocol, Self, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from invoica_webhooks.errors.definitions import (
    ErrInvalidURL,
    ErrNoEvents,
    ErrRegistrationNotFound,
    ErrSecretLength,
    ErrUnknownEventType,
)
from invoica_webhooks.errors.webhook_errors import WebhookError
from invoica_webhooks.notifications.events import EventType
from invoica_webhooks.notifications.signing import generate_webhook_secret

logger = logging.getLogger(__name__)

SECRET_MIN_LENGTH = 16
SECRET_MAX_LENGTH = 64

_EVENT_TYPES = frozenset(e.value for e in EventType)
_KNOWN_ERRORS = {e.code: e for e in (ErrNoEvents, ErrUnknownEventType, ErrSecretLength)}


def _custom_error(err: WebhookError, detail: str = "") -> PydanticCustomError:
    message = f"{err.message}: {detail}" if detail else err.message
    return PydanticCustomError(err.code, "{message}", {"message": message})


# ---------------------------------------------------------------------------
# Request validation
# ---------------------------------------------------------------------------


class RegistrationRequest(BaseModel):
    """Validated input for creating a webhook registration."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    url: HttpUrl = Field(description="Absolute http(s) endpoint receiving deliveries")
    events: list[str]
    secret: str | None = None

    @field_validator("events")
    @classmethod
    def _check_events(cls, value: list[str]) -> list[str]:
        if not value:
            raise _custom_error(ErrNoEvents)
        seen: list[str] = []
        for item in value:
            if item not in _EVENT_TYPES:
                raise _custom_error(ErrUnknownEventType, repr(item))
            if item not in seen:
                seen.append(item)
        return seen

    @field_validator("secret")
    @classmethod
    def _check_secret(cls, value: str | None) -> str | None:
        if value is not None and not SECRET_MIN_LENGTH <= len(value) <= SECRET_MAX_LENGTH:
            raise _custom_error(ErrSecretLength)
        return value

    @classmethod
    def parse(cls, data: Any) -> Self:
        """Validate raw input, converting failures into a 400 ``WebhookError``."""
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise validation_error(exc.errors()) from None


def validation_error(errors: Sequence[Any]) -> WebhookError:
    """Convert pydantic error dicts into a single 400 ``WebhookError``.

    Registration rule violations keep their own code, pydantic ``url_*``
    failures become ``invalid-url``; anything else (missing field, wrong
    type) becomes ``validation-error``.
    """
    if not errors:
        return WebhookError("invalid request", status_code=400, code="validation-error")
    first = errors[0]
    if first["type"].startswith("url_"):
        return WebhookError(
            f"{ErrInvalidURL.message}: {first['msg']}",
            status_code=ErrInvalidURL.status_code,
            code=ErrInvalidURL.code,
        )
    known = _KNOWN_ERRORS.get(first["type"])
    if known is not None:
        return WebhookError(first["msg"], status_code=400, code=known.code)
    field_name = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"{field_name}: {first['msg']}" if field_name else first["msg"]
    return WebhookError(message, status_code=400, code="validation-error")


# ---------------------------------------------------------------------------
# Registration model
# ---------------------------------------------------------------------------


def new_registration_id() -> str:
    """Collision-resistant registration identifier."""
    return f"wh_{uuid.uuid4().hex}"


@dataclass(frozen=True)
class WebhookRegistration:
    """An endpoint subscribed to one or more event types."""

    url: str
    events: tuple[str, ...]
    secret: str
    id: str = field(default_factory=new_registration_id)
    active: bool = True
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_request(cls, request: RegistrationRequest) -> Self:
        """Create a new active registration, generating a secret if none was given."""
        return cls(
            url=str(request.url),
            events=tuple(request.events),
            secret=request.secret or generate_webhook_secret(),
        )

    def subscribes_to(self, event_type: str) -> bool:
        """Whether this registration should receive *event_type*."""
        return self.active and event_type in self.events

    def to_dict(self, *, include_secret: bool = True) -> dict[str, Any]:
        """Render the public registration shape."""
        data: dict[str, Any] = {
            "id": self.id,
            "url": self.url,
            "events": list(self.events),
        }
        if include_secret:
            data["secret"] = self.secret
        data["active"] = self.active
        data["createdAt"] = self.created_at.isoformat()
        return data

    def __repr__(self) -> str:
        return f"<WebhookRegistration id={self.id} url={self.url[:30]} active={self.active}>"


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------


@runtime_checkable
class RegistrationStore(Protocol):
    """Persistence boundary for webhook registrations."""

    async def find_active(self, event_type: str) -> list[WebhookRegistration]:
        """Active registrations subscribed to *event_type*."""
        ...

    async def add(self, registration: WebhookRegistration) -> None: ...

    async def get(self, registration_id: str) -> WebhookRegistration | None: ...

    async def list(self) -> list[WebhookRegistration]: ...

    async def remove(self, registration_id: str) -> bool: ...

    async def set_active(
        self, registration_id: str, active: bool
    ) -> WebhookRegistration | None: ...


class InMemoryRegistrationStore:
    """Dict-backed store for tests and single-process deployments.

    Writers hold a lock; readers work on a snapshot of the values, so
    concurrent ``find_active`` calls never observe a half-applied write.
    """

    def __init__(self, registrations: list[WebhookRegistration] | None = None) -> None:
        self._items: dict[str, WebhookRegistration] = {r.id: r for r in registrations or []}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._items)

    async def find_active(self, event_type: str) -> list[WebhookRegistration]:
        return [r for r in list(self._items.values()) if r.subscribes_to(event_type)]

    async def add(self, registration: WebhookRegistration) -> None:
        async with self._lock:
            self._items[registration.id] = registration

    async def get(self, registration_id: str) -> WebhookRegistration | None:
        return self._items.get(registration_id)

    async def list(self) -> list[WebhookRegistration]:
        return sorted(self._items.values(), key=lambda r: r.created_at)

    async def remove(self, registration_id: str) -> bool:
        async with self._lock:
            return self._items.pop(registration_id, None) is not None

    async def set_active(self, registration_id: str, active: bool) -> WebhookRegistration | None:
        async with self._lock:
            current = self._items.get(registration_id)
            if current is None:
                return None
            updated = replace(current, active=active)
            self._items[registration_id] = updated
            return updated


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class RegistrationService:
    """Create, look up and delete registrations on top of a store."""

    def __init__(self, store: RegistrationStore) -> None:
        self._store = store

    @property
    def store(self) -> RegistrationStore:
        return self._store

    async def register(self, data: RegistrationRequest | dict[str, Any]) -> WebhookRegistration:
        """Validate *data* and persist a new active registration.

        Raises:
            WebhookError: 400 on invalid URL, events or secret.
        """
        request = data if isinstance(data, RegistrationRequest) else RegistrationRequest.parse(data)
        registration = WebhookRegistration.from_request(request)
        await self._store.add(registration)
        logger.info(
            "Webhook registered: %s -> %s (%s)",
            registration.id,
            registration.url,
            ", ".join(registration.events),
        )
        return registration

    async def get(self, registration_id: str) -> WebhookRegistration:
        """Return a registration or raise ``registration-not-found``."""
        registration = await self._store.get(registration_id)
        if registration is None:
            raise ErrRegistrationNotFound
        return registration

    async def list(self) -> list[WebhookRegistration]:
        return await self._store.list()

    async def unregister(self, registration_id: str) -> None:
        """Delete a registration.

        Raises:
            WebhookError: 404 if it does not exist.
        """
        if not await self._store.remove(registration_id):
            raise ErrRegistrationNotFound
        logger.info("Webhook unregistered: %s", registration_id)

    async def set_active(self, registration_id: str, active: bool) -> WebhookRegistration:
        """Toggle whether a registration receives deliveries."""
        registration = await self._store.set_active(registration_id, active)
        if registration is None:
            raise ErrRegistrationNotFound
        logger.info("Webhook %s %s", registration_id, "activated" if active else "deactivated")
        return registration
