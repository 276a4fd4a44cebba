"""ORM models for durable webhook registrations."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import JSON, Boolean, DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from invoica_webhooks.notifications.registrations import WebhookRegistration


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all models."""


class RegistrationRow(Base):
    """A persisted webhook registration."""

    __tablename__ = "webhook_registrations"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, comment="Registration ID")
    url: Mapped[str] = mapped_column(Text, nullable=False, comment="Delivery URL")
    events: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, comment="Subscribed event types"
    )
    secret: Mapped[str] = mapped_column(String(64), nullable=False, comment="HMAC secret")
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    @classmethod
    def from_registration(cls, registration: WebhookRegistration) -> RegistrationRow:
        return cls(
            id=registration.id,
            url=registration.url,
            events=list(registration.events),
            secret=registration.secret,
            active=registration.active,
            created_at=registration.created_at,
        )

    def to_registration(self) -> WebhookRegistration:
        created_at = self.created_at
        # SQLite drops tzinfo on the way back
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=UTC)
        return WebhookRegistration(
            id=self.id,
            url=self.url,
            events=tuple(self.events),
            secret=self.secret,
            active=self.active,
            created_at=created_at,
        )

    def __repr__(self) -> str:
        return f"<RegistrationRow id={self.id} url={self.url[:30]}>"
