"""Datastore — async SQLAlchemy persistence for registrations."""

from __future__ import annotations

from invoica_webhooks.datastore.client import Datastore
from invoica_webhooks.datastore.models import Base, RegistrationRow
from invoica_webhooks.datastore.store import SQLRegistrationStore

__all__ = ["Base", "Datastore", "RegistrationRow", "SQLRegistrationStore"]
