"""SQL-backed :class:`RegistrationStore`."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import delete, select

from invoica_webhooks.datastore.models import RegistrationRow

if TYPE_CHECKING:
    from invoica_webhooks.datastore.client import Datastore
    from invoica_webhooks.notifications.registrations import WebhookRegistration


class SQLRegistrationStore:
    """Registration store over the ``webhook_registrations`` table.

    Each call runs in its own session, so concurrent readers never share
    session state. Writes go through :meth:`Datastore.transaction`.
    """

    def __init__(self, datastore: Datastore) -> None:
        self._datastore = datastore

    async def find_active(self, event_type: str) -> list[WebhookRegistration]:
        stmt = select(RegistrationRow).where(RegistrationRow.active.is_(True))
        async with self._datastore.session() as session:
            rows = (await session.scalars(stmt)).all()
        # JSON containment differs per dialect; filter the (small) active set here.
        return [row.to_registration() for row in rows if event_type in row.events]

    async def add(self, registration: WebhookRegistration) -> None:
        async with self._datastore.transaction() as session:
            session.add(RegistrationRow.from_registration(registration))

    async def get(self, registration_id: str) -> WebhookRegistration | None:
        async with self._datastore.session() as session:
            row = await session.get(RegistrationRow, registration_id)
        return row.to_registration() if row is not None else None

    async def list(self) -> list[WebhookRegistration]:
        stmt = select(RegistrationRow).order_by(RegistrationRow.created_at)
        async with self._datastore.session() as session:
            rows = (await session.scalars(stmt)).all()
        return [row.to_registration() for row in rows]

    async def remove(self, registration_id: str) -> bool:
        stmt = delete(RegistrationRow).where(RegistrationRow.id == registration_id)
        async with self._datastore.transaction() as session:
            result = await session.execute(stmt)
        return bool(result.rowcount)

    async def set_active(self, registration_id: str, active: bool) -> WebhookRegistration | None:
        async with self._datastore.transaction() as session:
            row = await session.get(RegistrationRow, registration_id)
            if row is None:
                return None
            row.active = active
        return row.to_registration()
