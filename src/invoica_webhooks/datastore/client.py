"""Registration database handle: one engine, short-lived sessions."""

from __future__ import annotations

import contextlib
import logging
from typing import TYPE_CHECKING, Self

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from invoica_webhooks.datastore.engines import create_engine

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from sqlalchemy.orm import DeclarativeBase

    from invoica_webhooks.config.settings import DatabaseConfig

logger = logging.getLogger(__name__)

_NOT_OPEN = "Datastore is not open. Call open() first."


class Datastore:
    """Owns the engine backing :class:`SQLRegistrationStore`.

    Usage::

        async with Datastore(db_config) as ds:
            async with ds.transaction() as session:
                session.add(row)

    Reads use :meth:`session`; writes use :meth:`transaction`, which commits
    on success and rolls back if the block raises.
    """

    def __init__(self, config: DatabaseConfig, *, base: type[DeclarativeBase] | None = None):
        self._config = config
        self._base = base
        self._engine: AsyncEngine | None = None
        self._sessions: async_sessionmaker[AsyncSession] | None = None

    async def __aenter__(self) -> Self:
        await self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> AsyncEngine:
        """The live engine.

        Raises:
            RuntimeError: If the datastore is not open.
        """
        if self._engine is None:
            raise RuntimeError(_NOT_OPEN)
        return self._engine

    async def open(self, *, base: type[DeclarativeBase] | None = None) -> None:
        """Create the engine, then the tables of *base* if one is known.

        Calling ``open`` on an open datastore does nothing.
        """
        if self._engine is not None:
            return
        engine = create_engine(self._config)
        tables = base or self._base
        if tables is not None:
            try:
                async with engine.begin() as conn:
                    await conn.run_sync(tables.metadata.create_all)
            except Exception:
                await engine.dispose()
                raise
        self._engine = engine
        self._sessions = async_sessionmaker(engine, expire_on_commit=False)
        logger.info("Datastore opened (%s)", engine.url.render_as_string(hide_password=True))

    async def close(self) -> None:
        """Dispose the engine; safe to call more than once."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessions = None
        logger.info("Datastore closed")

    def session(self) -> AsyncSession:
        """A fresh session, to be used as an async context manager.

        Raises:
            RuntimeError: If the datastore is not open.
        """
        if self._sessions is None:
            raise RuntimeError(_NOT_OPEN)
        return self._sessions()

    @contextlib.asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Session wrapped in a transaction committed when the block exits."""
        async with self.session() as session, session.begin():
            yield session
