"""Async SQLAlchemy engine for the registration store.

The DSN must name an async driver. An in-memory SQLite database lives
only as long as its connection, so it gets a single shared connection.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

if TYPE_CHECKING:
    from sqlalchemy.engine import URL

    from invoica_webhooks.config.settings import DatabaseConfig

ASYNC_DRIVERS = frozenset({"aiosqlite", "asyncpg", "psycopg", "aiomysql", "asyncmy"})


def is_memory_sqlite(url: URL) -> bool:
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


def create_engine(config: DatabaseConfig) -> AsyncEngine:
    """Build the engine for *config.dsn*.

    Raises:
        ValueError: If the DSN names a synchronous (or no) driver.
    """
    url = make_url(config.dsn)
    driver = url.get_driver_name()
    if driver not in ASYNC_DRIVERS:
        msg = (
            f"database DSN must use an async driver ({', '.join(sorted(ASYNC_DRIVERS))}), "
            f"got {url.drivername!r}"
        )
        raise ValueError(msg)

    kwargs: dict[str, Any] = {"echo": config.debug_sql}
    if is_memory_sqlite(url):
        kwargs["poolclass"] = StaticPool
    elif url.get_backend_name() != "sqlite":
        kwargs["pool_size"] = config.max_idle_connections
        kwargs["max_overflow"] = config.max_open_connections - config.max_idle_connections
        kwargs["pool_pre_ping"] = True

    return create_async_engine(url, **kwargs)
