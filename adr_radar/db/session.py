"""Async Engine Factory — one place that builds engines for app, migrations and tests.

Invariants:
    - Used by DatabaseSessionManager and test fixtures alike
    - SQLite connections get foreign_keys=ON

Design Decisions:
    - Separate from infrastructure/database.py: fixtures need an engine without
      the session manager around it
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine


def create_engine_for(
    database_url: str, echo: bool = False, **engine_kwargs,
) -> AsyncEngine:
    """Create an async engine; SQLite URLs get the pragma hook."""
    engine = create_async_engine(database_url, echo=echo, **engine_kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _sqlite_pragmas)
    return engine


def _sqlite_pragmas(dbapi_connection, _record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()
