"""Database Session Manager — async engine, sessions with automatic rollback, schema bootstrap.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - All SQLAlchemy exceptions escaping a session are mapped to DatabaseError
    - RadarError raised inside a session passes through unchanged (callers translate
      IntegrityError into DuplicateNameError/DuplicateAdrError themselves)
    - ensure_schema() only ever adds tables and nullable columns
    - open_database() is the one way entry points open the index: the TUI, the
      headless command and the API all land on the same file

Design Decisions:
    - Singleton db_manager initialized on startup (CLI or FastAPI lifespan), no
      global import side effects
    - expire_on_commit=False: rows are converted to records after commit
    - ensure_schema() next to alembic: a fresh local database works without running
      migrations, and older databases gain the additive columns
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import inspect, select, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from adr_radar.config import Settings, database_url_for
from adr_radar.core.errors import DatabaseError
from adr_radar.db.base import Base
from adr_radar.db.session import create_engine_for
import adr_radar.models  # noqa: F401
from adr_radar.models.app_setting import AppSetting

logger = logging.getLogger(__name__)

# (table, column, DDL) for columns added after the first release
ADDITIVE_COLUMNS: tuple[tuple[str, str, str], ...] = (
    ("adr_log", "blip_name",
     "ALTER TABLE adr_log ADD COLUMN blip_name TEXT NOT NULL DEFAULT ''"),
    ("adr_log", "status",
     "ALTER TABLE adr_log ADD COLUMN status VARCHAR(32) NOT NULL DEFAULT 'proposed'"),
    ("adr_log", "quadrant", "ALTER TABLE adr_log ADD COLUMN quadrant VARCHAR(20)"),
    ("adr_log", "ring", "ALTER TABLE adr_log ADD COLUMN ring VARCHAR(20)"),
    ("blip", "adr_id", "ALTER TABLE blip ADD COLUMN adr_id INTEGER"),
)


class DatabaseSessionManager:
    """Manages async database sessions with rollback and health checks."""

    def __init__(
        self, database_url: str | None = None, engine: AsyncEngine | None = None,
    ):
        if engine is None:
            if not database_url:
                raise ValueError("database_url or engine is required")
            engine = create_engine_for(database_url)
        self.engine = engine
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            yield session
        except IntegrityError as e:
            await session.rollback()
            logger.error(f"DB integrity error: {e}")
            raise DatabaseError("Integrity constraint violated", "commit")
        except OperationalError as e:
            await session.rollback()
            logger.error(f"DB operational error: {e}")
            raise DatabaseError("Connection or operational error", "execute")
        except DBAPIError as e:
            await session.rollback()
            logger.error(f"DB driver error: {e}")
            raise DatabaseError("Database driver error", "query")
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"SQLAlchemy error: {e}")
            raise DatabaseError("Database operation failed", "unknown")
        except BaseException:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def ensure_schema(self) -> None:
        """Create missing tables, then add missing additive columns."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            added = await conn.run_sync(_add_missing_columns)
        for table, column in added:
            logger.info(f"Added column {table}.{column}")

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


def _add_missing_columns(conn: Connection) -> list[tuple[str, str]]:
    inspector = inspect(conn)
    added = []
    for table, column, ddl in ADDITIVE_COLUMNS:
        existing = {c["name"] for c in inspector.get_columns(table)}
        if column not in existing:
            conn.execute(text(ddl))
            added.append((table, column))
    return added


# Singleton (initialized on startup)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url)
    return db_manager


def get_db_manager() -> DatabaseSessionManager:
    """FastAPI dependency for the session manager."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    return db_manager


async def open_database(settings: Settings) -> DatabaseSessionManager:
    """Initialize the singleton, bootstrap the schema, follow a saved DATABASE_NAME."""
    manager = init_db(settings.database_url)
    await manager.ensure_schema()
    if not settings.follow_database_name:
        return manager
    async with manager.session() as db:
        name = await db.scalar(
            select(AppSetting.value).where(AppSetting.key == "DATABASE_NAME")
        )
    if name and database_url_for(name) != settings.database_url:
        logger.info(f"Following saved DATABASE_NAME to {name}")
        await manager.dispose()
        manager = init_db(database_url_for(name))
        await manager.ensure_schema()
    return manager
