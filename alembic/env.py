"""Alembic environment — runs adr-radar migrations against the SQLite index.

The URL comes from `ADR_RADAR_DATABASE_URL`, the variable the application
reads, so both point at one file; alembic.ini is the fallback.

Design Decisions:
    - render_as_batch on both paths: SQLite rewrites tables for most ALTERs
    - NullPool: a migration run opens exactly one connection
    - Every model imported through adr_radar.models so autogenerate sees all tables
"""

import asyncio
import os
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from alembic import context

import adr_radar.models  # noqa: F401
from adr_radar.config import async_sqlite_url
from adr_radar.db.base import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

MIGRATION_OPTIONS = {"render_as_batch": True, "compare_type": True}


def database_url() -> str:
    configured = os.environ.get("ADR_RADAR_DATABASE_URL")
    return async_sqlite_url(configured or config.get_main_option("sqlalchemy.url"))


def _migrate(connection: Connection) -> None:
    context.configure(
        connection=connection, target_metadata=target_metadata, **MIGRATION_OPTIONS,
    )
    with context.begin_transaction():
        context.run_migrations()


async def _migrate_online() -> None:
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = database_url()
    engine = async_engine_from_config(
        section, prefix="sqlalchemy.", poolclass=pool.NullPool,
    )
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    # Emit SQL only
    context.configure(
        url=database_url(), target_metadata=target_metadata, literal_binds=True,
        dialect_opts={"paramstyle": "named"}, **MIGRATION_OPTIONS,
    )
    with context.begin_transaction():
        context.run_migrations()
else:
    asyncio.run(_migrate_online())
