"""Service test fixtures — async DB, record store, document writer, FastAPI client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - Document directories live under tmp_path
    - db_manager patched so readiness probes see the test database
    - get_db_manager and get_writer overridden for route-level injection

Design Decisions:
    - SQLite in-memory with StaticPool: one connection, so every session sees
      the same database
    - Fixed clocks: created dates and ADR timestamps are predictable in assertions
"""

from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

from adr_radar.api.dependencies import get_writer
from adr_radar.db.session import create_engine_for
from adr_radar.infrastructure.database import DatabaseSessionManager, get_db_manager
from adr_radar.infrastructure.document_writer import MarkdownDocumentWriter
from adr_radar.infrastructure.record_store import SqlRecordStore
from adr_radar.services.sync_protocol import SyncProtocol
import adr_radar.infrastructure.database as db_module
from adr_radar.main import app
from tests.services.fake_writer import FailingWriter, fixed_clock

@pytest.fixture
async def test_engine():
    engine = create_engine_for(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    await engine.dispose()


@pytest.fixture
async def db(test_engine):
    manager = DatabaseSessionManager(engine=test_engine)
    await manager.ensure_schema()
    return manager


@pytest.fixture
def store(db):
    return SqlRecordStore(db, clock=fixed_clock)


@pytest.fixture
def adr_dir(tmp_path) -> Path:
    return tmp_path / "adrs"


@pytest.fixture
def blip_dir(tmp_path) -> Path:
    return tmp_path / "blips"


@pytest.fixture
def writer(adr_dir, blip_dir):
    return MarkdownDocumentWriter(adr_dir, blip_dir, author="Test Author")


@pytest.fixture
def protocol(store, writer):
    return SyncProtocol(store, writer, clock=fixed_clock)


@pytest.fixture
def failing_writer(adr_dir, blip_dir):
    return FailingWriter(adr_dir, blip_dir)


@pytest.fixture
async def client(db, writer):
    """FastAPI test client with store and writer dependencies overridden."""
    app.dependency_overrides[get_db_manager] = lambda: db
    app.dependency_overrides[get_writer] = lambda: writer

    original_manager = db_module.db_manager
    db_module.db_manager = db

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
