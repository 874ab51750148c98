"""Opening the index — every entry point lands on the same database file.

Tests:
    - open_database() follows a DATABASE_NAME saved in app_settings
    - An explicit --db (follow_database_name off) wins over the saved name
    - The API lifespan opens the followed database, same as the CLI
"""

import pytest

import adr_radar.infrastructure.database as db_module
import adr_radar.main as main_module
from adr_radar.config import Settings, database_url_for
from adr_radar.infrastructure.database import open_database
from adr_radar.infrastructure.record_store import SqlRecordStore


@pytest.fixture
def files(tmp_path, monkeypatch):
    monkeypatch.setattr(db_module, "db_manager", None)
    return tmp_path / "first.db", tmp_path / "second.db"


def _settings(tmp_path, database: str, **extra) -> Settings:
    return Settings(
        database_url=database_url_for(database),
        adr_dir=str(tmp_path / "adrs"),
        blip_dir=str(tmp_path / "blips"),
        log_file=str(tmp_path / "api.log"),
        **extra,
    )


async def _save_database_name(tmp_path, first, second) -> None:
    manager = await open_database(_settings(tmp_path, str(first)))
    await SqlRecordStore(manager).set_setting("DATABASE_NAME", str(second))
    await manager.dispose()


async def test_open_database_follows_saved_name(tmp_path, files):
    first, second = files
    await _save_database_name(tmp_path, first, second)

    manager = await open_database(_settings(tmp_path, str(first)))
    try:
        assert manager.engine.url.database == str(second)
        assert db_module.db_manager is manager
        assert second.exists()
    finally:
        await manager.dispose()


async def test_explicit_database_is_not_redirected(tmp_path, files):
    first, second = files
    await _save_database_name(tmp_path, first, second)

    settings = _settings(tmp_path, str(first), follow_database_name=False)
    manager = await open_database(settings)
    try:
        assert manager.engine.url.database == str(first)
    finally:
        await manager.dispose()


async def test_api_lifespan_uses_followed_database(tmp_path, files, monkeypatch):
    first, second = files
    await _save_database_name(tmp_path, first, second)
    monkeypatch.setattr(
        main_module, "get_settings", lambda: _settings(tmp_path, str(first)),
    )

    async with main_module.lifespan(main_module.app):
        assert db_module.db_manager.engine.url.database == str(second)
