"""API Dependencies — per-request wiring of store, writer and Sync Protocol.

Invariants:
    - The writer is created once per app (lifespan) and shared by all requests
    - Each request gets its own SqlRecordStore over the shared session manager
"""

from fastapi import Depends, Request

from adr_radar.infrastructure.database import DatabaseSessionManager, get_db_manager
from adr_radar.infrastructure.document_writer import MarkdownDocumentWriter
from adr_radar.infrastructure.record_store import SqlRecordStore
from adr_radar.services.sync_protocol import SyncProtocol


def get_store(
    db: DatabaseSessionManager = Depends(get_db_manager),
) -> SqlRecordStore:
    return SqlRecordStore(db)


def get_writer(request: Request) -> MarkdownDocumentWriter:
    return request.app.state.writer


def get_protocol(
    store: SqlRecordStore = Depends(get_store),
    writer: MarkdownDocumentWriter = Depends(get_writer),
) -> SyncProtocol:
    return SyncProtocol(store, writer)
