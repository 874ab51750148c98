"""adr-radar API — FastAPI application entry point for the snapshot API.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map RadarError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database, schema and document writer initialized on startup via lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Persisted ADR_DIR/BLIP_DIR applied at startup: the API writes where the TUI writes
    - Database opened through open_database(), so a DATABASE_NAME chosen in the TUI
      is the file the API serves
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from adr_radar.api.error_handlers import register_error_handlers
from adr_radar.api.routes import health, radar
from adr_radar.config import get_settings
from adr_radar.infrastructure.database import open_database
from adr_radar.infrastructure.document_writer import MarkdownDocumentWriter
from adr_radar.infrastructure.observability import setup_logging
from adr_radar.infrastructure.record_store import SqlRecordStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format, settings.log_file)
    manager = await open_database(settings)

    persisted = await SqlRecordStore(manager).get_settings()
    app.state.writer = MarkdownDocumentWriter(
        persisted.get("ADR_DIR") or settings.adr_dir,
        persisted.get("BLIP_DIR") or settings.blip_dir,
        settings.author_name,
    )
    logger.info("adr-radar API started")
    yield
    await manager.dispose()
    logger.info("adr-radar API shutting down")


app = FastAPI(
    title="adr-radar API", version="0.3.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(radar.router)

register_error_handlers(app)
