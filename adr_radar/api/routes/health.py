"""Health & Readiness Probes — is the API up, and can it write both halves of a record?

Invariants:
    - GET /health/ always returns 200 while the process runs
    - GET /health/ready is 503 unless the index answers AND both document
      directories can be written (an existing writable dir, or a writable parent)

Design Decisions:
    - Directory checks use os.access only: a probe never creates files
    - db_manager read at call time: the lifespan (or a test) sets it after import
"""

import logging
import os
from pathlib import Path

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

import adr_radar.infrastructure.database as db_module
from adr_radar.api.dependencies import get_writer
from adr_radar.core.domain_types import EntryKind
from adr_radar.infrastructure.document_writer import MarkdownDocumentWriter

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])

API_VERSION = "0.3.0"


def directory_writable(path: Path) -> bool:
    """True when path is a writable directory, or could be created under one."""
    for candidate in (path, *path.parents):
        if candidate.exists():
            return candidate.is_dir() and os.access(candidate, os.W_OK | os.X_OK)
    return False


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    return {"status": "healthy", "service": "adr-radar-api", "version": API_VERSION}


@router.get("/ready")
async def readiness_check(writer: MarkdownDocumentWriter = Depends(get_writer)):
    """Index reachable and document directories writable."""
    manager = db_module.db_manager
    checks = {
        "database": bool(manager) and await manager.health_check(),
        **{
            f"{kind.value}_dir": directory_writable(writer.directory_for(kind))
            for kind in EntryKind
        },
    }
    failing = [name for name, ok in checks.items() if not ok]
    if failing:
        logger.warning(f"Not ready: {', '.join(failing)}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "failing": failing},
        )
    return {"status": "ready", "checks": {name: "ok" for name in checks}}
