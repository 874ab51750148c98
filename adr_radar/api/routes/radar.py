"""Radar Routes — read-only snapshots plus create endpoints over the Sync Protocol.

Invariants:
    - Reads never write; creates go through SyncProtocol only (same path as the TUI)
    - Duplicates map to 409, store failures to 503, via the RadarError handler
    - Partial and orphan outcomes are 201: the row exists, the warning says what is missing
"""

import logging

from fastapi import APIRouter, Depends, Query, status

from adr_radar.config import Settings, get_settings
from adr_radar.core.domain_types import BlipId, SyncOutcome
from adr_radar.core.errors import ResourceNotFoundError
from adr_radar.core.radar_geometry import plot_blips, sweep_angle
from adr_radar.core.radar_stats import summarize
from adr_radar.core.records import SyncResult
from adr_radar.api.dependencies import get_protocol, get_store
from adr_radar.infrastructure.record_store import SqlRecordStore
from adr_radar.schemas.radar import (
    AdrCreate, AdrResponse, BlipCreate, BlipResponse, RadarPointResponse,
    RadarResponse, SyncResponse,
)
from adr_radar.services.sync_protocol import SyncProtocol

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["radar"])


def _created_or_raise(result: SyncResult) -> SyncResponse:
    clean_or_kept = (
        SyncOutcome.CREATED, SyncOutcome.PARTIAL_WRITE, SyncOutcome.ORPHAN_ADR,
    )
    if result.outcome not in clean_or_kept and result.error is not None:
        raise result.error
    return SyncResponse.from_result(result)


# ─── Blips ───────────────────────────────────────────────────────

@router.get("/blips", response_model=list[BlipResponse])
async def list_blips(store: SqlRecordStore = Depends(get_store)):
    return [BlipResponse.from_record(b) for b in await store.list_blips()]


@router.get("/blips/{blip_id}", response_model=BlipResponse)
async def get_blip(blip_id: int, store: SqlRecordStore = Depends(get_store)):
    blip = await store.get_blip(BlipId(blip_id))
    if blip is None:
        raise ResourceNotFoundError("Blip", str(blip_id))
    return BlipResponse.from_record(blip)


@router.post(
    "/blips", response_model=SyncResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_blip(
    body: BlipCreate, protocol: SyncProtocol = Depends(get_protocol),
):
    return _created_or_raise(await protocol.create_blip(body.to_draft()))


# ─── ADRs ────────────────────────────────────────────────────────

@router.get("/adrs", response_model=list[AdrResponse])
async def list_adrs(store: SqlRecordStore = Depends(get_store)):
    return [AdrResponse.from_record(a) for a in await store.list_adrs()]


@router.post(
    "/adrs", response_model=SyncResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_adr(
    body: AdrCreate, protocol: SyncProtocol = Depends(get_protocol),
):
    return _created_or_raise(await protocol.create_adr(body.to_draft()))


# ─── Radar & Stats ───────────────────────────────────────────────

@router.get("/radar", response_model=RadarResponse)
async def radar_frame(
    t: float = Query(0.0, ge=0.0),
    store: SqlRecordStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """Blip positions plus the sweep angle at elapsed time t (seconds)."""
    blips = await store.list_blips()
    period = settings.sweep_period_seconds
    return RadarResponse(
        t=t,
        period_seconds=period,
        sweep_angle=sweep_angle(t, period),
        points=[RadarPointResponse.from_point(p) for p in plot_blips(blips)],
        unplotted=[b.name for b in blips if not b.is_classified],
    )


@router.get("/stats")
async def radar_stats(store: SqlRecordStore = Depends(get_store)):
    return summarize(await store.list_blips(), await store.list_adrs()).to_dict()
