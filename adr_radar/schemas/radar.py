"""Radar Schemas — Pydantic models for the snapshot API boundary.

Invariants:
    - BlipCreate.name and AdrCreate.title/blip_name: 1-200 chars, stripped, non-empty
    - Quadrant/Ring/AdrStatus validated by their enums; unknown values are 400s
    - Responses are built from core records only (never from ORM rows)

Design Decisions:
    - to_draft() on the create models: the API feeds the same Sync Protocol as the
      wizard, with the same draft types
"""

from pydantic import BaseModel, Field, field_validator

from adr_radar.core.domain_types import AdrStatus, Quadrant, Ring
from adr_radar.core.radar_geometry import RadarPoint
from adr_radar.core.records import (
    AdrDraft, AdrRecord, BlipDraft, BlipRecord, SyncResult,
)


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("cannot be empty or whitespace")
    return v


class BlipCreate(BaseModel):
    """Blip creation, same fields as the blip wizard."""
    name: str = Field(min_length=1, max_length=200)
    quadrant: Quadrant | None = None
    ring: Ring | None = None
    tag: str | None = Field(None, max_length=200)
    description: str | None = Field(None, max_length=10_000)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return _strip_required(v)

    def to_draft(self) -> BlipDraft:
        return BlipDraft(
            name=self.name, quadrant=self.quadrant, ring=self.ring,
            tag=self.tag or None, description=self.description or None,
        )


class AdrCreate(BaseModel):
    """ADR creation, same fields as the ADR wizard."""
    title: str = Field(min_length=1, max_length=200)
    blip_name: str = Field(min_length=1, max_length=200)
    status: AdrStatus = AdrStatus.PROPOSED
    quadrant: Quadrant | None = None
    ring: Ring | None = None
    context: str = Field("", max_length=10_000)
    decision: str = Field("", max_length=10_000)
    consequences: str = Field("", max_length=10_000)
    references: str = Field("", max_length=10_000)

    @field_validator("title", "blip_name")
    @classmethod
    def strip_required(cls, v: str) -> str:
        return _strip_required(v)

    def to_draft(self) -> AdrDraft:
        return AdrDraft(
            title=self.title, blip_name=self.blip_name, status=self.status.value,
            quadrant=self.quadrant, ring=self.ring, context=self.context,
            decision=self.decision, consequences=self.consequences,
            references=self.references,
        )


class BlipResponse(BaseModel):
    id: int
    name: str
    quadrant: Quadrant | None
    ring: Ring | None
    tag: str | None
    description: str | None
    created: str
    has_adr: bool
    adr_id: int | None

    @classmethod
    def from_record(cls, blip: BlipRecord) -> "BlipResponse":
        return cls(
            id=blip.id, name=blip.name, quadrant=blip.quadrant, ring=blip.ring,
            tag=blip.tag, description=blip.description, created=blip.created,
            has_adr=blip.has_adr, adr_id=blip.adr_id,
        )


class AdrResponse(BaseModel):
    id: int
    title: str
    blip_name: str
    status: str
    timestamp: str
    quadrant: Quadrant | None
    ring: Ring | None

    @classmethod
    def from_record(cls, adr: AdrRecord) -> "AdrResponse":
        return cls(
            id=adr.id, title=adr.title, blip_name=adr.blip_name, status=adr.status,
            timestamp=adr.timestamp, quadrant=adr.quadrant, ring=adr.ring,
        )


class RadarPointResponse(BaseModel):
    blip_id: int
    name: str
    quadrant: Quadrant
    ring: Ring
    angle: float
    radius: float
    x: float
    y: float

    @classmethod
    def from_point(cls, p: RadarPoint) -> "RadarPointResponse":
        return cls(
            blip_id=p.blip_id, name=p.name, quadrant=p.quadrant, ring=p.ring,
            angle=p.angle, radius=p.radius, x=p.x, y=p.y,
        )


class RadarResponse(BaseModel):
    """Radar frame at elapsed time t."""
    t: float
    period_seconds: float
    sweep_angle: float
    points: list[RadarPointResponse]
    unplotted: list[str]


class SyncResponse(BaseModel):
    """Outcome of a create call. warning is set for partial and orphan outcomes."""
    outcome: str
    kind: str
    identifier: str
    record_id: int | None
    file_path: str | None
    linked_blip_id: int | None
    warning: str | None = None

    @classmethod
    def from_result(cls, result: SyncResult) -> "SyncResponse":
        warning = None
        if result.error is not None:
            warning = "; ".join((result.error.message,) + result.warnings)
        return cls(
            outcome=result.outcome.value, kind=result.kind.value,
            identifier=result.identifier, record_id=result.record_id,
            file_path=result.file_path, linked_blip_id=result.linked_blip_id,
            warning=warning,
        )
