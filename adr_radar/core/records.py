"""Records — immutable snapshots of store rows and wizard output.

Invariants:
    - BlipRecord.has_adr == (BlipRecord.adr_id is not None) for rows written by the store
    - Drafts are produced only by a completed, validated wizard (or the API schemas)
    - Records never hold ORM objects: session state and render see plain data

Design Decisions:
    - Frozen dataclasses over ORM instances: session state can be shared read-only
      with the render path and compared in tests (ADR: pure core)
    - Body sections live only on AdrDraft: they go to the Markdown file, not the row
"""

from dataclasses import dataclass, field

from adr_radar.core.domain_types import (
    AdrId, BlipId, EntryKind, Quadrant, Ring, SyncOutcome,
)
from adr_radar.core.errors import RadarError


# ─── Store Snapshots ─────────────────────────────────────────────

@dataclass(frozen=True)
class BlipRecord:
    id: BlipId
    name: str
    ring: Ring | None
    quadrant: Quadrant | None
    tag: str | None
    description: str | None
    created: str
    has_adr: bool
    adr_id: AdrId | None

    @property
    def is_classified(self) -> bool:
        return self.ring is not None and self.quadrant is not None


@dataclass(frozen=True)
class AdrRecord:
    id: AdrId
    title: str
    blip_name: str
    status: str
    timestamp: str
    quadrant: Quadrant | None
    ring: Ring | None


# ─── Wizard Output ───────────────────────────────────────────────

@dataclass(frozen=True)
class BlipDraft:
    """Validated blip fields, ready for the Sync Protocol."""
    name: str
    quadrant: Quadrant | None = None
    ring: Ring | None = None
    tag: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class AdrDraft:
    """Validated ADR fields. Sections are written to the document only."""
    title: str
    blip_name: str
    status: str
    quadrant: Quadrant | None = None
    ring: Ring | None = None
    context: str = ""
    decision: str = ""
    consequences: str = ""
    references: str = ""


@dataclass(frozen=True)
class SyncRequest:
    """What a completed wizard asks the Sync Protocol to do.

    target_id is None for creation and the row id for edits.
    """
    kind: EntryKind
    draft: BlipDraft | AdrDraft
    target_id: int | None = None

    @property
    def identifier(self) -> str:
        if isinstance(self.draft, BlipDraft):
            return self.draft.name
        return self.draft.title


# ─── Sync Output ─────────────────────────────────────────────────

@dataclass(frozen=True)
class SyncResult:
    """Outcome of one Sync Protocol call.

    record_id is set whenever a row exists after the call (also for
    PARTIAL_WRITE and ORPHAN_ADR). error carries the translated condition for
    every outcome other than CREATED/UPDATED.
    """
    outcome: SyncOutcome
    kind: EntryKind
    identifier: str
    record_id: int | None = None
    file_path: str | None = None
    linked_blip_id: int | None = None
    error: RadarError | None = None
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.outcome in (SyncOutcome.CREATED, SyncOutcome.UPDATED)

    @property
    def message(self) -> str:
        if self.error is not None:
            return self.error.status_text()
        verb = "Created" if self.outcome == SyncOutcome.CREATED else "Updated"
        where = f" -> {self.file_path}" if self.file_path else ""
        return f"{verb} {self.kind.value} '{self.identifier}'{where}"
