"""Boundary Protocols — contracts between the core and its IO collaborators.

Invariants:
    - Core NEVER imports from infrastructure; dependency arrows point inward only
    - Every mutating RecordStore call is a single committed write
    - Failures are raised as RadarError subclasses (core/errors.py), never swallowed

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - RecordStore is async because SQLAlchemy's async engine backs it; DocumentWriter
      is sync because a single small file write does not need a thread hop
"""

from pathlib import Path
from typing import Mapping, Protocol

from adr_radar.core.domain_types import AdrId, BlipId, EntryKind, Quadrant, Ring
from adr_radar.core.records import AdrRecord, BlipRecord


class RecordStore(Protocol):
    """Contract for the relational index, implemented by infrastructure."""

    async def create_blip(
        self,
        name: str,
        ring: Ring | None = None,
        quadrant: Quadrant | None = None,
        tag: str | None = None,
        description: str | None = None,
    ) -> BlipId: ...

    async def update_blip(self, blip_id: BlipId, **fields: object) -> None: ...

    async def link_adr_to_blip(self, blip_id: BlipId, adr_id: AdrId) -> None: ...

    async def create_adr(
        self,
        title: str,
        timestamp: str,
        status: str,
        quadrant: Quadrant | None,
        ring: Ring | None,
        blip_name: str,
    ) -> AdrId: ...

    async def update_adr(self, adr_id: AdrId, **fields: object) -> None: ...
    async def rename_blip_references(self, old_name: str, new_name: str) -> int: ...

    async def get_blip(self, blip_id: BlipId) -> BlipRecord | None: ...
    async def get_adr(self, adr_id: AdrId) -> AdrRecord | None: ...
    async def find_blip_by_name(self, name: str) -> BlipRecord | None: ...
    async def list_blips(self) -> list[BlipRecord]: ...
    async def list_adrs(self) -> list[AdrRecord]: ...

    async def get_settings(self) -> dict[str, str]: ...
    async def set_setting(self, key: str, value: str) -> None: ...


class DocumentWriter(Protocol):
    """Contract for the Markdown store, implemented by infrastructure."""

    def write_document(
        self,
        kind: EntryKind,
        fields: Mapping[str, object],
        previous_title: str | None = None,
    ) -> Path: ...

    def set_directories(
        self, adr_dir: str | Path | None = None, blip_dir: str | Path | None = None,
    ) -> None: ...
