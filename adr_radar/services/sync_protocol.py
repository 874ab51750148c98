"""Sync Protocol — keeps the relational index and the Markdown files consistent.

Invariants:
    - Write order is row, then document, then link; no step runs before the one above
    - A duplicate stops the protocol before any file is touched
    - A document failure keeps the row (PARTIAL_WRITE); the row is authoritative
    - A missing blip keeps the ADR and its document (ORPHAN_ADR)
    - Linking is attempted even after a PARTIAL_WRITE
    - Every call returns a SyncResult; RadarErrors never escape to the caller
    - Renaming a blip carries its ADRs along (adr_log.blip_name and their documents)

Design Decisions:
    - Errors translated into SyncResult, not re-raised: the TUI and the API both
      branch on the outcome, and a failed step must not hide the ones that succeeded
    - Consistency errors are built, never raised: they describe a state that
      already exists on disk and in the database
    - rewrite_document()/relink_adr() repair the two inconsistent outcomes without
      touching the row
"""

import logging
from pathlib import Path
from typing import Callable

from adr_radar.core.domain_types import AdrId, BlipId, EntryKind, SyncOutcome
from adr_radar.core.errors import (
    DatabaseError, DocumentWriteError, DuplicateAdrError, DuplicateNameError,
    ErrorContext, OrphanAdrError, PartialWriteError, RadarError,
    ResourceNotFoundError,
)
from adr_radar.core.records import (
    AdrDraft, AdrRecord, BlipDraft, BlipRecord, SyncRequest, SyncResult,
)
from adr_radar.core.repository_protocols import DocumentWriter, RecordStore
from adr_radar.infrastructure.record_store import utc_date

logger = logging.getLogger(__name__)


# ─── Document Fields ─────────────────────────────────────────────

def blip_fields(blip: BlipRecord) -> dict[str, object]:
    return {
        "id": int(blip.id),
        "title": blip.name,
        "date": blip.created,
        "quadrant": blip.quadrant.value if blip.quadrant else None,
        "ring": blip.ring.value if blip.ring else None,
        "tag": blip.tag,
        "hasAdr": blip.has_adr,
        "adrId": int(blip.adr_id) if blip.adr_id is not None else None,
        "description": blip.description,
    }


def adr_fields(adr: AdrRecord, draft: AdrDraft | None = None) -> dict[str, object]:
    fields: dict[str, object] = {
        "id": int(adr.id),
        "title": adr.title,
        "date": adr.timestamp,
        "status": adr.status,
        "quadrant": adr.quadrant.value if adr.quadrant else None,
        "ring": adr.ring.value if adr.ring else None,
        "blip": adr.blip_name,
    }
    if draft is not None:
        fields.update(
            context=draft.context, decision=draft.decision,
            consequences=draft.consequences, references=draft.references,
        )
    return fields


def _result(
    outcome: SyncOutcome, kind: EntryKind, identifier: str, **extra,
) -> SyncResult:
    result = SyncResult(outcome=outcome, kind=kind, identifier=identifier, **extra)
    log = logger.info if result.ok else logger.warning
    log(
        f"Sync {kind.value} '{identifier}': {outcome.value}",
        extra={
            "outcome": outcome.value,
            "error_code": result.error.code if result.error else None,
            "path": result.file_path,
        },
    )
    return result


class SyncProtocol:
    """Row-then-document-then-link writer used by every surface."""

    def __init__(
        self,
        store: RecordStore,
        writer: DocumentWriter,
        clock: Callable[[], str] = utc_date,
    ):
        self.store = store
        self.writer = writer
        self._clock = clock

    async def submit(self, request: SyncRequest) -> SyncResult:
        """Dispatch a completed wizard's request."""
        draft = request.draft
        if isinstance(draft, BlipDraft):
            if request.target_id is None:
                return await self.create_blip(draft)
            return await self.edit_blip(BlipId(request.target_id), draft)
        if request.target_id is None:
            return await self.create_adr(draft)
        return await self.edit_adr(AdrId(request.target_id), draft)

    # ─── Blips ───────────────────────────────────────────────────

    async def create_blip(self, draft: BlipDraft) -> SyncResult:
        kind, name = EntryKind.BLIP, draft.name
        try:
            blip_id = await self.store.create_blip(
                name, ring=draft.ring, quadrant=draft.quadrant,
                tag=draft.tag, description=draft.description,
            )
            blip = await self.store.get_blip(blip_id)
        except DuplicateNameError as e:
            return _result(SyncOutcome.DUPLICATE_NAME, kind, name, error=e)
        except DatabaseError as e:
            return _result(SyncOutcome.STORE_ERROR, kind, name, error=e)
        if blip is None:
            return self._missing(kind, name, blip_id)

        path, error = self._write(kind, blip_fields(blip), blip_id=blip_id)
        if error is not None:
            return _result(
                SyncOutcome.PARTIAL_WRITE, kind, name, record_id=blip_id, error=error,
            )
        return _result(
            SyncOutcome.CREATED, kind, name, record_id=blip_id, file_path=str(path),
        )

    async def edit_blip(self, blip_id: BlipId, draft: BlipDraft) -> SyncResult:
        kind, name = EntryKind.BLIP, draft.name
        try:
            before = await self.store.get_blip(blip_id)
            if before is None:
                return self._missing(kind, name, blip_id)
            await self.store.update_blip(
                blip_id, name=draft.name, ring=draft.ring, quadrant=draft.quadrant,
                tag=draft.tag, description=draft.description,
            )
            renamed: list[AdrRecord] = []
            if before.name != draft.name:
                if await self.store.rename_blip_references(before.name, draft.name):
                    renamed = [
                        adr for adr in await self.store.list_adrs()
                        if adr.blip_name == draft.name
                    ]
            blip = await self.store.get_blip(blip_id)
        except DuplicateNameError as e:
            return _result(SyncOutcome.DUPLICATE_NAME, kind, name, error=e)
        except ResourceNotFoundError as e:
            return _result(SyncOutcome.NOT_FOUND, kind, name, error=e)
        except DatabaseError as e:
            return _result(SyncOutcome.STORE_ERROR, kind, name, error=e)
        if blip is None:
            return self._missing(kind, name, blip_id)

        path, error = self._write(
            kind, blip_fields(blip), previous_title=before.name, blip_id=blip_id,
        )
        warnings = self._rewrite_referencing_adrs(renamed)
        if error is not None:
            return _result(
                SyncOutcome.PARTIAL_WRITE, kind, name, record_id=blip_id,
                error=error, warnings=warnings,
            )
        return _result(
            SyncOutcome.UPDATED, kind, name, record_id=blip_id,
            file_path=str(path), warnings=warnings,
        )

    def _rewrite_referencing_adrs(self, adrs: list[AdrRecord]) -> tuple[str, ...]:
        """Refresh the `blip` header of ADR documents after a blip rename."""
        warnings = []
        for adr in adrs:
            _, error = self._write(EntryKind.ADR, adr_fields(adr), adr_id=adr.id)
            if error is not None:
                warnings.append(f"ADR '{adr.title}': {error.message}")
        return tuple(warnings)

    # ─── ADRs ────────────────────────────────────────────────────

    async def create_adr(self, draft: AdrDraft) -> SyncResult:
        kind, title = EntryKind.ADR, draft.title
        try:
            adr_id = await self.store.create_adr(
                title, self._clock(), draft.status,
                draft.quadrant, draft.ring, draft.blip_name,
            )
            adr = await self.store.get_adr(adr_id)
        except DuplicateAdrError as e:
            return _result(SyncOutcome.DUPLICATE_ADR, kind, title, error=e)
        except DatabaseError as e:
            return _result(SyncOutcome.STORE_ERROR, kind, title, error=e)
        if adr is None:
            return self._missing(kind, title, adr_id)

        path, write_error = self._write(kind, adr_fields(adr, draft), adr_id=adr_id)
        return await self._link_and_report(
            adr, path, write_error, SyncOutcome.CREATED,
        )

    async def edit_adr(self, adr_id: AdrId, draft: AdrDraft) -> SyncResult:
        kind, title = EntryKind.ADR, draft.title
        try:
            before = await self.store.get_adr(adr_id)
            if before is None:
                return self._missing(kind, title, adr_id)
            await self.store.update_adr(
                adr_id, title=draft.title, blip_name=draft.blip_name,
                status=draft.status, quadrant=draft.quadrant, ring=draft.ring,
            )
            if before.blip_name != draft.blip_name:
                await self._unlink_previous(before)
            adr = await self.store.get_adr(adr_id)
        except DuplicateAdrError as e:
            return _result(SyncOutcome.DUPLICATE_ADR, kind, title, error=e)
        except ResourceNotFoundError as e:
            return _result(SyncOutcome.NOT_FOUND, kind, title, error=e)
        except DatabaseError as e:
            return _result(SyncOutcome.STORE_ERROR, kind, title, error=e)
        if adr is None:
            return self._missing(kind, title, adr_id)

        path, write_error = self._write(
            kind, adr_fields(adr, draft), previous_title=before.title, adr_id=adr_id,
        )
        return await self._link_and_report(
            adr, path, write_error, SyncOutcome.UPDATED,
        )

    async def _unlink_previous(self, before: AdrRecord) -> None:
        """Clear the link on the blip this ADR no longer names."""
        old = await self.store.find_blip_by_name(before.blip_name)
        if old is not None and old.adr_id == before.id:
            await self.store.update_blip(old.id, adr_id=None)

    async def _link(self, adr: AdrRecord) -> BlipId | None:
        """Link the ADR to the blip it names. None when there is no such blip."""
        blip = await self.store.find_blip_by_name(adr.blip_name)
        if blip is None:
            return None
        try:
            await self.store.link_adr_to_blip(blip.id, adr.id)
        except ResourceNotFoundError:
            return None
        return blip.id

    async def _link_and_report(
        self,
        adr: AdrRecord,
        path: Path | None,
        write_error: RadarError | None,
        clean: SyncOutcome,
    ) -> SyncResult:
        kind, title = EntryKind.ADR, adr.title
        try:
            linked = await self._link(adr)
        except DatabaseError as e:
            return _result(
                SyncOutcome.STORE_ERROR, kind, title, record_id=adr.id, error=e,
                file_path=str(path) if path else None,
            )

        orphan = None
        if linked is None:
            orphan = OrphanAdrError(adr.blip_name, ErrorContext(adr_id=adr.id))

        if write_error is not None:
            warnings = (orphan.message,) if orphan else ()
            return _result(
                SyncOutcome.PARTIAL_WRITE, kind, title, record_id=adr.id,
                linked_blip_id=linked, error=write_error, warnings=warnings,
            )
        if orphan is not None:
            return _result(
                SyncOutcome.ORPHAN_ADR, kind, title, record_id=adr.id,
                file_path=str(path), error=orphan,
            )
        return _result(
            clean, kind, title, record_id=adr.id,
            file_path=str(path), linked_blip_id=linked,
        )

    # ─── Repairs ─────────────────────────────────────────────────

    async def rewrite_document(self, kind: EntryKind, record_id: int) -> SyncResult:
        """Re-write the document of an existing row (retry after PARTIAL_WRITE)."""
        identifier = str(record_id)
        try:
            if kind == EntryKind.BLIP:
                blip = await self.store.get_blip(BlipId(record_id))
                record = blip
                fields = blip_fields(blip) if blip else None
                identifier = blip.name if blip else identifier
            else:
                adr = await self.store.get_adr(AdrId(record_id))
                record = adr
                fields = adr_fields(adr) if adr else None
                identifier = adr.title if adr else identifier
        except DatabaseError as e:
            return _result(SyncOutcome.STORE_ERROR, kind, identifier, error=e)
        if record is None or fields is None:
            return self._missing(kind, identifier, record_id)

        path, error = self._write(kind, fields)
        if error is not None:
            return _result(
                SyncOutcome.PARTIAL_WRITE, kind, identifier,
                record_id=record_id, error=error,
            )
        return _result(
            SyncOutcome.UPDATED, kind, identifier,
            record_id=record_id, file_path=str(path),
        )

    async def relink_adr(self, adr_id: AdrId) -> SyncResult:
        """Retry the link step for an ADR (repair after ORPHAN_ADR)."""
        kind = EntryKind.ADR
        try:
            adr = await self.store.get_adr(adr_id)
            if adr is None:
                return self._missing(kind, str(adr_id), adr_id)
            linked = await self._link(adr)
        except DatabaseError as e:
            return _result(SyncOutcome.STORE_ERROR, kind, str(adr_id), error=e)
        if linked is None:
            return _result(
                SyncOutcome.ORPHAN_ADR, kind, adr.title, record_id=adr_id,
                error=OrphanAdrError(adr.blip_name, ErrorContext(adr_id=adr_id)),
            )
        return _result(
            SyncOutcome.UPDATED, kind, adr.title,
            record_id=adr_id, linked_blip_id=linked,
        )

    # ─── Helpers ─────────────────────────────────────────────────

    def _write(
        self,
        kind: EntryKind,
        fields: dict[str, object],
        previous_title: str | None = None,
        blip_id: int | None = None,
        adr_id: int | None = None,
    ) -> tuple[Path | None, PartialWriteError | None]:
        try:
            return self.writer.write_document(kind, fields, previous_title), None
        except DocumentWriteError as e:
            ctx = ErrorContext(blip_id=blip_id, adr_id=adr_id, path=e.path)
            return None, PartialWriteError(e.message, ctx)

    def _missing(self, kind: EntryKind, identifier: str, record_id: int) -> SyncResult:
        resource = "Blip" if kind == EntryKind.BLIP else "ADR"
        return _result(
            SyncOutcome.NOT_FOUND, kind, identifier,
            error=ResourceNotFoundError(resource, str(record_id)),
        )
