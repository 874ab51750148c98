"""SQL Record Store — RecordStore implementation over SQLAlchemy async sessions.

Invariants:
    - Each mutating method opens one session and commits exactly once
    - create_blip fails with DuplicateNameError instead of overwriting
    - create_adr fails with DuplicateAdrError on a repeated (title, timestamp)
    - update_blip/update_adr touch only the keys passed; None clears optional fields
    - has_adr is always written together with adr_id
    - list_blips()/list_adrs() return id-ascending snapshots (creation order)
    - rename_blip_references() moves every adr_log.blip_name off the old name

Design Decisions:
    - Existence pre-check plus IntegrityError catch for names: the pre-check gives
      a clean error path, the constraint still guards against a racing writer
    - Rows converted to frozen records before the session closes: callers never
      hold ORM objects
    - Blip timestamps come from an injectable clock so tests control `created`
"""

import logging
from datetime import datetime, timezone
from typing import Callable

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from adr_radar.core.domain_types import AdrId, BlipId, Quadrant, Ring
from adr_radar.core.errors import (
    DuplicateAdrError, DuplicateNameError, ErrorContext, ResourceNotFoundError,
)
from adr_radar.core.records import AdrRecord, BlipRecord
from adr_radar.infrastructure.database import DatabaseSessionManager
from adr_radar.models.adr_log import AdrLog
from adr_radar.models.app_setting import AppSetting
from adr_radar.models.blip import Blip

logger = logging.getLogger(__name__)

BLIP_UPDATABLE = frozenset({"name", "ring", "quadrant", "tag", "description", "adr_id"})
ADR_UPDATABLE = frozenset({"title", "blip_name", "status", "timestamp", "quadrant", "ring"})
_NOT_NULL = frozenset({"name", "title", "blip_name", "status", "timestamp"})


def utc_date() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


def _enum_value(value: object) -> object:
    return value.value if isinstance(value, (Quadrant, Ring)) else value


def blip_to_record(row: Blip) -> BlipRecord:
    return BlipRecord(
        id=BlipId(row.id),
        name=row.name,
        ring=Ring.parse(row.ring),
        quadrant=Quadrant.parse(row.quadrant),
        tag=row.tag,
        description=row.description,
        created=row.created,
        has_adr=bool(row.has_adr),
        adr_id=AdrId(row.adr_id) if row.adr_id is not None else None,
    )


def adr_to_record(row: AdrLog) -> AdrRecord:
    return AdrRecord(
        id=AdrId(row.id),
        title=row.title,
        blip_name=row.blip_name,
        status=row.status,
        timestamp=row.timestamp,
        quadrant=Quadrant.parse(row.quadrant),
        ring=Ring.parse(row.ring),
    )


def _check_fields(fields: dict, allowed: frozenset[str]) -> None:
    unknown = set(fields) - allowed
    if unknown:
        raise ValueError(f"Unknown fields: {', '.join(sorted(unknown))}")
    for key in _NOT_NULL & set(fields):
        if fields[key] is None:
            raise ValueError(f"{key} cannot be cleared")


class SqlRecordStore:
    """Relational index backed by the async session manager."""

    def __init__(
        self, db: DatabaseSessionManager, clock: Callable[[], str] = utc_date,
    ):
        self._db = db
        self._clock = clock

    # ─── Blips ───────────────────────────────────────────────────

    async def create_blip(
        self,
        name: str,
        ring: Ring | None = None,
        quadrant: Quadrant | None = None,
        tag: str | None = None,
        description: str | None = None,
    ) -> BlipId:
        async with self._db.session() as db:
            exists = await db.scalar(select(Blip.id).where(Blip.name == name))
            if exists is not None:
                raise DuplicateNameError(name)
            row = Blip(
                name=name,
                ring=_enum_value(ring),
                quadrant=_enum_value(quadrant),
                tag=tag,
                description=description,
                created=self._clock(),
                has_adr=False,
                adr_id=None,
            )
            db.add(row)
            try:
                await db.commit()
            except IntegrityError:
                await db.rollback()
                raise DuplicateNameError(name)
            logger.info(f"Created blip '{name}'", extra={"blip_id": row.id})
            return BlipId(row.id)

    async def update_blip(self, blip_id: BlipId, **fields: object) -> None:
        _check_fields(fields, BLIP_UPDATABLE)
        async with self._db.session() as db:
            row = await db.get(Blip, blip_id)
            if row is None:
                raise ResourceNotFoundError("Blip", str(blip_id))
            new_name = fields.get("name")
            if new_name is not None and new_name != row.name:
                taken = await db.scalar(select(Blip.id).where(Blip.name == new_name))
                if taken is not None:
                    raise DuplicateNameError(
                        str(new_name), ErrorContext(blip_id=blip_id),
                    )
            for key, value in fields.items():
                setattr(row, key, _enum_value(value))
            if "adr_id" in fields:
                row.has_adr = row.adr_id is not None
            try:
                await db.commit()
            except IntegrityError:
                await db.rollback()
                raise DuplicateNameError(str(new_name), ErrorContext(blip_id=blip_id))

    async def link_adr_to_blip(self, blip_id: BlipId, adr_id: AdrId) -> None:
        async with self._db.session() as db:
            row = await db.get(Blip, blip_id)
            if row is None:
                raise ResourceNotFoundError("Blip", str(blip_id))
            if await db.get(AdrLog, adr_id) is None:
                raise ResourceNotFoundError("ADR", str(adr_id))
            row.adr_id = adr_id
            row.has_adr = True
            await db.commit()
        logger.info(
            f"Linked ADR {adr_id} to blip {blip_id}",
            extra={"blip_id": blip_id, "adr_id": adr_id},
        )

    async def get_blip(self, blip_id: BlipId) -> BlipRecord | None:
        async with self._db.session() as db:
            row = await db.get(Blip, blip_id)
            return blip_to_record(row) if row else None

    async def find_blip_by_name(self, name: str) -> BlipRecord | None:
        async with self._db.session() as db:
            row = await db.scalar(select(Blip).where(Blip.name == name))
            return blip_to_record(row) if row else None

    async def list_blips(self) -> list[BlipRecord]:
        async with self._db.session() as db:
            result = await db.scalars(select(Blip).order_by(Blip.id.asc()))
            return [blip_to_record(row) for row in result.all()]

    # ─── ADRs ────────────────────────────────────────────────────

    async def create_adr(
        self,
        title: str,
        timestamp: str,
        status: str,
        quadrant: Quadrant | None,
        ring: Ring | None,
        blip_name: str,
    ) -> AdrId:
        async with self._db.session() as db:
            row = AdrLog(
                title=title,
                timestamp=timestamp,
                status=status,
                quadrant=_enum_value(quadrant),
                ring=_enum_value(ring),
                blip_name=blip_name,
            )
            db.add(row)
            try:
                await db.commit()
            except IntegrityError:
                await db.rollback()
                raise DuplicateAdrError(title, timestamp)
            logger.info(f"Created ADR '{title}'", extra={"adr_id": row.id})
            return AdrId(row.id)

    async def update_adr(self, adr_id: AdrId, **fields: object) -> None:
        _check_fields(fields, ADR_UPDATABLE)
        async with self._db.session() as db:
            row = await db.get(AdrLog, adr_id)
            if row is None:
                raise ResourceNotFoundError("ADR", str(adr_id))
            for key, value in fields.items():
                setattr(row, key, _enum_value(value))
            title, timestamp = row.title, row.timestamp
            try:
                await db.commit()
            except IntegrityError:
                await db.rollback()
                raise DuplicateAdrError(title, timestamp, ErrorContext(adr_id=adr_id))

    async def get_adr(self, adr_id: AdrId) -> AdrRecord | None:
        async with self._db.session() as db:
            row = await db.get(AdrLog, adr_id)
            return adr_to_record(row) if row else None

    async def list_adrs(self) -> list[AdrRecord]:
        async with self._db.session() as db:
            result = await db.scalars(select(AdrLog).order_by(AdrLog.id.asc()))
            return [adr_to_record(row) for row in result.all()]

    async def rename_blip_references(self, old_name: str, new_name: str) -> int:
        """Point ADRs that name `old_name` at `new_name`. Returns the row count."""
        async with self._db.session() as db:
            result = await db.execute(
                update(AdrLog)
                .where(AdrLog.blip_name == old_name)
                .values(blip_name=new_name)
            )
            await db.commit()
        if result.rowcount:
            logger.info(
                f"Moved {result.rowcount} ADR(s) from blip '{old_name}' to '{new_name}'",
            )
        return result.rowcount

    # ─── Settings ────────────────────────────────────────────────

    async def get_settings(self) -> dict[str, str]:
        async with self._db.session() as db:
            result = await db.scalars(select(AppSetting).order_by(AppSetting.key))
            return {row.key: row.value for row in result.all()}

    async def set_setting(self, key: str, value: str) -> None:
        async with self._db.session() as db:
            await db.merge(AppSetting(key=key, value=value))
            await db.commit()
